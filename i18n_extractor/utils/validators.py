"""Validation and key-naming utilities."""

import re
import unicodedata
from typing import Optional, Pattern, Union

DEFAULT_KEY_PATTERN = r'^[a-z0-9_]+(\.[a-z0-9_]+)+$'

# Format placeholders understood by the runtime lookup: {}, {0}, {name}
PLACEHOLDER_PATTERN = re.compile(r'\{[A-Za-z0-9_]*\}')

_key_pattern_cache = {}

# Special characters to ASCII. Covers Turkish, German, French, Spanish,
# Portuguese, Polish, Czech, Hungarian, Romanian, Scandinavian, Dutch.
CHAR_MAP = {
    'ç': 'c', 'Ç': 'C', 'ğ': 'g', 'Ğ': 'G', 'ı': 'i', 'İ': 'I',
    'ö': 'o', 'Ö': 'O', 'ş': 's', 'Ş': 'S', 'ü': 'u', 'Ü': 'U',
    'ä': 'a', 'Ä': 'A', 'ß': 'ss',
    'æ': 'ae', 'Æ': 'AE', 'œ': 'oe', 'Œ': 'OE',
    'ł': 'l', 'Ł': 'L',
    'ø': 'o', 'Ø': 'O', 'å': 'a', 'Å': 'A',
    'ĳ': 'ij', 'Ĳ': 'IJ',
    'ð': 'd', 'Ð': 'D', 'þ': 'th', 'Þ': 'TH',
}

# Regional and legacy spellings mapped to the pack's canonical codes
LANGUAGE_ALIASES = {
    'zh': 'zh-cn', 'zh-hans': 'zh-cn', 'zh-sg': 'zh-cn', 'zhcn': 'zh-cn',
    'zh-hant': 'zh-tw', 'zh-hk': 'zh-tw', 'zh-mo': 'zh-tw', 'zhtw': 'zh-tw',
    'chinese': 'zh-cn', 'japanese': 'ja', 'korean': 'ko', 'french': 'fr',
    'german': 'de', 'spanish': 'es', 'italian': 'it', 'portuguese': 'pt',
    'russian': 'ru', 'es-419': 'es',
}

# Languages whose region part is dropped (ja-jp -> ja)
_REGIONLESS = {'ja', 'ko', 'fr', 'de', 'es', 'it', 'ru', 'vi', 'th', 'id', 'ms', 'tr', 'pl', 'nl'}


def compile_key_pattern(pattern: Union[str, Pattern, None] = None) -> Pattern:
    """Compile (and cache) the key pattern."""
    if pattern is None:
        pattern = DEFAULT_KEY_PATTERN
    if not isinstance(pattern, str):
        return pattern
    compiled = _key_pattern_cache.get(pattern)
    if compiled is None:
        compiled = re.compile(pattern)
        _key_pattern_cache[pattern] = compiled
    return compiled


def is_valid_key_name(key: str, pattern: Union[str, Pattern, None] = None) -> bool:
    """
    Validate a translation key.

    Valid (default pattern):
        - i18n.menu.file
        - i18n.editor.save_changes

    Invalid:
        - menu (needs at least two segments)
        - i18n..file, i18n.Menu.File, i18n.menu-file
    """
    if not key or not isinstance(key, str):
        return False
    return bool(compile_key_pattern(pattern).match(key))


def is_valid_language_code(code: str) -> bool:
    """
    Validate a pack language code.

    Examples: en, fr, zh-cn, pt-br, es-419
    """
    if not code or not isinstance(code, str):
        return False
    return bool(re.match(r'^[a-z]{2,3}(-([a-z]{2,4}|[0-9]{3}))?$', code))


def normalize_language_code(code: str) -> str:
    """
    Normalize a user-supplied language code.

    Lowercases, maps ``_`` to ``-``, drops encodings (``zh_CN.UTF-8``) and
    resolves common aliases (``zh-Hans`` -> ``zh-cn``, ``ja_JP`` -> ``ja``).
    """
    code = code.strip().lower().split('.', 1)[0].replace('_', '-')
    if code in LANGUAGE_ALIASES:
        return LANGUAGE_ALIASES[code]
    base = code.split('-', 1)[0]
    if base in _REGIONLESS:
        return base
    return code


def transliterate(text: str) -> str:
    """Map accented and special characters to plain ASCII."""
    for char, replacement in CHAR_MAP.items():
        text = text.replace(char, replacement)
    text = unicodedata.normalize('NFKD', text)
    return ''.join(c for c in text if not unicodedata.combining(c))


def slugify(text: str, max_words: Optional[int] = 5, fallback: str = 'text') -> str:
    """
    Convert display text into a snake_case key segment.

    Args:
        text: Original text
        max_words: Maximum number of words kept (None for all)
        fallback: Returned when nothing usable remains

    Examples:
        "Save Changes…" -> "save_changes"
        "Öffnen" -> "offnen"
        "Close {name}" -> "close_name"
    """
    text = transliterate(text)
    words = [w.lower() for w in re.split(r'[^A-Za-z0-9]+', text) if w]
    if max_words:
        words = words[:max_words]
    if not words:
        return fallback
    return '_'.join(words)


def count_placeholders(text: str) -> int:
    """Count format placeholders in a text."""
    if not text:
        return 0
    return len(PLACEHOLDER_PATTERN.findall(text))


def strip_placeholders(text: str) -> str:
    return PLACEHOLDER_PATTERN.sub('', text)
