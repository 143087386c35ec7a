"""Scaffolding for new language packs."""

from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, List, Optional, Tuple, Union

from ..core.pack import PackDescriptor, PackEntry, TranslationPack
from ..core.registry import KeyRegistry
from ..utils.config import PackConfig
from ..utils.fileio import atomic_write
from ..utils.validators import is_valid_language_code, normalize_language_code

PACK_DIR_PREFIX = 'i18n-'

# code -> (English name, native name)
LANGUAGE_NAMES: Dict[str, Tuple[str, str]] = {
    'zh-cn': ('Chinese (Simplified)', '简体中文'),
    'zh-tw': ('Chinese (Traditional)', '繁體中文'),
    'ja': ('Japanese', '日本語'),
    'ko': ('Korean', '한국어'),
    'fr': ('French', 'Français'),
    'de': ('German', 'Deutsch'),
    'es': ('Spanish', 'Español'),
    'it': ('Italian', 'Italiano'),
    'pt': ('Portuguese', 'Português'),
    'pt-br': ('Portuguese (Brazil)', 'Português (Brasil)'),
    'ru': ('Russian', 'Русский'),
    'ar': ('Arabic', 'العربية'),
    'nl': ('Dutch', 'Nederlands'),
    'pl': ('Polish', 'Polski'),
    'sv': ('Swedish', 'Svenska'),
    'da': ('Danish', 'Dansk'),
    'fi': ('Finnish', 'Suomi'),
    'el': ('Greek', 'Ελληνικά'),
    'he': ('Hebrew', 'עברית'),
    'hi': ('Hindi', 'हिन्दी'),
    'th': ('Thai', 'ไทย'),
    'vi': ('Vietnamese', 'Tiếng Việt'),
    'id': ('Indonesian', 'Bahasa Indonesia'),
    'cs': ('Czech', 'Čeština'),
    'hu': ('Hungarian', 'Magyar'),
    'ro': ('Romanian', 'Română'),
    'uk': ('Ukrainian', 'Українська'),
    'tr': ('Turkish', 'Türkçe'),
    'en': ('English', 'English'),
}

README_TEMPLATE = """# {name} language pack

Translations for `{language}` ({native_name}).

* `{descriptor}` describes the pack
* `{storage}` maps every key to its translation; `null` marks a key that
  still needs translating

Run `i18n-extractor reorganize {storage}` after the defaults change, and
`i18n-extractor validate .` before publishing.
"""


def language_info(code: str) -> Tuple[str, str]:
    """English and native name for ``code`` (falls back to the code itself)."""
    if code in LANGUAGE_NAMES:
        return LANGUAGE_NAMES[code]
    base = code.split('-', 1)[0]
    if base in LANGUAGE_NAMES:
        return LANGUAGE_NAMES[base]
    return f'Language ({code})', code


@dataclass
class PackCreation:
    """Files written by ``create_pack``."""
    directory: Path
    language: str
    name: str
    native_name: str
    files: List[Path] = field(default_factory=list)
    key_count: int = 0


class PackTemplate:
    """
    Create the directory layout of a new language pack.

    Layout::

        i18n-<code>/
            pack.yml
            translations/translation.json   every registry key set to null
            README.md
    """

    def __init__(self, registry: KeyRegistry, pack_config: Optional[PackConfig] = None):
        self.registry = registry
        self.pack_config = pack_config or PackConfig()

    def create_pack(
        self,
        lang_code: str,
        output_dir: Union[str, Path] = '.',
        name: Optional[str] = None,
    ) -> PackCreation:
        """
        Scaffold a pack for ``lang_code``.

        Args:
            lang_code: Language code; ``i18n-`` prefixes, underscores and
                aliases such as ``zh_Hans`` are accepted
            output_dir: Directory the pack directory is created in
            name: Override for the English language name

        Returns:
            PackCreation listing the created files

        Raises:
            ValueError: If the code is not a valid language code
            FileExistsError: If the pack directory already exists
        """
        raw = lang_code[len(PACK_DIR_PREFIX):] if lang_code.startswith(PACK_DIR_PREFIX) else lang_code
        code = normalize_language_code(raw)
        if not is_valid_language_code(code):
            raise ValueError(f"Invalid language code: {lang_code}")

        english, native = language_info(code)
        directory = Path(output_dir) / f'{PACK_DIR_PREFIX}{code}'
        if directory.exists():
            raise FileExistsError(f"Pack directory already exists: {directory}")

        creation = PackCreation(directory=directory, language=code, name=name or english,
                                native_name=native, key_count=len(self.registry))

        descriptor = PackDescriptor(
            language=code,
            name=creation.name,
            native_name=native,
            description=f'{creation.name} translations',
        )
        pack = TranslationPack(entries=tuple(PackEntry(key, None) for key in self.registry.keys()),
                               language=code)

        files = [
            (directory / self.pack_config.descriptor, descriptor.dumps()),
            (directory / self.pack_config.storage, pack.dumps(self.pack_config.quarantine_key)),
            (directory / 'README.md', README_TEMPLATE.format(
                name=creation.name, language=code, native_name=native,
                descriptor=self.pack_config.descriptor, storage=self.pack_config.storage,
            )),
        ]
        for path, content in files:
            atomic_write(path, content)
            creation.files.append(path)

        return creation
