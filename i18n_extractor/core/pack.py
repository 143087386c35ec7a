"""Translation pack: per-language values for registry keys."""

import json
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Any, Dict, Iterator, List, Optional, Tuple, Union

import yaml

from ..utils.fileio import read_text
from .errors import PackLoadError

DEFAULT_QUARANTINE_KEY = '__obsolete__'


class EntryState(Enum):
    PRESENT = "present"
    PLACEHOLDER = "placeholder"


@dataclass(frozen=True)
class PackEntry:
    """A translated value. ``value=None`` is an untranslated placeholder."""
    key: str
    value: Optional[str]

    @property
    def state(self) -> EntryState:
        return EntryState.PLACEHOLDER if self.value is None else EntryState.PRESENT


@dataclass(frozen=True)
class TranslationPack:
    """
    Contents of one translation file.

    ``entries`` follow registry order after a reorganize; ``quarantined``
    holds entries whose keys left the registry. Both keep their order.
    """
    entries: Tuple[PackEntry, ...] = ()
    quarantined: Tuple[PackEntry, ...] = ()
    language: Optional[str] = None

    def __iter__(self) -> Iterator[PackEntry]:
        return iter(self.entries)

    def __len__(self) -> int:
        return len(self.entries)

    def __contains__(self, key: object) -> bool:
        return any(entry.key == key for entry in self.entries)

    def keys(self) -> List[str]:
        return [entry.key for entry in self.entries]

    def values(self) -> Dict[str, Optional[str]]:
        return {entry.key: entry.value for entry in self.entries}

    def quarantined_values(self) -> Dict[str, Optional[str]]:
        return {entry.key: entry.value for entry in self.quarantined}

    def get(self, key: str) -> Optional[PackEntry]:
        for entry in self.entries:
            if entry.key == key:
                return entry
        return None

    def placeholders(self) -> List[str]:
        return [entry.key for entry in self.entries if entry.state is EntryState.PLACEHOLDER]

    def to_dict(self, quarantine_key: str = DEFAULT_QUARANTINE_KEY) -> Dict[str, Any]:
        data: Dict[str, Any] = {entry.key: entry.value for entry in self.entries}
        if self.quarantined:
            data[quarantine_key] = {entry.key: entry.value for entry in self.quarantined}
        return data

    def dumps(self, quarantine_key: str = DEFAULT_QUARANTINE_KEY) -> str:
        """Canonical JSON text: 2-space indent, UTF-8 kept as is, trailing newline."""
        return json.dumps(self.to_dict(quarantine_key), indent=2, ensure_ascii=False) + '\n'


@dataclass
class RawPack:
    """
    Lenient view of a translation file used by the validator.

    Keeps every ``(key, value)`` pair in file order, duplicates included,
    so problems can be reported instead of raised.
    """
    pairs: List[Tuple[str, Any]] = field(default_factory=list)
    quarantined: List[Tuple[str, Any]] = field(default_factory=list)
    error: Optional[str] = None


class _Pairs(list):
    """JSON object decoded as an ordered list of pairs."""


def _pairs_hook(pairs):
    return _Pairs(pairs)


def _type_name(value: Any) -> str:
    return "object" if isinstance(value, _Pairs) else type(value).__name__


def parse_raw(content: str, quarantine_key: str = DEFAULT_QUARANTINE_KEY) -> RawPack:
    """Parse JSON text into a ``RawPack`` without raising on content problems."""
    try:
        data = json.loads(content, object_pairs_hook=_pairs_hook)
    except json.JSONDecodeError as e:
        return RawPack(error=f"invalid JSON: {e.msg} (line {e.lineno}, column {e.colno})")

    if not isinstance(data, _Pairs):
        return RawPack(error="top level must be a JSON object")

    raw = RawPack()
    for key, value in data:
        if key == quarantine_key:
            if isinstance(value, _Pairs):
                raw.quarantined.extend(value)
            else:
                raw.error = f"'{quarantine_key}' must be an object"
            continue
        raw.pairs.append((key, value))
    return raw


def loads(content: str, source: str = '<string>',
          quarantine_key: str = DEFAULT_QUARANTINE_KEY) -> TranslationPack:
    """
    Strictly parse translation JSON.

    Raises:
        PackLoadError: On invalid JSON, duplicate keys, or values that are
            neither strings nor null
    """
    raw = parse_raw(content, quarantine_key)
    if raw.error:
        raise PackLoadError(source, raw.error)

    def build(pairs, section: str) -> Tuple[PackEntry, ...]:
        seen = set()
        entries = []
        for key, value in pairs:
            if key in seen:
                raise PackLoadError(source, f"duplicate key '{key}'{section}")
            if value is not None and not isinstance(value, str):
                raise PackLoadError(
                    source, f"value of '{key}'{section} must be a string or null, "
                            f"got {_type_name(value)}"
                )
            seen.add(key)
            entries.append(PackEntry(key, value))
        return tuple(entries)

    return TranslationPack(
        entries=build(raw.pairs, ''),
        quarantined=build(raw.quarantined, f" in '{quarantine_key}'"),
    )


def load(path: Union[str, Path], quarantine_key: str = DEFAULT_QUARANTINE_KEY) -> TranslationPack:
    """Load a translation file strictly (see ``loads``)."""
    path = Path(path)
    try:
        content = read_text(path)
    except (OSError, UnicodeDecodeError) as e:
        raise PackLoadError(str(path), str(e)) from e
    return loads(content, source=str(path), quarantine_key=quarantine_key)


@dataclass
class PackDescriptor:
    """Contents of ``pack.yml``."""
    language: str
    name: str = ''
    native_name: str = ''
    version: str = '0.1.0'
    authors: List[str] = field(default_factory=list)
    description: str = ''

    def to_dict(self) -> Dict[str, Any]:
        return {
            'language': self.language,
            'name': self.name,
            'native_name': self.native_name,
            'version': self.version,
            'authors': list(self.authors),
            'description': self.description,
        }

    def dumps(self) -> str:
        return yaml.safe_dump(self.to_dict(), allow_unicode=True, sort_keys=False,
                              default_flow_style=False)

    @classmethod
    def loads(cls, content: str) -> 'PackDescriptor':
        """
        Raises:
            ValueError: If the YAML is invalid or has no ``language`` string
        """
        try:
            data = yaml.safe_load(content)
        except yaml.YAMLError as e:
            raise ValueError(f"invalid YAML: {e}") from e
        if not isinstance(data, dict):
            raise ValueError("descriptor must be a mapping")
        language = data.get('language')
        if not isinstance(language, str) or not language:
            raise ValueError("descriptor has no 'language'")
        authors = data.get('authors') or []
        if not isinstance(authors, list):
            authors = [str(authors)]
        return cls(
            language=language,
            name=str(data.get('name') or ''),
            native_name=str(data.get('native_name') or ''),
            version=str(data.get('version') or '0.1.0'),
            authors=[str(a) for a in authors],
            description=str(data.get('description') or ''),
        )
