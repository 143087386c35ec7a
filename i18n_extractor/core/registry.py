"""Defaults registry: the canonical key -> default text mapping."""

from dataclasses import dataclass, replace
from pathlib import Path
from typing import Dict, Iterable, Iterator, List, Optional, Tuple, Union

import yaml

from ..utils.fileio import atomic_write
from .errors import DuplicateKeyConflict, RegistryLoadError

REGISTRY_HEADER = (
    "# Default texts for every translation key.\n"
    "# Keys and origins are maintained by `i18n-extractor scan`; texts may be edited.\n"
)

COMMON_CATEGORY = 'common'


def category_for_key(key: str) -> str:
    """``i18n.menu.file`` -> ``menu``; two-segment keys fall into ``common``."""
    parts = key.split('.')
    return parts[1] if len(parts) > 2 else COMMON_CATEGORY


@dataclass(frozen=True)
class RegistryEntry:
    """One registry record."""
    key: str
    text: str
    origin: Optional[str] = None  # "path:line" of the first observation

    @property
    def category(self) -> str:
        """
        Grouping used for the comment headers of the registry file.

        Read from the key, not from ``origin``: derived keys already carry
        their source module as the second segment, and an explicit
        ``t!(cx, "i18n.menu.x")`` in ``editor.rs`` stays with the other
        ``menu`` keys.
        """
        return category_for_key(self.key)


class _UniqueKeyLoader(yaml.SafeLoader):
    """SafeLoader that rejects duplicate mapping keys instead of keeping the last."""


def _construct_unique_mapping(loader, node, deep=False):
    seen = {}
    for key_node, _ in node.value:
        key = loader.construct_object(key_node, deep=deep)
        try:
            hash(key)
        except TypeError as e:
            raise yaml.constructor.ConstructorError(
                "while constructing a mapping", node.start_mark,
                f"found unhashable key ({e})", key_node.start_mark
            ) from e
        if key in seen:
            raise yaml.constructor.ConstructorError(
                None, None, f"duplicate key {key!r}", key_node.start_mark
            )
        seen[key] = True
    return loader.construct_mapping(node, deep=deep)


_UniqueKeyLoader.add_constructor(
    yaml.resolver.BaseResolver.DEFAULT_MAPPING_TAG, _construct_unique_mapping
)


class KeyRegistry:
    """
    Immutable, ordered collection of registry entries.

    Every "mutating" operation returns a new registry; instances are safe
    to share between the builder, the validator and the reorganizer.
    """

    __slots__ = ('_entries', '_index')

    def __init__(self, entries: Iterable[RegistryEntry] = ()):
        ordered: List[RegistryEntry] = []
        index: Dict[str, int] = {}
        for entry in entries:
            if entry.key in index:
                existing = ordered[index[entry.key]]
                if existing.text != entry.text:
                    raise DuplicateKeyConflict(
                        entry.key, existing.text, entry.text, existing.origin, entry.origin
                    )
                continue
            index[entry.key] = len(ordered)
            ordered.append(entry)
        self._entries: Tuple[RegistryEntry, ...] = tuple(ordered)
        self._index = index

    # -- collection protocol --------------------------------------------

    def __iter__(self) -> Iterator[RegistryEntry]:
        return iter(self._entries)

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, key: object) -> bool:
        return key in self._index

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, KeyRegistry):
            return NotImplemented
        return self._entries == other._entries

    def __repr__(self) -> str:
        return f"KeyRegistry({len(self._entries)} entries)"

    @property
    def entries(self) -> Tuple[RegistryEntry, ...]:
        return self._entries

    def keys(self) -> List[str]:
        return [entry.key for entry in self._entries]

    def get(self, key: str) -> Optional[RegistryEntry]:
        position = self._index.get(key)
        return self._entries[position] if position is not None else None

    def texts(self) -> Dict[str, str]:
        """Ordered ``key -> default text`` mapping."""
        return {entry.key: entry.text for entry in self._entries}

    def keys_for_text(self, text: str) -> List[str]:
        return [entry.key for entry in self._entries if entry.text == text]

    # -- derivation -----------------------------------------------------

    def with_entry(self, entry: RegistryEntry) -> 'KeyRegistry':
        """Append ``entry``, or replace the entry with the same key in place."""
        position = self._index.get(entry.key)
        if position is None:
            return KeyRegistry(self._entries + (entry,))
        entries = list(self._entries)
        entries[position] = entry
        return KeyRegistry(entries)

    def updated(self, key: str, text: str) -> 'KeyRegistry':
        """Return a registry where ``key`` has the new default ``text``."""
        entry = self.get(key)
        if entry is None:
            raise KeyError(key)
        return self.with_entry(replace(entry, text=text))

    def diff(self, other: 'KeyRegistry'):
        """Changes needed to go from this registry to ``other``."""
        from ..features.diff import diff_registries
        return diff_registries(self, other)

    # -- serialization --------------------------------------------------

    @classmethod
    def loads(cls, content: str, source: str = '<string>') -> 'KeyRegistry':
        """
        Parse registry YAML.

        Each key maps either to a mapping with ``text`` (and optional
        ``origin``) or directly to the default text.

        Raises:
            RegistryLoadError: On YAML syntax errors, duplicate keys or
                values of the wrong type
        """
        try:
            data = yaml.load(content, Loader=_UniqueKeyLoader)
        except yaml.YAMLError as e:
            raise RegistryLoadError(source, f"invalid YAML: {e}") from e

        if data is None:
            return cls()
        if not isinstance(data, dict):
            raise RegistryLoadError(source, "top level must be a mapping of keys")

        entries = []
        for key, value in data.items():
            if not isinstance(key, str):
                raise RegistryLoadError(source, f"key {key!r} is not a string")
            if isinstance(value, str):
                entries.append(RegistryEntry(key, value))
            elif isinstance(value, dict):
                text = value.get('text')
                origin = value.get('origin')
                if not isinstance(text, str):
                    raise RegistryLoadError(source, f"'{key}' has no string 'text'")
                if origin is not None and not isinstance(origin, str):
                    raise RegistryLoadError(source, f"'{key}' has a non-string 'origin'")
                entries.append(RegistryEntry(key, text, origin))
            else:
                raise RegistryLoadError(
                    source, f"'{key}' must map to a string or a mapping, got {type(value).__name__}"
                )
        return cls(entries)

    @classmethod
    def load(cls, path: Union[str, Path], missing_ok: bool = False) -> 'KeyRegistry':
        """
        Load a registry file.

        Args:
            path: Registry file
            missing_ok: Return an empty registry when the file does not exist

        Raises:
            RegistryLoadError: If the file is missing (and not ``missing_ok``),
                unreadable or malformed
        """
        path = Path(path)
        if not path.exists():
            if missing_ok:
                return cls()
            raise RegistryLoadError(str(path), "file not found")
        try:
            content = path.read_text(encoding='utf-8')
        except (OSError, UnicodeDecodeError) as e:
            raise RegistryLoadError(str(path), str(e)) from e
        return cls.loads(content, source=str(path))

    def dumps(self) -> str:
        """Serialize to YAML with a comment line before each category group."""
        lines = [REGISTRY_HEADER]
        category = None
        for entry in self._entries:
            if entry.category != category:
                category = entry.category
                lines.append(f"\n# -- {category}\n")
            value: Union[str, Dict[str, str]]
            if entry.origin:
                value = {'text': entry.text, 'origin': entry.origin}
            else:
                value = entry.text
            lines.append(yaml.safe_dump(
                {entry.key: value}, allow_unicode=True, sort_keys=False,
                default_flow_style=False, width=4096,
            ))
        return ''.join(lines)

    def save(self, path: Union[str, Path]) -> None:
        """Write the full registry atomically."""
        atomic_write(path, self.dumps())
