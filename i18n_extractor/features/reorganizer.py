"""Reorganizer: bring a translation file in line with the registry."""

from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, List, Optional, Union

from ..core import pack as pack_io
from ..core.pack import PackEntry, TranslationPack, DEFAULT_QUARANTINE_KEY
from ..core.registry import KeyRegistry
from ..utils.fileio import read_text, write_if_changed
from ..utils.logging import get_logger


def _alias(key: str, taken) -> str:
    """First free ``key~2``, ``key~3`` ... name; ``~`` never appears in a valid key."""
    n = 2
    while f"{key}~{n}" in taken:
        n += 1
    return f"{key}~{n}"


def reorganize(pack: TranslationPack, registry: KeyRegistry) -> TranslationPack:
    """
    Return ``pack`` rearranged to follow ``registry``.

    * active entries appear in registry order; values are carried over from
      the active section or, for keys that came back, from quarantine
    * registry keys without a value get a placeholder (``None``)
    * keys the registry no longer has move to the quarantine section:
      previously quarantined ones first, then newly quarantined, each in
      their prior order

    A key found in both sections with different values keeps both. The
    active value stays active (or, when quarantined too, takes an alias
    ``key~N``) and the quarantined value stays where it is. No value is
    ever dropped.

    Pure and idempotent: ``reorganize(reorganize(p, r), r) == reorganize(p, r)``.
    """
    active: Dict[str, Optional[str]] = {entry.key: entry.value for entry in pack.entries}
    parked: Dict[str, Optional[str]] = {entry.key: entry.value for entry in pack.quarantined}

    entries = []
    for entry in registry:
        if entry.key in active:
            entries.append(PackEntry(entry.key, active[entry.key]))
        elif entry.key in parked:
            entries.append(PackEntry(entry.key, parked[entry.key]))
        else:
            entries.append(PackEntry(entry.key, None))

    quarantined: Dict[str, Optional[str]] = {}
    for key, value in parked.items():
        if key in active and active[key] == value:
            continue
        if key in registry and key not in active:
            continue
        quarantined[key] = value
    for key, value in active.items():
        if key in registry:
            continue
        if key in quarantined:
            key = _alias(key, quarantined)
        quarantined[key] = value

    return TranslationPack(
        entries=tuple(entries),
        quarantined=tuple(PackEntry(key, value) for key, value in quarantined.items()),
        language=pack.language,
    )


@dataclass
class ReorganizeResult:
    """Outcome of reorganizing one file."""
    path: str
    written: bool = False
    added_placeholders: List[str] = field(default_factory=list)
    quarantined: List[str] = field(default_factory=list)
    restored: List[str] = field(default_factory=list)
    conflicts: List[str] = field(default_factory=list)  # in both sections, values differ
    reordered: bool = False

    @property
    def changed(self) -> bool:
        return bool(self.added_placeholders or self.quarantined or self.restored or self.reordered)


def reorganize_file(
    path: Union[str, Path],
    registry: KeyRegistry,
    quarantine_key: str = DEFAULT_QUARANTINE_KEY,
    dry_run: bool = False,
) -> ReorganizeResult:
    """
    Reorganize a translation file in place.

    The file is loaded strictly, the full new content is built in memory and
    the file is replaced atomically, only when the content differs.

    Raises:
        PackLoadError: If the file is missing, not valid JSON, has duplicate
            keys or non-string values; nothing is written in that case
    """
    path = Path(path)
    logger = get_logger()

    before = pack_io.load(path, quarantine_key)
    after = reorganize(before, registry)

    old_active = set(before.keys())
    parked_values = before.quarantined_values()
    old_parked = set(parked_values)
    result = ReorganizeResult(path=str(path))
    result.added_placeholders = [e.key for e in after.entries
                                 if e.key not in old_active and e.key not in old_parked]
    result.restored = [e.key for e in after.entries if e.key in old_parked and e.key not in old_active]
    result.quarantined = [key for key in before.keys() if key not in registry]
    result.conflicts = [key for key, value in before.values().items()
                        if key in parked_values and parked_values[key] != value]

    new_content = after.dumps(quarantine_key)
    result.reordered = read_text(path) != new_content and not (
        result.added_placeholders or result.quarantined or result.restored)

    for key in result.quarantined:
        logger.warning(f"{path}: '{key}' is not in the registry, moved to '{quarantine_key}'")
    for key in result.conflicts:
        logger.warning(f"{path}: '{key}' has a different value in '{quarantine_key}', both kept")

    if not dry_run:
        result.written = write_if_changed(path, new_content)
    return result
