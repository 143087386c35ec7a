"""Registry diff - what a scan would change."""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional

from ..utils.colors import Colors


class DiffType(Enum):
    """Kind of change for one key."""
    ADDED = "added"      # only in the new registry
    REMOVED = "removed"  # only in the old registry
    CHANGED = "changed"  # default text differs


@dataclass
class DiffEntry:
    """One changed key."""
    key: str
    diff_type: DiffType
    old_text: Optional[str] = None
    new_text: Optional[str] = None
    origin: Optional[str] = None


@dataclass
class RegistryDiff:
    """Differences between two registries, each list in registry order."""
    added: List[DiffEntry] = field(default_factory=list)
    removed: List[DiffEntry] = field(default_factory=list)
    changed: List[DiffEntry] = field(default_factory=list)

    @property
    def total_differences(self) -> int:
        return len(self.added) + len(self.removed) + len(self.changed)

    @property
    def has_differences(self) -> bool:
        return self.total_differences > 0

    def to_dict(self) -> Dict[str, Any]:
        return {
            'added': [{'key': e.key, 'text': e.new_text, 'origin': e.origin} for e in self.added],
            'removed': [{'key': e.key, 'text': e.old_text} for e in self.removed],
            'changed': [{'key': e.key, 'old': e.old_text, 'new': e.new_text} for e in self.changed],
        }


def diff_registries(old, new) -> RegistryDiff:
    """
    Compare two ``KeyRegistry`` values.

    Added and changed entries follow ``new``'s order, removed ones ``old``'s.
    """
    result = RegistryDiff()

    for entry in new:
        previous = old.get(entry.key)
        if previous is None:
            result.added.append(DiffEntry(entry.key, DiffType.ADDED, None, entry.text, entry.origin))
        elif previous.text != entry.text:
            result.changed.append(DiffEntry(
                entry.key, DiffType.CHANGED, previous.text, entry.text, entry.origin or previous.origin
            ))

    for entry in old:
        if entry.key not in new:
            result.removed.append(DiffEntry(entry.key, DiffType.REMOVED, entry.text, None, entry.origin))

    return result


def _truncate(text: Optional[str], max_len: int = 60) -> str:
    if not text:
        return ""
    if len(text) <= max_len:
        return text
    return text[:max_len - 3] + "..."


def print_diff(result: RegistryDiff, limit: int = 50) -> None:
    """Print a registry diff (used by ``scan --dry-run``)."""
    print(f"\n{Colors.bold('REGISTRY CHANGES')}")
    print("-" * 70)

    if not result.has_differences:
        print(f"  {Colors.success('✓')} Registry is up to date")
        return

    for entry in result.added[:limit]:
        origin = f"  ({entry.origin})" if entry.origin else ''
        print(f"  {Colors.success('+')} {entry.key}: \"{_truncate(entry.new_text)}\"{Colors.dim(origin)}")
    if len(result.added) > limit:
        print(f"  ... and {len(result.added) - limit} more additions")

    for entry in result.changed[:limit]:
        print(f"  {Colors.warning('~')} {entry.key}")
        print(f"      old: \"{_truncate(entry.old_text)}\"")
        print(f"      new: \"{_truncate(entry.new_text)}\"")
    if len(result.changed) > limit:
        print(f"  ... and {len(result.changed) - limit} more changes")

    for entry in result.removed[:limit]:
        print(f"  {Colors.error('-')} {entry.key}")

    print(f"\n  {len(result.added)} added, {len(result.changed)} changed, {len(result.removed)} removed")
