"""Progress bar wrapper around tqdm."""

import sys
from typing import Iterable, Iterator, Optional, TypeVar

from tqdm import tqdm

T = TypeVar('T')


class ProgressBar:
    """
    Progress indicator with a consistent interface for the scanner.

    Usage:
        for path in ProgressBar(files, desc="Scanning", unit="files"):
            scan(path)

        # Disabled bars yield the items untouched
        for path in ProgressBar(files, disable=True):
            scan(path)
    """

    def __init__(
        self,
        iterable: Iterable[T],
        desc: Optional[str] = None,
        total: Optional[int] = None,
        disable: bool = False,
        unit: str = 'it',
        leave: bool = False,
        file: Optional[object] = None,
    ):
        """
        Initialize progress bar.

        Args:
            iterable: Items to iterate over
            desc: Description prefix for the progress bar
            total: Total number of items (if not provided, will try len())
            disable: If True, don't show progress output
            unit: Unit of items (e.g., 'files', 'keys')
            leave: Whether to leave progress bar after completion
            file: File object for output (default: sys.stderr)
        """
        self.iterable = iterable
        self.desc = desc
        self.total = total
        self.disable = disable
        self.unit = unit
        self.leave = leave
        self.file = file or sys.stderr

        if self.total is None:
            try:
                self.total = len(iterable)  # type: ignore
            except (TypeError, AttributeError):
                pass

    def __iter__(self) -> Iterator[T]:
        if self.disable:
            yield from self.iterable
            return

        yield from tqdm(
            self.iterable,
            desc=self.desc,
            total=self.total,
            unit=self.unit,
            leave=self.leave,
            file=self.file,
        )
