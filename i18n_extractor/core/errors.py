"""Exceptions raised by the extraction and reconciliation engine."""

from typing import List, Optional, Sequence


class I18nError(Exception):
    """Base class for every error the engine reports to the user."""


class ParseSkipped(I18nError):
    """
    A source file could not be tokenized.

    The scanner records these and keeps going; they never abort a scan.
    """

    def __init__(self, file: str, reason: str, line: Optional[int] = None):
        self.file = file
        self.reason = reason
        self.line = line
        location = f"{file}:{line}" if line else file
        super().__init__(f"{location}: {reason}")


class DuplicateKeyConflict(I18nError):
    """The same key was given two different default texts."""

    def __init__(self, key: str, first: str, second: str,
                 first_origin: Optional[str] = None, second_origin: Optional[str] = None):
        self.key = key
        self.first = first
        self.second = second
        self.first_origin = first_origin
        self.second_origin = second_origin
        where = ''
        if first_origin or second_origin:
            where = f" ({first_origin or '?'} vs {second_origin or '?'})"
        super().__init__(f"Conflicting default texts for '{key}': {first!r} vs {second!r}{where}")


class AmbiguousLiteralMatch(I18nError):
    """A menu literal maps to zero or several defaults entries."""

    def __init__(self, text: str, candidates: Sequence[str], location: Optional[str] = None):
        self.text = text
        self.candidates: List[str] = list(candidates)
        self.location = location
        prefix = f"{location}: " if location else ''
        if self.candidates:
            detail = f"matches {len(self.candidates)} keys: {', '.join(self.candidates)}"
        else:
            detail = "has no entry in the defaults file"
        super().__init__(f"{prefix}literal {text!r} {detail}")


class RegistryLoadError(I18nError):
    """The defaults registry file is unreadable or malformed."""

    def __init__(self, path: str, reason: str):
        self.path = path
        self.reason = reason
        super().__init__(f"Cannot load registry {path}: {reason}")


class PackLoadError(I18nError):
    """A translation file cannot be loaded strictly enough to be rewritten."""

    def __init__(self, path: str, reason: str):
        self.path = path
        self.reason = reason
        super().__init__(f"Cannot load translation file {path}: {reason}")
