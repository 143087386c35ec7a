"""Report modules."""

from .json_reporter import JSONReporter
from .console_reporter import ConsoleReporter

__all__ = [
    'JSONReporter',
    'ConsoleReporter',
]
