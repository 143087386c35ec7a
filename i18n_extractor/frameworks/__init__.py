"""Framework adapters for different source languages."""

from .base import BaseAdapter, CallSite, LexError, LiteralContext, StringSite, Token
from .python import PythonAdapter
from .rust import RustAdapter

__all__ = [
    'BaseAdapter',
    'CallSite',
    'LexError',
    'LiteralContext',
    'StringSite',
    'Token',
    'PythonAdapter',
    'RustAdapter',
]
