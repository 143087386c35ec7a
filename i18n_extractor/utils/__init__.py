"""Utility modules."""

from .colors import Colors
from .config import Config, create_default_config
from .fileio import atomic_write, read_text, write_if_changed
from .validators import (
    is_valid_language_code,
    is_valid_key_name,
    normalize_language_code,
    slugify,
)

__all__ = [
    'Colors',
    'Config',
    'create_default_config',
    'atomic_write',
    'read_text',
    'write_if_changed',
    'is_valid_language_code',
    'is_valid_key_name',
    'normalize_language_code',
    'slugify',
]
