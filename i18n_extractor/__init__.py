"""
i18n-extractor
==============

Source-extracted localization: finds user-facing strings and translation
calls in Rust or Python sources, keeps an ordered defaults registry, and
validates and reorganizes per-language translation packs against it.

Usage:
    from i18n_extractor import KeyRegistry, RegistryBuilder, RustAdapter, SourceScanner

    scanner = SourceScanner(RustAdapter())
    registry = KeyRegistry.load('i18n/defaults.yml', missing_ok=True)
    result = RegistryBuilder().merge(registry, scanner.scan('crates'))
    result.registry.save('i18n/defaults.yml')

CLI:
    i18n-extractor scan crates i18n/defaults.yml
    i18n-extractor new fr
    i18n-extractor validate i18n-fr
    i18n-extractor reorganize i18n-fr/translations/translation.json
    i18n-extractor scan-app-menus scan src/app_menus.rs i18n/menus.yml
"""

from .__version__ import __version__, __author__, __description__

# Core exports
from .core.classifier import LiteralClassifier
from .core.errors import (
    AmbiguousLiteralMatch,
    DuplicateKeyConflict,
    I18nError,
    PackLoadError,
    ParseSkipped,
    RegistryLoadError,
)
from .core.pack import TranslationPack
from .core.registry import KeyRegistry, RegistryEntry
from .core.scanner import SourceScanner

# Framework adapters
from .frameworks.base import BaseAdapter
from .frameworks.python import PythonAdapter
from .frameworks.rust import RustAdapter

# Features
from .features.builder import RegistryBuilder
from .features.menu_pipeline import MenuReplacer, MenuScanner
from .features.pack_template import PackTemplate
from .features.reorganizer import reorganize, reorganize_file
from .features.validator import PackValidator

__all__ = [
    '__version__',
    '__author__',
    '__description__',
    'LiteralClassifier',
    'AmbiguousLiteralMatch',
    'DuplicateKeyConflict',
    'I18nError',
    'PackLoadError',
    'ParseSkipped',
    'RegistryLoadError',
    'TranslationPack',
    'KeyRegistry',
    'RegistryEntry',
    'SourceScanner',
    'BaseAdapter',
    'PythonAdapter',
    'RustAdapter',
    'RegistryBuilder',
    'MenuReplacer',
    'MenuScanner',
    'PackTemplate',
    'reorganize',
    'reorganize_file',
    'PackValidator',
]
