"""Core modules: classification, scanning, registry and pack models."""

from .classifier import LiteralClassifier, Classification, Verdict
from .pack import TranslationPack, PackEntry, PackDescriptor
from .registry import KeyRegistry, RegistryEntry
from .scanner import SourceScanner, ScanResult, CallSiteKey, LiteralCandidate

__all__ = [
    'LiteralClassifier',
    'Classification',
    'Verdict',
    'TranslationPack',
    'PackEntry',
    'PackDescriptor',
    'KeyRegistry',
    'RegistryEntry',
    'SourceScanner',
    'ScanResult',
    'CallSiteKey',
    'LiteralCandidate',
]
