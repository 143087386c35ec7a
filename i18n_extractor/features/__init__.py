"""Feature modules."""

from .builder import RegistryBuilder, BuildReport, BuildResult
from .diff import RegistryDiff, diff_registries
from .menu_pipeline import MenuScanner, MenuReplacer, ReplaceResult
from .pack_template import PackTemplate, PackCreation
from .reorganizer import reorganize, reorganize_file, ReorganizeResult
from .validator import PackValidator, ValidationReport

__all__ = [
    'RegistryBuilder',
    'BuildReport',
    'BuildResult',
    'RegistryDiff',
    'diff_registries',
    'MenuScanner',
    'MenuReplacer',
    'ReplaceResult',
    'PackTemplate',
    'PackCreation',
    'reorganize',
    'reorganize_file',
    'ReorganizeResult',
    'PackValidator',
    'ValidationReport',
]
