"""Translation pack validator."""

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

from ..core.pack import PackDescriptor, parse_raw
from ..core.registry import KeyRegistry
from ..utils.config import KeysConfig, PackConfig
from ..utils.fileio import read_text
from ..utils.validators import count_placeholders, is_valid_key_name, is_valid_language_code


@dataclass(frozen=True)
class MalformedEntry:
    """A problem with one key (or with a whole file when ``key`` is a file name)."""
    key: str
    reason: str
    code: str


@dataclass
class ValidationReport:
    """
    Result of checking one pack against the registry.

    ``missing_keys``, ``extra_keys``, ``malformed_entries`` and
    ``missing_files`` decide success; placeholders and quarantined keys are
    informational.
    """
    pack: str
    language: Optional[str] = None
    missing_keys: List[str] = field(default_factory=list)
    extra_keys: List[str] = field(default_factory=list)
    malformed_entries: List[MalformedEntry] = field(default_factory=list)
    missing_files: List[str] = field(default_factory=list)
    placeholder_keys: List[str] = field(default_factory=list)
    quarantined_keys: List[str] = field(default_factory=list)
    total_keys: int = 0

    @property
    def is_clean(self) -> bool:
        return not (self.missing_keys or self.extra_keys or self.malformed_entries or self.missing_files)

    @property
    def total_issues(self) -> int:
        return (len(self.missing_keys) + len(self.extra_keys)
                + len(self.malformed_entries) + len(self.missing_files))

    @property
    def completion(self) -> float:
        """Share of registry keys with a real translation, in percent."""
        if not self.total_keys:
            return 100.0
        translated = self.total_keys - len(self.missing_keys) - len(self.placeholder_keys)
        return round(max(translated, 0) / self.total_keys * 100, 1)

    def to_dict(self) -> Dict[str, Any]:
        return {
            'pack': self.pack,
            'language': self.language,
            'valid': self.is_clean,
            'completion': self.completion,
            'missing_keys': list(self.missing_keys),
            'extra_keys': list(self.extra_keys),
            'malformed_entries': [
                {'key': m.key, 'code': m.code, 'reason': m.reason} for m in self.malformed_entries
            ],
            'missing_files': list(self.missing_files),
            'placeholder_keys': list(self.placeholder_keys),
            'quarantined_keys': list(self.quarantined_keys),
        }


class PackValidator:
    """
    Check a language pack against the defaults registry.

    Checks:
    - required files exist (descriptor and translation file)
    - descriptor is valid YAML with a language code
    - translation file is a JSON object
    - keys are well formed and unique
    - values are strings (or null for untranslated placeholders)
    - placeholder count matches the default text
    - key sets: missing = registry - pack, extra = pack - registry

    The pack is never modified.
    """

    ERROR_CODES = {
        'E001': 'Invalid key format',
        'E002': 'Value is not a string',
        'E003': 'Duplicate key',
        'E004': 'Placeholder count mismatch',
        'E005': 'Unreadable translation file',
        'E006': 'Invalid pack descriptor',
    }

    def __init__(
        self,
        registry: KeyRegistry,
        keys_config: Optional[KeysConfig] = None,
        pack_config: Optional[PackConfig] = None,
    ):
        self.registry = registry
        self.keys_config = keys_config or KeysConfig()
        self.pack_config = pack_config or PackConfig()

    def validate(self, pack_dir: Union[str, Path]) -> ValidationReport:
        """
        Validate the pack in ``pack_dir``.

        Args:
            pack_dir: Pack directory containing the descriptor and the
                translation file

        Returns:
            ValidationReport (never raises for problems inside the pack)
        """
        pack_dir = Path(pack_dir)
        report = ValidationReport(pack=str(pack_dir), total_keys=len(self.registry))

        if not pack_dir.is_dir():
            report.missing_files.append(str(pack_dir))
            return report

        self._check_descriptor(pack_dir / self.pack_config.descriptor, report)

        storage = pack_dir / self.pack_config.storage
        if not storage.is_file():
            report.missing_files.append(str(storage))
            report.missing_keys = self.registry.keys()
            return report

        self.check_translations(storage, report)
        return report

    def _check_descriptor(self, path: Path, report: ValidationReport) -> None:
        if not path.is_file():
            report.missing_files.append(str(path))
            return
        try:
            descriptor = PackDescriptor.loads(read_text(path))
        except (OSError, UnicodeDecodeError, ValueError) as e:
            self._malformed(report, path.name, 'E006', str(e))
            return
        report.language = descriptor.language
        if not is_valid_language_code(descriptor.language):
            self._malformed(report, path.name, 'E006', f"invalid language code '{descriptor.language}'")

    def check_translations(self, storage: Path, report: ValidationReport) -> None:
        """Validate the translation file itself and compute the key sets."""
        try:
            content = read_text(storage)
        except (OSError, UnicodeDecodeError) as e:
            self._malformed(report, storage.name, 'E005', str(e))
            return

        raw = parse_raw(content, self.pack_config.quarantine_key)
        if raw.error:
            self._malformed(report, storage.name, 'E005', raw.error)
            return

        texts = self.registry.texts()
        pattern = self.keys_config.pattern
        seen = set()
        duplicates = set()
        pack_keys: List[str] = []

        for key, value in raw.pairs:
            if key in seen:
                if key not in duplicates:
                    self._malformed(report, key, 'E003', 'key appears more than once')
                    duplicates.add(key)
                continue
            seen.add(key)
            pack_keys.append(key)

            if not is_valid_key_name(key, pattern):
                self._malformed(report, key, 'E001', 'key does not match the key pattern')

            if value is None:
                report.placeholder_keys.append(key)
                continue
            if not isinstance(value, str):
                self._malformed(report, key, 'E002', 'value must be a string or null')
                continue

            default = texts.get(key)
            if default is not None:
                expected, actual = count_placeholders(default), count_placeholders(value)
                if expected != actual:
                    self._malformed(
                        report, key, 'E004',
                        f'{actual} placeholders, default text has {expected}'
                    )

        report.quarantined_keys = [key for key, _ in raw.quarantined]
        report.missing_keys = [key for key in texts if key not in seen]
        report.extra_keys = [key for key in pack_keys if key not in texts]

    @staticmethod
    def _malformed(report: ValidationReport, key: str, code: str, reason: str) -> None:
        report.malformed_entries.append(MalformedEntry(key=key, reason=reason, code=code))
