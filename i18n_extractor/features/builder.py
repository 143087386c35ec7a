"""Registry builder: merges scan findings into the defaults registry."""

from dataclasses import dataclass, field, replace
from pathlib import PurePosixPath
from typing import Dict, List, Optional, Tuple

from ..core.errors import DuplicateKeyConflict, ParseSkipped
from ..core.registry import KeyRegistry, RegistryEntry
from ..core.scanner import CallSiteKey, LiteralCandidate, ScanResult
from ..utils.config import KeysConfig, ScanConfig
from ..utils.logging import get_logger
from ..utils.validators import is_valid_key_name, slugify

# File stems that say nothing about the feature a file belongs to
GENERIC_STEMS = {'mod', 'lib', 'main', '__init__', '__main__'}


@dataclass
class BuildReport:
    """What a merge did to the registry."""
    added: List[str] = field(default_factory=list)
    updated: List[Tuple[str, str, str]] = field(default_factory=list)  # key, old, new
    reused: int = 0
    unresolved: List[CallSiteKey] = field(default_factory=list)
    invalid: List[str] = field(default_factory=list)  # "origin: key" that fail the key pattern
    stale: List[str] = field(default_factory=list)
    below_threshold: int = 0
    skipped: List[ParseSkipped] = field(default_factory=list)
    dynamic_calls: List[str] = field(default_factory=list)

    @property
    def changed(self) -> bool:
        return bool(self.added or self.updated)


@dataclass
class BuildResult:
    registry: KeyRegistry
    report: BuildReport


class RegistryBuilder:
    """
    Turn a scan into a new registry.

    * call sites with a default text add the key, or update its text
    * call sites without a default only resolve against existing keys
    * literal candidates at or above ``min_confidence`` get a derived key
      ``<prefix>.<category>.<slug>``; an existing key with the same text is
      reused, otherwise the first free ``_2``, ``_3`` ... suffix is taken
    * keys no longer seen are reported as stale and kept
    """

    def __init__(self, keys_config: Optional[KeysConfig] = None, scan_config: Optional[ScanConfig] = None):
        self.keys_config = keys_config or KeysConfig()
        self.scan_config = scan_config or ScanConfig()
        self.logger = get_logger()

    def category_for_file(self, file: str) -> str:
        """
        Category segment for literals found in ``file``.

        ``keys.module_mapping`` fragments win (first match); otherwise the
        file stem, or its directory for ``mod.rs``/``__init__.py`` style files.
        """
        lowered = file.lower()
        for fragment, module in self.keys_config.module_mapping.items():
            if fragment.lower() in lowered:
                return slugify(module, None, self.keys_config.default_module)

        path = PurePosixPath(file)
        name = path.stem
        if name in GENERIC_STEMS:
            parents = [p for p in path.parent.parts if p not in ('src', '.')]
            name = parents[-1] if parents else ''
        return slugify(name, None, self.keys_config.default_module) if name else self.keys_config.default_module

    def derive_key(self, file: str, text: str) -> str:
        slug = slugify(text, self.keys_config.max_words)
        return f"{self.keys_config.prefix}.{self.category_for_file(file)}.{slug}"

    def merge(self, registry: KeyRegistry, scan: ScanResult, adopt_unresolved: bool = False) -> BuildResult:
        """
        Merge ``scan`` into ``registry``.

        Args:
            registry: Current registry (left untouched)
            scan: Scanner output
            adopt_unresolved: Add keys used without a default, with the key
                itself as default text

        Returns:
            BuildResult with the new registry and a report

        Raises:
            DuplicateKeyConflict: If two sources give one key different texts
        """
        report = BuildReport(skipped=list(scan.skipped), dynamic_calls=list(scan.dynamic_calls))
        current: Dict[str, RegistryEntry] = {entry.key: entry for entry in registry}
        run_defaults: Dict[str, Tuple[str, str]] = {}
        observed = set()
        pattern = self.keys_config.pattern

        def claim(key: str, text: str, origin: str) -> None:
            previous = run_defaults.get(key)
            if previous is not None and previous[0] != text:
                raise DuplicateKeyConflict(key, previous[0], text, previous[1], origin)
            run_defaults.setdefault(key, (text, origin))

        for finding in scan.findings:
            if isinstance(finding, CallSiteKey):
                if not is_valid_key_name(finding.key, pattern):
                    report.invalid.append(f"{finding.origin}: {finding.key}")
                    self.logger.warning(f"{finding.origin}: key '{finding.key}' does not match the key pattern")
                    continue
                observed.add(finding.key)
                self._merge_call_site(finding, current, report, claim, adopt_unresolved)

            elif isinstance(finding, LiteralCandidate):
                if finding.confidence < self.scan_config.min_confidence:
                    report.below_threshold += 1
                    continue
                base = self.derive_key(finding.file, finding.text)
                if not is_valid_key_name(base, pattern):
                    report.invalid.append(f"{finding.origin}: {base}")
                    continue
                key = self._resolve_key(base, finding.text, current)
                observed.add(key)
                claim(key, finding.text, finding.origin)
                if key in current:
                    report.reused += 1
                else:
                    current[key] = RegistryEntry(key, finding.text, finding.origin)
                    report.added.append(key)

        report.stale = [entry.key for entry in registry if entry.key not in observed]
        # A later call site may have supplied the default
        report.unresolved = [call for call in report.unresolved if call.key not in current]

        for call in report.unresolved:
            self.logger.warning(f"{call.origin}: '{call.key}' has no default text and is not in the registry")
        if report.stale:
            self.logger.info(f"{len(report.stale)} registry keys were not found in the sources (kept)")

        return BuildResult(KeyRegistry(current.values()), report)

    def _merge_call_site(self, call: CallSiteKey, current: Dict[str, RegistryEntry],
                         report: BuildReport, claim, adopt_unresolved: bool) -> None:
        key = call.key
        if call.default_text is None:
            if key in current:
                return
            if adopt_unresolved:
                current[key] = RegistryEntry(key, key, call.origin)
                report.added.append(key)
            elif key not in {c.key for c in report.unresolved}:
                report.unresolved.append(call)
            return

        claim(key, call.default_text, call.origin)
        existing = current.get(key)
        if existing is None:
            current[key] = RegistryEntry(key, call.default_text, call.origin)
            report.added.append(key)
        elif existing.text != call.default_text:
            report.updated.append((key, existing.text, call.default_text))
            current[key] = replace(existing, text=call.default_text, origin=existing.origin or call.origin)

    @staticmethod
    def _resolve_key(base: str, text: str, current: Dict[str, RegistryEntry]) -> str:
        n = 1
        while True:
            key = base if n == 1 else f"{base}_{n}"
            entry = current.get(key)
            if entry is None or entry.text == text:
                return key
            n += 1
