"""Source scanner: walks a source tree and reports translation keys and UI literals."""

from concurrent.futures import ThreadPoolExecutor, as_completed
from dataclasses import dataclass, field
from fnmatch import fnmatch
from pathlib import Path
from typing import List, Optional, Sequence, Tuple, Union

from ..frameworks.base import BaseAdapter, CallSite, LexError, StringSite
from ..utils.config import ScanConfig
from ..utils.fileio import read_text
from ..utils.logging import get_logger
from ..utils.progress import ProgressBar
from .classifier import LiteralClassifier
from .errors import ParseSkipped


@dataclass(frozen=True)
class CallSiteKey:
    """A key used in a translation call, with its default text if one was given."""
    file: str
    line: int
    column: int
    key: str
    default_text: Optional[str]
    call: str

    @property
    def origin(self) -> str:
        return f"{self.file}:{self.line}"


@dataclass(frozen=True)
class LiteralCandidate:
    """A string literal classified as user-facing text."""
    file: str
    line: int
    column: int
    text: str
    confidence: float
    call: Optional[str] = None
    field: Optional[str] = None

    @property
    def origin(self) -> str:
        return f"{self.file}:{self.line}"


Finding = Union[CallSiteKey, LiteralCandidate]


def finding_sort_key(finding: Finding) -> Tuple[str, int, int]:
    return finding.file, finding.line, finding.column


@dataclass
class ScanResult:
    """Everything one scan produced, in deterministic order."""
    root: str
    findings: List[Finding] = field(default_factory=list)
    skipped: List[ParseSkipped] = field(default_factory=list)
    dynamic_calls: List[str] = field(default_factory=list)  # "path:line" of non-literal keys
    files_scanned: int = 0

    @property
    def call_sites(self) -> List[CallSiteKey]:
        return [f for f in self.findings if isinstance(f, CallSiteKey)]

    @property
    def literals(self) -> List[LiteralCandidate]:
        return [f for f in self.findings if isinstance(f, LiteralCandidate)]


@dataclass
class _FileResult:
    findings: List[Finding] = field(default_factory=list)
    dynamic_calls: List[str] = field(default_factory=list)
    skipped: Optional[ParseSkipped] = None


class SourceScanner:
    """
    Scan source files for translation calls and untranslated UI literals.

    Files are processed on a thread pool; results are merged and sorted by
    ``(file, line, column)``, so two scans of the same tree return identical
    lists. A file that cannot be decoded or tokenized is recorded as
    ``ParseSkipped`` and the scan carries on.
    """

    def __init__(
        self,
        adapter: BaseAdapter,
        config: Optional[ScanConfig] = None,
        classifier: Optional[LiteralClassifier] = None,
        show_progress: bool = False,
    ):
        self.adapter = adapter
        self.config = config or ScanConfig()
        self.classifier = classifier or LiteralClassifier(self.config)
        self.show_progress = show_progress
        self.logger = get_logger()

    # ------------------------------------------------------------------
    # File discovery
    # ------------------------------------------------------------------

    def find_files(
        self,
        root: Path,
        include: Sequence[str] = (),
        exclude: Sequence[str] = (),
    ) -> List[Path]:
        """Source files under ``root`` (or ``root`` itself), sorted."""
        root = Path(root)
        if root.is_file():
            return [root]

        extensions = self.config.extensions or self.adapter.get_file_extensions()
        files = []
        for path in root.rglob('*'):
            if path.suffix not in extensions or not path.is_file():
                continue
            rel = path.relative_to(root)
            if self.adapter.should_exclude_file(rel):
                continue
            rel_posix = rel.as_posix()
            if any(self._matches(rel_posix, pattern) for pattern in exclude):
                continue
            if include and not any(self._matches(rel_posix, pattern) for pattern in include):
                continue
            files.append(path)
        return sorted(files, key=lambda p: p.relative_to(root).as_posix())

    @staticmethod
    def _matches(rel_posix: str, pattern: str) -> bool:
        if pattern.endswith('/'):
            return ('/' + pattern) in ('/' + rel_posix)
        name = rel_posix.rsplit('/', 1)[-1]
        return fnmatch(rel_posix, pattern) or fnmatch(name, pattern)

    # ------------------------------------------------------------------
    # Scanning
    # ------------------------------------------------------------------

    def scan(
        self,
        root: Union[str, Path],
        include: Sequence[str] = (),
        exclude: Sequence[str] = (),
    ) -> ScanResult:
        """
        Scan a directory tree or a single file.

        Args:
            root: Directory or file to scan
            include: Optional globs a file must match
            exclude: Globs (or ``dir/`` prefixes) to skip

        Returns:
            ScanResult with findings sorted by (file, line, column)
        """
        root = Path(root)
        base = root.parent if root.is_file() else root
        files = self.find_files(root, include, exclude)
        result = ScanResult(root=str(root), files_scanned=len(files))

        self.logger.debug(f"Scanning {len(files)} files under {root}")

        results: List[_FileResult] = []
        if self.config.max_workers > 1 and len(files) > 1:
            with ThreadPoolExecutor(max_workers=self.config.max_workers) as executor:
                futures = [executor.submit(self._scan_file, path, base) for path in files]
                for future in ProgressBar(as_completed(futures), desc="Scanning", total=len(futures),
                                          unit="files", disable=not self.show_progress):
                    results.append(future.result())
        else:
            for path in ProgressBar(files, desc="Scanning", unit="files",
                                    disable=not self.show_progress):
                results.append(self._scan_file(path, base))

        for file_result in results:
            result.findings.extend(file_result.findings)
            result.dynamic_calls.extend(file_result.dynamic_calls)
            if file_result.skipped is not None:
                result.skipped.append(file_result.skipped)

        result.findings.sort(key=finding_sort_key)
        result.dynamic_calls.sort(key=_origin_sort_key)
        result.skipped.sort(key=lambda s: s.file)

        for skipped in result.skipped:
            self.logger.warning(f"Skipped {skipped}")

        return result

    def scan_source(self, content: str, file: str) -> List[Finding]:
        """
        Scan one in-memory source text.

        Raises:
            LexError: If the content cannot be tokenized
        """
        return self._analyze(content, file).findings

    def _scan_file(self, path: Path, base: Path) -> _FileResult:
        rel = path.relative_to(base).as_posix()
        try:
            content = read_text(path)
        except UnicodeDecodeError as e:
            return _FileResult(skipped=ParseSkipped(rel, f"not valid UTF-8 ({e.reason})"))
        except OSError as e:
            return _FileResult(skipped=ParseSkipped(rel, f"cannot read: {e.strerror or e}"))

        try:
            return self._analyze(content, rel)
        except LexError as e:
            return _FileResult(skipped=ParseSkipped(rel, str(e), e.line))

    def _analyze(self, content: str, rel: str) -> _FileResult:
        tokens = self.adapter.tokenize(content)
        events = self.adapter.walk(tokens, self.config.translation_calls, self.config.ignore_marker)
        file_result = _FileResult()

        for event in events:
            if isinstance(event, CallSite):
                if event.key is None:
                    file_result.dynamic_calls.append(f"{rel}:{event.line}")
                    continue
                file_result.findings.append(CallSiteKey(
                    file=rel,
                    line=event.line,
                    column=event.column,
                    key=event.key,
                    default_text=event.default,
                    call=event.name,
                ))
            elif isinstance(event, StringSite):
                verdict = self.classifier.classify(event.token.value, event.context)
                if not verdict.translatable:
                    continue
                file_result.findings.append(LiteralCandidate(
                    file=rel,
                    line=event.token.line,
                    column=event.token.column,
                    text=event.token.value,
                    confidence=verdict.confidence,
                    call=event.context.call_name,
                    field=event.context.field,
                ))

        return file_result


def _origin_sort_key(origin: str) -> Tuple[str, int]:
    path, _, line = origin.rpartition(':')
    return path, int(line) if line.isdigit() else 0
