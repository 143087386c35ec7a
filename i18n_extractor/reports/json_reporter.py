"""JSON report generator."""

import json
from datetime import datetime
from pathlib import Path
from typing import List, Optional

from ..__version__ import __version__
from ..features.validator import ValidationReport
from ..utils.fileio import atomic_write, read_text


class JSONReporter:
    """Write validation reports as JSON for CI and other tooling."""

    @staticmethod
    def build(reports: List[ValidationReport], registry_path: Optional[str] = None) -> dict:
        return {
            'metadata': {
                'generated_at': datetime.now().isoformat(),
                'version': __version__,
                'registry': registry_path,
            },
            'valid': all(report.is_clean for report in reports),
            'packs': [report.to_dict() for report in reports],
        }

    @staticmethod
    def generate(
        reports: List[ValidationReport],
        output_path: Optional[Path] = None,
        registry_path: Optional[str] = None,
        pretty: bool = True
    ) -> Path:
        """
        Generate JSON report.

        Args:
            reports: Validation reports, one per pack
            output_path: Output file path
            registry_path: Registry the packs were checked against
            pretty: Pretty print JSON

        Returns:
            Path to generated report
        """
        if output_path is None:
            output_path = Path.cwd() / 'validation_report.json'
        output_path = Path(output_path)

        report = JSONReporter.build(reports, registry_path)
        if pretty:
            content = json.dumps(report, indent=2, ensure_ascii=False)
        else:
            content = json.dumps(report, ensure_ascii=False)

        atomic_write(output_path, content + '\n')
        return output_path

    @staticmethod
    def load(report_path: Path) -> dict:
        """Load a JSON report from file."""
        return json.loads(read_text(report_path))
