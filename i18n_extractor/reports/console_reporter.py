"""Console report generator."""

from typing import List

from ..features.builder import BuildReport
from ..features.menu_pipeline import ReplaceResult
from ..features.pack_template import PackCreation
from ..features.reorganizer import ReorganizeResult
from ..features.validator import ValidationReport
from ..utils.colors import Colors


class ConsoleReporter:
    """Print command results for humans."""

    @staticmethod
    def print_build_report(report: BuildReport, registry_path: str, total_keys: int,
                           files_scanned: int, dry_run: bool = False, limit: int = 10):
        """Summary of a ``scan`` run."""
        ConsoleReporter._print_header('🔍 SCAN REPORT')

        print(f"Files scanned:     {files_scanned}")
        print(f"Registry:          {registry_path} ({total_keys} keys)")
        print(f"✅ Added:           {len(report.added)}")
        print(f"✏️  Updated:         {len(report.updated)}")
        print(f"♻️  Reused:          {report.reused}")
        if report.below_threshold:
            print(f"🔽 Below threshold: {report.below_threshold}")

        ConsoleReporter._print_list('⚠️  UNRESOLVED KEYS (no default text)',
                                    [f"{c.key}  {Colors.dim(c.origin)}" for c in report.unresolved], limit)
        ConsoleReporter._print_list('❌ INVALID KEYS', report.invalid, limit)
        ConsoleReporter._print_list('🟡 STALE KEYS (kept)', report.stale, limit)
        ConsoleReporter._print_list('🔄 DYNAMIC KEYS (not a literal)', report.dynamic_calls, limit)
        ConsoleReporter._print_list('⏭️  SKIPPED FILES', [str(s) for s in report.skipped], limit)

        print()
        if dry_run:
            print(f"{Colors.info('[DRY RUN]')} Registry not written")
        elif report.changed:
            print(f"{Colors.success('✓')} Registry updated: {registry_path}")
        else:
            print(f"{Colors.success('✓')} Registry is up to date")

    @staticmethod
    def print_validation_report(report: ValidationReport, limit: int = 20):
        """Print one pack's validation report."""
        language = f" ({report.language})" if report.language else ''
        ConsoleReporter._print_header(f'🌍 PACK VALIDATION - {report.pack}{language}')

        completion = ConsoleReporter._create_progress_bar(report.completion)
        print(f"Registry keys:  {report.total_keys}")
        print(f"Completion:     {completion}")
        print(f"Placeholders:   {len(report.placeholder_keys)}")
        if report.quarantined_keys:
            print(f"Quarantined:    {len(report.quarantined_keys)}")

        ConsoleReporter._print_list('📁 MISSING FILES', report.missing_files, limit)
        ConsoleReporter._print_list('🔴 MISSING KEYS (in registry, not in pack)', report.missing_keys, limit)
        ConsoleReporter._print_list('🟡 EXTRA KEYS (in pack, not in registry)', report.extra_keys, limit)
        ConsoleReporter._print_list(
            '❌ MALFORMED ENTRIES',
            [f"[{m.code}] {m.key}: {m.reason}" for m in report.malformed_entries], limit
        )

        print()
        if report.is_clean:
            print(f"{Colors.success('✓')} Pack is valid")
        else:
            print(f"{Colors.error('✗')} {report.total_issues} issue(s) found")

    @staticmethod
    def print_reorganize_result(result: ReorganizeResult, dry_run: bool = False, limit: int = 20):
        ConsoleReporter._print_header(f'🗂️  REORGANIZE - {result.path}')

        print(f"➕ Placeholders added: {len(result.added_placeholders)}")
        print(f"↩️  Restored:           {len(result.restored)}")
        print(f"📦 Quarantined:        {len(result.quarantined)}")

        ConsoleReporter._print_list('📦 QUARANTINED KEYS', result.quarantined, limit)
        ConsoleReporter._print_list('⚠️  KEPT BOTH VALUES', result.conflicts, limit)

        print()
        if not result.changed:
            print(f"{Colors.success('✓')} Already in registry order, nothing to do")
        elif dry_run:
            print(f"{Colors.info('[DRY RUN]')} File not written")
        else:
            print(f"{Colors.success('✓')} Rewritten: {result.path}")

    @staticmethod
    def print_menu_scan(defaults_path: str, key_count: int):
        print(f"{Colors.success('✓')} {key_count} menu strings written to {defaults_path}")
        print("   Review the file, then run the replace step")

    @staticmethod
    def print_replace_result(result: ReplaceResult, limit: int = 20):
        ConsoleReporter._print_header(f'🔁 MENU REPLACE - {result.path}')

        print(f"Replaced:           {len(result.replaced)}")
        print(f"Already translated: {result.already_translated}")
        if result.import_added:
            print("Import added:       yes")

        ConsoleReporter._print_list('REPLACED', [f"line {line}: {key}" for key, line in result.replaced], limit)

        print()
        if result.written:
            print(f"{Colors.success('✓')} Source rewritten: {result.path}")
        else:
            print(f"{Colors.success('✓')} Nothing to replace")

    @staticmethod
    def print_pack_creation(creation: PackCreation):
        print(f"\n🌍 {Colors.bold(f'{creation.name} ({creation.native_name})')}")
        for path in creation.files:
            print(f"   {Colors.success('✓')} Created: {path}")
        print(f"\n{creation.key_count} keys waiting for translation in {creation.directory}")
        print("\nNext steps:")
        print("1. Fill in translations/translation.json")
        print(f"2. Run: i18n-extractor validate {creation.directory}")

    @staticmethod
    def _print_header(title: str):
        print("\n" + "=" * 70)
        print(Colors.bold(title))
        print("=" * 70)

    @staticmethod
    def _print_list(title: str, items: List[str], limit: int):
        if not items:
            return
        print(f"\n{Colors.bold(title)}")
        print("-" * 70)
        for i, item in enumerate(items[:limit], 1):
            print(f"{i}. {item}")
        if len(items) > limit:
            print(f"... and {len(items) - limit} more")

    @staticmethod
    def _create_progress_bar(percent: float, width: int = 20) -> str:
        """Create ASCII progress bar."""
        filled = int(width * percent / 100)
        bar = '█' * filled + '░' * (width - filled)

        if percent >= 90:
            paint = Colors.success
        elif percent >= 70:
            paint = Colors.info
        else:
            paint = Colors.warning

        return f"{paint(bar)} {percent:.1f}%"
