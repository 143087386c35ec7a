"""Command-line interface for i18n-extractor."""

import sys
import argparse
from pathlib import Path
from typing import Optional

from .__version__ import __version__
from .utils.colors import Colors
from .utils.config import Config, CONFIG_FILENAME, SUPPORTED_FRAMEWORKS, create_default_config, ConfigValidationError
from .utils.logging import configure_logging, get_logger
from .core.errors import AmbiguousLiteralMatch, DuplicateKeyConflict, PackLoadError, RegistryLoadError
from .core.registry import KeyRegistry
from .core.scanner import SourceScanner
from .frameworks.base import BaseAdapter, LexError
from .frameworks.python import PythonAdapter
from .frameworks.rust import RustAdapter
from .features.builder import RegistryBuilder
from .features.diff import print_diff
from .features.menu_pipeline import MenuReplacer, MenuScanner
from .features.pack_template import PackTemplate
from .features.reorganizer import reorganize_file
from .features.validator import PackValidator
from .reports.console_reporter import ConsoleReporter
from .reports.json_reporter import JSONReporter


def load_and_validate_config(config_path: Optional[str] = None, validate: bool = True,
                             verbose: bool = False) -> Config:
    """
    Load configuration and optionally validate it.

    Args:
        config_path: Explicit config file (default: ``.i18n.yml`` if present)
        validate: Whether to validate the config
        verbose: Whether to print warnings

    Returns:
        Loaded Config object

    Raises:
        ConfigValidationError: If loading or validation fails with errors
    """
    path = Path(config_path) if config_path else None
    if path is not None and not path.is_file():
        raise ConfigValidationError([f"Config file not found: {path}"])

    config = Config.from_file(path)

    if validate:
        errors, warnings = config.validate()

        if verbose and warnings:
            for warning in warnings:
                print(f"{Colors.warning('⚠️')}  Config warning: {warning}")

        if errors:
            raise ConfigValidationError(errors)

    return config


def create_adapter(framework: str) -> BaseAdapter:
    if framework == 'python':
        return PythonAdapter()
    return RustAdapter()


def _load_config(args) -> Optional[Config]:
    """Config for a command, or None after reporting why it is unusable."""
    try:
        return load_and_validate_config(args.config, validate=True, verbose=args.verbose)
    except ConfigValidationError as e:
        logger = get_logger()
        logger.error("Configuration errors:")
        for error in e.errors:
            logger.error(f"  • {error}")
        return None
    except OSError as e:
        get_logger().error(f"Cannot read config: {e}")
        return None


def cmd_init(args):
    """Initialize configuration file."""
    config_path = Path(args.config) if args.config else Path.cwd() / CONFIG_FILENAME

    if config_path.exists() and not args.force:
        print(f"{Colors.error('❌')} Config already exists: {config_path}")
        print("   Use --force to overwrite")
        return 1

    config = create_default_config(args.framework)
    try:
        config_path.parent.mkdir(parents=True, exist_ok=True)
        config.save(config_path)
    except OSError as e:
        get_logger().error(f"Cannot write {config_path}: {e}")
        return 1

    print(f"{Colors.success('✅')} Created: {config_path}")
    print(f"\n{Colors.bold('Next steps:')}")
    print(f"1. Edit {config_path.name} to configure your project")
    print("2. Run: i18n-extractor scan")

    return 0


def cmd_scan(args):
    """Scan sources and merge the findings into the registry."""
    config = _load_config(args)
    if config is None:
        return 1
    logger = get_logger()

    source = Path(args.src or config.paths.source)
    if not source.exists():
        logger.error(f"Source path not found: {source}")
        return 1
    registry_path = Path(args.out_file or config.paths.registry)

    try:
        registry = KeyRegistry.load(registry_path, missing_ok=True)
    except RegistryLoadError as e:
        logger.error(str(e))
        return 1

    scanner = SourceScanner(
        create_adapter(config.project.framework),
        config.scan,
        show_progress=not args.quiet and sys.stderr.isatty(),
    )
    scan = scanner.scan(source, include=config.paths.include, exclude=config.paths.exclude)

    builder = RegistryBuilder(config.keys, config.scan)
    try:
        result = builder.merge(registry, scan, adopt_unresolved=args.adopt_unresolved)
    except DuplicateKeyConflict as e:
        logger.error(str(e))
        return 1

    if args.dry_run:
        print_diff(registry.diff(result.registry))
    elif result.registry != registry or not registry_path.exists():
        try:
            result.registry.save(registry_path)
        except OSError as e:
            logger.error(f"Cannot write {registry_path}: {e}")
            return 1

    if not args.quiet:
        ConsoleReporter.print_build_report(
            result.report, str(registry_path), len(result.registry),
            scan.files_scanned, dry_run=args.dry_run,
        )
    return 0


def cmd_new(args):
    """Create a new language pack."""
    config = _load_config(args)
    if config is None:
        return 1
    logger = get_logger()

    try:
        registry = KeyRegistry.load(args.registry or config.paths.registry)
    except RegistryLoadError as e:
        logger.error(str(e))
        return 1

    template = PackTemplate(registry, config.pack)
    try:
        creation = template.create_pack(args.lang_code, output_dir=args.output, name=args.name)
    except (ValueError, FileExistsError) as e:
        logger.error(str(e))
        return 1
    except OSError as e:
        logger.error(f"Cannot create pack: {e}")
        return 1

    if not args.quiet:
        ConsoleReporter.print_pack_creation(creation)
    return 0


def cmd_validate(args):
    """Validate a language pack against the registry."""
    config = _load_config(args)
    if config is None:
        return 1
    logger = get_logger()

    registry_path = args.registry or config.paths.registry
    try:
        registry = KeyRegistry.load(registry_path)
    except RegistryLoadError as e:
        logger.error(str(e))
        return 1

    validator = PackValidator(registry, config.keys, config.pack)
    report = validator.validate(args.pack_dir)

    if not args.quiet:
        ConsoleReporter.print_validation_report(report)

    if args.json:
        try:
            output = JSONReporter.generate([report], Path(args.json), registry_path=str(registry_path))
        except OSError as e:
            logger.error(f"Cannot write {args.json}: {e}")
            return 1
        if not args.quiet:
            print(f"\n{Colors.success('✓')} JSON report: {output}")

    return 0 if report.is_clean else 1


def cmd_reorganize(args):
    """Rewrite a translation file in registry order."""
    config = _load_config(args)
    if config is None:
        return 1
    logger = get_logger()

    try:
        registry = KeyRegistry.load(args.registry or config.paths.registry)
    except RegistryLoadError as e:
        logger.error(str(e))
        return 1

    pack_file = Path(args.pack_file)
    if pack_file.is_dir():
        pack_file = pack_file / config.pack.storage

    try:
        result = reorganize_file(pack_file, registry, config.pack.quarantine_key, dry_run=args.dry_run)
    except PackLoadError as e:
        logger.error(str(e))
        return 1
    except OSError as e:
        logger.error(f"Cannot write {pack_file}: {e}")
        return 1

    if not args.quiet:
        ConsoleReporter.print_reorganize_result(result, dry_run=args.dry_run)
    return 0


def cmd_scan_app_menus(args):
    """Menu scan (write defaults) or replace (rewrite source)."""
    config = _load_config(args)
    if config is None:
        return 1
    logger = get_logger()

    source = Path(args.src_file)
    if not source.is_file():
        logger.error(f"Source file not found: {source}")
        return 1

    scanner = MenuScanner(create_adapter(config.project.framework), config.menu, config.keys, config.scan)

    try:
        if args.phase == 'scan':
            registry = scanner.write_defaults(source, args.defaults_file)
            if not args.quiet:
                ConsoleReporter.print_menu_scan(args.defaults_file, len(registry))
        else:
            result = MenuReplacer(scanner).replace(source, args.defaults_file, dry_run=args.dry_run)
            if not args.quiet:
                ConsoleReporter.print_replace_result(result)
    except (AmbiguousLiteralMatch, RegistryLoadError) as e:
        logger.error(str(e))
        logger.error(f"{source} was not modified")
        return 1
    except LexError as e:
        where = f":{e.line}" if e.line else ''
        logger.error(f"{source}{where}: {e}")
        return 1
    except (OSError, UnicodeDecodeError) as e:
        logger.error(f"I/O error: {e}")
        return 1

    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog='i18n-extractor',
        description='Extract UI strings into a key registry and maintain language packs',
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )

    parser.add_argument('--version', action='version', version=f'%(prog)s {__version__}')
    parser.add_argument('--config', metavar='PATH', help=f'Config file (default: ./{CONFIG_FILENAME})')
    parser.add_argument('--verbose', '-v', action='store_true', help='Show debug output')
    parser.add_argument('--quiet', '-q', action='store_true', help='Only warnings and errors')
    parser.add_argument('--log-file', metavar='PATH', help='Also write log messages to a file')
    parser.add_argument('--no-color', action='store_true', help='Disable colored output')

    subparsers = parser.add_subparsers(dest='command', help='Commands')

    # init command
    init_parser = subparsers.add_parser('init', help='Initialize configuration file')
    init_parser.add_argument('--framework', choices=SUPPORTED_FRAMEWORKS,
                             default='rust', help='Source language of the project')
    init_parser.add_argument('--force', action='store_true', help='Overwrite existing config')

    # scan command
    scan_parser = subparsers.add_parser('scan', help='Scan sources and update the defaults registry')
    scan_parser.add_argument('src', nargs='?', help='Source directory or file (default: paths.source)')
    scan_parser.add_argument('out_file', nargs='?', help='Registry file (default: paths.registry)')
    scan_parser.add_argument('--dry-run', action='store_true', help='Show registry changes only')
    scan_parser.add_argument('--adopt-unresolved', action='store_true',
                             help='Add keys used without default text, using the key as text')

    # new command
    new_parser = subparsers.add_parser('new', help='Create a language pack')
    new_parser.add_argument('lang_code', help='Language code, e.g. fr, zh-cn or i18n-fr')
    new_parser.add_argument('--output', '-o', default='.', metavar='DIR',
                            help='Directory to create the pack in (default: .)')
    new_parser.add_argument('--name', help='Language name for the pack descriptor')
    new_parser.add_argument('--registry', metavar='PATH', help='Registry file (default: paths.registry)')

    # validate command
    validate_parser = subparsers.add_parser('validate', help='Validate a language pack')
    validate_parser.add_argument('pack_dir', help='Pack directory')
    validate_parser.add_argument('--registry', metavar='PATH', help='Registry file (default: paths.registry)')
    validate_parser.add_argument('--json', metavar='PATH', help='Write the report as JSON')

    # reorganize command
    reorganize_parser = subparsers.add_parser('reorganize', help='Put a translation file in registry order')
    reorganize_parser.add_argument('pack_file', help='Translation file (or pack directory)')
    reorganize_parser.add_argument('--registry', metavar='PATH', help='Registry file (default: paths.registry)')
    reorganize_parser.add_argument('--dry-run', action='store_true', help='Preview only')

    # scan-app-menus command
    menus_parser = subparsers.add_parser('scan-app-menus', help='Extract or replace menu strings')
    menus_parser.add_argument('phase', choices=['scan', 'replace'],
                              help='scan: write defaults file; replace: rewrite the source')
    menus_parser.add_argument('src_file', help='Menu definition source file')
    menus_parser.add_argument('defaults_file', help='Menu defaults file')
    menus_parser.add_argument('--dry-run', action='store_true', help='replace: check matches only')

    return parser


def main(argv=None):
    """Main CLI entry point."""
    parser = build_parser()
    args = parser.parse_args(argv)

    Colors.set_enabled(not args.no_color)
    configure_logging(
        verbose=args.verbose,
        quiet=args.quiet,
        log_file=Path(args.log_file) if args.log_file else None,
        use_colors=not args.no_color,
    )

    # Execute command
    if args.command == 'init':
        return cmd_init(args)
    elif args.command == 'scan':
        return cmd_scan(args)
    elif args.command == 'new':
        return cmd_new(args)
    elif args.command == 'validate':
        return cmd_validate(args)
    elif args.command == 'reorganize':
        return cmd_reorganize(args)
    elif args.command == 'scan-app-menus':
        return cmd_scan_app_menus(args)
    else:
        parser.print_help()
        return 0


if __name__ == '__main__':
    sys.exit(main())
