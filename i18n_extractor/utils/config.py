"""Configuration management for i18n-extractor."""

import re
import yaml
from pathlib import Path
from typing import Dict, List, Optional, Any, Tuple
from dataclasses import dataclass, field, fields, asdict

from .validators import DEFAULT_KEY_PATTERN, is_valid_key_name

CONFIG_FILENAME = '.i18n.yml'

SUPPORTED_FRAMEWORKS = ('rust', 'python')


class ConfigValidationError(Exception):
    """Raised when configuration validation fails."""

    def __init__(self, errors: List[str]):
        self.errors = errors
        super().__init__(f"Configuration validation failed: {'; '.join(errors)}")


class ConfigValidationWarning:
    """Represents a configuration warning (non-fatal)."""

    def __init__(self, message: str):
        self.message = message

    def __str__(self):
        return self.message


# Non-UI text patterns shared by all frameworks
DEFAULT_EXCLUSION_PATTERNS = [
    r'^(https?|ftp|file|mailto)://',
    r'^www\.',
    r'^[\w.+-]+@[\w-]+\.[\w.]+$',
    r'^[\w.\-~]*[/\\][\w.\-/\\~]*$',
    r'^[\w\-]+\.(rs|py|json|toml|ya?ml|md|txt|png|jpe?g|svg|ttf|otf|html|css|js|ts|sh|lock|log)$',
    r'^[a-z][a-z0-9]*(_[a-z0-9]+)+$',
    r'^[a-z]+([A-Z][a-z0-9]*)+$',
    r'^[A-Z0-9]+(_[A-Z0-9]+)+$',
    r'^[a-z0-9]+(-[a-z0-9]+)+$',
    r'^[a-z0-9_]+(\.[a-z0-9_]+)+$',
    r'^\w+(::\w+)+$',
    r'^#[0-9a-fA-F]{3,8}$',
    r'^0x[0-9a-fA-F]+$',
    r'^[\d\s.,:;+\-*/=<>%()]+$',
]

RUST_TRANSLATION_CALLS = [
    {'name': 't!', 'key_arg': 1, 'default_arg': 2},
    {'name': 'i18n::t', 'key_arg': 1, 'default_arg': 2},
]

PYTHON_TRANSLATION_CALLS = [
    {'name': '_', 'key_arg': 0, 'default_arg': 1},
    {'name': 't', 'key_arg': 0, 'default_arg': 1},
    {'name': 'gettext', 'key_arg': 0, 'default_arg': None},
]

RUST_IGNORE_CALLS = [
    '#attr', 'cfg', 'println!', 'print!', 'eprintln!', 'eprint!', 'dbg!',
    'panic!', 'unreachable!', 'todo!', 'unimplemented!', 'assert*', 'debug_assert*',
    'log::*', 'tracing::*', 'trace!', 'debug!', 'info!', 'warn!', 'error!',
    'anyhow!', 'bail!', 'ensure!', 'context', 'with_context', 'expect',
    'include_str!', 'include_bytes!', 'env!', 'option_env!', 'concat!',
    'Path::new', 'PathBuf::from', 'Regex::new', 'Command::new', 'actions!',
    'impl_actions!', 'json!', 'KeyBinding::new', 'Keystroke::parse',
]

PYTHON_IGNORE_CALLS = [
    'print', 'logging.*', 'logger.*', 'log.*', 'warnings.warn', 'assert*',
    'getattr', 'setattr', 'hasattr', 'isinstance', 'open', 'Path', 'os.*',
    're.*', 'json.*', 'subprocess.*', 'importlib.*', '*.get', '*.startswith',
    '*.endswith', '*.split', '*.join', '*.replace', '*.encode', '*.decode',
]

RUST_UI_CALLS = [
    'Label::new', 'Button::new', 'Headline::new', 'Tooltip::text', 'Tooltip::with_meta',
    'MenuItem::action', 'MenuItem::os_action', 'entry', 'header', 'label', 'tooltip',
    'placeholder_text', 'set_placeholder_text', 'title',
]

PYTHON_UI_CALLS = [
    'QLabel', 'QPushButton', 'QAction', 'QCheckBox', '*.setText', '*.setToolTip',
    '*.setWindowTitle', '*.setPlaceholderText', 'messagebox.*', 'Label', 'Button',
    'flash', 'st.*',
]

DEFAULT_UI_FIELDS = [
    'name', 'label', 'title', 'tooltip', 'placeholder', 'description', 'message',
    'text', 'help', 'help_text', 'verbose_name', 'prompt', 'detail',
]


@dataclass
class ProjectConfig:
    """Project configuration."""
    name: str = "Unnamed Project"
    framework: str = "rust"  # rust | python


@dataclass
class PathsConfig:
    """Paths configuration."""
    source: str = "."
    registry: str = "i18n/defaults.yml"
    include: List[str] = field(default_factory=list)
    exclude: List[str] = field(default_factory=lambda: [
        'target/', 'build/', 'dist/', '.git/', 'node_modules/',
        '.venv/', 'venv/', '__pycache__/', 'tests/fixtures/',
    ])


@dataclass
class KeysConfig:
    """Key naming configuration."""
    prefix: str = "i18n"
    pattern: str = DEFAULT_KEY_PATTERN
    max_words: int = 5
    # Maps path fragments to categories, e.g. {'workspace/': 'workspace'}
    module_mapping: Dict[str, str] = field(default_factory=dict)
    # Used when neither the mapping nor the file name gives a category
    default_module: str = "common"


@dataclass
class ScanConfig:
    """Scanner and literal classifier configuration."""
    translation_calls: List[Dict[str, Any]] = field(
        default_factory=lambda: [dict(c) for c in RUST_TRANSLATION_CALLS])
    ignore_calls: List[str] = field(default_factory=lambda: list(RUST_IGNORE_CALLS))
    ui_calls: List[str] = field(default_factory=lambda: list(RUST_UI_CALLS))
    ui_fields: List[str] = field(default_factory=lambda: list(DEFAULT_UI_FIELDS))
    exclusion_patterns: List[str] = field(default_factory=lambda: list(DEFAULT_EXCLUSION_PATTERNS))
    min_length: int = 2
    min_words: int = 1
    min_confidence: float = 0.6
    ignore_marker: str = "i18n-ignore"
    max_workers: int = 4
    # Empty means the framework adapter's default extensions
    extensions: List[str] = field(default_factory=list)

    @classmethod
    def for_framework(cls, framework: str, **overrides) -> 'ScanConfig':
        """Framework defaults with ``overrides`` applied on top."""
        config = cls()
        if framework == 'python':
            config.translation_calls = [dict(c) for c in PYTHON_TRANSLATION_CALLS]
            config.ignore_calls = list(PYTHON_IGNORE_CALLS)
            config.ui_calls = list(PYTHON_UI_CALLS)
        for name, value in overrides.items():
            setattr(config, name, value)
        return config


@dataclass
class PackConfig:
    """Translation pack layout."""
    descriptor: str = "pack.yml"
    storage: str = "translations/translation.json"
    quarantine_key: str = "__obsolete__"


@dataclass
class MenuConfig:
    """Menu scan/replace configuration."""
    menu_types: List[str] = field(default_factory=lambda: ['Menu'])
    name_fields: List[str] = field(default_factory=lambda: ['name'])
    item_calls: List[str] = field(default_factory=lambda: ['MenuItem::action', 'MenuItem::os_action'])
    namespace: str = "menu"
    replacement: str = 't!(cx, "{key}")'
    import_line: str = "use crate::i18n::t;"

    @classmethod
    def for_framework(cls, framework: str, **overrides) -> 'MenuConfig':
        config = cls()
        if framework == 'python':
            config.item_calls = ['MenuItem.action', 'MenuItem.os_action']
            config.replacement = '_("{key}")'
            config.import_line = "from i18n import _"
        for name, value in overrides.items():
            setattr(config, name, value)
        return config


_SECTIONS = {
    'project': ProjectConfig,
    'paths': PathsConfig,
    'keys': KeysConfig,
    'scan': ScanConfig,
    'pack': PackConfig,
    'menu': MenuConfig,
}


def _section_data(data: Dict[str, Any], name: str) -> Dict[str, Any]:
    section = data.get(name) or {}
    if not isinstance(section, dict):
        raise ConfigValidationError([f"Section '{name}' must be a mapping"])
    known = {f.name for f in fields(_SECTIONS[name])}
    unknown = sorted(set(section) - known)
    if unknown:
        raise ConfigValidationError(
            [f"Unknown option '{opt}' in section '{name}'" for opt in unknown]
        )
    return section


@dataclass
class Config:
    """Main configuration class."""
    project: ProjectConfig = field(default_factory=ProjectConfig)
    paths: PathsConfig = field(default_factory=PathsConfig)
    keys: KeysConfig = field(default_factory=KeysConfig)
    scan: ScanConfig = field(default_factory=ScanConfig)
    pack: PackConfig = field(default_factory=PackConfig)
    menu: MenuConfig = field(default_factory=MenuConfig)

    @classmethod
    def from_file(cls, config_path: Optional[Path] = None) -> 'Config':
        """
        Load configuration from a YAML file.

        Without an explicit path, ``.i18n.yml`` in the current directory is
        used when present, otherwise the defaults.

        Raises:
            ConfigValidationError: If the file is not valid YAML or contains
                unknown sections/options
            OSError: If an explicitly given file cannot be read
        """
        if config_path is None:
            config_path = Path.cwd() / CONFIG_FILENAME
            if not config_path.exists():
                return cls()

        with open(config_path, 'r', encoding='utf-8') as f:
            try:
                data = yaml.safe_load(f) or {}
            except yaml.YAMLError as e:
                raise ConfigValidationError([f"Invalid YAML in {config_path}: {e}"]) from e

        return cls.from_dict(data)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'Config':
        if not isinstance(data, dict):
            raise ConfigValidationError(["Configuration root must be a mapping"])

        unknown = sorted(set(data) - set(_SECTIONS))
        if unknown:
            raise ConfigValidationError([f"Unknown section '{name}'" for name in unknown])

        project = ProjectConfig(**_section_data(data, 'project'))
        return cls(
            project=project,
            paths=PathsConfig(**_section_data(data, 'paths')),
            keys=KeysConfig(**_section_data(data, 'keys')),
            scan=ScanConfig.for_framework(project.framework, **_section_data(data, 'scan')),
            pack=PackConfig(**_section_data(data, 'pack')),
            menu=MenuConfig.for_framework(project.framework, **_section_data(data, 'menu')),
        )

    def to_dict(self) -> Dict[str, Any]:
        """Convert config to dictionary."""
        return {name: asdict(getattr(self, name)) for name in _SECTIONS}

    def save(self, config_path: Optional[Path] = None):
        """Save configuration to a YAML file."""
        if config_path is None:
            config_path = Path.cwd() / CONFIG_FILENAME

        with open(config_path, 'w', encoding='utf-8') as f:
            yaml.safe_dump(self.to_dict(), f, default_flow_style=False, sort_keys=False,
                           allow_unicode=True)

    def validate(self, raise_on_error: bool = False) -> Tuple[List[str], List[ConfigValidationWarning]]:
        """
        Validate configuration and return errors and warnings.

        Args:
            raise_on_error: If True, raise ConfigValidationError on validation errors

        Returns:
            Tuple of (errors, warnings) lists
        """
        errors = []
        warnings = []

        if self.project.framework not in SUPPORTED_FRAMEWORKS:
            errors.append(
                f"Invalid framework '{self.project.framework}'. "
                f"Valid options: {', '.join(SUPPORTED_FRAMEWORKS)}"
            )

        if not Path(self.paths.source).exists():
            warnings.append(ConfigValidationWarning(
                f"Source path does not exist: {self.paths.source}"
            ))

        if not self.paths.registry:
            errors.append("paths.registry cannot be empty")

        # Key naming
        key_pattern_ok = True
        try:
            re.compile(self.keys.pattern)
        except re.error as e:
            key_pattern_ok = False
            errors.append(f"keys.pattern is not a valid regex: {e}")

        if key_pattern_ok:
            sample = f"{self.keys.prefix}.{self.keys.default_module}.text"
            if not is_valid_key_name(sample, self.keys.pattern):
                errors.append(
                    f"keys.prefix '{self.keys.prefix}' / keys.default_module "
                    f"'{self.keys.default_module}' produce keys rejected by keys.pattern "
                    f"(e.g. '{sample}')"
                )

        if self.keys.max_words < 1:
            errors.append(f"keys.max_words must be at least 1, got {self.keys.max_words}")

        # Scanner
        for pattern in self.scan.exclusion_patterns:
            try:
                re.compile(pattern)
            except re.error as e:
                errors.append(f"Invalid exclusion pattern '{pattern}': {e}")

        if not self.scan.translation_calls:
            errors.append("scan.translation_calls cannot be empty")

        for call in self.scan.translation_calls:
            if not isinstance(call, dict) or not call.get('name'):
                errors.append(f"Translation call needs a 'name': {call!r}")
                continue
            if not isinstance(call.get('key_arg', 0), int):
                errors.append(f"Translation call '{call['name']}' key_arg must be an integer")
            default_arg = call.get('default_arg')
            if default_arg is not None and not isinstance(default_arg, int):
                errors.append(f"Translation call '{call['name']}' default_arg must be an integer")

        if not 0.0 <= self.scan.min_confidence <= 1.0:
            errors.append(
                f"scan.min_confidence must be between 0 and 1, got {self.scan.min_confidence}"
            )

        if self.scan.max_workers < 1:
            errors.append(f"scan.max_workers must be at least 1, got {self.scan.max_workers}")

        if self.scan.min_length < 1:
            warnings.append(ConfigValidationWarning(
                "scan.min_length below 1 lets empty strings through to the classifier"
            ))

        # Pack layout
        if not self.pack.storage:
            errors.append("pack.storage cannot be empty")
        if not self.pack.descriptor:
            errors.append("pack.descriptor cannot be empty")

        # Menu pipeline
        if '{key}' not in self.menu.replacement:
            errors.append("menu.replacement must contain '{key}'")

        if raise_on_error and errors:
            raise ConfigValidationError(errors)

        return errors, warnings


def create_default_config(framework: str = 'rust') -> Config:
    """Create default configuration for a framework."""
    config = Config()
    config.project.framework = framework
    config.scan = ScanConfig.for_framework(framework)
    config.menu = MenuConfig.for_framework(framework)

    if framework == 'rust':
        config.paths.source = './crates'
    elif framework == 'python':
        config.paths.source = './src'

    return config
