"""Tests for CLI commands."""

import json
import os
from pathlib import Path

import pytest
import yaml

from i18n_extractor.cli import build_parser, load_and_validate_config, main
from i18n_extractor.core import pack as pack_io
from i18n_extractor.core.registry import KeyRegistry, RegistryEntry
from i18n_extractor.utils.colors import Colors
from i18n_extractor.utils.config import ConfigValidationError
from i18n_extractor.utils.logging import reset_logger


EDITOR_RS = '''fn render(cx: &mut Context) {
    let title = t!(cx, "i18n.editor.title", "Untitled");
    div().child(Label::new("Save changes"));
    let other = t!(cx, "x.y");
}
'''

MENUS_RS = '''pub fn app_menus() -> Vec<Menu> {
    vec![Menu {
        name: "File".into(),
        items: vec![MenuItem::action("Open", Open)],
    }]
}
'''


@pytest.fixture
def workdir(tmp_path, monkeypatch):
    """Empty project directory used as the working directory."""
    monkeypatch.chdir(tmp_path)
    yield tmp_path
    reset_logger()
    Colors.set_enabled(True)


def run(*argv):
    return main(['--no-color', *argv])


def write_registry(path, **texts):
    KeyRegistry([RegistryEntry(key, text) for key, text in texts.items()]).save(path)


class TestParser:
    """Test cases for argument parsing."""

    def test_scan_arguments(self):
        args = build_parser().parse_args(['scan', 'src', 'out.yml', '--dry-run', '--adopt-unresolved'])
        assert (args.src, args.out_file, args.dry_run, args.adopt_unresolved) == ('src', 'out.yml', True, True)

    def test_global_options(self):
        args = build_parser().parse_args(['--verbose', '--log-file', 'x.log', 'validate', 'pack'])
        assert args.verbose
        assert args.log_file == 'x.log'
        assert args.pack_dir == 'pack'

    def test_menu_phase_is_checked(self):
        with pytest.raises(SystemExit):
            build_parser().parse_args(['scan-app-menus', 'apply', 'a.rs', 'd.yml'])

    def test_no_command_prints_help(self, workdir, capsys):
        assert run() == 0
        assert 'usage:' in capsys.readouterr().out


class TestConfigLoading:
    """Test cases for config handling in the CLI."""

    def test_missing_explicit_config(self, workdir):
        with pytest.raises(ConfigValidationError):
            load_and_validate_config(str(workdir / 'missing.yml'))

    def test_defaults_without_config(self, workdir):
        config = load_and_validate_config()
        assert config.project.framework == 'rust'

    def test_invalid_config_fails_command(self, workdir):
        (workdir / '.i18n.yml').write_text('project:\n  framework: swift\n', encoding='utf-8')
        assert run('scan') == 1

    def test_missing_config_fails_command(self, workdir):
        assert run('--config', 'nope.yml', 'scan') == 1


class TestCmdInit:
    """Test cases for the init command."""

    def test_init_creates_config_file(self, workdir):
        assert run('init', '--framework', 'python') == 0
        data = yaml.safe_load((workdir / '.i18n.yml').read_text(encoding='utf-8'))
        assert data['project']['framework'] == 'python'
        assert data['menu']['import_line'] == 'from i18n import _'

    def test_init_fails_without_force_if_exists(self, workdir):
        (workdir / '.i18n.yml').write_text('old: config\n', encoding='utf-8')
        assert run('init') == 1
        assert (workdir / '.i18n.yml').read_text(encoding='utf-8') == 'old: config\n'

    def test_init_overwrites_with_force(self, workdir):
        (workdir / '.i18n.yml').write_text('old: config\n', encoding='utf-8')
        assert run('init', '--force') == 0
        assert 'old' not in yaml.safe_load((workdir / '.i18n.yml').read_text(encoding='utf-8'))

    def test_init_at_custom_path(self, workdir):
        assert run('--config', 'conf/i18n.yml', 'init') == 0
        assert (workdir / 'conf' / 'i18n.yml').is_file()


class TestCmdScan:
    """Test cases for the scan command."""

    @pytest.fixture
    def project(self, workdir):
        (workdir / 'src').mkdir()
        (workdir / 'src' / 'editor.rs').write_text(EDITOR_RS, encoding='utf-8')
        return workdir

    def test_scan_writes_registry(self, project):
        assert run('scan', 'src', 'i18n/defaults.yml') == 0
        registry = KeyRegistry.load(project / 'i18n' / 'defaults.yml')
        assert registry.texts() == {
            'i18n.editor.title': 'Untitled',
            'i18n.editor.save_changes': 'Save changes',
        }

    def test_unresolved_key_is_not_added(self, project):
        """A key used without default text only produces a warning."""
        assert run('scan', 'src', 'defaults.yml') == 0
        assert 'x.y' not in KeyRegistry.load(project / 'defaults.yml')

    def test_adopt_unresolved(self, project):
        assert run('scan', 'src', 'defaults.yml', '--adopt-unresolved') == 0
        assert KeyRegistry.load(project / 'defaults.yml').get('x.y').text == 'x.y'

    def test_second_scan_leaves_registry_untouched(self, project):
        run('scan', 'src', 'defaults.yml')
        path = project / 'defaults.yml'
        before = path.read_bytes()
        os.utime(path, ns=(0, 0))

        assert run('scan', 'src', 'defaults.yml') == 0
        assert path.read_bytes() == before
        assert path.stat().st_mtime_ns == 0

    def test_dry_run(self, project, capsys):
        assert run('scan', 'src', 'defaults.yml', '--dry-run') == 0
        assert not (project / 'defaults.yml').exists()
        assert '+ i18n.editor.save_changes: "Save changes"' in capsys.readouterr().out

    def test_conflicting_defaults(self, project):
        (project / 'src' / 'other.rs').write_text(
            'fn f() { t!(cx, "i18n.editor.title", "No title"); }\n', encoding='utf-8')
        assert run('scan', 'src', 'defaults.yml') == 1
        assert not (project / 'defaults.yml').exists()

    def test_broken_registry(self, project):
        (project / 'defaults.yml').write_text('a.b: [unclosed\n', encoding='utf-8')
        assert run('scan', 'src', 'defaults.yml') == 1

    def test_missing_source(self, workdir):
        assert run('scan', 'nowhere', 'defaults.yml') == 1

    def test_paths_from_config(self, project):
        (project / '.i18n.yml').write_text(
            'paths:\n  source: src\n  registry: locale/keys.yml\n', encoding='utf-8')
        assert run('scan') == 0
        assert (project / 'locale' / 'keys.yml').is_file()


class TestCmdNew:
    """Test cases for the new command."""

    def test_creates_pack(self, workdir):
        write_registry(workdir / 'defaults.yml', **{'i18n.menu.file': 'File'})
        assert run('new', 'fr', '--registry', 'defaults.yml', '--output', 'packs') == 0
        storage = workdir / 'packs' / 'i18n-fr' / 'translations' / 'translation.json'
        assert json.loads(storage.read_text(encoding='utf-8')) == {'i18n.menu.file': None}

    def test_invalid_language(self, workdir):
        write_registry(workdir / 'defaults.yml', **{'i18n.menu.file': 'File'})
        assert run('new', 'Klingon!', '--registry', 'defaults.yml') == 1

    def test_existing_pack(self, workdir):
        write_registry(workdir / 'defaults.yml', **{'i18n.menu.file': 'File'})
        (workdir / 'i18n-fr').mkdir()
        assert run('new', 'fr', '--registry', 'defaults.yml') == 1

    def test_missing_registry(self, workdir):
        assert run('new', 'fr', '--registry', 'missing.yml') == 1


class TestCmdValidate:
    """Test cases for the validate command."""

    @pytest.fixture
    def pack(self, workdir):
        write_registry(workdir / 'defaults.yml', **{'a.hello': 'Hello', 'a.world': 'World'})
        directory = workdir / 'i18n-fr'
        (directory / 'translations').mkdir(parents=True)
        (directory / 'pack.yml').write_text('language: fr\n', encoding='utf-8')
        return directory

    def write(self, pack, values):
        (pack / 'translations' / 'translation.json').write_text(json.dumps(values), encoding='utf-8')

    def test_valid_pack(self, pack):
        self.write(pack, {'a.hello': 'Bonjour', 'a.world': None})
        assert run('validate', str(pack), '--registry', 'defaults.yml') == 0

    def test_missing_key_fails(self, pack):
        self.write(pack, {'a.hello': 'Bonjour'})
        assert run('validate', str(pack), '--registry', 'defaults.yml') == 1

    def test_json_report(self, pack, workdir):
        self.write(pack, {'a.hello': 'Bonjour'})
        run('--quiet', 'validate', str(pack), '--registry', 'defaults.yml', '--json', 'report.json')
        data = json.loads((workdir / 'report.json').read_text(encoding='utf-8'))
        assert data['valid'] is False
        assert data['packs'][0]['missing_keys'] == ['a.world']

    def test_missing_registry(self, pack):
        self.write(pack, {})
        assert run('validate', str(pack), '--registry', 'missing.yml') == 1

    def test_registry_with_complex_key(self, pack, workdir, capsys):
        """A corrupt registry is reported by name instead of crashing."""
        self.write(pack, {})
        (workdir / 'corrupt.yml').write_text('? [a, b]\n: text\n', encoding='utf-8')
        assert run('validate', str(pack), '--registry', 'corrupt.yml') == 1
        assert 'corrupt.yml' in capsys.readouterr().err


class TestCmdReorganize:
    """Test cases for the reorganize command."""

    @pytest.fixture
    def pack(self, workdir):
        write_registry(workdir / 'defaults.yml', **{'a.hello': 'Hello', 'a.world': 'World'})
        directory = workdir / 'i18n-fr'
        (directory / 'translations').mkdir(parents=True)
        return directory

    def test_reorganize_pack_directory(self, pack):
        storage = pack / 'translations' / 'translation.json'
        storage.write_text(json.dumps({'a.gone': 'Parti', 'a.hello': 'Bonjour'}), encoding='utf-8')

        assert run('reorganize', str(pack), '--registry', 'defaults.yml') == 0

        result = pack_io.load(storage)
        assert result.values() == {'a.hello': 'Bonjour', 'a.world': None}
        assert result.quarantined_values() == {'a.gone': 'Parti'}

    def test_dry_run(self, pack):
        storage = pack / 'translations' / 'translation.json'
        storage.write_text('{"a.hello": "Bonjour"}', encoding='utf-8')
        assert run('reorganize', str(storage), '--registry', 'defaults.yml', '--dry-run') == 0
        assert storage.read_text(encoding='utf-8') == '{"a.hello": "Bonjour"}'

    def test_malformed_file(self, pack):
        storage = pack / 'translations' / 'translation.json'
        storage.write_text('{"a.hello": "A", "a.hello": "B"}', encoding='utf-8')
        assert run('reorganize', str(storage), '--registry', 'defaults.yml') == 1
        assert storage.read_text(encoding='utf-8') == '{"a.hello": "A", "a.hello": "B"}'


class TestCmdScanAppMenus:
    """Test cases for the scan-app-menus command."""

    def test_scan_then_replace(self, workdir):
        source = workdir / 'app_menus.rs'
        source.write_text(MENUS_RS, encoding='utf-8')

        assert run('scan-app-menus', 'scan', 'app_menus.rs', 'menus.yml') == 0
        assert source.read_text(encoding='utf-8') == MENUS_RS
        assert KeyRegistry.load(workdir / 'menus.yml').keys() == ['i18n.menu.file', 'i18n.menu.file.open']

        assert run('scan-app-menus', 'replace', 'app_menus.rs', 'menus.yml') == 0
        rewritten = source.read_text(encoding='utf-8')
        assert rewritten.startswith('use crate::i18n::t;\n')
        assert 'MenuItem::action(t!(cx, "i18n.menu.file.open"), Open)' in rewritten

        assert run('scan-app-menus', 'replace', 'app_menus.rs', 'menus.yml') == 0
        assert source.read_text(encoding='utf-8') == rewritten

    def test_ambiguous_replace_fails(self, workdir):
        source = workdir / 'app_menus.rs'
        source.write_text(MENUS_RS, encoding='utf-8')
        write_registry(workdir / 'menus.yml', **{
            'i18n.menu.file': 'File',
            'i18n.menu.a.open': 'Open',
            'i18n.menu.b.open': 'Open',
        })
        assert run('scan-app-menus', 'replace', 'app_menus.rs', 'menus.yml') == 1
        assert source.read_text(encoding='utf-8') == MENUS_RS

    def test_missing_source(self, workdir):
        assert run('scan-app-menus', 'scan', 'missing.rs', 'menus.yml') == 1

    def test_untokenizable_source(self, workdir):
        (workdir / 'broken.rs').write_text('let s = "never closed;\n', encoding='utf-8')
        assert run('scan-app-menus', 'scan', 'broken.rs', 'menus.yml') == 1
        assert not (workdir / 'menus.yml').exists()
