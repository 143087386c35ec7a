"""Tests for language pack scaffolding."""

import json
import tempfile
from pathlib import Path

import pytest
import yaml

from i18n_extractor.core.registry import KeyRegistry, RegistryEntry
from i18n_extractor.features.pack_template import PackTemplate, language_info
from i18n_extractor.features.validator import PackValidator


@pytest.fixture
def registry():
    return KeyRegistry([
        RegistryEntry('i18n.menu.file', 'File'),
        RegistryEntry('i18n.editor.title', 'Untitled'),
    ])


@pytest.fixture
def tmpdir():
    with tempfile.TemporaryDirectory() as directory:
        yield Path(directory)


class TestLanguageInfo:
    """Test cases for language names."""

    def test_known_language(self):
        assert language_info('fr') == ('French', 'Français')

    def test_region_falls_back_to_base(self):
        assert language_info('de-at') == ('German', 'Deutsch')

    def test_unknown_language(self):
        assert language_info('xx') == ('Language (xx)', 'xx')


class TestPackTemplate:
    """Test cases for PackTemplate.create_pack."""

    def test_creates_layout(self, registry, tmpdir):
        creation = PackTemplate(registry).create_pack('fr', tmpdir)

        directory = tmpdir / 'i18n-fr'
        assert creation.directory == directory
        assert creation.key_count == 2
        assert (directory / 'README.md').is_file()

        descriptor = yaml.safe_load((directory / 'pack.yml').read_text(encoding='utf-8'))
        assert descriptor['language'] == 'fr'
        assert descriptor['name'] == 'French'
        assert descriptor['native_name'] == 'Français'

        translations = json.loads(
            (directory / 'translations' / 'translation.json').read_text(encoding='utf-8'))
        assert list(translations) == ['i18n.menu.file', 'i18n.editor.title']
        assert all(value is None for value in translations.values())

    def test_new_pack_validates(self, registry, tmpdir):
        """A fresh pack has every key as a placeholder and no problems."""
        creation = PackTemplate(registry).create_pack('ja', tmpdir)
        report = PackValidator(registry).validate(creation.directory)
        assert report.is_clean
        assert report.placeholder_keys == registry.keys()
        assert report.completion == 0.0

    @pytest.mark.parametrize('raw,directory', [
        ('i18n-zh-cn', 'i18n-zh-cn'),
        ('zh_Hans', 'i18n-zh-cn'),
        ('pt_BR', 'i18n-pt-br'),
    ])
    def test_code_normalization(self, registry, tmpdir, raw, directory):
        creation = PackTemplate(registry).create_pack(raw, tmpdir)
        assert creation.directory.name == directory

    def test_custom_name(self, registry, tmpdir):
        creation = PackTemplate(registry).create_pack('fr', tmpdir, name='Français (France)')
        descriptor = yaml.safe_load((creation.directory / 'pack.yml').read_text(encoding='utf-8'))
        assert descriptor['name'] == 'Français (France)'

    def test_invalid_code(self, registry, tmpdir):
        with pytest.raises(ValueError):
            PackTemplate(registry).create_pack('not a language', tmpdir)
        assert list(tmpdir.iterdir()) == []

    def test_existing_directory(self, registry, tmpdir):
        (tmpdir / 'i18n-fr').mkdir()
        with pytest.raises(FileExistsError):
            PackTemplate(registry).create_pack('fr', tmpdir)
