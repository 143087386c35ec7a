"""Tests for the validator module."""

import json
import tempfile
from pathlib import Path

import pytest

from i18n_extractor.core.registry import KeyRegistry, RegistryEntry
from i18n_extractor.features.validator import MalformedEntry, PackValidator, ValidationReport


@pytest.fixture
def registry():
    return KeyRegistry([
        RegistryEntry('i18n.app.hello', 'Hello'),
        RegistryEntry('i18n.app.world', 'World'),
        RegistryEntry('i18n.app.open', 'Open {name}'),
    ])


@pytest.fixture
def pack_dir():
    with tempfile.TemporaryDirectory() as tmpdir:
        directory = Path(tmpdir) / 'i18n-fr'
        (directory / 'translations').mkdir(parents=True)
        (directory / 'pack.yml').write_text('language: fr\nname: French\n', encoding='utf-8')
        yield directory


def write_translations(pack_dir, content):
    if not isinstance(content, str):
        content = json.dumps(content, ensure_ascii=False)
    (pack_dir / 'translations' / 'translation.json').write_text(content, encoding='utf-8')


def codes(report):
    return [(m.key, m.code) for m in report.malformed_entries]


class TestValidationReport:
    """Test cases for ValidationReport."""

    def test_default_clean(self):
        """An empty report is clean."""
        report = ValidationReport(pack='x')
        assert report.is_clean
        assert report.total_issues == 0
        assert report.completion == 100.0

    def test_placeholders_do_not_fail(self):
        report = ValidationReport(pack='x', placeholder_keys=['a.b'], total_keys=2)
        assert report.is_clean
        assert report.completion == 50.0

    def test_each_problem_fails(self):
        assert not ValidationReport(pack='x', missing_keys=['a.b']).is_clean
        assert not ValidationReport(pack='x', extra_keys=['a.b']).is_clean
        assert not ValidationReport(pack='x', missing_files=['pack.yml']).is_clean
        assert not ValidationReport(
            pack='x', malformed_entries=[MalformedEntry('a.b', 'bad', 'E002')]).is_clean

    def test_to_dict(self):
        report = ValidationReport(pack='x', language='fr', missing_keys=['a.b'], total_keys=1)
        data = report.to_dict()
        assert data['valid'] is False
        assert data['missing_keys'] == ['a.b']
        assert data['completion'] == 0.0


class TestPackValidator:
    """Test cases for PackValidator."""

    def test_missing_and_extra_keys(self, pack_dir):
        """Keys are compared as sets against the registry."""
        registry = KeyRegistry([RegistryEntry('a.a', 'Hello'), RegistryEntry('a.b', 'World')])
        write_translations(pack_dir, {'a.a': 'Bonjour'})

        report = PackValidator(registry).validate(pack_dir)

        assert report.missing_keys == ['a.b']
        assert report.extra_keys == []
        assert not report.is_clean

    def test_complete_pack_is_clean(self, registry, pack_dir):
        write_translations(pack_dir, {
            'i18n.app.hello': 'Bonjour',
            'i18n.app.world': 'Monde',
            'i18n.app.open': 'Ouvrir {name}',
        })
        report = PackValidator(registry).validate(pack_dir)
        assert report.is_clean
        assert report.language == 'fr'
        assert report.completion == 100.0

    def test_extra_keys(self, registry, pack_dir):
        write_translations(pack_dir, {
            'i18n.app.hello': 'Bonjour',
            'i18n.app.world': 'Monde',
            'i18n.app.open': 'Ouvrir {name}',
            'i18n.app.gone': 'Parti',
        })
        report = PackValidator(registry).validate(pack_dir)
        assert report.extra_keys == ['i18n.app.gone']

    def test_placeholders_and_quarantine_are_informational(self, registry, pack_dir):
        write_translations(pack_dir, {
            'i18n.app.hello': 'Bonjour',
            'i18n.app.world': None,
            'i18n.app.open': None,
            '__obsolete__': {'i18n.app.gone': 'Parti'},
        })
        report = PackValidator(registry).validate(pack_dir)
        assert report.is_clean
        assert report.placeholder_keys == ['i18n.app.world', 'i18n.app.open']
        assert report.quarantined_keys == ['i18n.app.gone']

    def test_invalid_key_format(self, registry, pack_dir):
        """E001"""
        write_translations(pack_dir, {'i18n.app.hello': 'Bonjour', 'Bad Key': 'x'})
        report = PackValidator(registry).validate(pack_dir)
        assert ('Bad Key', 'E001') in codes(report)

    def test_non_string_value(self, registry, pack_dir):
        """E002"""
        write_translations(pack_dir, {'i18n.app.hello': 42, 'i18n.app.world': ['Monde']})
        report = PackValidator(registry).validate(pack_dir)
        assert codes(report) == [('i18n.app.hello', 'E002'), ('i18n.app.world', 'E002')]

    def test_duplicate_keys(self, registry, pack_dir):
        """E003, reported once per key"""
        write_translations(
            pack_dir, '{"i18n.app.hello": "A", "i18n.app.hello": "B", "i18n.app.hello": "C"}')
        report = PackValidator(registry).validate(pack_dir)
        assert codes(report) == [('i18n.app.hello', 'E003')]

    def test_placeholder_mismatch(self, registry, pack_dir):
        """E004"""
        write_translations(pack_dir, {'i18n.app.open': 'Ouvrir'})
        report = PackValidator(registry).validate(pack_dir)
        assert codes(report) == [('i18n.app.open', 'E004')]

    def test_unreadable_translation_file(self, registry, pack_dir):
        """E005"""
        write_translations(pack_dir, '{"i18n.app.hello": ')
        report = PackValidator(registry).validate(pack_dir)
        assert codes(report) == [('translation.json', 'E005')]
        assert report.missing_keys == []

    def test_invalid_descriptor(self, registry, pack_dir):
        """E006"""
        (pack_dir / 'pack.yml').write_text('language: French!\n', encoding='utf-8')
        write_translations(pack_dir, {})
        report = PackValidator(registry).validate(pack_dir)
        assert ('pack.yml', 'E006') in codes(report)

    def test_descriptor_without_language(self, registry, pack_dir):
        (pack_dir / 'pack.yml').write_text('name: French\n', encoding='utf-8')
        write_translations(pack_dir, {})
        report = PackValidator(registry).validate(pack_dir)
        assert ('pack.yml', 'E006') in codes(report)

    def test_missing_files(self, registry, pack_dir):
        (pack_dir / 'pack.yml').unlink()
        report = PackValidator(registry).validate(pack_dir)
        assert len(report.missing_files) == 2
        assert report.missing_keys == registry.keys()

    def test_missing_directory(self, registry, pack_dir):
        report = PackValidator(registry).validate(pack_dir / 'nope')
        assert report.missing_files == [str(pack_dir / 'nope')]

    def test_pack_is_not_modified(self, registry, pack_dir):
        content = '{"i18n.app.hello": "Bonjour", "stray": 1}'
        write_translations(pack_dir, content)
        PackValidator(registry).validate(pack_dir)
        assert (pack_dir / 'translations' / 'translation.json').read_text(encoding='utf-8') == content
