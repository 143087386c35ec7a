"""Tests for merging scan findings into the registry."""

import pytest

from i18n_extractor.core.errors import DuplicateKeyConflict
from i18n_extractor.core.registry import KeyRegistry, RegistryEntry
from i18n_extractor.core.scanner import CallSiteKey, LiteralCandidate, ScanResult
from i18n_extractor.features.builder import RegistryBuilder
from i18n_extractor.utils.config import KeysConfig


def call(key, default=None, file='src/editor.rs', line=1):
    return CallSiteKey(file=file, line=line, column=1, key=key, default_text=default, call='t!')


def literal(text, file='src/editor.rs', line=1, confidence=0.9):
    return LiteralCandidate(file=file, line=line, column=1, text=text, confidence=confidence)


def scan(*findings):
    return ScanResult(root='.', findings=list(findings), files_scanned=1)


@pytest.fixture
def builder():
    return RegistryBuilder()


class TestKeyDerivation:
    """Test cases for deriving keys from literals."""

    def test_category_from_file_stem(self, builder):
        assert builder.derive_key('src/editor.rs', 'Save changes') == 'i18n.editor.save_changes'

    def test_generic_stems_use_directory(self, builder):
        assert builder.category_for_file('crates/workspace/src/mod.rs') == 'workspace'
        assert builder.category_for_file('app/settings/__init__.py') == 'settings'
        assert builder.category_for_file('src/main.rs') == 'common'

    def test_module_mapping_wins(self):
        builder = RegistryBuilder(KeysConfig(module_mapping={'project_panel': 'Project Panel'}))
        assert builder.category_for_file('crates/project_panel/src/view.rs') == 'project_panel'

    def test_max_words(self):
        builder = RegistryBuilder(KeysConfig(max_words=2))
        assert builder.derive_key('a/menu.rs', 'Open the recent project') == 'i18n.menu.open_the'


class TestMerge:
    """Test cases for RegistryBuilder.merge."""

    def test_call_site_with_default_adds_key(self, builder):
        result = builder.merge(KeyRegistry(), scan(call('i18n.editor.title', 'Untitled', line=4)))
        entry = result.registry.get('i18n.editor.title')
        assert entry.text == 'Untitled'
        assert entry.origin == 'src/editor.rs:4'
        assert result.report.added == ['i18n.editor.title']

    def test_changed_default_updates_text(self, builder):
        registry = KeyRegistry([RegistryEntry('i18n.editor.title', 'Untitled', 'src/editor.rs:4')])
        result = builder.merge(registry, scan(call('i18n.editor.title', 'New file')))
        assert result.registry.get('i18n.editor.title').text == 'New file'
        assert result.registry.get('i18n.editor.title').origin == 'src/editor.rs:4'
        assert result.report.updated == [('i18n.editor.title', 'Untitled', 'New file')]

    def test_unchanged_scan_is_a_no_op(self, builder):
        registry = KeyRegistry([RegistryEntry('i18n.editor.title', 'Untitled')])
        result = builder.merge(registry, scan(call('i18n.editor.title', 'Untitled')))
        assert result.registry == registry
        assert not result.report.changed

    def test_unresolved_call_leaves_registry_unchanged(self, builder):
        """A key used without a default and unknown to the registry is only reported."""
        registry = KeyRegistry([RegistryEntry('i18n.menu.file', 'File')])
        result = builder.merge(registry, scan(call('x.y', line=7)))

        assert result.registry == registry
        assert [c.key for c in result.report.unresolved] == ['x.y']
        assert result.report.unresolved[0].origin == 'src/editor.rs:7'

    def test_adopt_unresolved(self, builder):
        result = builder.merge(KeyRegistry(), scan(call('x.y')), adopt_unresolved=True)
        assert result.registry.get('x.y').text == 'x.y'
        assert result.report.unresolved == []

    def test_later_default_resolves_earlier_use(self, builder):
        result = builder.merge(KeyRegistry(), scan(
            call('i18n.editor.title', line=1),
            call('i18n.editor.title', 'Untitled', line=9),
        ))
        assert result.report.unresolved == []
        assert result.registry.get('i18n.editor.title').text == 'Untitled'

    def test_conflicting_defaults_raise(self, builder):
        with pytest.raises(DuplicateKeyConflict) as exc_info:
            builder.merge(KeyRegistry(), scan(
                call('i18n.editor.title', 'Untitled', line=1),
                call('i18n.editor.title', 'No title', line=2),
            ))
        assert exc_info.value.first_origin == 'src/editor.rs:1'
        assert exc_info.value.second_origin == 'src/editor.rs:2'

    def test_invalid_keys_are_reported(self, builder):
        result = builder.merge(KeyRegistry(), scan(call('Editor-Title', 'Title')))
        assert len(result.registry) == 0
        assert result.report.invalid == ['src/editor.rs:1: Editor-Title']

    def test_literal_gets_derived_key(self, builder):
        result = builder.merge(KeyRegistry(), scan(literal('Save changes', line=3)))
        assert result.registry.texts() == {'i18n.editor.save_changes': 'Save changes'}

    def test_literal_reuses_key_with_same_text(self, builder):
        registry = KeyRegistry([RegistryEntry('i18n.editor.save_changes', 'Save changes')])
        result = builder.merge(registry, scan(literal('Save changes'), literal('Save changes', line=8)))
        assert result.registry == registry
        assert result.report.reused == 2

    def test_literal_collision_gets_suffix(self, builder):
        registry = KeyRegistry([RegistryEntry('i18n.editor.save_changes', 'Save Changes!')])
        result = builder.merge(registry, scan(literal('Save changes'), literal('Save changes?', line=2)))
        assert result.registry.keys() == [
            'i18n.editor.save_changes',
            'i18n.editor.save_changes_2',
            'i18n.editor.save_changes_3',
        ]

    def test_low_confidence_literals_are_counted(self, builder):
        result = builder.merge(KeyRegistry(), scan(literal('maybe', confidence=0.3)))
        assert len(result.registry) == 0
        assert result.report.below_threshold == 1

    def test_stale_keys_are_kept(self, builder):
        registry = KeyRegistry([
            RegistryEntry('i18n.editor.title', 'Untitled'),
            RegistryEntry('i18n.old.thing', 'Old thing'),
        ])
        result = builder.merge(registry, scan(call('i18n.editor.title', 'Untitled')))
        assert result.report.stale == ['i18n.old.thing']
        assert 'i18n.old.thing' in result.registry

    def test_input_registry_is_not_modified(self, builder):
        registry = KeyRegistry([RegistryEntry('i18n.editor.title', 'Untitled')])
        builder.merge(registry, scan(call('i18n.editor.title', 'Changed'), literal('Save changes')))
        assert registry.texts() == {'i18n.editor.title': 'Untitled'}

    def test_new_keys_follow_existing_ones(self, builder):
        registry = KeyRegistry([RegistryEntry('i18n.menu.file', 'File')])
        result = builder.merge(registry, scan(call('i18n.editor.title', 'Untitled')))
        assert result.registry.keys() == ['i18n.menu.file', 'i18n.editor.title']
