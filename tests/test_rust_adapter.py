"""Tests for the Rust tokenizer and structure walk."""

import pytest

from i18n_extractor.frameworks.base import CallSite, LexError, StringSite, call_matches, is_translation_call
from i18n_extractor.frameworks.rust import RustAdapter
from i18n_extractor.utils.config import RUST_TRANSLATION_CALLS


@pytest.fixture
def adapter():
    return RustAdapter()


def strings(tokens):
    return [tok.value for tok in tokens if tok.kind == 'string']


def walk(adapter, source, marker='i18n-ignore'):
    return adapter.walk(adapter.tokenize(source), RUST_TRANSLATION_CALLS, marker)


class TestRustTokenizer:
    """Test cases for the lexer."""

    def test_escapes_are_decoded(self, adapter):
        tokens = adapter.tokenize(r'let s = "a\"b\n\t\\ \x41 \u{1F600}";')
        assert strings(tokens) == ['a"b\n\t\\ A \U0001F600']

    def test_raw_strings(self, adapter):
        tokens = adapter.tokenize('let s = r#"He said "hi""#; let p = r"C:\\dir";')
        assert strings(tokens) == ['He said "hi"', 'C:\\dir']

    def test_byte_and_c_strings_are_not_text(self, adapter):
        tokens = adapter.tokenize('let a = b"bytes"; let b = c"cstr"; let c = br"raw";')
        assert strings(tokens) == []
        assert [tok.kind for tok in tokens].count('bytes') == 3

    def test_chars_and_lifetimes(self, adapter):
        tokens = adapter.tokenize("fn f<'a>(x: &'a str) -> char { let q = '\"'; 'x' }")
        kinds = [tok.kind for tok in tokens]
        assert kinds.count('lifetime') == 2
        assert kinds.count('char') == 2
        assert strings(tokens) == []

    def test_comments(self, adapter):
        source = '// "not a string"\n/* outer /* "nested" */ still */ let s = "real";'
        tokens = adapter.tokenize(source)
        assert strings(tokens) == ['real']
        assert [tok.kind for tok in tokens][:2] == ['comment', 'comment']

    def test_positions(self, adapter):
        source = 'fn main() {\n    let s = "Hello";\n}'
        token = next(tok for tok in adapter.tokenize(source) if tok.kind == 'string')
        assert (token.line, token.column) == (2, 13)
        assert source[token.start:token.end] == '"Hello"'

    def test_multiline_string_tracks_lines(self, adapter):
        source = 'let a = "one\ntwo";\nlet b = "three";'
        tokens = [tok for tok in adapter.tokenize(source) if tok.kind == 'string']
        assert [tok.line for tok in tokens] == [1, 3]

    def test_line_continuation(self, adapter):
        tokens = adapter.tokenize('let s = "Hello \\\n         world";')
        assert strings(tokens) == ['Hello world']

    def test_multichar_punctuation(self, adapter):
        tokens = adapter.tokenize('a::b => c == d')
        assert [tok.value for tok in tokens if tok.kind == 'punct'] == ['::', '=>', '==']

    @pytest.mark.parametrize('source', [
        'let s = "unterminated;',
        'let s = r#"raw never closed";',
        '/* open comment',
        r'let s = "bad \q escape";',
    ])
    def test_lex_errors(self, adapter, source):
        with pytest.raises(LexError):
            adapter.tokenize(source)

    def test_lex_error_reports_line(self, adapter):
        with pytest.raises(LexError) as exc_info:
            adapter.tokenize('fn main() {}\nlet s = "oops;\n')
        assert exc_info.value.line == 2


class TestCalleeMatching:
    """Test cases for callee name matching."""

    def test_call_matches_path_suffixes(self):
        assert call_matches('log::info!', ['log::*'])
        assert call_matches('gpui::MenuItem::action', ['MenuItem::action'])
        assert call_matches('self.logger.warning', ['logger.*'])
        assert not call_matches('Label::new', ['Button::new'])
        assert not call_matches(None, ['*'])

    def test_is_translation_call(self):
        assert is_translation_call('t!', 't!')
        assert is_translation_call('crate::i18n::t', 'i18n::t')
        assert not is_translation_call('format_t!', 't!')
        assert not is_translation_call(None, 't!')


class TestRustWalk:
    """Test cases for the structure walk on Rust code."""

    def test_translation_call_site(self, adapter):
        events = walk(adapter, 'let s = t!(cx, "i18n.editor.title", "Untitled");')
        calls = [e for e in events if isinstance(e, CallSite)]
        assert len(calls) == 1
        call = calls[0]
        assert call.name == 't!'
        assert call.key == 'i18n.editor.title'
        assert call.default == 'Untitled'
        assert call.line == 1

    def test_literals_inside_translation_call_are_flagged(self, adapter):
        events = walk(adapter, 'let s = t!(cx, "i18n.editor.title", "Untitled");')
        sites = [e for e in events if isinstance(e, StringSite)]
        assert sites and all(site.context.in_translation_call for site in sites)

    def test_call_without_default(self, adapter):
        events = walk(adapter, 'Label::new(t!(cx, "i18n.editor.title"))')
        call = next(e for e in events if isinstance(e, CallSite))
        assert call.key == 'i18n.editor.title'
        assert call.default is None
        assert call.context.call_name == 'Label::new'

    def test_dynamic_key(self, adapter):
        events = walk(adapter, 'let s = t!(cx, &format!("i18n.{}", name));')
        call = next(e for e in events if isinstance(e, CallSite))
        assert call.key is None

    def test_path_call_context(self, adapter):
        events = walk(adapter, 'div().child(Label::new("Save changes")).tooltip("Save all")')
        sites = [e for e in events if isinstance(e, StringSite)]
        assert [s.context.call_name for s in sites] == ['Label::new', 'tooltip']
        assert [s.context.arg_index for s in sites] == [0, 0]

    def test_macro_call_context(self, adapter):
        events = walk(adapter, 'println!("Starting {}", name);')
        site = next(e for e in events if isinstance(e, StringSite))
        assert site.context.call_name == 'println!'

    def test_struct_field_label(self, adapter):
        events = walk(adapter, 'Menu { name: "File".into(), items: vec![] }')
        site = next(e for e in events if isinstance(e, StringSite))
        assert site.context.field == 'name'
        assert site.context.innermost.callee == 'Menu'
        assert site.context.innermost.kind == 'struct'

    def test_attribute_frame(self, adapter):
        events = walk(adapter, '#[serde(rename = "display_name")]\nstruct Foo;')
        site = next(e for e in events if isinstance(e, StringSite))
        assert '#attr' in site.context.callees()

    def test_match_arm_and_comparison_roles(self, adapter):
        source = 'match s { "dark" => 1, _ => 2 }; if mode == "light" {}'
        sites = [e for e in walk(adapter, source) if isinstance(e, StringSite)]
        assert [s.context.role for s in sites] == ['pattern', 'comparison']

    def test_subscript_role(self, adapter):
        sites = [e for e in walk(adapter, 'let v = map["Some key"];') if isinstance(e, StringSite)]
        assert sites[0].context.role == 'subscript'

    def test_ignore_marker(self, adapter):
        source = '// i18n-ignore\nlet a = "Skipped text";\nlet b = "Kept text";'
        sites = [e for e in walk(adapter, source) if isinstance(e, StringSite)]
        assert [s.context.marked for s in sites] == [True, False]

    def test_unbalanced_closers_do_not_crash(self, adapter):
        events = walk(adapter, 'let a = "One thing"; } ) let b = "Two things";')
        assert len([e for e in events if isinstance(e, StringSite)]) == 2
