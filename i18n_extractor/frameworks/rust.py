"""Rust source adapter."""

from typing import List, Optional

from .base import BaseAdapter, LexError, Token


RUST_KEYWORDS = frozenset({
    'as', 'async', 'await', 'break', 'const', 'continue', 'crate', 'dyn', 'else',
    'enum', 'extern', 'fn', 'for', 'if', 'impl', 'in', 'let', 'loop', 'match',
    'mod', 'move', 'mut', 'pub', 'ref', 'return', 'static', 'struct', 'trait',
    'type', 'unsafe', 'use', 'where', 'while',
})

# Longest first
PUNCTUATION = ('::', '=>', '==', '!=', '->', '<=', '>=', '&&', '||', '..')

SIMPLE_ESCAPES = {
    'n': '\n', 't': '\t', 'r': '\r', '0': '\0', '\\': '\\', '"': '"', "'": "'",
}


class RustAdapter(BaseAdapter):
    """
    Tokenizer for Rust sources.

    Handles line and (nested) block comments, escaped, raw (``r#"..."#``)
    and byte strings, char literals versus lifetimes, and the multi-char
    punctuation the structure walk relies on (``::``, ``=>``, ``==``).
    It is a lexer only; macros and generics are not expanded or parsed.
    """

    name = 'rust'
    keywords = RUST_KEYWORDS
    colon_fields = True
    struct_braces = True

    def get_file_extensions(self) -> List[str]:
        return ['.rs']

    def tokenize(self, content: str) -> List[Token]:
        return _RustLexer(content).run()


class _RustLexer:

    def __init__(self, src: str):
        self.src = src
        self.pos = 0
        self.line = 1
        self.line_start = 0
        self.tokens: List[Token] = []

    def run(self) -> List[Token]:
        src = self.src
        n = len(src)
        while self.pos < n:
            ch = src[self.pos]

            if ch == '\n':
                self._newline(self.pos)
                self.pos += 1
            elif ch.isspace():
                self.pos += 1
            elif src.startswith('//', self.pos):
                self._line_comment()
            elif src.startswith('/*', self.pos):
                self._block_comment()
            elif ch == '"':
                self._string(self.pos, self.pos + 1, 'string')
            elif ch in 'rbc' and self._string_prefix():
                pass
            elif ch == "'":
                self._char_or_lifetime()
            elif ch.isalpha() or ch == '_' or ord(ch) > 127:
                self._ident()
            elif ch.isdigit():
                self._number()
            else:
                self._punct()
        return self.tokens

    # ------------------------------------------------------------------

    def _newline(self, at: int) -> None:
        self.line += 1
        self.line_start = at + 1

    def _col(self, offset: int) -> int:
        return offset - self.line_start + 1

    def _emit(self, kind: str, value: str, start: int, end: int, line: int, column: int) -> None:
        self.tokens.append(Token(kind, value, line, column, start, end, end_line=self.line))

    def _line_comment(self) -> None:
        start = self.pos
        end = self.src.find('\n', start)
        if end == -1:
            end = len(self.src)
        self._emit('comment', self.src[start:end], start, end, self.line, self._col(start))
        self.pos = end

    def _block_comment(self) -> None:
        start, line, column = self.pos, self.line, self._col(self.pos)
        depth = 0
        src = self.src
        i = start
        while i < len(src):
            if src.startswith('/*', i):
                depth += 1
                i += 2
            elif src.startswith('*/', i):
                depth -= 1
                i += 2
                if depth == 0:
                    self.pos = i
                    self._emit('comment', src[start:i], start, i, line, column)
                    return
            else:
                if src[i] == '\n':
                    self._newline(i)
                i += 1
        raise LexError('unterminated block comment', line)

    def _string_prefix(self) -> bool:
        """Handle r"..", r#".."#, b"..", br"..", b'.', c"..". False if not a literal."""
        src = self.src
        start = self.pos
        i = start
        kind = 'string'
        if src[i] in 'bc':
            kind = 'bytes'
            i += 1
            if i < len(src) and src[i] == "'" and src[start] == 'b':
                self.pos = i
                self._char_or_lifetime(byte_start=start)
                return True
        if i < len(src) and src[i] == 'r':
            j = i + 1
            while j < len(src) and src[j] == '#':
                j += 1
            if j < len(src) and src[j] == '"':
                self._raw_string(start, j + 1, j - (i + 1), kind)
                return True
            return False
        if i < len(src) and src[i] == '"' and i > start:
            self._string(start, i + 1, kind)
            return True
        return False

    def _string(self, start: int, body: int, kind: str) -> None:
        """Escaped string; ``body`` is the offset after the opening quote."""
        src = self.src
        line, column = self.line, self._col(start)
        out = []
        i = body
        while i < len(src):
            ch = src[i]
            if ch == '"':
                self.pos = i + 1
                self._emit(kind, ''.join(out), start, i + 1, line, column)
                return
            if ch == '\\':
                i = self._escape(i, out, line)
                continue
            if ch == '\n':
                self._newline(i)
            out.append(ch)
            i += 1
        raise LexError('unterminated string literal', line)

    def _escape(self, i: int, out: List[str], line: int) -> int:
        src = self.src
        if i + 1 >= len(src):
            raise LexError('unterminated string literal', line)
        nxt = src[i + 1]
        if nxt in SIMPLE_ESCAPES:
            out.append(SIMPLE_ESCAPES[nxt])
            return i + 2
        if nxt == '\n':
            # Line continuation swallows the newline and leading whitespace
            self._newline(i + 1)
            i += 2
            while i < len(src) and src[i] in ' \t\r\n':
                if src[i] == '\n':
                    self._newline(i)
                i += 1
            return i
        if nxt == 'x' and i + 3 < len(src):
            try:
                out.append(chr(int(src[i + 2:i + 4], 16)))
            except ValueError:
                raise LexError(f'invalid escape {src[i:i + 4]!r}', line)
            return i + 4
        if nxt == 'u' and src.startswith('{', i + 2):
            close = src.find('}', i + 3)
            if close == -1:
                raise LexError('unterminated unicode escape', line)
            try:
                out.append(chr(int(src[i + 3:close].replace('_', ''), 16)))
            except ValueError:
                raise LexError(f'invalid escape {src[i:close + 1]!r}', line)
            return close + 1
        raise LexError(f'invalid escape \\{nxt}', line)

    def _raw_string(self, start: int, body: int, hashes: int, kind: str) -> None:
        src = self.src
        line, column = self.line, self._col(start)
        terminator = '"' + '#' * hashes
        end = src.find(terminator, body)
        if end == -1:
            raise LexError('unterminated raw string literal', line)
        value = src[body:end]
        for offset, ch in enumerate(value):
            if ch == '\n':
                self._newline(body + offset)
        self.pos = end + len(terminator)
        self._emit(kind, value, start, self.pos, line, column)

    def _char_or_lifetime(self, byte_start: Optional[int] = None) -> None:
        src = self.src
        i = self.pos
        start = byte_start if byte_start is not None else i
        column = self._col(start)
        if i + 1 < len(src) and src[i + 1] == '\\':
            close = src.find("'", i + 3)
            if close == -1 or '\n' in src[i:close]:
                raise LexError('unterminated char literal', self.line)
            self.pos = close + 1
            self._emit('char', src[start:self.pos], start, self.pos, self.line, column)
            return
        if i + 2 < len(src) and src[i + 2] == "'" and src[i + 1] != '\n':
            self.pos = i + 3
            self._emit('char', src[start:self.pos], start, self.pos, self.line, column)
            return
        # Lifetime or label: 'a, 'static
        j = i + 1
        while j < len(src) and (src[j].isalnum() or src[j] == '_'):
            j += 1
        if j == i + 1:
            raise LexError('stray quote', self.line)
        self.pos = j
        self._emit('lifetime', src[i:j], i, j, self.line, column)

    def _ident(self) -> None:
        src = self.src
        start = i = self.pos
        while i < len(src) and (src[i].isalnum() or src[i] == '_' or ord(src[i]) > 127):
            i += 1
        # Raw identifier r#type
        if src[start:i] == 'r' and src.startswith('#', i) and i + 1 < len(src) \
                and (src[i + 1].isalpha() or src[i + 1] == '_'):
            i += 1
            while i < len(src) and (src[i].isalnum() or src[i] == '_'):
                i += 1
            value = src[start + 2:i]
        else:
            value = src[start:i]
        self.pos = i
        self._emit('ident', value, start, i, self.line, self._col(start))

    def _number(self) -> None:
        src = self.src
        start = i = self.pos
        while i < len(src):
            ch = src[i]
            if ch.isalnum() or ch == '_':
                i += 1
            elif ch == '.' and i + 1 < len(src) and src[i + 1].isdigit():
                i += 1
            else:
                break
        self.pos = i
        self._emit('number', src[start:i], start, i, self.line, self._col(start))

    def _punct(self) -> None:
        src = self.src
        start = self.pos
        value = src[start]
        for candidate in PUNCTUATION:
            if src.startswith(candidate, start):
                value = candidate
                break
        self.pos = start + len(value)
        self._emit('punct', value, start, self.pos, self.line, self._col(start))
