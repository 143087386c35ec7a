"""Python source adapter."""

import ast
import io
import keyword
import tokenize
from typing import List

from .base import BaseAdapter, LexError, Token

_SKIP = {tokenize.ENCODING, tokenize.ENDMARKER, tokenize.INDENT, tokenize.DEDENT, tokenize.NL}

# Python 3.12 tokenizes f-strings into parts
_FSTRING_START = getattr(tokenize, 'FSTRING_START', None)
_FSTRING_END = getattr(tokenize, 'FSTRING_END', None)


def _string_prefix(raw: str) -> str:
    i = 0
    while i < len(raw) and raw[i] not in '\'"':
        i += 1
    return raw[:i].lower()


class PythonAdapter(BaseAdapter):
    """
    Tokenizer for Python sources, built on the standard ``tokenize`` module.

    String values come from ``ast.literal_eval`` on the token text. Adjacent
    literals are joined the way the compiler joins them. f-strings and bytes
    are reported under their own kinds and never treated as literals.
    Expression-statement strings (docstrings) carry a ``docstring`` hint.
    """

    name = 'python'
    keywords = frozenset(keyword.kwlist)

    def get_file_extensions(self) -> List[str]:
        return ['.py']

    def tokenize(self, content: str) -> List[Token]:
        line_starts = [0]
        for index, ch in enumerate(content):
            if ch == '\n':
                line_starts.append(index + 1)

        def offset(row: int, col: int) -> int:
            return line_starts[row - 1] + col if row - 1 < len(line_starts) else len(content)

        tokens: List[Token] = []
        fstring_depth = 0
        fstring_begin = None
        try:
            for tok in tokenize.generate_tokens(io.StringIO(content).readline):
                (srow, scol), (erow, ecol) = tok.start, tok.end

                if _FSTRING_START is not None and tok.type == _FSTRING_START:
                    if fstring_depth == 0:
                        fstring_begin = tok
                    fstring_depth += 1
                    continue
                if fstring_depth:
                    if tok.type == _FSTRING_END:
                        fstring_depth -= 1
                        if fstring_depth == 0:
                            (brow, bcol) = fstring_begin.start
                            tokens.append(Token(
                                'fstring', '', brow, bcol + 1, offset(brow, bcol),
                                offset(erow, ecol), end_line=erow,
                            ))
                    continue

                if tok.type in _SKIP:
                    continue

                start, end = offset(srow, scol), offset(erow, ecol)
                if tok.type == tokenize.COMMENT:
                    tokens.append(Token('comment', tok.string, srow, scol + 1, start, end, end_line=erow))
                elif tok.type == tokenize.NEWLINE:
                    tokens.append(Token('newline', '', srow, scol + 1, start, end, end_line=erow))
                elif tok.type == tokenize.NAME:
                    tokens.append(Token('ident', tok.string, srow, scol + 1, start, end, end_line=erow))
                elif tok.type == tokenize.NUMBER:
                    tokens.append(Token('number', tok.string, srow, scol + 1, start, end, end_line=erow))
                elif tok.type == tokenize.STRING:
                    tokens.append(self._string_token(tok.string, srow, scol, start, end, erow))
                elif tok.type == tokenize.OP:
                    tokens.append(Token('punct', tok.string, srow, scol + 1, start, end, end_line=erow))
                elif tok.type == tokenize.ERRORTOKEN and not tok.string.isspace():
                    raise LexError(f'unexpected character {tok.string!r}', srow)
        except tokenize.TokenError as e:
            line = e.args[1][0] if len(e.args) > 1 and e.args[1] else None
            raise LexError(str(e.args[0]), line) from e
        except (SyntaxError, IndentationError) as e:
            raise LexError(e.msg, e.lineno) from e

        return self._mark_docstrings(self._join_adjacent(tokens))

    def _string_token(self, raw: str, srow: int, scol: int, start: int, end: int, erow: int) -> Token:
        prefix = _string_prefix(raw)
        if 'f' in prefix:
            return Token('fstring', '', srow, scol + 1, start, end, end_line=erow)
        if 'b' in prefix:
            return Token('bytes', '', srow, scol + 1, start, end, end_line=erow)
        try:
            value = ast.literal_eval(raw)
        except (ValueError, SyntaxError) as e:
            raise LexError(f'invalid string literal: {e}', srow) from e
        return Token('string', value, srow, scol + 1, start, end, end_line=erow)

    @staticmethod
    def _join_adjacent(tokens: List[Token]) -> List[Token]:
        """``"a" "b"`` becomes a single literal spanning both."""
        out: List[Token] = []
        last = None
        for tok in tokens:
            if tok.kind == 'comment':
                out.append(tok)
                continue
            prev = out[last] if last is not None else None
            if prev is not None and prev.kind in ('string', 'fstring') and tok.kind in ('string', 'fstring'):
                kind = 'string' if prev.kind == tok.kind == 'string' else 'fstring'
                out[last] = Token(kind, prev.value + tok.value if kind == 'string' else '',
                                  prev.line, prev.column, prev.start, tok.end, end_line=tok.end_line)
                continue
            out.append(tok)
            last = len(out) - 1
        return out

    @staticmethod
    def _mark_docstrings(tokens: List[Token]) -> List[Token]:
        """Flag strings that form a whole statement on their own."""
        out = list(tokens)
        sig = [i for i, tok in enumerate(out) if tok.kind != 'comment']
        for pos, index in enumerate(sig):
            tok = out[index]
            if tok.kind != 'string':
                continue
            before = out[sig[pos - 1]] if pos > 0 else None
            after = out[sig[pos + 1]] if pos + 1 < len(sig) else None
            starts_statement = before is None or before.kind == 'newline' or (
                before.kind == 'punct' and before.value == ':')
            ends_statement = after is None or after.kind == 'newline'
            if starts_statement and ends_statement:
                out[index] = Token(tok.kind, tok.value, tok.line, tok.column, tok.start,
                                   tok.end, end_line=tok.end_line, hint='docstring')
        return out
