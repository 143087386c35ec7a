"""Base adapter interface for different source languages."""

import re
from abc import ABC, abstractmethod
from dataclasses import dataclass
from fnmatch import fnmatchcase
from pathlib import Path
from typing import Any, Dict, FrozenSet, Iterable, List, Optional, Sequence, Tuple, Union


class LexError(ValueError):
    """Raised by a tokenizer when the source cannot be split into tokens."""

    def __init__(self, message: str, line: Optional[int] = None):
        self.line = line
        super().__init__(message)


@dataclass(frozen=True)
class Token:
    """One lexical token. ``start``/``end`` are character offsets into the source."""
    kind: str  # ident | string | bytes | fstring | number | punct | comment | newline
    value: str  # decoded value for strings, raw text otherwise
    line: int
    column: int
    start: int
    end: int
    end_line: int = 0
    hint: Optional[str] = None  # e.g. 'docstring'


@dataclass(frozen=True)
class FrameInfo:
    """Snapshot of one open bracket (call, struct literal, list ...) around a token."""
    id: int
    opener: str
    callee: Optional[str]
    kind: str  # call | struct | attr | subscript | list | group | dict
    arg_index: int
    field: Optional[str]


@dataclass(frozen=True)
class LiteralContext:
    """Where a literal sits in the token stream."""
    frames: Tuple[FrameInfo, ...] = ()
    field: Optional[str] = None
    role: str = 'value'  # value | docstring | subscript | pattern | comparison | mapping_key
    marked: bool = False
    in_translation_call: bool = False

    @property
    def innermost(self) -> Optional[FrameInfo]:
        return self.frames[-1] if self.frames else None

    @property
    def call_name(self) -> Optional[str]:
        """Callee of the innermost call-like frame, if any."""
        for frame in reversed(self.frames):
            if frame.callee:
                return frame.callee
        return None

    @property
    def arg_index(self) -> Optional[int]:
        frame = self.innermost
        return frame.arg_index if frame else None

    def callees(self) -> List[str]:
        """All enclosing callee names, outermost first."""
        return [frame.callee for frame in self.frames if frame.callee]


@dataclass(frozen=True)
class StringSite:
    """A string literal together with its context."""
    token: Token
    context: LiteralContext


@dataclass(frozen=True)
class CallSite:
    """A translation call; ``key`` is None when the key argument is not a plain literal."""
    name: str
    key: Optional[str]
    default: Optional[str]
    line: int
    column: int
    context: LiteralContext
    key_token: Optional[Token] = None
    default_token: Optional[Token] = None


def callee_suffixes(callee: str) -> List[str]:
    """``a::b::c!`` -> ['a::b::c!', 'b::c!', 'c!']."""
    parts = re.split(r'(::|\.)', callee)
    return [''.join(parts[i:]) for i in range(0, len(parts), 2)]


def call_matches(callee: Optional[str], patterns: Iterable[str]) -> bool:
    """
    Check a callee against fnmatch patterns.

    Every path suffix of the callee is tried, so ``log::*`` matches
    ``log::info!`` and ``logger.*`` matches ``self.logger.warning``.
    """
    if not callee:
        return False
    suffixes = callee_suffixes(callee)
    return any(fnmatchcase(suffix, pattern) for pattern in patterns for suffix in suffixes)


def is_translation_call(callee: Optional[str], name: str) -> bool:
    """Exact match on the name or on a path ending in it."""
    if not callee:
        return False
    return callee == name or callee.endswith('::' + name) or callee.endswith('.' + name)


class _Frame:
    __slots__ = ('id', 'opener', 'callee', 'kind', 'arg_index', 'field', 'args', 'translation', 'token')

    def __init__(self, id: int, opener: str, callee: Optional[str], kind: str,
                 token: Optional[Token] = None):
        self.id = id
        self.opener = opener
        self.callee = callee
        self.kind = kind
        self.arg_index = 0
        self.field: Optional[str] = None
        self.args: List[List[Token]] = [[]]
        self.translation: Optional[Dict[str, Any]] = None
        self.token = token

    def info(self) -> FrameInfo:
        return FrameInfo(self.id, self.opener, self.callee, self.kind, self.arg_index, self.field)


OPENERS = {'(': ')', '[': ']', '{': '}'}
CLOSERS = {')', ']', '}'}


class BaseAdapter(ABC):
    """
    Framework adapter: tokenizer plus the bracket-structure walk shared by
    the scanner and the menu pipeline.
    """

    name = 'base'
    # Identifiers that never name a callee
    keywords: FrozenSet[str] = frozenset()
    # Rust struct literals use ``field: value``; Python only ``kw=value``
    colon_fields = False
    # ``Name { ... }`` is a struct literal
    struct_braces = False

    exclude_dirs = {
        'target', 'build', 'dist', '.git', 'node_modules', '.venv', 'venv',
        '__pycache__', '.mypy_cache', '.pytest_cache', '.tox',
    }

    @abstractmethod
    def get_file_extensions(self) -> List[str]:
        """Return list of file extensions to scan (e.g., ['.rs'])."""

    @abstractmethod
    def tokenize(self, content: str) -> List[Token]:
        """
        Split source text into tokens.

        Raises:
            LexError: On unterminated strings or comments and other input the
                tokenizer cannot make sense of
        """

    def should_exclude_file(self, file_path: Path) -> bool:
        """True for files under build output or VCS directories."""
        return any(part in self.exclude_dirs for part in file_path.parts)

    # ------------------------------------------------------------------
    # Structure walk
    # ------------------------------------------------------------------

    def walk(
        self,
        tokens: Sequence[Token],
        translation_calls: Sequence[Dict[str, Any]] = (),
        ignore_marker: Optional[str] = None,
    ) -> List[Union[StringSite, CallSite]]:
        """
        Walk the token stream and report string literals and translation calls.

        Events come out in source order, except that a ``CallSite`` is
        emitted when its closing bracket is reached (after the literals it
        contains).
        """
        marked_lines = set()
        if ignore_marker:
            for tok in tokens:
                if tok.kind == 'comment' and ignore_marker in tok.value:
                    marked_lines.update(range(tok.line, (tok.end_line or tok.line) + 1))

        sig = [tok for tok in tokens if tok.kind != 'comment']
        root = _Frame(-1, '', None, 'root')
        stack = [root]
        events: List[Union[StringSite, CallSite]] = []

        for i, tok in enumerate(sig):
            top = stack[-1]
            nxt = sig[i + 1] if i + 1 < len(sig) else None

            if tok.kind == 'newline':
                if top is root:
                    top.field = None
                continue

            if tok.kind == 'punct' and tok.value in OPENERS:
                callee, kind = self._frame_head(sig, i)
                frame = _Frame(tok.start, tok.value, callee, kind, tok)
                if callee and kind == 'call':
                    for call in translation_calls:
                        if is_translation_call(callee, call['name']):
                            frame.translation = call
                            break
                top.args[-1].append(tok)
                stack.append(frame)
                continue

            if tok.kind == 'punct' and tok.value in CLOSERS:
                if len(stack) > 1:
                    frame = stack.pop()
                    if frame.translation is not None:
                        events.append(self._call_site(frame, stack, tok))
                continue

            if tok.kind == 'punct' and tok.value == ',':
                top.arg_index += 1
                top.args.append([])
                top.field = None
                continue

            if tok.kind == 'punct' and tok.value == ';':
                top.field = None
                top.args[-1].append(tok)
                continue

            if tok.kind == 'ident' and nxt is not None and nxt.kind == 'punct':
                if nxt.value == ':' and self.colon_fields and top.kind != 'subscript':
                    top.field = tok.value
                elif nxt.value == '=' and top.field is None:
                    top.field = tok.value

            if tok.kind == 'string':
                prev = sig[i - 1] if i > 0 else None
                role = self._role(tok, prev, nxt, top)
                context = LiteralContext(
                    frames=tuple(f.info() for f in stack[1:]),
                    field=top.field,
                    role=role,
                    marked=tok.line in marked_lines or (tok.line - 1) in marked_lines,
                    in_translation_call=any(f.translation is not None for f in stack[1:]),
                )
                events.append(StringSite(tok, context))
                if role == 'mapping_key' and tok.value.isidentifier():
                    top.field = tok.value

            top.args[-1].append(tok)

        return events

    def _role(self, tok: Token, prev: Optional[Token], nxt: Optional[Token], top: _Frame) -> str:
        if tok.hint == 'docstring':
            return 'docstring'
        if top.kind == 'subscript':
            return 'subscript'
        if nxt is not None and nxt.kind == 'punct':
            if nxt.value == '=>':
                return 'pattern'
            if nxt.value in ('==', '!='):
                return 'comparison'
            if nxt.value == ':' and not self.colon_fields and top.opener == '{':
                return 'mapping_key'
        if prev is not None and prev.kind == 'punct' and prev.value in ('==', '!='):
            return 'comparison'
        return 'value'

    def _frame_head(self, sig: Sequence[Token], i: int) -> Tuple[Optional[str], str]:
        """Work out what the bracket at ``sig[i]`` opens."""
        opener = sig[i].value
        callee = self._callee_before(sig, i)
        prev = sig[i - 1] if i > 0 else None

        if opener == '(':
            return (callee, 'call') if callee else (None, 'group')

        if opener == '[':
            if prev is not None and prev.kind == 'punct' and prev.value in ('#', '!') and (
                    prev.value == '#' or (i > 1 and sig[i - 2].value == '#')):
                return '#attr', 'attr'
            if callee and callee.endswith('!'):
                return callee, 'call'
            if prev is not None and (
                    (prev.kind == 'ident' and prev.value not in self.keywords)
                    or (prev.kind == 'punct' and prev.value in (')', ']'))
                    or prev.kind == 'string'):
                return None, 'subscript'
            return None, 'list'

        # '{'
        if callee and callee.endswith('!'):
            return callee, 'call'
        if self.struct_braces and callee:
            return callee, 'struct'
        return None, 'dict' if not self.struct_braces else 'block'

    def _callee_before(self, sig: Sequence[Token], i: int) -> Optional[str]:
        """Dotted or ``::`` path immediately before an opening bracket."""
        j = i - 1
        if j < 0:
            return None

        tok = sig[j]
        if tok.kind == 'punct' and tok.value == '!' and j > 0 and sig[j - 1].kind == 'ident':
            name = sig[j - 1].value + '!'
            j -= 2
        elif tok.kind == 'ident' and tok.value not in self.keywords:
            name = tok.value
            j -= 1
        else:
            return None

        parts = [name]
        while j >= 1 and sig[j].kind == 'punct' and sig[j].value in ('::', '.') \
                and sig[j - 1].kind == 'ident' and sig[j - 1].value not in self.keywords:
            parts.insert(0, sig[j - 1].value + sig[j].value)
            j -= 2
        return ''.join(parts)

    @staticmethod
    def _plain_literal(arg: List[Token]) -> Optional[Token]:
        if len(arg) == 1 and arg[0].kind == 'string':
            return arg[0]
        return None

    def _call_site(self, frame: _Frame, stack: List[_Frame], closer: Token) -> CallSite:
        call = frame.translation
        key_arg = call.get('key_arg', 0)
        default_arg = call.get('default_arg')

        key_token = None
        if key_arg < len(frame.args):
            key_token = self._plain_literal(frame.args[key_arg])

        default_token = None
        if default_arg is not None and default_arg < len(frame.args):
            default_token = self._plain_literal(frame.args[default_arg])

        anchor = key_token or frame.token or closer
        parent = stack[-1]
        context = LiteralContext(
            frames=tuple(f.info() for f in stack[1:]),
            field=parent.field,
            in_translation_call=any(f.translation is not None for f in stack[1:]),
        )
        return CallSite(
            name=frame.callee or call['name'],
            key=key_token.value if key_token else None,
            default=default_token.value if default_token else None,
            line=anchor.line,
            column=anchor.column,
            context=context,
            key_token=key_token,
            default_token=default_token,
        )
