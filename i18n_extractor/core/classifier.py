"""Literal classifier: decides whether a string literal is user-facing text."""

import re
from dataclasses import dataclass
from enum import Enum
from typing import List, Optional, Pattern

from ..frameworks.base import LiteralContext, call_matches
from ..utils.config import ScanConfig
from ..utils.validators import PLACEHOLDER_PATTERN, strip_placeholders


class Verdict(Enum):
    TRANSLATABLE = "translatable"
    IGNORE = "ignore"


@dataclass(frozen=True)
class Classification:
    """Outcome for one literal."""
    verdict: Verdict
    confidence: float
    reason: str

    @property
    def translatable(self) -> bool:
        return self.verdict is Verdict.TRANSLATABLE


class LiteralClassifier:
    """
    Policy that decides which literals are UI text.

    Rules are applied in order and the first one that fires wins:

    1. literals inside a translation call are already handled
    2. an ignore-marker comment on the same or previous line
    3. structural positions (docstrings, subscripts, match arms, comparisons,
       mapping keys) and non-UI calls (logging, assertions, paths ...)
    4. empty, single-character, punctuation-only, emoji-only and
       placeholder-only text
    5. configured exclusion patterns (URLs, paths, identifiers ...)
    6. too short or too few words, unless in a UI call or field

    What survives gets a heuristic confidence in ``[0, 1]``; callers compare it
    with ``scan.min_confidence``.
    """

    # Pure emoji strings (compound and flag emoji included)
    EMOJI_PATTERN = re.compile(
        r'^[\U0001F300-\U0001FAFF\U00002600-\U000027BF\U0001F1E0-\U0001F1FF'
        r'\U00002300-\U000023FF\U0000FE00-\U0000FE0F\U0000200D\U000020E3\s]+$'
    )
    PUNCTUATION_PATTERN = re.compile(r'^[\W_]+$')
    WORD_PATTERN = re.compile(r'[^\W\d_][\w\'’-]*')
    SENTENCE_END = ('.', '!', '?', '…', ':')

    NON_VALUE_ROLES = ('docstring', 'subscript', 'pattern', 'comparison', 'mapping_key')

    def __init__(self, config: Optional[ScanConfig] = None):
        self.config = config or ScanConfig()
        self._exclusions: List[Pattern] = [re.compile(p) for p in self.config.exclusion_patterns]

    def classify(self, text: str, context: Optional[LiteralContext] = None) -> Classification:
        context = context or LiteralContext()
        stripped = text.strip()

        if context.in_translation_call:
            return self._ignore('translation-call')

        if context.marked:
            return self._ignore('marker')

        if context.role in self.NON_VALUE_ROLES:
            return self._ignore(context.role)

        for callee in context.callees():
            if call_matches(callee, self.config.ignore_calls):
                return self._ignore(f'call:{callee}')

        if not stripped:
            return self._ignore('empty')
        if len(stripped) == 1:
            return self._ignore('single-char')
        if self.EMOJI_PATTERN.match(stripped):
            return self._ignore('emoji')
        if self.PUNCTUATION_PATTERN.match(stripped):
            return self._ignore('punctuation')
        if PLACEHOLDER_PATTERN.search(stripped) and not strip_placeholders(stripped).strip(' \t:,.-/|'):
            return self._ignore('placeholder-only')

        for pattern in self._exclusions:
            if pattern.search(stripped):
                return self._ignore(f'pattern:{pattern.pattern}')

        in_ui = self._in_ui_position(context)
        words = self.WORD_PATTERN.findall(strip_placeholders(stripped))

        if not words:
            return self._ignore('no-words')
        if not in_ui:
            if len(stripped) < self.config.min_length:
                return self._ignore('too-short')
            if len(words) < self.config.min_words:
                return self._ignore('too-few-words')

        return Classification(Verdict.TRANSLATABLE, self._score(stripped, words, in_ui), 'heuristic')

    def _in_ui_position(self, context: LiteralContext) -> bool:
        if context.field and context.field in self.config.ui_fields:
            return True
        return call_matches(context.call_name, self.config.ui_calls)

    def _score(self, text: str, words: List[str], in_ui: bool) -> float:
        score = 0.5
        if len(words) > 1:
            score += 0.2
        first = words[0]
        if first[:1].isupper():
            score += 0.1
        elif len(words) == 1 and first.islower():
            score -= 0.2
        if text.endswith(self.SENTENCE_END):
            score += 0.1
        if in_ui:
            score += 0.2
        if PLACEHOLDER_PATTERN.search(text):
            score -= 0.2
        return round(max(0.0, min(1.0, score)), 2)

    @staticmethod
    def _ignore(reason: str) -> Classification:
        return Classification(Verdict.IGNORE, 0.0, reason)
