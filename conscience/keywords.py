"""Keyword policies deciding whether a rule fires for an action."""

from __future__ import annotations

import re
from typing import Protocol

from conscience.rules import MoralRule

_TOKEN_RE = re.compile(r"[^\W_]+", re.UNICODE)

STOPWORDS = frozenset(
    {
        "and",
        "any",
        "are",
        "but",
        "can",
        "does",
        "for",
        "from",
        "has",
        "have",
        "into",
        "not",
        "nor",
        "one",
        "our",
        "than",
        "that",
        "the",
        "their",
        "them",
        "then",
        "there",
        "they",
        "this",
        "was",
        "were",
        "what",
        "when",
        "who",
        "will",
        "with",
        "you",
        "your",
    }
)


def tokenize(text: str) -> list[str]:
    """Split text into lowercase word tokens."""
    return [match.group(0).lower() for match in _TOKEN_RE.finditer(text)]


class KeywordPolicy(Protocol):
    """Maps a rule to trigger words and matches it against an action."""

    def keywords_for(self, rule: MoralRule) -> frozenset[str]: ...

    def matches(self, rule: MoralRule, action: str) -> bool: ...


class DescriptionKeywordPolicy:
    """Whole-word keyword matching.

    Explicit rule keywords win; otherwise keywords are the description's
    words minus stopwords and words shorter than ``min_length``.

    Matching is on whole tokens, not substrings, so "believe" never fires a
    rule keyed on "lie". Inflected forms only match when listed as keywords.
    """

    def __init__(self, min_length: int = 3, stopwords: frozenset[str] = STOPWORDS) -> None:
        self.min_length = min_length
        self.stopwords = stopwords

    def keywords_for(self, rule: MoralRule) -> frozenset[str]:
        if rule.keywords:
            return frozenset(token for word in rule.keywords for token in tokenize(word))
        return frozenset(
            token
            for token in tokenize(rule.description)
            if len(token) >= self.min_length and token not in self.stopwords
        )

    def matches(self, rule: MoralRule, action: str) -> bool:
        keywords = self.keywords_for(rule)
        if not keywords:
            return False
        return not keywords.isdisjoint(tokenize(action))
