"""Tokenizers shared by rubric tagging and keyword similarity."""

from __future__ import annotations

import re
from dataclasses import dataclass

from interview_eval.extraction.word_lists import STOP_WORDS, TAG_STOP_WORDS

_PUNCT_RE = re.compile(r"[^\w\s]")
_NON_ALNUM_RE = re.compile(r"[^a-z0-9\s]")

MAX_TAGS = 5


def extract_tags(text: str, limit: int = MAX_TAGS) -> list[str]:
    """Derive up to ``limit`` lowercase tags from a rubric phrase.

    Tokens of three characters or fewer and tag stop words are dropped;
    the remainder is deduplicated in first-seen order.
    """
    words = _PUNCT_RE.sub(" ", text.lower()).split()
    tags: list[str] = []
    for word in words:
        if len(word) <= 3 or word in TAG_STOP_WORDS or word in tags:
            continue
        tags.append(word)
        if len(tags) == limit:
            break
    return tags


def keywords(text: str, min_length: int = 4) -> list[str]:
    """Lowercase words of at least ``min_length`` characters, deduplicated."""
    seen: dict[str, None] = {}
    for word in _PUNCT_RE.sub(" ", text.lower()).split():
        if len(word) >= min_length and word not in STOP_WORDS:
            seen.setdefault(word, None)
    return list(seen)


@dataclass(frozen=True)
class KeywordTokens:
    words: frozenset[str]
    bigrams: frozenset[str]


def tokenize(text: str) -> KeywordTokens:
    """Split text into stop-word-free words (>2 chars) and adjacent bigrams."""
    words = [
        w
        for w in _NON_ALNUM_RE.sub(" ", text.lower()).split()
        if len(w) > 2 and w not in STOP_WORDS
    ]
    bigrams = {f"{a}_{b}" for a, b in zip(words, words[1:])}
    return KeywordTokens(words=frozenset(words), bigrams=frozenset(bigrams))
