"""Curated word lists for keyword matching and rubric tagging.

Two lists with different jobs:
  - STOP_WORDS feeds the keyword similarity backend.  It only drops
    function words; technical vocabulary must survive.
  - TAG_STOP_WORDS feeds rubric tag derivation.  Tags already require
    four or more characters, so this list also drops the rubric-writing
    verbs ("explains", "mentions") that carry no topic signal.
"""

from __future__ import annotations

# ═══════════════════════════════════════════════════════════════════════════
# STOP WORDS (similarity)
# Articles, auxiliaries, prepositions, conjunctions and pronouns
# ═══════════════════════════════════════════════════════════════════════════
STOP_WORDS: frozenset[str] = frozenset({
    # Articles / auxiliaries
    "the", "a", "an", "is", "are", "was", "were", "be", "been", "being",
    "have", "has", "had", "do", "does", "did", "will", "would", "could",
    "should", "may", "might", "shall", "can", "need", "dare", "ought",
    "used",
    # Prepositions
    "to", "of", "in", "for", "on", "with", "at", "by", "from",
    "as", "into", "through", "during", "before", "after", "above", "below",
    "between", "under", "again", "further", "then", "once", "here", "there",
    "about", "up", "out", "off", "over",
    # Wh-words / quantifiers
    "when", "where", "why", "how", "all", "each", "every", "both", "few",
    "more", "most", "other", "some", "such", "no", "nor", "not", "only",
    "own", "same", "so", "than", "too", "very", "just",
    # Conjunctions
    "because", "but", "and", "or", "if", "while",
    # Determiners / pronouns
    "that", "this", "these", "those", "what", "which", "who", "whom",
    "its", "his", "her", "their", "our", "your", "my", "also", "it",
})

# ═══════════════════════════════════════════════════════════════════════════
# TAG STOP WORDS (rubric points)
# Long function words plus verbs typical of rubric phrasing
# ═══════════════════════════════════════════════════════════════════════════
TAG_STOP_WORDS: frozenset[str] = frozenset({
    "that", "this", "with", "from", "have", "been", "will", "should",
    "could", "would", "when", "where", "what", "which", "about", "into",
    "through", "during", "before", "after", "above", "below", "between",
    "under", "again", "further", "then", "once", "here", "there", "each",
    "more", "most", "other", "some", "such", "only", "same", "than", "very",
    "also", "just", "because",
    # Rubric-writing verbs
    "explains", "mentions", "describes", "understands", "knows",
})
