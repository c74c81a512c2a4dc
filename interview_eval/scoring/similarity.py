"""Text similarity backends used by the claim matcher.

Two interchangeable implementations of one interface:

  - ``EmbeddingSimilarity`` embeds both texts with the OpenAI embedding
    model and returns their cosine similarity.
  - ``KeywordSimilarity`` needs no API.  It scores stop-word-free word
    and bigram overlap, then maps the raw overlap onto the same
    covered / partial cut-offs the embedding backend is judged by.

Any backend failure surfaces as ``DependencyFailure``; the matcher turns
that into zero similarity.
"""

from __future__ import annotations

import logging

import numpy as np

import interview_eval.settings as settings
from interview_eval.errors import DependencyFailure
from interview_eval.extraction.keywords import KeywordTokens, tokenize

logger = logging.getLogger(__name__)

# Raw keyword-overlap cut-offs that correspond to covered / partial
KEYWORD_COVERED_RAW = 0.40
KEYWORD_PARTIAL_RAW = 0.25
BIGRAM_BONUS = 0.15


def _cosine_similarity(a: np.ndarray, b: np.ndarray) -> float:
    """Compute cosine similarity between two vectors."""
    if a.shape != b.shape:
        raise ValueError("Embedding dimensions must match")
    norm = np.linalg.norm(a) * np.linalg.norm(b)
    if norm == 0:
        return 0.0
    return float(np.dot(a, b) / norm)


class Similarity:
    """Interface: ``similarity(a, b)`` in [-1, 1] and a threshold test."""

    name = "base"

    def similarity(self, text_a: str, text_b: str) -> float:
        raise NotImplementedError

    def is_similar(
        self,
        text_a: str,
        text_b: str,
        threshold: float = settings.PARTIAL_THRESHOLD,
    ) -> bool:
        return self.similarity(text_a, text_b) >= threshold


class EmbeddingSimilarity(Similarity):
    """Cosine similarity of OpenAI embeddings, cached per text."""

    name = "embedding"

    def __init__(self, model=None):
        self._model = model
        self._cache: dict[str, np.ndarray] = {}

    def _embedding_model(self):
        if self._model is None:
            from interview_eval.llm import get_embeddings_model

            self._model = get_embeddings_model()
        return self._model

    def embed(self, text: str) -> np.ndarray:
        cached = self._cache.get(text)
        if cached is not None:
            return cached
        try:
            vector = np.array(self._embedding_model().embed_query(text), dtype=float)
        except DependencyFailure:
            raise
        except Exception as e:
            raise DependencyFailure("embeddings", str(e)) from e
        self._cache[text] = vector
        return vector

    def similarity(self, text_a: str, text_b: str) -> float:
        try:
            return _cosine_similarity(self.embed(text_a), self.embed(text_b))
        except ValueError as e:
            raise DependencyFailure("embeddings", str(e)) from e


def keyword_overlap(claim: KeywordTokens, point: KeywordTokens) -> float:
    """Raw 0–1 overlap of ``claim`` against a rubric ``point``.

    Harmonic mean of word recall (against the point) and precision
    (against a window three times the point's size), plus a bonus of up
    to 0.15 for shared bigrams.
    """
    if not point.words:
        return 0.0

    word_matches = len(point.words & claim.words)
    recall = word_matches / len(point.words)
    precision = (
        word_matches / min(len(claim.words), len(point.words) * 3) if claim.words else 0.0
    )
    bigram_bonus = (
        len(point.bigrams & claim.bigrams) / len(point.bigrams) * BIGRAM_BONUS
        if point.bigrams
        else 0.0
    )

    if recall > 0 and precision > 0:
        combined = 2 * recall * precision / (recall + precision)
    else:
        combined = max(recall * 0.8, precision * 0.5)
    return min(1.0, combined + bigram_bonus)


def calibrate_keyword_score(raw: float) -> float:
    """Monotone piecewise-linear map of raw overlap onto the coverage scale.

    0.40 raw lands on the covered threshold, 0.25 on the partial one.
    """
    covered = settings.COVERED_THRESHOLD
    partial = settings.PARTIAL_THRESHOLD
    if raw >= KEYWORD_COVERED_RAW:
        span = (raw - KEYWORD_COVERED_RAW) / (1.0 - KEYWORD_COVERED_RAW)
        return min(1.0, covered + span * (1.0 - covered))
    if raw >= KEYWORD_PARTIAL_RAW:
        span = (raw - KEYWORD_PARTIAL_RAW) / (KEYWORD_COVERED_RAW - KEYWORD_PARTIAL_RAW)
        return partial + span * (covered - partial)
    return max(0.0, raw / KEYWORD_PARTIAL_RAW * partial)


class KeywordSimilarity(Similarity):
    """API-free similarity based on keyword overlap.

    Asymmetric: ``text_b`` is the reference (rubric point or red flag).
    """

    name = "keyword"

    def similarity(self, text_a: str, text_b: str) -> float:
        raw = keyword_overlap(tokenize(text_a), tokenize(text_b))
        return calibrate_keyword_score(raw)


def get_similarity(backend: str | None = None) -> Similarity:
    """Pick a backend: ``embedding``, ``keyword`` or ``auto``.

    ``auto`` (the default, from ``SIMILARITY_BACKEND``) uses embeddings
    when an OpenAI key is configured and keyword overlap otherwise.
    """
    choice = (backend or settings.SIMILARITY_BACKEND or "auto").lower()
    if choice == "auto":
        choice = "embedding" if settings.provider_configured("openai") else "keyword"

    if choice == "embedding":
        logger.info("Similarity backend: embedding")
        return EmbeddingSimilarity()
    if choice == "keyword":
        logger.info("Similarity backend: keyword")
        return KeywordSimilarity()
    raise ValueError(f"Unknown similarity backend: {choice!r}")
