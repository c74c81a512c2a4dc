"""Shared fixtures: keep every test offline and give it fresh settings."""

from __future__ import annotations

import pytest

import interview_eval.settings as settings
from interview_eval.models.question import Question
from interview_eval.questions import bank


@pytest.fixture(autouse=True)
def offline_settings(monkeypatch):
    """No provider keys, default env, empty caches."""
    for key in (
        "OPENAI_API_KEY",
        "GROQ_API_KEY",
        "LLM_PROVIDERS",
        "SIMILARITY_BACKEND",
        "QUESTION_BANK_PATH",
    ):
        monkeypatch.delenv(key, raising=False)
    settings.reset()
    bank.reset()
    yield
    settings.reset()
    bank.reset()


SAMPLE_RUBRIC = {
    "must_have": [
        "Normalization reduces data redundancy",
        "First normal form requires atomic values",
        "Second normal form removes partial dependencies",
        "Third normal form removes transitive dependencies",
    ],
    "good_to_have": [
        "BCNF is a stricter version of third normal form",
        "Denormalization trades redundancy for read performance",
    ],
    "red_flags": [
        "Normalization always improves query performance",
    ],
}


@pytest.fixture
def sample_question() -> Question:
    return Question(
        id="dbms-test",
        domain="DBMS",
        topic="dbms.normalization",
        difficulty="Medium",
        text="Explain database normalization and the normal forms.",
        rubric=SAMPLE_RUBRIC,
    )


@pytest.fixture
def make_evaluation():
    """Build an ``Evaluation`` with a given score, missing points and wrong claims."""
    from interview_eval.models.evaluation import (
        Evaluation,
        ExtractedClaims,
        MatchSet,
        ScoreBreakdown,
        ScoreResult,
    )
    from interview_eval.models.rubric import PointType, RubricPoint

    def _make(score, missing=(), wrong=()):
        match_set = MatchSet()
        for i, text in enumerate(missing):
            match_set.must_have.add(
                RubricPoint(f"must_have_{i}", PointType.MUST_HAVE, text), "missing"
            )
        return Evaluation(
            score=ScoreResult(
                final_score=score,
                breakdown=ScoreBreakdown(0.0, 0.0, 0.0, 0.0),
                coverage={"red_flags": 0},
            ),
            grade="C",
            match_set=match_set,
            claims=ExtractedClaims(wrong_claims=list(wrong)),
            confidence=0.8,
            needs_follow_up=False,
        )

    return _make
