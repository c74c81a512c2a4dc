"""Answer evaluator — runs the full scoring pipeline for one answer.

    rubric -> points -> claims -> matches -> score -> (feedback)

Collaborators are passed in explicitly so tests can swap any of them.
LLM and embedding failures degrade the result (lower ``confidence``)
instead of failing; a broken rubric raises ``ValidationError``.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from typing import Any

import interview_eval.settings as settings
from interview_eval.agents.feedback import generate_feedback
from interview_eval.extraction.claims import extract_claims
from interview_eval.models.evaluation import (
    Evaluation,
    ExtractedClaims,
    MatchSet,
    ScoreResult,
)
from interview_eval.models.question import Question
from interview_eval.models.rubric import RubricPoint
from interview_eval.rubric.normalizer import normalize_rubric
from interview_eval.scoring.formula import ScoringEngine
from interview_eval.scoring.matcher import ClaimMatcher
from interview_eval.scoring.similarity import Similarity, get_similarity

logger = logging.getLogger(__name__)

FULL_CONFIDENCE = 0.8
DEGRADED_CONFIDENCE = 0.5

ClaimExtractor = Callable[[Question, str, list[RubricPoint]], ExtractedClaims]
FeedbackWriter = Callable[[Question, str, ScoreResult, MatchSet], dict[str, Any]]


class AnswerEvaluator:
    def __init__(
        self,
        similarity: Similarity | None = None,
        scoring: ScoringEngine | None = None,
        claim_extractor: ClaimExtractor = extract_claims,
        feedback_writer: FeedbackWriter | None = generate_feedback,
    ):
        self.matcher = ClaimMatcher(similarity or get_similarity())
        self.scoring = scoring or ScoringEngine()
        self.claim_extractor = claim_extractor
        self.feedback_writer = feedback_writer

    def evaluate(self, question: Question, answer: str) -> Evaluation:
        """Score ``answer`` against the question's rubric.

        Raises:
            ValidationError: the rubric breaks a structural rule.
        """
        if not question.rubric:
            logger.info("Question %s has no rubric; using placeholder", question.id)
            return self.placeholder()

        points = normalize_rubric(question.rubric)
        claims = self.claim_extractor(question, answer, points)
        match_set = self.matcher.match(claims.claims, claims.wrong_claims, points)
        score = self.scoring.compute(match_set, claims.answer_quality)

        degraded = claims.is_fallback or match_set.degraded
        evaluation = Evaluation(
            score=score,
            grade=self.scoring.grade(score.final_score),
            match_set=match_set,
            claims=claims,
            confidence=DEGRADED_CONFIDENCE if degraded else FULL_CONFIDENCE,
            needs_follow_up=self.scoring.needs_follow_up(score),
        )
        if self.feedback_writer is not None:
            evaluation.feedback = self.feedback_writer(question, answer, score, match_set)

        logger.info(
            "Evaluated %s: score=%.1f grade=%s confidence=%.1f",
            question.id,
            score.final_score,
            evaluation.grade,
            evaluation.confidence,
        )
        return evaluation

    def placeholder(self) -> Evaluation:
        """Neutral evaluation: score 5.0, grade C, zero confidence."""
        score = self.scoring.placeholder()
        return Evaluation(
            score=score,
            grade=self.scoring.grade(score.final_score),
            match_set=MatchSet(),
            claims=ExtractedClaims(source="fallback"),
            confidence=0.0,
            needs_follow_up=False,
            feedback={
                "summary": (
                    f"Answer recorded. Detailed scoring is unavailable for this "
                    f"question, so a neutral {settings.PLACEHOLDER_SCORE}/10 was assigned."
                ),
                "source": "placeholder",
            },
            placeholder=True,
        )
