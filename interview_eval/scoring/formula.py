"""ScoringEngine: the fixed 0–10 scoring formula.

    must_have_score    = (covered + 0.5 * partial) / total * 6   (6 when no points)
    good_to_have_score = (covered + 0.5 * partial) / total * 3   (0 when no points)
    clarity_score      = (clarity + structure) / 2 * 1
    penalty            = triggered red flags * 1.5
    final_score        = clamp(sum - penalty, 0, 10), one decimal

Breakdown values are rounded to two decimals.  Halves round up, so a
raw 2.25 is reported as 2.3.
"""

from __future__ import annotations

from decimal import ROUND_HALF_UP, Decimal

import interview_eval.settings as settings
from interview_eval.models.evaluation import (
    AnswerQuality,
    CoverageBucket,
    MatchSet,
    ScoreBreakdown,
    ScoreResult,
)

# (minimum score, grade), checked top-down
GRADE_BANDS: tuple[tuple[float, str], ...] = (
    (9.0, "A+"),
    (8.0, "A"),
    (7.0, "B+"),
    (6.0, "B"),
    (5.0, "C"),
    (4.0, "D"),
)
LOWEST_GRADE = "F"

# Follow-up trigger: more missing must-haves than this
MAX_MISSING_MUST_HAVE = 2


def round_half_up(value: float, places: int) -> float:
    quantum = Decimal(1).scaleb(-places)
    return float(Decimal(str(value)).quantize(quantum, rounding=ROUND_HALF_UP))


def _category_score(bucket: CoverageBucket, weight: float, vacuous: float) -> float:
    if bucket.total == 0:
        return vacuous
    earned = len(bucket.covered) + settings.PARTIAL_CREDIT * len(bucket.partial)
    return earned / bucket.total * weight


class ScoringEngine:
    """Pure functions over a match set; holds no state."""

    def compute(
        self,
        match_set: MatchSet,
        quality: AnswerQuality,
        red_flag_count: int | None = None,
    ) -> ScoreResult:
        if red_flag_count is None:
            red_flag_count = len(match_set.triggered_red_flags)

        must_have_score = _category_score(
            match_set.must_have, settings.MUST_HAVE_WEIGHT, settings.MUST_HAVE_WEIGHT
        )
        good_to_have_score = _category_score(
            match_set.good_to_have, settings.GOOD_TO_HAVE_WEIGHT, 0.0
        )
        clarity_score = (quality.clarity + quality.structure) / 2 * settings.CLARITY_WEIGHT
        penalty = red_flag_count * settings.RED_FLAG_PENALTY

        raw = must_have_score + good_to_have_score + clarity_score - penalty
        final = round_half_up(max(settings.MIN_SCORE, min(settings.MAX_SCORE, raw)), 1)

        return ScoreResult(
            final_score=final,
            breakdown=ScoreBreakdown(
                must_have_score=round_half_up(must_have_score, 2),
                good_to_have_score=round_half_up(good_to_have_score, 2),
                clarity_score=round_half_up(clarity_score, 2),
                penalty=round_half_up(penalty, 2),
            ),
            coverage={
                "must_have": match_set.must_have.counts(),
                "good_to_have": match_set.good_to_have.counts(),
                "red_flags": red_flag_count,
            },
        )

    @staticmethod
    def grade(score: float) -> str:
        for minimum, grade in GRADE_BANDS:
            if score >= minimum:
                return grade
        return LOWEST_GRADE

    @staticmethod
    def needs_follow_up(result: ScoreResult) -> bool:
        return (
            result.final_score < settings.FOLLOW_UP_THRESHOLD
            or result.missing_must_have_count > MAX_MISSING_MUST_HAVE
            or result.red_flag_count > 0
        )

    def placeholder(self) -> ScoreResult:
        """Neutral result for questions that carry no rubric."""
        return ScoreResult(
            final_score=settings.PLACEHOLDER_SCORE,
            breakdown=ScoreBreakdown(0.0, 0.0, 0.0, 0.0),
            coverage={
                "must_have": CoverageBucket().counts(),
                "good_to_have": CoverageBucket().counts(),
                "red_flags": 0,
            },
        )
