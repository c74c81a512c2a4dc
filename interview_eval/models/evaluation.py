"""Value objects produced by one answer evaluation.

The flow is claims → ``MatchSet`` → ``ScoreResult`` → ``Evaluation``.
Every object serializes to plain dicts so the web API and session logs
can mirror them as JSON.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from interview_eval.models.rubric import RubricPoint


@dataclass(frozen=True)
class AnswerQuality:
    clarity: float = 0.5  # 0–1
    structure: float = 0.5  # 0–1

    def to_dict(self) -> dict[str, float]:
        return {"clarity": self.clarity, "structure": self.structure}


@dataclass
class ExtractedClaims:
    """Output contract of the claim-extraction capability."""

    claims: list[str] = field(default_factory=list)
    wrong_claims: list[str] = field(default_factory=list)
    answer_quality: AnswerQuality = field(default_factory=AnswerQuality)
    source: str = "llm"  # "llm" or "fallback"

    @property
    def is_fallback(self) -> bool:
        return self.source == "fallback"

    def to_dict(self) -> dict[str, Any]:
        return {
            "claims": list(self.claims),
            "wrong_claims": list(self.wrong_claims),
            "answer_quality": self.answer_quality.to_dict(),
            "source": self.source,
        }


@dataclass(frozen=True)
class MatchResult:
    point: RubricPoint
    similarity: float  # clamped to 0–1
    coverage: str  # "covered" | "partial" | "missing"

    def to_dict(self) -> dict[str, Any]:
        return {
            "point_id": self.point.id,
            "point_text": self.point.text,
            "point_type": self.point.type.value,
            "similarity": round(self.similarity, 4),
            "coverage": self.coverage,
        }


@dataclass
class CoverageBucket:
    """Points of one category grouped by coverage tier."""

    covered: list[RubricPoint] = field(default_factory=list)
    partial: list[RubricPoint] = field(default_factory=list)
    missing: list[RubricPoint] = field(default_factory=list)

    @property
    def total(self) -> int:
        return len(self.covered) + len(self.partial) + len(self.missing)

    def add(self, point: RubricPoint, coverage: str) -> None:
        getattr(self, coverage).append(point)

    def counts(self) -> dict[str, int]:
        return {
            "covered": len(self.covered),
            "partial": len(self.partial),
            "missing": len(self.missing),
            "total": self.total,
        }

    def texts(self) -> dict[str, list[str]]:
        return {
            "covered": [p.text for p in self.covered],
            "partial": [p.text for p in self.partial],
            "missing": [p.text for p in self.missing],
        }


@dataclass(frozen=True)
class TriggeredRedFlag:
    red_flag: str
    matched_claim: str
    similarity: float

    def to_dict(self) -> dict[str, Any]:
        return {
            "red_flag": self.red_flag,
            "matched_claim": self.matched_claim,
            "similarity": round(self.similarity, 4),
        }


@dataclass
class MatchSet:
    must_have: CoverageBucket = field(default_factory=CoverageBucket)
    good_to_have: CoverageBucket = field(default_factory=CoverageBucket)
    triggered_red_flags: list[TriggeredRedFlag] = field(default_factory=list)
    details: list[MatchResult] = field(default_factory=list)
    degraded: bool = False  # True when a similarity call failed

    @property
    def missing_core_points(self) -> list[str]:
        return [p.text for p in self.must_have.missing]

    def to_dict(self) -> dict[str, Any]:
        return {
            "must_have": self.must_have.texts(),
            "good_to_have": self.good_to_have.texts(),
            "red_flags": {
                "triggered": [r.to_dict() for r in self.triggered_red_flags],
            },
            "details": [m.to_dict() for m in self.details],
            "degraded": self.degraded,
        }


@dataclass(frozen=True)
class ScoreBreakdown:
    must_have_score: float
    good_to_have_score: float
    clarity_score: float
    penalty: float

    def to_dict(self) -> dict[str, float]:
        return {
            "must_have_score": self.must_have_score,
            "good_to_have_score": self.good_to_have_score,
            "clarity_score": self.clarity_score,
            "penalty": self.penalty,
        }


@dataclass(frozen=True)
class ScoreResult:
    final_score: float  # 0–10, one decimal
    breakdown: ScoreBreakdown
    coverage: dict[str, Any]

    @property
    def missing_must_have_count(self) -> int:
        return int(self.coverage.get("must_have", {}).get("missing", 0))

    @property
    def red_flag_count(self) -> int:
        return int(self.coverage.get("red_flags", 0))

    def to_dict(self) -> dict[str, Any]:
        return {
            "final_score": self.final_score,
            "breakdown": self.breakdown.to_dict(),
            "coverage": self.coverage,
        }


@dataclass
class Evaluation:
    """Everything the pipeline learned about one answer."""

    score: ScoreResult
    grade: str
    match_set: MatchSet
    claims: ExtractedClaims
    confidence: float
    needs_follow_up: bool
    feedback: dict[str, Any] = field(default_factory=dict)
    placeholder: bool = False

    @property
    def final_score(self) -> float:
        return self.score.final_score

    @property
    def missing_core_points(self) -> list[str]:
        return self.match_set.missing_core_points

    @property
    def wrong_claims(self) -> list[str]:
        return list(self.claims.wrong_claims)

    def to_dict(self) -> dict[str, Any]:
        return {
            "score": self.score.final_score,
            "grade": self.grade,
            "score_breakdown": self.score.breakdown.to_dict(),
            "coverage": self.score.coverage,
            "matches": self.match_set.to_dict(),
            "claims": self.claims.to_dict(),
            "confidence": self.confidence,
            "needs_follow_up": self.needs_follow_up,
            "feedback": self.feedback,
            "placeholder": self.placeholder,
        }
