"""Claim extraction — turn a free-text answer into discrete claims.

The LLM lists the factual claims, the incorrect ones, and rates clarity
and structure.  When the LLM is unavailable or replies with junk the
answer is split into sentences instead, so evaluation always proceeds.
"""

from __future__ import annotations

import json
import logging
import re
from typing import Any

from langchain_core.messages import HumanMessage, SystemMessage

import interview_eval.settings as settings
from interview_eval.errors import DependencyFailure
from interview_eval.llm import invoke_json
from interview_eval.models.evaluation import AnswerQuality, ExtractedClaims
from interview_eval.models.question import Question
from interview_eval.models.rubric import PointType, RubricPoint
from interview_eval.rubric.normalizer import points_of_type

logger = logging.getLogger(__name__)

_SENTENCE_SPLIT_RE = re.compile(r"[.!?]+")
MIN_SENTENCE_CHARS = 10

EXTRACTION_PROMPT = """\
You analyze technical interview answers and extract structured information.

TASK:
1. Extract all factual claims made by the candidate (what concepts they explained)
2. Identify any incorrect or wrong claims
3. Rate the answer's clarity (0-1) and structure (0-1)

Respond with valid JSON only:
{
  "claims": ["claim 1", "claim 2"],
  "wrongClaims": ["incorrect statement 1"],
  "answerQuality": {"clarity": 0.8, "structure": 0.7}
}
"""


def _points_text(points: list[RubricPoint], point_type: PointType) -> str:
    return "; ".join(p.text for p in points_of_type(points, point_type)) or "None"


def _build_request(question: Question, answer: str, points: list[RubricPoint]) -> str:
    return (
        f'QUESTION: "{question.text}"\n'
        f"TOPIC: {question.topic}\n"
        f"DOMAIN: {question.domain}\n\n"
        f'CANDIDATE ANSWER:\n"{answer}"\n\n'
        "EXPECTED CONCEPTS (for reference):\n"
        f"Must Cover: {_points_text(points, PointType.MUST_HAVE)}\n"
        f"Bonus Points: {_points_text(points, PointType.GOOD_TO_HAVE)}\n"
        f"Incorrect Statements to Watch For: {_points_text(points, PointType.RED_FLAG)}"
    )


def _quality_value(raw: Any) -> float:
    try:
        value = float(raw)
    except (TypeError, ValueError):
        return settings.NEUTRAL_QUALITY
    return max(0.0, min(1.0, value))


def _string_list(raw: Any) -> list[str]:
    if not isinstance(raw, list):
        return []
    return [str(item).strip() for item in raw if str(item).strip()]


def fallback_claims(answer: str) -> ExtractedClaims:
    """Sentences longer than ten characters, no wrong claims, neutral quality."""
    sentences = [s.strip() for s in _SENTENCE_SPLIT_RE.split(answer)]
    return ExtractedClaims(
        claims=[s for s in sentences if len(s) > MIN_SENTENCE_CHARS],
        wrong_claims=[],
        answer_quality=AnswerQuality(settings.NEUTRAL_QUALITY, settings.NEUTRAL_QUALITY),
        source="fallback",
    )


def extract_claims(
    question: Question,
    answer: str,
    points: list[RubricPoint],
) -> ExtractedClaims:
    """Extract claims from ``answer``; never raises for LLM trouble."""
    if not answer.strip():
        return fallback_claims(answer)

    try:
        parsed = invoke_json(
            [
                SystemMessage(content=EXTRACTION_PROMPT),
                HumanMessage(content=_build_request(question, answer, points)),
            ],
            temperature=0.2,
        )
        quality = parsed.get("answerQuality") or {}
        if not isinstance(quality, dict):
            quality = {}
        return ExtractedClaims(
            claims=_string_list(parsed.get("claims")),
            wrong_claims=_string_list(parsed.get("wrongClaims")),
            answer_quality=AnswerQuality(
                clarity=_quality_value(quality.get("clarity", settings.NEUTRAL_QUALITY)),
                structure=_quality_value(quality.get("structure", settings.NEUTRAL_QUALITY)),
            ),
            source="llm",
        )

    except (json.JSONDecodeError, TypeError, ValueError) as e:
        logger.warning("Claim extraction parse error: %s", e)
        return fallback_claims(answer)

    except DependencyFailure as e:
        logger.warning("Claim extraction failed: %s", e)
        return fallback_claims(answer)
