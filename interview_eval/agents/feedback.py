"""Feedback agent — candidate-facing prose about one evaluated answer.

Purely additive: the score and the next action are already fixed when
this runs.  If the LLM is unavailable a static summary is built from the
coverage lists instead.
"""

from __future__ import annotations

import json
import logging
from typing import Any

from langchain_core.messages import HumanMessage, SystemMessage

from interview_eval.errors import DependencyFailure
from interview_eval.llm import invoke_json
from interview_eval.models.evaluation import MatchSet, ScoreResult
from interview_eval.models.question import Question

logger = logging.getLogger(__name__)

FEEDBACK_PROMPT = """\
You are a supportive technical interview coach. Generate constructive
feedback that:
1. Acknowledges what the candidate did well (2-3 points)
2. Explains missing concepts clearly (most important first)
3. Corrects any wrong statements
4. Provides one actionable study tip
5. Suggests a follow-up question to test understanding

Return valid JSON only:
{
  "summary": "1-2 sentence overall assessment",
  "didWell": ["strength 1", "strength 2"],
  "needsImprovement": ["improvement 1", "improvement 2"],
  "corrections": ["correction for a wrong statement"],
  "studyTip": "one specific recommendation",
  "followUpQuestion": "a probing question to ask next"
}
"""

# LLM JSON key -> feedback dict key
_KEYS: dict[str, str] = {
    "summary": "summary",
    "didWell": "did_well",
    "needsImprovement": "needs_improvement",
    "corrections": "corrections",
    "studyTip": "study_tip",
    "followUpQuestion": "follow_up_question",
}
_LIST_KEYS = {"did_well", "needs_improvement", "corrections"}


def _bullets(items: list[str], mark: str, empty: str) -> str:
    return "\n".join(f"{mark} {item}" for item in items) if items else empty


def _build_request(
    question: Question, answer: str, score: ScoreResult, match_set: MatchSet
) -> str:
    must = match_set.must_have.texts()
    parts = [
        f'QUESTION: "{question.text}"',
        f'CANDIDATE ANSWER: "{answer}"',
        f"SCORE: {score.final_score}/10",
        "COVERED CORRECTLY:\n" + _bullets(must["covered"], "+", "None fully covered"),
        "PARTIALLY COVERED:\n" + _bullets(must["partial"], "~", "None"),
        "MISSING:\n" + _bullets(must["missing"], "-", "None"),
    ]
    if match_set.triggered_red_flags:
        wrong = [r.matched_claim for r in match_set.triggered_red_flags]
        parts.append("INCORRECT STATEMENTS:\n" + _bullets(wrong, "!", ""))
    return "\n\n".join(parts)


def fallback_feedback(score: ScoreResult, match_set: MatchSet) -> dict[str, Any]:
    must = match_set.must_have.texts()
    missing = must["missing"]
    verdict = "Some key concepts were missing." if missing else "Good coverage!"
    return {
        "summary": f"You scored {score.final_score}/10. {verdict}",
        "did_well": must["covered"][:2],
        "needs_improvement": missing[:2],
        "corrections": [r.matched_claim for r in match_set.triggered_red_flags],
        "study_tip": "Review the core concepts for this topic.",
        "follow_up_question": "Can you explain this concept in more detail?",
        "source": "fallback",
    }


def generate_feedback(
    question: Question,
    answer: str,
    score: ScoreResult,
    match_set: MatchSet,
) -> dict[str, Any]:
    """Return feedback with snake_case keys and a ``source`` marker."""
    try:
        parsed = invoke_json(
            [
                SystemMessage(content=FEEDBACK_PROMPT),
                HumanMessage(content=_build_request(question, answer, score, match_set)),
            ],
            temperature=0.5,
        )
    except (json.JSONDecodeError, ValueError) as e:
        logger.warning("Feedback parse error: %s", e)
        return fallback_feedback(score, match_set)
    except DependencyFailure as e:
        logger.warning("Feedback generation failed: %s", e)
        return fallback_feedback(score, match_set)

    fallback = fallback_feedback(score, match_set)
    feedback: dict[str, Any] = {}
    for llm_key, key in _KEYS.items():
        value = parsed.get(llm_key)
        if key in _LIST_KEYS:
            feedback[key] = [str(v) for v in value] if isinstance(value, list) else fallback[key]
        else:
            feedback[key] = str(value) if value else fallback[key]
    feedback["source"] = "llm"
    return feedback
