"""PolicyEngine: decide the next interview action.

A pure function of the inputs in ``PolicyContext`` and the thresholds.
Rules are checked in order and the first match wins:

    1. questions_asked >= max_questions             -> end_session
    2. (missing core points or wrong claims)
       and follow_up_depth < max_follow_up_depth     -> follow_up
    3. last_score < follow_up_threshold
       and follow_up_depth < max_follow_up_depth     -> follow_up
    4. consecutive_low_scores >= topic_switch_low    -> switch_topic
    5. last_score > difficulty_up_threshold          -> increase_difficulty
    6. otherwise                                     -> continue
"""

from __future__ import annotations

from dataclasses import asdict, dataclass, field

import interview_eval.settings as settings
from interview_eval.models.session import Difficulty, PolicyAction, PolicyDecision

REASON_MAX_QUESTIONS = "Maximum question limit reached"
REASON_MISSING_CORE = "Missing core concepts or incorrect statements"
REASON_LOW_SCORE = "Score below threshold, clarification needed"
REASON_SWITCH_TOPIC = "Multiple low scores in current topic"
REASON_INCREASE = "Excellent answer, increasing challenge"
REASON_CONTINUE = "Proceeding with next question"
REASON_NO_QUESTIONS = "No more questions available"

DIFFICULTY_ORDER: tuple[Difficulty, ...] = (
    Difficulty.EASY,
    Difficulty.MEDIUM,
    Difficulty.HARD,
)


@dataclass(frozen=True)
class PolicyThresholds:
    max_questions: int = settings.MAX_QUESTIONS
    follow_up_threshold: float = settings.FOLLOW_UP_THRESHOLD
    difficulty_up_threshold: float = settings.DIFFICULTY_UP_THRESHOLD
    max_follow_up_depth: int = settings.MAX_FOLLOW_UP_DEPTH
    topic_switch_consecutive_low: int = settings.TOPIC_SWITCH_CONSECUTIVE_LOW


@dataclass(frozen=True)
class PolicyContext:
    last_score: float
    follow_up_depth: int = 0
    consecutive_low_scores: int = 0
    questions_asked: int = 0
    missing_core_points: tuple[str, ...] = field(default_factory=tuple)
    wrong_claims: tuple[str, ...] = field(default_factory=tuple)


class PolicyEngine:
    def __init__(self, thresholds: PolicyThresholds | None = None):
        self.thresholds = thresholds or PolicyThresholds()

    def decide(self, ctx: PolicyContext) -> PolicyDecision:
        t = self.thresholds
        can_follow_up = ctx.follow_up_depth < t.max_follow_up_depth

        if ctx.questions_asked >= t.max_questions:
            return PolicyDecision(PolicyAction.END_SESSION, REASON_MAX_QUESTIONS)

        if (ctx.missing_core_points or ctx.wrong_claims) and can_follow_up:
            return PolicyDecision(
                PolicyAction.FOLLOW_UP,
                REASON_MISSING_CORE,
                focus_points=tuple(ctx.missing_core_points) + tuple(ctx.wrong_claims),
            )

        if ctx.last_score < t.follow_up_threshold and can_follow_up:
            return PolicyDecision(PolicyAction.FOLLOW_UP, REASON_LOW_SCORE)

        if ctx.consecutive_low_scores >= t.topic_switch_consecutive_low:
            return PolicyDecision(PolicyAction.SWITCH_TOPIC, REASON_SWITCH_TOPIC)

        if ctx.last_score > t.difficulty_up_threshold:
            return PolicyDecision(PolicyAction.INCREASE_DIFFICULTY, REASON_INCREASE)

        return PolicyDecision(PolicyAction.CONTINUE, REASON_CONTINUE)

    @staticmethod
    def adjust_difficulty(current: Difficulty | str, action: PolicyAction) -> Difficulty:
        """Step one level up or down, capped at Easy / Hard."""
        index = DIFFICULTY_ORDER.index(Difficulty(current))
        if action is PolicyAction.INCREASE_DIFFICULTY:
            index = min(index + 1, len(DIFFICULTY_ORDER) - 1)
        elif action is PolicyAction.DECREASE_DIFFICULTY:
            index = max(index - 1, 0)
        return DIFFICULTY_ORDER[index]

    def describe_rules(self) -> dict:
        """Thresholds plus the rule list in evaluation order."""
        return {
            "thresholds": asdict(self.thresholds),
            "rules": [
                "end_session: questions_asked >= max_questions",
                "follow_up: missing core points or wrong claims, "
                "while follow_up_depth < max_follow_up_depth",
                "follow_up: last_score < follow_up_threshold, "
                "while follow_up_depth < max_follow_up_depth",
                "switch_topic: consecutive_low_scores >= topic_switch_consecutive_low",
                "increase_difficulty: last_score > difficulty_up_threshold",
                "continue: default action",
            ],
        }
