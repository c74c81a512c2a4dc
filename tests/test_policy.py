"""Tests for the adaptive policy rules."""

import pytest

from interview_eval.models.session import Difficulty, PolicyAction
from interview_eval.policy.engine import (
    REASON_CONTINUE,
    REASON_INCREASE,
    REASON_LOW_SCORE,
    REASON_MAX_QUESTIONS,
    REASON_MISSING_CORE,
    REASON_SWITCH_TOPIC,
    PolicyContext,
    PolicyEngine,
    PolicyThresholds,
)


class TestDecide:
    engine = PolicyEngine()

    @pytest.mark.parametrize(
        "ctx,action,reason",
        [
            (PolicyContext(last_score=9.5, questions_asked=10), PolicyAction.END_SESSION, REASON_MAX_QUESTIONS),
            (PolicyContext(last_score=1.0, questions_asked=12, missing_core_points=("x",)), PolicyAction.END_SESSION, REASON_MAX_QUESTIONS),
            (PolicyContext(last_score=6.0, missing_core_points=("B-trees stay balanced",)), PolicyAction.FOLLOW_UP, REASON_MISSING_CORE),
            (PolicyContext(last_score=9.0, wrong_claims=("Heaps are sorted",)), PolicyAction.FOLLOW_UP, REASON_MISSING_CORE),
            (PolicyContext(last_score=3.0), PolicyAction.FOLLOW_UP, REASON_LOW_SCORE),
            (PolicyContext(last_score=3.0, follow_up_depth=3, consecutive_low_scores=2), PolicyAction.SWITCH_TOPIC, REASON_SWITCH_TOPIC),
            (PolicyContext(last_score=8.0), PolicyAction.INCREASE_DIFFICULTY, REASON_INCREASE),
            (PolicyContext(last_score=7.5), PolicyAction.CONTINUE, REASON_CONTINUE),
            (PolicyContext(last_score=3.0, follow_up_depth=3, consecutive_low_scores=1), PolicyAction.CONTINUE, REASON_CONTINUE),
        ],
    )
    def test_rule_table(self, ctx, action, reason):
        decision = self.engine.decide(ctx)
        assert decision.action is action
        assert decision.reason == reason

    def test_max_questions_beats_everything(self):
        for score in (0.0, 4.0, 7.5, 10.0):
            ctx = PolicyContext(last_score=score, questions_asked=10, consecutive_low_scores=5)
            assert self.engine.decide(ctx).action is PolicyAction.END_SESSION

    def test_focus_points_are_missing_then_wrong(self):
        decision = self.engine.decide(
            PolicyContext(
                last_score=5.0,
                missing_core_points=("Pages have fixed size",),
                wrong_claims=("Segments have fixed size",),
            )
        )
        assert decision.focus_points == ("Pages have fixed size", "Segments have fixed size")

    def test_follow_up_depth_cap_blocks_follow_up(self):
        decision = self.engine.decide(
            PolicyContext(last_score=6.0, follow_up_depth=3, missing_core_points=("x",))
        )
        assert decision.action is PolicyAction.CONTINUE

    def test_high_score_at_depth_cap_increases(self):
        decision = self.engine.decide(PolicyContext(last_score=9.0, follow_up_depth=3))
        assert decision.action is PolicyAction.INCREASE_DIFFICULTY

    def test_score_exactly_at_follow_up_threshold_does_not_follow_up(self):
        decision = self.engine.decide(PolicyContext(last_score=4.0))
        assert decision.action is PolicyAction.CONTINUE

    def test_deterministic(self):
        ctx = PolicyContext(last_score=2.5, consecutive_low_scores=1, missing_core_points=("a",))
        assert len({self.engine.decide(ctx) for _ in range(20)}) == 1

    def test_custom_thresholds(self):
        engine = PolicyEngine(PolicyThresholds(max_questions=3, difficulty_up_threshold=6.0))
        assert engine.decide(PolicyContext(last_score=6.5)).action is PolicyAction.INCREASE_DIFFICULTY
        assert engine.decide(PolicyContext(last_score=6.5, questions_asked=3)).action is PolicyAction.END_SESSION


class TestAdjustDifficulty:
    @pytest.mark.parametrize(
        "current,action,expected",
        [
            (Difficulty.EASY, PolicyAction.INCREASE_DIFFICULTY, Difficulty.MEDIUM),
            (Difficulty.MEDIUM, PolicyAction.INCREASE_DIFFICULTY, Difficulty.HARD),
            (Difficulty.HARD, PolicyAction.INCREASE_DIFFICULTY, Difficulty.HARD),
            (Difficulty.HARD, PolicyAction.DECREASE_DIFFICULTY, Difficulty.MEDIUM),
            (Difficulty.EASY, PolicyAction.DECREASE_DIFFICULTY, Difficulty.EASY),
            ("Medium", PolicyAction.CONTINUE, Difficulty.MEDIUM),
        ],
    )
    def test_steps_and_caps(self, current, action, expected):
        assert PolicyEngine.adjust_difficulty(current, action) is expected


class TestDescribeRules:
    def test_thresholds_and_rule_order(self):
        described = PolicyEngine().describe_rules()
        assert described["thresholds"] == {
            "max_questions": 10,
            "follow_up_threshold": 4.0,
            "difficulty_up_threshold": 7.5,
            "max_follow_up_depth": 3,
            "topic_switch_consecutive_low": 2,
        }
        assert described["rules"][0].startswith("end_session")
        assert described["rules"][-1].startswith("continue")
