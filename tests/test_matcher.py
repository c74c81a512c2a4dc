"""Tests for ClaimMatcher using a scripted similarity backend."""

from unittest.mock import MagicMock

from interview_eval.errors import DependencyFailure
from interview_eval.models.rubric import PointType
from interview_eval.rubric.normalizer import normalize_rubric
from interview_eval.scoring.matcher import ClaimMatcher
from interview_eval.scoring.similarity import (
    EmbeddingSimilarity,
    KeywordSimilarity,
    Similarity,
)

RUBRIC = {
    "must_have": ["Stack is LIFO", "Push adds to the top", "Pop removes from the top"],
    "good_to_have": ["Used for recursion"],
    "red_flags": ["Stack is FIFO"],
}


class ScriptedSimilarity(Similarity):
    """Returns a fixed score per reference text; unknown pairs score 0."""

    def __init__(self, scores, failing=()):
        self.scores = scores
        self.failing = set(failing)
        self.calls = []

    def similarity(self, text_a, text_b):
        self.calls.append((text_a, text_b))
        if text_b in self.failing:
            raise DependencyFailure("embeddings", "timeout")
        return self.scores.get((text_a, text_b), self.scores.get(text_b, 0.0))


class TestCoverage:
    def test_points_classified_by_threshold(self):
        sim = ScriptedSimilarity(
            {
                "Stack is LIFO": 0.91,
                "Push adds to the top": 0.72,
                "Pop removes from the top": 0.40,
                "Used for recursion": 0.80,
            }
        )
        result = ClaimMatcher(sim).match(["claim one", "claim two"], [], normalize_rubric(RUBRIC))

        assert [p.text for p in result.must_have.covered] == ["Stack is LIFO"]
        assert [p.text for p in result.must_have.partial] == ["Push adds to the top"]
        assert [p.text for p in result.must_have.missing] == ["Pop removes from the top"]
        assert [p.text for p in result.good_to_have.covered] == ["Used for recursion"]
        assert result.missing_core_points == ["Pop removes from the top"]
        assert not result.degraded

    def test_claims_combined_into_one_text(self):
        sim = ScriptedSimilarity({})
        ClaimMatcher(sim).match(["first", "  ", "second"], [], normalize_rubric(RUBRIC))
        assert sim.calls[0][0] == "first. second"

    def test_no_claims_means_everything_missing(self):
        sim = ScriptedSimilarity({})
        result = ClaimMatcher(sim).match([], [], normalize_rubric(RUBRIC))
        assert result.must_have.counts()["missing"] == 3
        assert result.good_to_have.counts()["missing"] == 1
        assert sim.calls == []

    def test_similarity_clamped(self):
        sim = ScriptedSimilarity({"Stack is LIFO": 1.3, "Push adds to the top": -0.4})
        result = ClaimMatcher(sim).match(["x"], [], normalize_rubric(RUBRIC))
        values = {d.point.text: d.similarity for d in result.details}
        assert values["Stack is LIFO"] == 1.0
        assert values["Push adds to the top"] == 0.0

    def test_values_just_below_thresholds_are_not_promoted(self):
        sim = ScriptedSimilarity(
            {
                "Stack is LIFO": 0.77996,
                "Push adds to the top": 0.69996,
                "Pop removes from the top": 0.78,
                "Used for recursion": 0.70,
            }
        )
        result = ClaimMatcher(sim).match(["x"], [], normalize_rubric(RUBRIC))
        coverage = {d.point.text: d.coverage for d in result.details}
        assert coverage == {
            "Stack is LIFO": "partial",
            "Push adds to the top": "missing",
            "Pop removes from the top": "covered",
            "Used for recursion": "partial",
        }
        assert result.details[0].similarity == 0.77996
        assert result.details[0].to_dict()["similarity"] == 0.78

    def test_details_follow_rubric_order(self):
        result = ClaimMatcher(ScriptedSimilarity({})).match(["x"], [], normalize_rubric(RUBRIC))
        assert [d.point.id for d in result.details] == [
            "must_have_0",
            "must_have_1",
            "must_have_2",
            "good_to_have_0",
        ]
        assert all(d.point.type is not PointType.RED_FLAG for d in result.details)

    def test_failing_backend_degrades_to_missing(self):
        sim = ScriptedSimilarity({"Stack is LIFO": 0.95}, failing={"Push adds to the top"})
        result = ClaimMatcher(sim).match(["x"], [], normalize_rubric(RUBRIC))
        assert result.degraded
        assert "Push adds to the top" in result.missing_core_points
        assert [p.text for p in result.must_have.covered] == ["Stack is LIFO"]

    def test_mismatched_embeddings_degrade_to_missing(self):
        model = MagicMock()
        model.embed_query.side_effect = lambda text: (
            [1.0, 0.0] if text == "x" else [1.0, 0.0, 0.0]
        )
        result = ClaimMatcher(EmbeddingSimilarity(model=model)).match(
            ["x"], [], normalize_rubric(RUBRIC)
        )
        assert result.degraded
        assert result.must_have.counts()["missing"] == 3


class TestRedFlags:
    def test_wrong_claim_triggers_flag(self):
        sim = ScriptedSimilarity({("A stack is first in first out", "Stack is FIFO"): 0.88})
        result = ClaimMatcher(sim).match(
            ["x"], ["A stack is first in first out"], normalize_rubric(RUBRIC)
        )
        assert len(result.triggered_red_flags) == 1
        flag = result.triggered_red_flags[0]
        assert flag.red_flag == "Stack is FIFO"
        assert flag.matched_claim == "A stack is first in first out"
        assert flag.similarity == 0.88

    def test_flag_counted_once_with_best_claim(self):
        sim = ScriptedSimilarity(
            {
                ("stacks are FIFO", "Stack is FIFO"): 0.75,
                ("a stack is FIFO", "Stack is FIFO"): 0.93,
            }
        )
        result = ClaimMatcher(sim).match(
            [], ["stacks are FIFO", "a stack is FIFO"], normalize_rubric(RUBRIC)
        )
        assert len(result.triggered_red_flags) == 1
        assert result.triggered_red_flags[0].matched_claim == "a stack is FIFO"

    def test_below_partial_threshold_ignored(self):
        sim = ScriptedSimilarity({("unrelated slip", "Stack is FIFO"): 0.69})
        result = ClaimMatcher(sim).match(["x"], ["unrelated slip"], normalize_rubric(RUBRIC))
        assert result.triggered_red_flags == []

    def test_just_below_partial_threshold_ignored(self):
        sim = ScriptedSimilarity({("near miss", "Stack is FIFO"): 0.69996})
        result = ClaimMatcher(sim).match(["x"], ["near miss"], normalize_rubric(RUBRIC))
        assert result.triggered_red_flags == []

    def test_correct_claims_never_trigger_flags(self):
        sim = ScriptedSimilarity({"Stack is FIFO": 0.99})
        result = ClaimMatcher(sim).match(["Stack is FIFO"], [], normalize_rubric(RUBRIC))
        assert result.triggered_red_flags == []


class TestWithKeywordBackend:
    def test_good_answer_covers_core_points(self):
        claims = [
            "A stack is LIFO",
            "Push adds an element to the top",
            "Pop removes the element from the top",
        ]
        result = ClaimMatcher(KeywordSimilarity()).match(claims, [], normalize_rubric(RUBRIC))
        assert result.must_have.counts()["missing"] == 0
