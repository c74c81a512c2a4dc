"""ClaimMatcher: classify rubric coverage and detect red flags.

Must-have and good-to-have points are compared with the combined claim
text.  Red flags are compared with each wrong claim on its own, so a
single wrong statement is enough to trigger one.
"""

from __future__ import annotations

import logging

import interview_eval.settings as settings
from interview_eval.errors import DependencyFailure
from interview_eval.models.evaluation import MatchResult, MatchSet, TriggeredRedFlag
from interview_eval.models.rubric import PointType, RubricPoint
from interview_eval.rubric.normalizer import points_of_type
from interview_eval.scoring.similarity import Similarity

logger = logging.getLogger(__name__)


class ClaimMatcher:
    def __init__(self, similarity: Similarity):
        self.similarity = similarity

    def _score(self, text_a: str, text_b: str, match_set: MatchSet) -> float:
        """Similarity clamped to [0, 1]; a failing backend counts as no match."""
        try:
            value = float(self.similarity.similarity(text_a, text_b))
        except DependencyFailure as e:
            logger.warning("Similarity unavailable, treating as no match: %s", e)
            match_set.degraded = True
            return 0.0
        return max(0.0, min(1.0, value))

    def match(
        self,
        claims: list[str],
        wrong_claims: list[str],
        points: list[RubricPoint],
    ) -> MatchSet:
        match_set = MatchSet()
        combined = ". ".join(c for c in claims if c.strip())

        for point in points:
            if point.type is PointType.RED_FLAG:
                continue
            similarity = self._score(combined, point.text, match_set) if combined else 0.0
            coverage = settings.classify_coverage(similarity)
            match_set.details.append(MatchResult(point, similarity, coverage))
            bucket = (
                match_set.must_have
                if point.type is PointType.MUST_HAVE
                else match_set.good_to_have
            )
            bucket.add(point, coverage)

        red_flags = points_of_type(points, PointType.RED_FLAG)
        for flag in red_flags:
            best: TriggeredRedFlag | None = None
            for claim in wrong_claims:
                if not claim.strip():
                    continue
                similarity = self._score(claim, flag.text, match_set)
                if similarity < settings.PARTIAL_THRESHOLD:
                    continue
                if best is None or similarity > best.similarity:
                    best = TriggeredRedFlag(flag.text, claim, similarity)
            if best is not None:
                match_set.triggered_red_flags.append(best)

        logger.debug(
            "Matched %d points: must_have=%s good_to_have=%s red_flags=%d",
            len(match_set.details),
            match_set.must_have.counts(),
            match_set.good_to_have.counts(),
            len(match_set.triggered_red_flags),
        )
        return match_set
