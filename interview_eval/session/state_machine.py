"""SessionStateMachine: the only writer of a ``SessionState``.

Each answer cycle:
  1. record the score (newest first, capped) and the low-score streak
  2. advance ``question_number``
  3. ask the ``PolicyEngine`` for a decision
  4. apply it: follow-up, difficulty change, topic switch, continue or end

A selector that has nothing left ends the session with
"No more questions available" instead of raising.  Every public method
holds the machine's lock, so two requests for the same session cannot
interleave their updates.
"""

from __future__ import annotations

import logging
import threading
from collections.abc import Callable, Sequence
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Protocol

import interview_eval.settings as settings
from interview_eval.errors import InvalidState, NoCandidateQuestion
from interview_eval.models.evaluation import Evaluation
from interview_eval.models.question import Question
from interview_eval.models.session import (
    PolicyAction,
    PolicyDecision,
    SessionState,
    SessionStatus,
)
from interview_eval.policy.engine import REASON_NO_QUESTIONS, PolicyContext, PolicyEngine
from interview_eval.questions.follow_up import template_follow_up

logger = logging.getLogger(__name__)

FollowUpBuilder = Callable[[Question, Sequence[str], int], Question]


class QuestionSelector(Protocol):
    def select_next(
        self,
        domain: str,
        topic: str | None,
        difficulty: str,
        exclude_ids: Sequence[str],
        *,
        avoid_topics: Sequence[str] = (),
        recent_topics: Sequence[str] = (),
    ) -> Question | None: ...


@dataclass(frozen=True)
class Transition:
    decision: PolicyDecision
    next_question: Question | None

    @property
    def ended(self) -> bool:
        return self.next_question is None


class SessionStateMachine:
    def __init__(
        self,
        state: SessionState,
        selector: QuestionSelector,
        policy: PolicyEngine | None = None,
        follow_up_builder: FollowUpBuilder | None = None,
    ):
        self.state = state
        self.selector = selector
        self.policy = policy or PolicyEngine()
        self.follow_up_builder = follow_up_builder or template_follow_up
        self._lock = threading.RLock()

    # ── Public API ────────────────────────────────────────────────────────

    def start(self) -> Transition:
        """Select the first question (idempotent once a question is set)."""
        with self._lock:
            self._require_active()
            if self.state.current_question is not None:
                return Transition(
                    self.state.last_policy_decision
                    or PolicyDecision(PolicyAction.CONTINUE, "Session in progress"),
                    self.state.current_question,
                )

            question = self._select(topic=self.state.current_topic)
            if question is None:
                return self._end_no_questions()

            self._set_current(question)
            logger.info(
                "Session %s started: %s (%s, %s)",
                self.state.session_id,
                question.id,
                question.topic,
                question.difficulty,
            )
            return Transition(
                PolicyDecision(PolicyAction.CONTINUE, "Session started"), question
            )

    def submit(self, evaluation: Evaluation) -> Transition:
        """Apply one evaluated answer to the session.

        Raises:
            InvalidState: the session is terminal or has no open question.
        """
        with self._lock:
            self._require_active()
            current = self.state.current_question
            if current is None:
                raise InvalidState("No question is awaiting an answer")

            score = evaluation.final_score
            self._record_score(current.topic, score)

            decision = self.policy.decide(
                PolicyContext(
                    last_score=score,
                    follow_up_depth=self.state.follow_up_depth,
                    consecutive_low_scores=self.state.consecutive_low_score_count,
                    questions_asked=self.state.question_number,
                    missing_core_points=tuple(evaluation.missing_core_points),
                    wrong_claims=tuple(evaluation.wrong_claims),
                )
            )
            logger.info(
                "Session %s Q%d score=%.1f -> %s (%s)",
                self.state.session_id,
                self.state.question_number,
                score,
                decision.action.value,
                decision.reason,
            )
            return self._apply(decision, current)

    def abandon(self, reason: str = "Abandoned by candidate") -> Transition:
        with self._lock:
            self._require_active()
            decision = PolicyDecision(PolicyAction.END_SESSION, reason)
            self._end(SessionStatus.ABANDONED, decision)
            return Transition(decision, None)

    # ── Transition helpers ────────────────────────────────────────────────

    def _require_active(self) -> None:
        if self.state.is_terminal:
            raise InvalidState(
                f"Session {self.state.session_id} is {self.state.status.value}"
            )

    def _record_score(self, topic: str, score: float) -> None:
        state = self.state
        state.recent_scores.insert(0, {"topic": topic, "score": score})
        del state.recent_scores[settings.RECENT_SCORES_LIMIT:]
        if score < settings.LOW_SCORE_THRESHOLD:
            state.consecutive_low_score_count += 1
        else:
            state.consecutive_low_score_count = 0
        state.question_number += 1

    def _apply(self, decision: PolicyDecision, current: Question) -> Transition:
        state = self.state
        action = decision.action

        if action is PolicyAction.END_SESSION:
            self._end(SessionStatus.COMPLETED, decision)
            return Transition(decision, None)

        if action is PolicyAction.FOLLOW_UP:
            state.follow_up_depth += 1
            follow_up = self.follow_up_builder(
                current, list(decision.focus_points), state.follow_up_depth
            )
            state.follow_up_links.append(
                {
                    "follow_up_id": follow_up.id,
                    "parent_id": current.id,
                    "depth": state.follow_up_depth,
                }
            )
            state.current_question = follow_up
            state.last_policy_decision = decision
            return Transition(decision, follow_up)

        avoid: tuple[str, ...] = ()
        if action in (PolicyAction.INCREASE_DIFFICULTY, PolicyAction.DECREASE_DIFFICULTY):
            state.current_difficulty = self.policy.adjust_difficulty(
                state.current_difficulty, action
            )
        elif action is PolicyAction.SWITCH_TOPIC:
            if state.current_topic:
                avoid = (state.current_topic,)
            state.current_topic = None
            state.consecutive_low_score_count = 0

        state.follow_up_depth = 0
        question = self._select(topic=state.current_topic, avoid_topics=avoid)
        if question is None:
            return self._end_no_questions()

        self._set_current(question)
        state.last_policy_decision = decision
        return Transition(decision, question)

    def _select(
        self,
        topic: str | None,
        avoid_topics: Sequence[str] = (),
    ) -> Question | None:
        state = self.state
        try:
            return self.selector.select_next(
                state.domain,
                topic,
                state.current_difficulty.value,
                list(state.asked_question_ids),
                avoid_topics=tuple(avoid_topics),
                recent_topics=tuple(state.asked_topics),
            )
        except NoCandidateQuestion as e:
            logger.info("Selector has no candidate: %s", e)
            return None

    def _set_current(self, question: Question) -> None:
        state = self.state
        state.current_question = question
        state.current_topic = question.topic
        state.asked_question_ids.append(question.id)
        # asked_topics stays distinct, oldest first
        if question.topic in state.asked_topics:
            state.asked_topics.remove(question.topic)
        state.asked_topics.append(question.topic)

    def _end_no_questions(self) -> Transition:
        decision = PolicyDecision(PolicyAction.END_SESSION, REASON_NO_QUESTIONS)
        self._end(SessionStatus.COMPLETED, decision)
        return Transition(decision, None)

    def _end(self, status: SessionStatus, decision: PolicyDecision) -> None:
        state = self.state
        state.status = status
        state.end_reason = decision.reason
        state.last_policy_decision = decision
        state.current_question = None
        state.ended_at = datetime.now(timezone.utc).isoformat()
        logger.info(
            "Session %s %s: %s", state.session_id, status.value, decision.reason
        )
