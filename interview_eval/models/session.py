"""Session state owned by the ``SessionStateMachine``.

The state is a plain mutable dataclass so it can be unit-tested without
any storage.  ``to_dict`` / ``from_dict`` give a JSON-safe snapshot used
by the LangGraph checkpointer and the session logs.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any

from interview_eval.models.question import Question
from interview_eval.scoring.formula import round_half_up


class Difficulty(str, Enum):
    EASY = "Easy"
    MEDIUM = "Medium"
    HARD = "Hard"


class SessionStatus(str, Enum):
    ACTIVE = "active"
    COMPLETED = "completed"
    ABANDONED = "abandoned"


class PolicyAction(str, Enum):
    CONTINUE = "continue"
    FOLLOW_UP = "follow_up"
    INCREASE_DIFFICULTY = "increase_difficulty"
    DECREASE_DIFFICULTY = "decrease_difficulty"
    SWITCH_TOPIC = "switch_topic"
    END_SESSION = "end_session"


@dataclass(frozen=True)
class PolicyDecision:
    action: PolicyAction
    reason: str
    focus_points: tuple[str, ...] = ()

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {"action": self.action.value, "reason": self.reason}
        if self.focus_points:
            data["focus_points"] = list(self.focus_points)
        return data

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> PolicyDecision:
        return cls(
            action=PolicyAction(data["action"]),
            reason=data.get("reason", ""),
            focus_points=tuple(data.get("focus_points", ())),
        )


def _now() -> str:
    return datetime.now(timezone.utc).isoformat()


@dataclass
class SessionState:
    """Mutable per-session counters and history."""

    session_id: str
    domain: str
    current_difficulty: Difficulty = Difficulty.MEDIUM
    current_topic: str | None = None
    current_question: Question | None = None
    question_number: int = 0
    follow_up_depth: int = 0
    recent_scores: list[dict[str, Any]] = field(default_factory=list)  # newest first
    consecutive_low_score_count: int = 0
    asked_question_ids: list[str] = field(default_factory=list)
    asked_topics: list[str] = field(default_factory=list)
    follow_up_links: list[dict[str, Any]] = field(default_factory=list)
    last_policy_decision: PolicyDecision | None = None
    status: SessionStatus = SessionStatus.ACTIVE
    end_reason: str | None = None
    started_at: str = field(default_factory=_now)
    ended_at: str | None = None

    @property
    def is_terminal(self) -> bool:
        return self.status is not SessionStatus.ACTIVE

    @property
    def average_score(self) -> float | None:
        if not self.recent_scores:
            return None
        total = sum(float(r["score"]) for r in self.recent_scores)
        return round_half_up(total / len(self.recent_scores), 1)

    def public_view(self, max_questions: int) -> dict[str, Any]:
        """Subset that is safe to show to the candidate."""
        return {
            "question_number": self.question_number,
            "current_difficulty": self.current_difficulty.value,
            "current_topic": self.current_topic,
            "questions_remaining": max(0, max_questions - self.question_number),
            "follow_up_depth": self.follow_up_depth,
            "average_score": self.average_score,
            "status": self.status.value,
        }

    def to_dict(self) -> dict[str, Any]:
        return {
            "session_id": self.session_id,
            "domain": self.domain,
            "current_difficulty": self.current_difficulty.value,
            "current_topic": self.current_topic,
            "current_question": (
                self.current_question.to_dict() if self.current_question else None
            ),
            "question_number": self.question_number,
            "follow_up_depth": self.follow_up_depth,
            "recent_scores": [dict(r) for r in self.recent_scores],
            "consecutive_low_score_count": self.consecutive_low_score_count,
            "asked_question_ids": list(self.asked_question_ids),
            "asked_topics": list(self.asked_topics),
            "follow_up_links": [dict(link) for link in self.follow_up_links],
            "last_policy_decision": (
                self.last_policy_decision.to_dict() if self.last_policy_decision else None
            ),
            "status": self.status.value,
            "end_reason": self.end_reason,
            "started_at": self.started_at,
            "ended_at": self.ended_at,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> SessionState:
        question = data.get("current_question")
        decision = data.get("last_policy_decision")
        return cls(
            session_id=data["session_id"],
            domain=data["domain"],
            current_difficulty=Difficulty(data.get("current_difficulty", "Medium")),
            current_topic=data.get("current_topic"),
            current_question=Question.from_dict(question) if question else None,
            question_number=int(data.get("question_number", 0)),
            follow_up_depth=int(data.get("follow_up_depth", 0)),
            recent_scores=[dict(r) for r in data.get("recent_scores", [])],
            consecutive_low_score_count=int(data.get("consecutive_low_score_count", 0)),
            asked_question_ids=list(data.get("asked_question_ids", [])),
            asked_topics=list(data.get("asked_topics", [])),
            follow_up_links=[dict(link) for link in data.get("follow_up_links", [])],
            last_policy_decision=PolicyDecision.from_dict(decision) if decision else None,
            status=SessionStatus(data.get("status", "active")),
            end_reason=data.get("end_reason"),
            started_at=data.get("started_at") or _now(),
            ended_at=data.get("ended_at"),
        )


def new_session_state(
    session_id: str,
    domain: str,
    difficulty: str | Difficulty = Difficulty.MEDIUM,
) -> SessionState:
    """Return a fresh session with every counter zeroed."""
    return SessionState(
        session_id=session_id,
        domain=domain,
        current_difficulty=Difficulty(difficulty),
    )
