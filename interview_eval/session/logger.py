"""Session logger — structured JSON transcript of each interview session.

Captures everything needed to review or replay a session:
  - Per-turn: timestamp, question, interviewer prompt, answer,
    evaluation and the policy decision that followed
  - Session-level: final session state and summary, metadata
  - Saved as a JSON file per session

Output directory: data/sessions/
File format: {session_id}_{timestamp}.json
"""

from __future__ import annotations

import json
from datetime import datetime, timezone
from pathlib import Path
from typing import Any

import interview_eval.settings as settings
from interview_eval.paths import SESSIONS_DIR


def _sessions_dir() -> Path:
    SESSIONS_DIR.mkdir(parents=True, exist_ok=True)
    return SESSIONS_DIR


class SessionLogger:
    """Accumulates session data and writes a structured JSON log.

    Usage:
        log = SessionLogger(session_id="abc123", domain="DBMS")
        log.log_turn(
            turn_number=1,
            question=question,
            ai_message="What is normalization?",
            user_message="Normalization removes redundancy...",
            evaluation=evaluation.to_dict(),
            decision=transition.decision.to_dict(),
        )
        ...
        log.log_summary(summary)
        log.save()
    """

    def __init__(self, session_id: str, domain: str = ""):
        self.session_id = session_id
        self.started_at = datetime.now(timezone.utc).isoformat()
        self.completed_at: str | None = None
        self.turns: list[dict[str, Any]] = []
        self.final_summary: dict[str, Any] = {}
        self.metadata: dict[str, Any] = {
            "domain": domain,
            "llm_providers": list(settings.LLM_PROVIDERS),
            "chat_model": settings.LLM_MODEL_NAME,
            "similarity_backend": settings.SIMILARITY_BACKEND,
        }

    def log_turn(
        self,
        turn_number: int,
        question: dict[str, Any] | None,
        ai_message: str,
        user_message: str,
        evaluation: dict[str, Any] | None = None,
        decision: dict[str, Any] | None = None,
    ) -> None:
        """Record a single answered question.

        Parameters
        ----------
        turn_number : int
            The 1-based answer index.
        question : dict, optional
            ``Question.to_dict()`` of the question that was answered.
        ai_message : str
            The interviewer's message as shown to the candidate.
        user_message : str
            The candidate's answer.
        evaluation : dict, optional
            ``Evaluation.to_dict()`` for the answer.
        decision : dict, optional
            ``PolicyDecision.to_dict()`` applied after the answer.
        """
        self.turns.append(
            {
                "turn_number": turn_number,
                "timestamp": datetime.now(timezone.utc).isoformat(),
                "question_id": question.get("id") if question else None,
                "question": question,
                "ai_message": ai_message,
                "user_message": user_message,
                "evaluation": evaluation,
                "decision": decision,
            }
        )

    def log_summary(self, summary: dict[str, Any]) -> None:
        """Record the end-of-session summary and mark the log complete."""
        self.final_summary = summary
        self.completed_at = datetime.now(timezone.utc).isoformat()

    def set_metadata(self, key: str, value: Any) -> None:
        """Add arbitrary metadata to the session log."""
        self.metadata[key] = value

    def to_dict(self) -> dict[str, Any]:
        """Serialize the full session log to a dictionary."""
        return {
            "session_id": self.session_id,
            "started_at": self.started_at,
            "completed_at": self.completed_at,
            "metadata": self.metadata,
            "total_turns": len(self.turns),
            "turns": self.turns,
            "summary": self.final_summary,
        }

    def save(self) -> Path:
        """Write the session log to a JSON file.

        Returns
        -------
        Path
            Absolute path to the saved log file.
        """
        directory = _sessions_dir()

        if self.completed_at is None:
            self.completed_at = datetime.now(timezone.utc).isoformat()

        timestamp = datetime.now(timezone.utc).strftime("%Y%m%d_%H%M%S")
        filepath = directory / f"{self.session_id}_{timestamp}.json"

        with open(filepath, "w", encoding="utf-8") as f:
            json.dump(self.to_dict(), f, indent=2, ensure_ascii=False)

        return filepath

    def summary(self) -> str:
        """One-line summary of the session."""
        avg = self.final_summary.get("average_score", "?")
        reason = self.final_summary.get("end_reason", "?")
        return (
            f"Session {self.session_id}: {len(self.turns)} answers, "
            f"average={avg}, ended: {reason}"
        )


def load_session(filepath: str | Path) -> dict[str, Any]:
    """Load a session log from a JSON file."""
    with open(filepath, encoding="utf-8") as f:
        return json.load(f)


def list_sessions() -> list[Path]:
    """List all session log files, newest first."""
    files = list(_sessions_dir().glob("*.json"))
    return sorted(files, key=lambda p: p.stat().st_mtime, reverse=True)
