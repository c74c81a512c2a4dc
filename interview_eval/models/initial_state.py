"""Factory helpers for creating workflow state payloads."""

from __future__ import annotations

from typing import Any

from interview_eval.models.session import Difficulty, new_session_state


def new_interview_state(
    session_id: str,
    domain: str,
    difficulty: str | Difficulty = Difficulty.MEDIUM,
) -> dict[str, Any]:
    """Return a fresh interview state dict used by CLI and web entrypoints."""
    return {
        "session_id": session_id,
        "session": new_session_state(session_id, domain, difficulty).to_dict(),
        "user_input": "",
        "last_evaluation": {},
        "turn_records": [],
        "summary": {},
        "done": False,
    }
