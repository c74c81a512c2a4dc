"""Shared state definitions for the LangGraph interview workflow.

The graph state is deliberately thin.  Everything the policy needs
lives in ``session`` (a ``SessionState.to_dict()`` snapshot); the graph
only adds the chat history, the latest raw answer and per-turn records.
"""

from __future__ import annotations

from typing import Any, TypedDict

from langgraph.graph import MessagesState


class TurnRecord(TypedDict, total=False):
    """Record of a single answered question for session logging."""

    turn_number: int
    timestamp: str  # ISO 8601
    question_id: str
    question_text: str
    is_follow_up: bool
    ai_message: str
    user_message: str
    evaluation: dict[str, Any]  # Evaluation.to_dict()
    decision: dict[str, Any]  # PolicyDecision.to_dict()


class InterviewState(MessagesState):
    """Full shared state for the interview workflow.

    Extends MessagesState (which provides `messages: list[AnyMessage]`
    with the `add_messages` reducer) with session-specific fields.
    """

    # --- Session identity ---
    session_id: str

    # --- Core session snapshot (owned by SessionStateMachine) ---
    session: dict[str, Any]

    # --- Human input (set by interrupt/resume) ---
    user_input: str

    # --- Per-turn data ---
    last_evaluation: dict[str, Any]  # most recent Evaluation.to_dict()
    turn_records: list[TurnRecord]  # accumulated (overwrite)

    # --- Output ---
    summary: dict[str, Any]  # final report, set by finalize

    # --- Control flow ---
    done: bool  # True once the session is terminal
