"""LangGraph workflow — wires the interviewer, evaluator and session policy.

Flow:
    START → router → start → router → interviewer → human_turn → evaluate → router → …
                  ↘ finalize → END   (once the session is completed or abandoned)

The human_turn node uses LangGraph's `interrupt()` to pause execution
and wait for the candidate's answer, which the CLI / web runner resumes
via `Command(resume=...)`.

All policy state lives in the ``session`` snapshot; every node that
changes it rebuilds a ``SessionStateMachine`` around the snapshot and
writes the new snapshot back.
"""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Any

from langchain_core.messages import AIMessage, HumanMessage
from langgraph.checkpoint.memory import MemorySaver
from langgraph.graph import END, START, StateGraph
from langgraph.types import Command, interrupt

import interview_eval.settings as settings
from interview_eval.agents.evaluator import AnswerEvaluator
from interview_eval.agents.interviewer import generate_follow_up, interviewer_node
from interview_eval.errors import ValidationError
from interview_eval.models.session import SessionState
from interview_eval.models.state import InterviewState, TurnRecord
from interview_eval.questions.bank import LocalQuestionBank
from interview_eval.scoring.formula import round_half_up
from interview_eval.session.logger import SessionLogger
from interview_eval.session.state_machine import (
    FollowUpBuilder,
    QuestionSelector,
    SessionStateMachine,
)

logger = logging.getLogger(__name__)

# Resume value that ends the session early (CLI "quit")
ABANDON_SIGNAL = "__abandon__"


# ── Graph nodes ───────────────────────────────────────────────────────────


def router(state: InterviewState) -> Command:
    """Route to finalize, start, or the next interviewer turn."""
    session = state.get("session") or {}
    terminal = session.get("status", "active") != "active"

    if state.get("done", False) or terminal:
        return Command(update={"done": True}, goto="finalize")
    if not session.get("current_question"):
        return Command(goto="start")
    return Command(goto="interviewer")


def start_session(state: InterviewState, selector: QuestionSelector) -> dict:
    """Select the first question."""
    machine = SessionStateMachine(SessionState.from_dict(state["session"]), selector)
    machine.start()
    return {"session": machine.state.to_dict()}


def human_turn(state: InterviewState) -> dict:
    """Pause execution and wait for user input via interrupt()."""
    user_input: str = interrupt("Waiting for candidate answer…")
    return {"user_input": user_input}


def _last_ai_text(state: InterviewState) -> str:
    for msg in reversed(state.get("messages", [])):
        if getattr(msg, "type", "") == "ai":
            return msg.content
    return ""


def evaluate_answer(
    state: InterviewState,
    evaluator: AnswerEvaluator,
    selector: QuestionSelector,
    follow_up_builder: FollowUpBuilder | None = None,
) -> dict:
    """Score the answer, apply the policy and record the turn.

    A rubric that fails validation gets the placeholder evaluation so
    the interview keeps moving.
    """
    session = SessionState.from_dict(state["session"])
    machine = SessionStateMachine(session, selector, follow_up_builder=follow_up_builder)
    answer: str = state.get("user_input", "")

    if answer == ABANDON_SIGNAL:
        machine.abandon()
        return {"session": machine.state.to_dict(), "done": True}

    question = session.current_question
    try:
        evaluation = evaluator.evaluate(question, answer)
    except ValidationError as e:
        logger.warning("Rubric for %s is invalid, using placeholder: %s", question.id, e)
        evaluation = evaluator.placeholder()

    transition = machine.submit(evaluation)

    record: TurnRecord = {
        "turn_number": machine.state.question_number,
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "question_id": question.id,
        "question_text": question.text,
        "is_follow_up": question.is_follow_up,
        "ai_message": _last_ai_text(state),
        "user_message": answer,
        "evaluation": evaluation.to_dict(),
        "decision": transition.decision.to_dict(),
    }
    return {
        "messages": [HumanMessage(content=answer)],
        "session": machine.state.to_dict(),
        "last_evaluation": evaluation.to_dict(),
        "turn_records": state.get("turn_records", []) + [record],
        "done": machine.state.is_terminal,
    }


def build_summary(state: InterviewState) -> dict[str, Any]:
    session = SessionState.from_dict(state["session"])
    records = state.get("turn_records", [])
    scores = [r["evaluation"]["score"] for r in records]
    return {
        "session_id": session.session_id,
        "domain": session.domain,
        "status": session.status.value,
        "end_reason": session.end_reason,
        "questions_answered": session.question_number,
        "average_score": round_half_up(sum(scores) / len(scores), 1) if scores else None,
        "final_difficulty": session.current_difficulty.value,
        "topics": list(session.asked_topics),
        "follow_ups": len(session.follow_up_links),
        "scores": [
            {
                "question_id": r["question_id"],
                "score": r["evaluation"]["score"],
                "grade": r["evaluation"]["grade"],
            }
            for r in records
        ],
    }


def _summary_text(summary: dict[str, Any]) -> str:
    lines = ["## Interview Complete\n"]
    for item in summary["scores"]:
        lines.append(f"- {item['question_id']}: {item['score']:.1f}/10 ({item['grade']})")
    avg = summary["average_score"]
    lines.append(f"\n**Average score**: {avg:.1f}/10" if avg is not None else "\nNo answers scored.")
    lines.append(f"**Questions answered**: {summary['questions_answered']}")
    lines.append(f"**Ended**: {summary['end_reason']}")
    return "\n".join(lines)


def finalize(state: InterviewState) -> dict:
    """Summarize the session and write its JSON log."""
    summary = build_summary(state)

    session_log = SessionLogger(summary["session_id"], summary["domain"])
    for record in state.get("turn_records", []):
        session_log.log_turn(
            turn_number=record["turn_number"],
            question={"id": record["question_id"], "text": record["question_text"]},
            ai_message=record["ai_message"],
            user_message=record["user_message"],
            evaluation=record["evaluation"],
            decision=record["decision"],
        )
    session_log.set_metadata("session", state["session"])
    session_log.log_summary(summary)
    try:
        path = session_log.save()
        logger.info("%s (log: %s)", session_log.summary(), path)
    except OSError as e:
        logger.warning("Could not write session log: %s", e)

    return {
        "summary": summary,
        "done": True,
        "messages": [AIMessage(content=_summary_text(summary))],
    }


# ── Build the graph ───────────────────────────────────────────────────────


def build_graph(
    *,
    selector: QuestionSelector | None = None,
    evaluator: AnswerEvaluator | None = None,
    follow_up_builder: FollowUpBuilder | None = generate_follow_up,
    checkpointer=None,
):
    """Construct and compile the interview StateGraph."""
    selector = selector or LocalQuestionBank()
    evaluator = evaluator or AnswerEvaluator()

    graph = StateGraph(InterviewState)

    graph.add_node("router", router)
    graph.add_node("start", lambda state: start_session(state, selector))
    graph.add_node("interviewer", interviewer_node)
    graph.add_node("human_turn", human_turn)
    graph.add_node(
        "evaluate",
        lambda state: evaluate_answer(state, evaluator, selector, follow_up_builder),
    )
    graph.add_node("finalize", finalize)

    graph.add_edge(START, "router")
    # router uses Command to go to "start", "interviewer" or "finalize"
    graph.add_edge("start", "router")
    graph.add_edge("interviewer", "human_turn")
    graph.add_edge("human_turn", "evaluate")
    graph.add_edge("evaluate", "router")
    graph.add_edge("finalize", END)

    logger.debug("Interview graph built (max %d questions)", settings.MAX_QUESTIONS)
    return graph.compile(checkpointer=checkpointer or MemorySaver())
