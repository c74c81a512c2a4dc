"""FastAPI backend for the interview coaching web interface."""

from __future__ import annotations

import logging
import os
import uuid
from typing import Any

from dotenv import load_dotenv
from fastapi import FastAPI, HTTPException, Request
from fastapi.responses import JSONResponse
from langgraph.types import Command
from pydantic import BaseModel, Field

import interview_eval.settings as settings
from interview_eval.agents.evaluator import AnswerEvaluator
from interview_eval.errors import InvalidState, ValidationError
from interview_eval.logging_config import setup_logging
from interview_eval.models.initial_state import new_interview_state
from interview_eval.models.question import Question
from interview_eval.models.session import Difficulty, SessionState
from interview_eval.policy.engine import PolicyEngine
from interview_eval.questions.bank import LocalQuestionBank
from interview_eval.session.registry import SessionLocks
from interview_eval.workflow import build_graph

load_dotenv()
setup_logging()

# Hosting dashboards sometimes store env values with trailing whitespace after copy/paste.
for key in ("OPENAI_API_KEY", "GROQ_API_KEY"):
    value = os.environ.get(key)
    if value:
        os.environ[key] = value.strip()

logger = logging.getLogger(__name__)

app = FastAPI(title="Interview Coach", version="0.3.0")
bank = LocalQuestionBank()
evaluator = AnswerEvaluator()
graph = build_graph(selector=bank, evaluator=evaluator)
session_locks = SessionLocks()
MAX_MESSAGE_CHARS = 4000


# ── Request logging middleware ────────────────────────────────────────────

@app.middleware("http")
async def log_requests(request: Request, call_next):
    """Log every request with method, path, and response time."""
    import time

    request_id = uuid.uuid4().hex[:8]
    start = time.perf_counter()
    response = await call_next(request)
    elapsed_ms = (time.perf_counter() - start) * 1000
    logger.info(
        "%s %s -> %s (%.0fms) [rid=%s]",
        request.method,
        request.url.path,
        response.status_code,
        elapsed_ms,
        request_id,
    )
    response.headers["X-Request-ID"] = request_id
    return response


# ── Error mapping ─────────────────────────────────────────────────────────

@app.exception_handler(ValidationError)
async def rubric_validation_error(_request: Request, exc: ValidationError) -> JSONResponse:
    return JSONResponse(
        status_code=422,
        content={"detail": str(exc), "errors": exc.errors},
    )


@app.exception_handler(InvalidState)
async def invalid_state_error(_request: Request, exc: InvalidState) -> JSONResponse:
    return JSONResponse(status_code=409, content={"detail": str(exc)})


# ── Health check ──────────────────────────────────────────────────────────

@app.get("/health")
def health_check() -> JSONResponse:
    """Lightweight health probe for deployment platforms."""
    return JSONResponse({"status": "ok"})


# ── Models ────────────────────────────────────────────────────────────────

class StartRequest(BaseModel):
    domain: str = "DSA"
    difficulty: Difficulty = Difficulty.MEDIUM


class RespondRequest(BaseModel):
    session_id: str = Field(
        ...,
        min_length=1,
        max_length=64,
        pattern=r"^[A-Za-z0-9_-]+$",
    )
    message: str


class RubricModel(BaseModel):
    must_have: list[str] = Field(default_factory=list)
    good_to_have: list[str] = Field(default_factory=list)
    red_flags: list[str] = Field(default_factory=list)


class EvaluateRequest(BaseModel):
    question: str = Field(..., min_length=1)
    answer: str
    rubric: RubricModel | None = None
    domain: str = "General"
    topic: str = "general"
    difficulty: Difficulty = Difficulty.MEDIUM


class MessageResponse(BaseModel):
    session_id: str
    ai_message: str
    status: str
    question_number: int
    max_questions: int
    session: dict[str, Any]
    last_evaluation: dict[str, Any] | None = None
    summary: dict[str, Any] | None = None


def _extract_response(result: dict[str, Any], session_id: str) -> MessageResponse:
    """Build API response from graph state."""
    messages = result.get("messages", [])
    last_ai = messages[-1].content if messages else ""
    state = SessionState.from_dict(result["session"])
    is_complete = bool(result.get("done"))

    return MessageResponse(
        session_id=session_id,
        ai_message=last_ai,
        status="complete" if is_complete else "in-progress",
        question_number=state.question_number,
        max_questions=settings.MAX_QUESTIONS,
        session=state.public_view(settings.MAX_QUESTIONS),
        last_evaluation=result.get("last_evaluation") or None,
        summary=result.get("summary") if is_complete else None,
    )


# ── Routes ────────────────────────────────────────────────────────────────

@app.post("/api/start", response_model=MessageResponse)
def start_session(req: StartRequest | None = None) -> MessageResponse:
    """Start a new interview session."""
    req = req or StartRequest()
    if req.domain not in bank.list_domains():
        raise HTTPException(status_code=400, detail=f"Unknown domain: {req.domain}")

    session_id = str(uuid.uuid4())[:8]
    config = {"configurable": {"thread_id": session_id}}
    initial_state = new_interview_state(session_id, req.domain, req.difficulty)

    with session_locks.hold(session_id):
        result = graph.invoke(initial_state, config)
    return _extract_response(result, session_id)


@app.post("/api/respond", response_model=MessageResponse)
def respond(req: RespondRequest) -> MessageResponse:
    """Send a candidate answer and return the next state."""
    user_message = req.message.strip()
    if not user_message:
        raise HTTPException(status_code=400, detail="Message cannot be empty.")
    if len(user_message) > MAX_MESSAGE_CHARS:
        raise HTTPException(
            status_code=400,
            detail=f"Message too long. Maximum length is {MAX_MESSAGE_CHARS} characters.",
        )

    config = {"configurable": {"thread_id": req.session_id}}

    with session_locks.hold(req.session_id):
        snapshot = graph.get_state(config)
        values = snapshot.values if snapshot else {}
        if not values:
            raise HTTPException(status_code=404, detail="Unknown session.")
        if values.get("done"):
            raise InvalidState(f"Session {req.session_id} is already complete")

        try:
            result = graph.invoke(Command(resume=user_message), config)
        except InvalidState:
            raise
        except Exception:
            logger.exception("Failed to resume session %s", req.session_id)
            raise HTTPException(
                status_code=400,
                detail="Unable to continue this session. Start a new session and try again.",
            ) from None

    if result.get("done"):
        session_locks.discard(req.session_id)
    return _extract_response(result, req.session_id)


@app.post("/api/evaluate")
def evaluate(req: EvaluateRequest) -> dict[str, Any]:
    """Score one answer against a rubric without a session."""
    question = Question(
        id="adhoc",
        domain=req.domain,
        topic=req.topic,
        difficulty=req.difficulty.value,
        text=req.question,
        rubric=req.rubric.model_dump() if req.rubric else None,
    )
    return evaluator.evaluate(question, req.answer).to_dict()


@app.get("/api/policy/rules")
def policy_rules() -> dict[str, Any]:
    """Thresholds and rule order used to pick the next action."""
    return PolicyEngine().describe_rules()


if __name__ == "__main__":
    import uvicorn

    port = int(os.getenv("PORT", "8080"))
    print(f"Starting web interface on http://localhost:{port}")
    uvicorn.run(app, host="0.0.0.0", port=port)
