"""API tests for the FastAPI web entrypoint."""

from __future__ import annotations

from dataclasses import dataclass, field
from types import SimpleNamespace
from typing import Any

import pytest
from fastapi.testclient import TestClient

import web.app as web_app
from interview_eval.agents.evaluator import AnswerEvaluator
from interview_eval.models.session import new_session_state
from interview_eval.scoring.similarity import KeywordSimilarity

RUBRIC = {
    "must_have": [
        "A process has its own address space",
        "Threads share the process memory",
        "Context switching threads is cheaper",
    ],
    "good_to_have": ["Threads need synchronization"],
    "red_flags": ["Threads have separate address spaces"],
}


def _session(question_number: int = 0, status: str = "active") -> dict[str, Any]:
    state = new_session_state("abc12345", "OS")
    state.question_number = question_number
    state.current_topic = "os.processes"
    data = state.to_dict()
    data["status"] = status
    return data


@dataclass
class FakeGraph:
    """Small graph stub for API route tests."""

    fail_on_resume: bool = False
    complete_on_resume: bool = False
    known_session: bool = True
    already_done: bool = False
    resumed: list[Any] = field(default_factory=list)

    def invoke(self, payload: Any, _config: dict) -> dict[str, Any]:
        is_start_call = isinstance(payload, dict)
        if is_start_call:
            return {
                "messages": [SimpleNamespace(content="Welcome! What is a process?")],
                "session": _session(),
                "done": False,
            }

        self.resumed.append(payload.resume)
        if self.fail_on_resume:
            raise RuntimeError("resume failed")

        if self.complete_on_resume:
            return {
                "messages": [SimpleNamespace(content="## Interview Complete")],
                "session": _session(10, "completed"),
                "last_evaluation": {"score": 8.0, "grade": "A"},
                "summary": {"average_score": 7.2, "end_reason": "Maximum question limit reached"},
                "done": True,
            }
        return {
            "messages": [SimpleNamespace(content="Thanks. What is a thread?")],
            "session": _session(1),
            "last_evaluation": {"score": 6.5, "grade": "B"},
            "done": False,
        }

    def get_state(self, _config: dict) -> SimpleNamespace:
        if not self.known_session:
            return SimpleNamespace(values={})
        return SimpleNamespace(values={"session": _session(), "done": self.already_done})


@pytest.fixture
def client_with_fake_graph(monkeypatch):
    fake = FakeGraph()
    monkeypatch.setattr(web_app, "graph", fake)
    return TestClient(web_app.app), fake


def test_health(client_with_fake_graph):
    client, _ = client_with_fake_graph
    assert client.get("/health").json() == {"status": "ok"}


def test_start_session_returns_initial_ai_prompt(client_with_fake_graph):
    client, _ = client_with_fake_graph
    res = client.post("/api/start", json={"domain": "OS", "difficulty": "Easy"})
    data = res.json()

    assert res.status_code == 200
    assert data["status"] == "in-progress"
    assert data["session_id"]
    assert data["ai_message"] == "Welcome! What is a process?"
    assert data["question_number"] == 0
    assert data["max_questions"] == 10
    assert data["session"]["questions_remaining"] == 10
    assert res.headers["X-Request-ID"]


def test_start_session_without_body(client_with_fake_graph):
    client, _ = client_with_fake_graph
    assert client.post("/api/start").status_code == 200


def test_start_session_rejects_unknown_domain(client_with_fake_graph):
    client, _ = client_with_fake_graph
    res = client.post("/api/start", json={"domain": "Astrology"})
    assert res.status_code == 400
    assert "unknown domain" in res.json()["detail"].lower()


def test_start_session_rejects_bad_difficulty(client_with_fake_graph):
    client, _ = client_with_fake_graph
    res = client.post("/api/start", json={"domain": "OS", "difficulty": "Impossible"})
    assert res.status_code == 422


def test_respond_rejects_empty_message(client_with_fake_graph):
    client, _ = client_with_fake_graph
    res = client.post(
        "/api/respond",
        json={"session_id": "abc12345", "message": "   "},
    )
    assert res.status_code == 400
    assert "cannot be empty" in res.json()["detail"].lower()


def test_respond_rejects_too_long_message(client_with_fake_graph):
    client, _ = client_with_fake_graph
    long_text = "a" * (web_app.MAX_MESSAGE_CHARS + 1)
    res = client.post(
        "/api/respond",
        json={"session_id": "abc12345", "message": long_text},
    )
    assert res.status_code == 400
    assert "too long" in res.json()["detail"].lower()


def test_respond_rejects_invalid_session_id(client_with_fake_graph):
    client, _ = client_with_fake_graph
    res = client.post(
        "/api/respond",
        json={"session_id": "bad session id", "message": "hello"},
    )
    assert res.status_code == 422


def test_respond_unknown_session(monkeypatch):
    monkeypatch.setattr(web_app, "graph", FakeGraph(known_session=False))
    client = TestClient(web_app.app)
    res = client.post("/api/respond", json={"session_id": "nope", "message": "hi"})
    assert res.status_code == 404


def test_respond_to_finished_session_conflicts(monkeypatch):
    fake = FakeGraph(already_done=True)
    monkeypatch.setattr(web_app, "graph", fake)
    client = TestClient(web_app.app)
    res = client.post("/api/respond", json={"session_id": "abc12345", "message": "hi"})
    assert res.status_code == 409
    assert "already complete" in res.json()["detail"]
    assert fake.resumed == []


def test_respond_returns_safe_error_when_resume_fails(monkeypatch):
    fake = FakeGraph(fail_on_resume=True)
    monkeypatch.setattr(web_app, "graph", fake)
    client = TestClient(web_app.app)

    res = client.post(
        "/api/respond",
        json={"session_id": "abc12345", "message": "hello"},
    )
    assert res.status_code == 400
    assert "start a new session" in res.json()["detail"].lower()


def test_respond_in_progress(client_with_fake_graph):
    client, fake = client_with_fake_graph
    res = client.post(
        "/api/respond",
        json={"session_id": "abc12345", "message": "  A process is a running program.  "},
    )
    data = res.json()
    assert res.status_code == 200
    assert data["status"] == "in-progress"
    assert data["question_number"] == 1
    assert data["last_evaluation"]["grade"] == "B"
    assert data["summary"] is None
    assert fake.resumed == ["A process is a running program."]


def test_respond_returns_complete_status(monkeypatch):
    fake = FakeGraph(complete_on_resume=True)
    monkeypatch.setattr(web_app, "graph", fake)
    client = TestClient(web_app.app)

    res = client.post(
        "/api/respond",
        json={"session_id": "abc12345", "message": "hello"},
    )
    data = res.json()
    assert res.status_code == 200
    assert data["status"] == "complete"
    assert data["summary"]["average_score"] == 7.2
    assert data["session"]["questions_remaining"] == 0


@pytest.fixture
def keyword_evaluator(monkeypatch):
    monkeypatch.setattr(
        web_app,
        "evaluator",
        AnswerEvaluator(similarity=KeywordSimilarity(), feedback_writer=None),
    )
    return TestClient(web_app.app)


def test_evaluate_scores_answer(keyword_evaluator):
    res = keyword_evaluator.post(
        "/api/evaluate",
        json={
            "question": "Compare processes and threads.",
            "answer": (
                "A process has its own address space. "
                "Threads share the process memory and context switching threads is cheaper."
            ),
            "rubric": RUBRIC,
        },
    )
    data = res.json()
    assert res.status_code == 200
    assert 0.0 <= data["score"] <= 10.0
    assert data["coverage"]["must_have"]["total"] == 3
    assert data["claims"]["source"] == "fallback"


def test_evaluate_invalid_rubric(keyword_evaluator):
    res = keyword_evaluator.post(
        "/api/evaluate",
        json={
            "question": "Compare processes and threads.",
            "answer": "They differ.",
            "rubric": {"must_have": ["only one"]},
        },
    )
    assert res.status_code == 422
    assert res.json()["errors"] == ["must_have must have at least 3 items"]


def test_evaluate_without_rubric_is_placeholder(keyword_evaluator):
    res = keyword_evaluator.post(
        "/api/evaluate",
        json={"question": "Tell me about yourself.", "answer": "I like systems."},
    )
    data = res.json()
    assert res.status_code == 200
    assert data["placeholder"] is True
    assert data["score"] == 5.0


def test_policy_rules(client_with_fake_graph):
    client, _ = client_with_fake_graph
    data = client.get("/api/policy/rules").json()
    assert data["thresholds"]["max_follow_up_depth"] == 3
    assert len(data["rules"]) == 6
