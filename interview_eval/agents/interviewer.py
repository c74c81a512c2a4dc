"""Interviewer agent — asks the selected question in a conversational voice.

The question itself is chosen by the session state machine; this agent
only phrases it.  It also writes follow-up questions aimed at the points
the candidate missed.  Both paths fall back to deterministic text when
no LLM is available, so the interview never stalls.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence

from langchain_core.messages import AIMessage, SystemMessage

import interview_eval.settings as settings
from interview_eval.errors import DependencyFailure
from interview_eval.llm import invoke_text
from interview_eval.models.question import Question
from interview_eval.models.state import InterviewState
from interview_eval.questions.follow_up import make_follow_up, template_follow_up

logger = logging.getLogger(__name__)

SYSTEM_PROMPT = """\
You are a friendly but rigorous technical interviewer for {domain}.

RULES — follow strictly:
1. Ask exactly the question below. You may rephrase it slightly so it
   flows from the conversation, but do not change what it asks.
2. NEVER reveal the expected answer, hints or the scoring rubric.
3. If continuing the conversation, briefly acknowledge the previous
   answer in one short sentence before asking.
4. Keep your reply concise (2-3 sentences max).

QUESTION {number} of {max_questions} ({difficulty}, {topic}):
{question_text}
"""

OPENING_PROMPT = """\
You are a friendly but rigorous technical interviewer for {domain}.
This is the very first message of the interview. Greet the candidate
briefly, say the interview has up to {max_questions} questions, and ask
the question below. Do NOT reveal any expected answer.

QUESTION ({difficulty}, {topic}):
{question_text}

Keep it to 2-3 sentences.
"""

FOLLOW_UP_PROMPT = """\
You are a technical interviewer. The candidate just answered the
question below but missed or got wrong some points. Write ONE short
follow-up question that probes those points without giving the answer
away. Reply with the question text only.

ORIGINAL QUESTION:
{question_text}

POINTS TO PROBE:
{focus}
"""


def phrase_question(
    question: Question,
    history: Sequence,
    number: int,
    *,
    opening: bool = False,
) -> str:
    """Return the interviewer's message for ``question``."""
    fields = {
        "domain": question.domain,
        "difficulty": question.difficulty,
        "topic": question.topic,
        "question_text": question.text,
        "number": number,
        "max_questions": settings.MAX_QUESTIONS,
    }
    system_text = (OPENING_PROMPT if opening else SYSTEM_PROMPT).format(**fields)

    # system + conversation history (last 6 msgs)
    recent = list(history)[-6:]
    try:
        return invoke_text([SystemMessage(content=system_text)] + recent) or question.text
    except DependencyFailure as e:
        logger.warning("Question phrasing unavailable, using bank text: %s", e)
        if opening:
            return f"Welcome to your {question.domain} interview. {question.text}"
        return question.text


def generate_follow_up(
    parent: Question,
    focus_points: Sequence[str],
    depth: int,
) -> Question:
    """LLM-written follow-up; the deterministic template when that fails."""
    focus = "\n".join(f"- {p}" for p in focus_points) or "- The answer lacked depth"
    prompt = FOLLOW_UP_PROMPT.format(question_text=parent.text, focus=focus)
    try:
        text = invoke_text([SystemMessage(content=prompt)], temperature=0.5)
    except DependencyFailure as e:
        logger.warning("Follow-up generation failed: %s", e)
        return template_follow_up(parent, focus_points, depth)
    if not text:
        return template_follow_up(parent, focus_points, depth)
    return make_follow_up(parent, depth, text)


def interviewer_node(state: InterviewState) -> dict:
    """LangGraph node: voice the session's current question."""
    session = state.get("session") or {}
    raw = session.get("current_question")
    if not raw:
        return {}
    question = Question.from_dict(raw)
    if question.is_follow_up:
        # already written for this conversation
        return {"messages": [AIMessage(content=question.text)]}

    history = state.get("messages", [])
    opening = not any(getattr(m, "type", "") == "ai" for m in history)

    text = phrase_question(
        question, history, session.get("question_number", 0) + 1, opening=opening
    )
    return {"messages": [AIMessage(content=text)]}
