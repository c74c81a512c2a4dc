"""Follow-up questions derived from the question just answered."""

from __future__ import annotations

from collections.abc import Sequence

from interview_eval.models.question import Question

MAX_FOCUS_IN_TEMPLATE = 2


def root_question_id(question: Question) -> str:
    if question.is_follow_up and question.parent_id:
        return question.parent_id.split(":fu", 1)[0]
    return question.id


def make_follow_up(parent: Question, depth: int, text: str) -> Question:
    """Wrap ``text`` as a follow-up of ``parent`` sharing its rubric and topic."""
    return Question(
        id=f"{root_question_id(parent)}:fu{depth}",
        domain=parent.domain,
        topic=parent.topic,
        difficulty=parent.difficulty,
        text=text,
        rubric=parent.rubric,
        tags=list(parent.tags),
        hints=list(parent.hints),
        is_follow_up=True,
        parent_id=parent.id,
        follow_up_depth=depth,
    )


def template_follow_up(
    parent: Question,
    focus_points: Sequence[str],
    depth: int,
) -> Question:
    """Deterministic follow-up used when no LLM phrasing is available."""
    focus = [p for p in focus_points if p][:MAX_FOCUS_IN_TEMPLATE]
    if focus:
        text = (
            "Let's go a bit deeper on that. Can you explain: "
            + "; ".join(focus)
            + "?"
        )
    else:
        text = "Can you walk me through your answer again in more detail, with an example?"
    return make_follow_up(parent, depth, text)
