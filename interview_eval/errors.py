"""Exception hierarchy for the evaluation and session core.

``ValidationError`` and ``InvalidState`` reach the caller.
``DependencyFailure`` and ``NoCandidateQuestion`` are raised at the
collaborator boundary and recovered inside the core.
"""

from __future__ import annotations


class InterviewEvalError(Exception):
    """Base class for all errors raised by the core."""


class ValidationError(InterviewEvalError, ValueError):
    """A rubric broke one or more structural rules.

    ``errors`` holds every violated rule, not just the first.
    """

    def __init__(self, errors: list[str]):
        self.errors = list(errors)
        super().__init__("Invalid rubric: " + "; ".join(self.errors))


class DependencyFailure(InterviewEvalError):
    """An external capability (LLM, embeddings) is unavailable."""

    def __init__(self, dependency: str, message: str):
        self.dependency = dependency
        super().__init__(f"{dependency} unavailable: {message}")


class NoCandidateQuestion(InterviewEvalError):
    """The question selector has nothing left to offer."""


class InvalidState(InterviewEvalError):
    """Operation rejected because of the session's current state."""
