"""Question records handed out by the question selector."""

from __future__ import annotations

from dataclasses import asdict, dataclass, field
from typing import Any


@dataclass
class Question:
    id: str
    domain: str
    topic: str
    difficulty: str
    text: str
    rubric: dict[str, Any] | None = None
    tags: list[str] = field(default_factory=list)
    hints: list[str] = field(default_factory=list)
    is_follow_up: bool = False
    parent_id: str | None = None
    follow_up_depth: int = 0

    def to_dict(self) -> dict[str, Any]:
        """Convert to plain dict for JSON serialization."""
        return asdict(self)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Question:
        known = {k: v for k, v in data.items() if k in cls.__dataclass_fields__}
        return cls(**known)
