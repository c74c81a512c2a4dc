"""Rubric value objects shared by the normalizer, matcher and scorer."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from enum import Enum
from typing import Any


class PointType(str, Enum):
    MUST_HAVE = "must_have"
    GOOD_TO_HAVE = "good_to_have"
    RED_FLAG = "red_flag"


POINT_WEIGHTS: dict[PointType, float] = {
    PointType.MUST_HAVE: 1.0,
    PointType.GOOD_TO_HAVE: 0.5,
    PointType.RED_FLAG: -1.5,
}

# Accepted spellings for each rubric list (JSON from the API uses camelCase)
_KEY_ALIASES: dict[str, tuple[str, ...]] = {
    "must_have": ("must_have", "mustHave"),
    "good_to_have": ("good_to_have", "goodToHave"),
    "red_flags": ("red_flags", "redFlags"),
}


@dataclass(frozen=True)
class Rubric:
    """Raw rubric snapshot: three ordered lists of short phrases.

    Lists are kept as given (including non-list junk from legacy data)
    so that validation can report exactly what was wrong.
    """

    must_have: Any = field(default_factory=tuple)
    good_to_have: Any = field(default_factory=tuple)
    red_flags: Any = field(default_factory=tuple)

    @classmethod
    def from_dict(cls, data: Mapping[str, Any] | Rubric | None) -> Rubric:
        if isinstance(data, Rubric):
            return data
        data = data or {}
        values: dict[str, Any] = {}
        for attr, aliases in _KEY_ALIASES.items():
            raw = next((data[k] for k in aliases if k in data), None)
            if raw is None:
                values[attr] = () if attr != "must_have" else None
            elif isinstance(raw, list | tuple):
                values[attr] = tuple(raw)
            else:
                values[attr] = raw
        return cls(**values)

    def to_dict(self) -> dict[str, list[str]]:
        return {
            "must_have": list(self.must_have or ()),
            "good_to_have": list(self.good_to_have or ()),
            "red_flags": list(self.red_flags or ()),
        }


@dataclass(frozen=True)
class RubricPoint:
    """A single typed, weighted rubric point.

    Created once per evaluation from a rubric snapshot and discarded
    afterwards.  ``tags`` are derived and non-authoritative.
    """

    id: str
    type: PointType
    text: str
    tags: tuple[str, ...] = ()
    weight: float = 1.0

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "type": self.type.value,
            "text": self.text,
            "tags": list(self.tags),
            "weight": self.weight,
        }
