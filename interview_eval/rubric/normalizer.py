"""Turn a raw rubric into typed, weighted ``RubricPoint``s."""

from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import Any

from interview_eval.extraction.keywords import extract_tags, keywords
from interview_eval.models.rubric import POINT_WEIGHTS, PointType, Rubric, RubricPoint
from interview_eval.rubric.validator import validate_rubric

logger = logging.getLogger(__name__)

# Rubric attribute holding each point type, in output order
_SECTIONS: tuple[tuple[PointType, str], ...] = (
    (PointType.MUST_HAVE, "must_have"),
    (PointType.GOOD_TO_HAVE, "good_to_have"),
    (PointType.RED_FLAG, "red_flags"),
)


def _section(rubric: Rubric, attr: str) -> tuple[Any, ...]:
    items = getattr(rubric, attr)
    return tuple(items) if isinstance(items, list | tuple) else ()


def normalize_rubric(
    rubric: Rubric | Mapping[str, Any] | None,
    *,
    validate: bool = True,
) -> list[RubricPoint]:
    """Return the rubric's points: must-haves, then good-to-haves, then red flags.

    Ids are ``{type}_{index}`` with a per-type index.  Text and order are
    kept verbatim.  With ``validate=False`` structural rules are skipped
    and non-list sections are treated as empty.

    Raises:
        ValidationError: when ``validate`` is set and the rubric breaks a rule.
    """
    parsed = validate_rubric(rubric) if validate else Rubric.from_dict(rubric)

    points: list[RubricPoint] = []
    for point_type, attr in _SECTIONS:
        for index, item in enumerate(_section(parsed, attr)):
            text = str(item)
            points.append(
                RubricPoint(
                    id=f"{point_type.value}_{index}",
                    type=point_type,
                    text=text,
                    tags=tuple(extract_tags(text)),
                    weight=POINT_WEIGHTS[point_type],
                )
            )

    logger.debug("Normalized rubric into %d points", len(points))
    return points


def points_of_type(points: list[RubricPoint], point_type: PointType) -> list[RubricPoint]:
    return [p for p in points if p.type is point_type]


def sanitize_rubric(rubric: Rubric | Mapping[str, Any] | None) -> dict[str, Any]:
    """Trim every item and attach the rubric's keywords."""
    parsed = Rubric.from_dict(rubric)
    cleaned = {
        attr: [s.strip() for s in _section(parsed, attr) if isinstance(s, str)]
        for _, attr in _SECTIONS
    }
    cleaned["keywords"] = rubric_keywords(cleaned)
    return cleaned


def rubric_keywords(rubric: Rubric | Mapping[str, Any] | None) -> list[str]:
    """Distinct words longer than three characters from must/good items."""
    parsed = Rubric.from_dict(rubric)
    found: dict[str, None] = {}
    for item in (*_section(parsed, "must_have"), *_section(parsed, "good_to_have")):
        for word in keywords(str(item)):
            found.setdefault(word, None)
    return list(found)
