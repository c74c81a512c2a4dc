"""Structural rules for rubrics.

Rules:
  - must_have: 3-8 items, each a short phrase (max 100 chars)
  - good_to_have: 0-6 items
  - red_flags: 0-8 items
  - no duplicates inside a list or across lists (case / whitespace
    insensitive)

Every violated rule is collected so the caller can fix the rubric in
one pass.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from interview_eval.errors import ValidationError
from interview_eval.models.rubric import Rubric

MUST_HAVE_MIN = 3
MUST_HAVE_MAX = 8
GOOD_TO_HAVE_MAX = 6
RED_FLAGS_MAX = 8
MAX_PHRASE_CHARS = 100


def _has_duplicates(items: list[str] | tuple[str, ...]) -> bool:
    lowered = [s.lower().strip() for s in items]
    return len(set(lowered)) != len(lowered)


def _is_string_list(value: Any) -> bool:
    return isinstance(value, list | tuple) and all(isinstance(s, str) for s in value)


def rubric_errors(rubric: Rubric | Mapping[str, Any] | None) -> list[str]:
    """Return every rule the rubric breaks (empty list when valid)."""
    rubric = Rubric.from_dict(rubric)
    errors: list[str] = []

    must_have = rubric.must_have
    if not _is_string_list(must_have):
        errors.append("must_have must be a list")
    else:
        if len(must_have) < MUST_HAVE_MIN:
            errors.append(f"must_have must have at least {MUST_HAVE_MIN} items")
        if len(must_have) > MUST_HAVE_MAX:
            errors.append(f"must_have cannot have more than {MUST_HAVE_MAX} items")
        if _has_duplicates(must_have):
            errors.append("must_have contains duplicates")
        if any(len(s) > MAX_PHRASE_CHARS for s in must_have):
            errors.append(
                f"must_have items should be short phrases (max {MAX_PHRASE_CHARS} chars)"
            )

    for name, limit in (("good_to_have", GOOD_TO_HAVE_MAX), ("red_flags", RED_FLAGS_MAX)):
        items = getattr(rubric, name)
        if not _is_string_list(items):
            errors.append(f"{name} must be a list")
            continue
        if len(items) > limit:
            errors.append(f"{name} cannot have more than {limit} items")
        if _has_duplicates(items):
            errors.append(f"{name} contains duplicates")

    all_items = [
        s
        for items in (rubric.must_have, rubric.good_to_have, rubric.red_flags)
        if _is_string_list(items)
        for s in items
    ]
    if _has_duplicates(all_items):
        errors.append("Duplicate items found across must_have, good_to_have, and red_flags")

    return errors


def validate_rubric(rubric: Rubric | Mapping[str, Any] | None) -> Rubric:
    """Return the parsed rubric, or raise ``ValidationError`` listing all problems."""
    parsed = Rubric.from_dict(rubric)
    errors = rubric_errors(parsed)
    if errors:
        raise ValidationError(errors)
    return parsed
