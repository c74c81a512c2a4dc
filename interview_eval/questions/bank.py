"""Local JSON question bank — the default question selector.

Reads ``data/question_bank.json`` (or ``QUESTION_BANK_PATH``) once and
answers selection queries from memory.  Selection is deterministic:
candidates are ranked by difficulty distance, then topic preference,
then topic recency, then bank order.
"""

from __future__ import annotations

import json
import logging
from collections.abc import Sequence
from pathlib import Path
from typing import Any

import interview_eval.settings as settings
from interview_eval.models.question import Question
from interview_eval.paths import QUESTION_BANK_PATH

logger = logging.getLogger(__name__)

_CACHE: dict[Path, dict[str, Any]] = {}


def reset() -> None:
    """Drop the cached bank (tests)."""
    _CACHE.clear()


def bank_path() -> Path:
    override = settings.QUESTION_BANK_PATH
    return Path(override) if override else QUESTION_BANK_PATH


def _load(path: Path) -> dict[str, Any]:
    if path not in _CACHE:
        with open(path, encoding="utf-8") as f:
            _CACHE[path] = json.load(f)
        logger.info(
            "Loaded %d questions from %s", len(_CACHE[path].get("questions", [])), path
        )
    return _CACHE[path]


def _difficulty_order(difficulty: str) -> list[str]:
    """Requested level first, then the others by distance (easier first on ties)."""
    levels = list(settings.DIFFICULTY_LEVELS)
    if difficulty not in levels:
        return levels
    start = levels.index(difficulty)
    return sorted(levels, key=lambda lvl: (abs(levels.index(lvl) - start), levels.index(lvl)))


class LocalQuestionBank:
    """Question selector backed by a JSON file."""

    def __init__(self, path: str | Path | None = None):
        self.path = Path(path) if path else bank_path()

    def _questions(self) -> list[dict[str, Any]]:
        return _load(self.path).get("questions", [])

    def list_domains(self) -> list[str]:
        return sorted({q["domain"] for q in self._questions()})

    def list_topics(self, domain: str) -> list[str]:
        return sorted({q["topic"] for q in self._questions() if q["domain"] == domain})

    def get_question(self, question_id: str) -> Question | None:
        for q in self._questions():
            if q["id"] == question_id:
                return Question.from_dict(q)
        return None

    def select_next(
        self,
        domain: str,
        topic: str | None,
        difficulty: str,
        exclude_ids: Sequence[str],
        *,
        avoid_topics: Sequence[str] = (),
        recent_topics: Sequence[str] = (),
    ) -> Question | None:
        """Return the best unasked question, or None when the domain is exhausted.

        Preference order:
          1. requested difficulty before nearer, then farther, levels
          2. ``topic`` (when given) before other topics
          3. topics outside ``avoid_topics`` before avoided ones
          4. topics never seen, then those seen least recently
             (``recent_topics`` is oldest first)
        """
        excluded = set(exclude_ids)
        candidates = [
            (index, q)
            for index, q in enumerate(self._questions())
            if q["domain"] == domain and q["id"] not in excluded
        ]
        if not candidates:
            logger.info("No unasked questions left in %s", domain)
            return None

        difficulty_rank = {lvl: i for i, lvl in enumerate(_difficulty_order(difficulty))}
        last_seen = {t: i for i, t in enumerate(recent_topics)}
        avoided = set(avoid_topics)

        def rank(item: tuple[int, dict[str, Any]]) -> tuple:
            index, q = item
            return (
                difficulty_rank.get(q["difficulty"], len(difficulty_rank)),
                0 if topic and q["topic"] == topic else 1,
                1 if q["topic"] in avoided else 0,
                last_seen.get(q["topic"], -1),
                index,
            )

        _, best = min(candidates, key=rank)
        return Question.from_dict(best)
