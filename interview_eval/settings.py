"""Project-wide settings and shared scoring / policy constants.

The scoring formula and policy thresholds are fixed and never read from
the environment.  Everything environment-dependent (model names, provider
order, endpoints, timeouts) is read **lazily** on first access and cached
via ``functools.lru_cache``.  Call ``reset()`` in tests to clear the cache
after changing env vars; no ``importlib.reload`` required.
"""

from __future__ import annotations

import functools
import os
from typing import TYPE_CHECKING, Final


def _float_env(name: str, default: float) -> float:
    """Parse float environment values with a safe fallback."""
    raw = os.getenv(name)
    if raw is None:
        return default
    try:
        return float(raw)
    except ValueError:
        return default


def _int_env(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None:
        return default
    try:
        return int(raw)
    except ValueError:
        return default


def _list_env(name: str, default: str) -> tuple[str, ...]:
    raw = os.getenv(name, default)
    return tuple(part.strip().lower() for part in raw.split(",") if part.strip())


# ── Scoring formula (never changes at runtime) ───────────────────────────
MUST_HAVE_WEIGHT: Final[float] = 6.0
GOOD_TO_HAVE_WEIGHT: Final[float] = 3.0
CLARITY_WEIGHT: Final[float] = 1.0
RED_FLAG_PENALTY: Final[float] = 1.5
PARTIAL_CREDIT: Final[float] = 0.5
MIN_SCORE: Final[float] = 0.0
MAX_SCORE: Final[float] = 10.0

# Similarity tiers for rubric coverage
COVERED_THRESHOLD: Final[float] = 0.78
PARTIAL_THRESHOLD: Final[float] = 0.70

# Placeholder score used when no rubric is available
PLACEHOLDER_SCORE: Final[float] = 5.0
NEUTRAL_QUALITY: Final[float] = 0.5

# ── Policy thresholds ────────────────────────────────────────────────────
MAX_QUESTIONS: Final[int] = 10
FOLLOW_UP_THRESHOLD: Final[float] = 4.0
DIFFICULTY_UP_THRESHOLD: Final[float] = 7.5
MAX_FOLLOW_UP_DEPTH: Final[int] = 3
TOPIC_SWITCH_CONSECUTIVE_LOW: Final[int] = 2
LOW_SCORE_THRESHOLD: Final[float] = 4.0
RECENT_SCORES_LIMIT: Final[int] = 10

DIFFICULTY_LEVELS: Final[tuple[str, ...]] = ("Easy", "Medium", "Hard")


# ── Lazy settings cache ──────────────────────────────────────────────────

@functools.lru_cache(maxsize=1)
def _load_settings() -> dict[str, object]:
    """Read env-dependent settings once and cache the result."""
    return {
        "LLM_MODEL_NAME": os.getenv("OPENAI_CHAT_MODEL", "gpt-4o-mini"),
        "EMBEDDING_MODEL_NAME": os.getenv(
            "OPENAI_EMBEDDING_MODEL", "text-embedding-3-small"
        ),
        "GROQ_MODEL_NAME": os.getenv("GROQ_CHAT_MODEL", "llama-3.3-70b-versatile"),
        "GROQ_BASE_URL": os.getenv("GROQ_BASE_URL", "https://api.groq.com/openai/v1"),
        "LLM_PROVIDERS": _list_env("LLM_PROVIDERS", "openai,groq"),
        "LLM_MAX_RETRIES": _int_env("LLM_MAX_RETRIES", 3),
        "REQUEST_TIMEOUT": _float_env("LLM_REQUEST_TIMEOUT", 30.0),
        "SIMILARITY_BACKEND": os.getenv("SIMILARITY_BACKEND", "auto").strip().lower(),
        "QUESTION_BANK_PATH": os.getenv("QUESTION_BANK_PATH", ""),
    }


def reset() -> None:
    """Clear the cached settings — call from tests after monkeypatching env vars."""
    _load_settings.cache_clear()


# Type declarations for static analysis (not set at runtime so
# ``__getattr__`` is invoked on attribute access).
if TYPE_CHECKING:
    LLM_MODEL_NAME: str
    EMBEDDING_MODEL_NAME: str
    GROQ_MODEL_NAME: str
    GROQ_BASE_URL: str
    LLM_PROVIDERS: tuple[str, ...]
    LLM_MAX_RETRIES: int
    REQUEST_TIMEOUT: float
    SIMILARITY_BACKEND: str
    QUESTION_BANK_PATH: str


def __getattr__(name: str) -> object:
    """PEP 562 module-level ``__getattr__`` — provides lazy env reads."""
    settings = _load_settings()
    if name in settings:
        return settings[name]
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")


# ── Public helpers ────────────────────────────────────────────────────────


def classify_coverage(similarity: float) -> str:
    """Map a similarity value onto covered / partial / missing."""
    if similarity >= COVERED_THRESHOLD:
        return "covered"
    if similarity >= PARTIAL_THRESHOLD:
        return "partial"
    return "missing"


def provider_configured(provider: str) -> bool:
    """True when the API key for an LLM provider is present."""
    key_name = {"openai": "OPENAI_API_KEY", "groq": "GROQ_API_KEY"}.get(provider)
    return bool(key_name and os.getenv(key_name, "").strip())
