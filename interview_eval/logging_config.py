"""Structured logging configuration.

Call ``setup_logging()`` once from every entrypoint (CLI / web) before
any other application code runs.  Library modules should simply use
``logging.getLogger(__name__)`` — they inherit the root configuration.
"""

from __future__ import annotations

import logging
import os
import sys

_NOISY_LOGGERS = ("httpx", "httpcore", "openai", "langsmith", "urllib3")


def setup_logging(level: str | None = None) -> None:
    """Configure the root logger with a consistent format.

    With ``LOG_FORMAT=json`` emits one-line JSON records for log
    shippers.  Otherwise falls back to a human-readable format.
    ``level`` overrides ``LOG_LEVEL`` (the CLI ``--verbose`` flag uses it).
    """
    log_level = (level or os.getenv("LOG_LEVEL", "INFO")).upper()
    log_format = os.getenv("LOG_FORMAT", "text").lower()

    if log_format == "json":
        fmt = (
            '{"time":"%(asctime)s","level":"%(levelname)s",'
            '"logger":"%(name)s","message":"%(message)s"}'
        )
    else:
        fmt = "%(asctime)s  %(levelname)-8s  %(name)s  %(message)s"

    logging.basicConfig(
        level=getattr(logging, log_level, logging.INFO),
        format=fmt,
        datefmt="%Y-%m-%dT%H:%M:%S",
        stream=sys.stderr,
        force=True,
    )

    for name in _NOISY_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)
