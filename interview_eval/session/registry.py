"""Per-session locks for request handlers.

Two HTTP requests for the same session must not run the answer cycle
concurrently.  ``SessionLocks.hold(session_id)`` serializes them while
requests for different sessions proceed in parallel.

At most ``max_sessions`` locks are kept.  When the map grows past that,
the least recently used locks that no request holds or waits on are
dropped, so sessions that are started and never finished do not pile up.
"""

from __future__ import annotations

import threading
from collections import OrderedDict
from collections.abc import Iterator
from contextlib import contextmanager

DEFAULT_MAX_SESSIONS = 1024


class _Entry:
    __slots__ = ("lock", "users")

    def __init__(self) -> None:
        self.lock = threading.Lock()
        self.users = 0


class SessionLocks:
    def __init__(self, max_sessions: int = DEFAULT_MAX_SESSIONS) -> None:
        self.max_sessions = max(1, max_sessions)
        self._guard = threading.Lock()
        self._locks: OrderedDict[str, _Entry] = OrderedDict()

    def _acquire_entry(self, session_id: str) -> _Entry:
        with self._guard:
            entry = self._locks.get(session_id)
            if entry is None:
                entry = self._locks[session_id] = _Entry()
            else:
                self._locks.move_to_end(session_id)
            entry.users += 1
            self._evict_idle()
            return entry

    def _release_entry(self, entry: _Entry) -> None:
        with self._guard:
            entry.users -= 1
            self._evict_idle()

    def _evict_idle(self) -> None:
        # Caller holds the guard.  Entries in use are never dropped.
        excess = len(self._locks) - self.max_sessions
        if excess <= 0:
            return
        for session_id in [sid for sid, e in self._locks.items() if e.users == 0][:excess]:
            del self._locks[session_id]

    @contextmanager
    def hold(self, session_id: str) -> Iterator[None]:
        entry = self._acquire_entry(session_id)
        try:
            with entry.lock:
                yield
        finally:
            self._release_entry(entry)

    def discard(self, session_id: str) -> None:
        """Forget a finished session's lock unless a request still uses it."""
        with self._guard:
            entry = self._locks.get(session_id)
            if entry is not None and entry.users == 0:
                del self._locks[session_id]

    def __contains__(self, session_id: object) -> bool:
        return session_id in self._locks

    def __len__(self) -> int:
        return len(self._locks)
