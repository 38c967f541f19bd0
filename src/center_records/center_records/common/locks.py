from __future__ import annotations

import threading
from contextlib import contextmanager
from typing import Iterator, Optional


class SessionLocks:
    """One in-process mutex per session id.

    Two uploads for the same session run one after the other; uploads for
    different sessions (or student rosters, which have no session) do not wait.
    A session's entry is dropped once no upload holds or waits for it.
    """

    def __init__(self):
        self._guard = threading.Lock()
        # session id -> [lock, holders and waiters]
        self._locks: dict[int, list] = {}

    def __len__(self) -> int:
        with self._guard:
            return len(self._locks)

    def _acquire_entry(self, session_id: int) -> threading.Lock:
        with self._guard:
            entry = self._locks.get(session_id)
            if entry is None:
                entry = self._locks[session_id] = [threading.Lock(), 0]
            entry[1] += 1
            return entry[0]

    def _release_entry(self, session_id: int) -> None:
        with self._guard:
            entry = self._locks[session_id]
            entry[1] -= 1
            if entry[1] == 0:
                del self._locks[session_id]

    @contextmanager
    def hold(self, session_id: Optional[int]) -> Iterator[None]:
        if session_id is None:
            yield
            return
        sid = int(session_id)
        lock = self._acquire_entry(sid)
        try:
            with lock:
                yield
        finally:
            self._release_entry(sid)
