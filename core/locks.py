import threading
from contextlib import contextmanager
from typing import Dict, Iterator


class KeyedLock:
    """
    One re-entrant lock per key (user id).

    Shared by the orchestrator, the worker pool and the skill engine so that
    no two recompute cycles for the same user interleave. Locks are never
    removed; the registry grows with the number of distinct users seen by
    this process.
    """

    def __init__(self):
        self._locks: Dict[str, threading.RLock] = {}
        self._guard = threading.Lock()

    def _lock_for(self, key: str) -> threading.RLock:
        with self._guard:
            lock = self._locks.get(key)
            if lock is None:
                lock = threading.RLock()
                self._locks[key] = lock
            return lock

    @contextmanager
    def hold(self, key: str) -> Iterator[None]:
        lock = self._lock_for(key)
        with lock:
            yield
