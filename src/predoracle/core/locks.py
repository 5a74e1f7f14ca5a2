"""Named locks for per-record mutual exclusion."""

from __future__ import annotations

from contextlib import ExitStack, contextmanager
from threading import Lock
from typing import Iterator


class KeyedLocks:
    """One lock per key (e.g. "proposal:7"), created on first use.

    hold() acquires keys in the order given; callers must use a fixed category
    order (proposal, event, principal, config) to stay deadlock-free.
    """

    def __init__(self) -> None:
        self._guard = Lock()
        self._locks: dict[str, Lock] = {}

    def get(self, key: str) -> Lock:
        with self._guard:
            lock = self._locks.get(key)
            if lock is None:
                lock = self._locks[key] = Lock()
            return lock

    @contextmanager
    def hold(self, *keys: str) -> Iterator[None]:
        seen: set[str] = set()
        with ExitStack() as stack:
            for key in keys:
                if key in seen:
                    continue
                seen.add(key)
                stack.enter_context(self.get(key))
            yield

    def __len__(self) -> int:
        return len(self._locks)
