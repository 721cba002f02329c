# semspace/index/locks.py
from threading import Lock

from semspace.constants import DEFAULT_LOCK_STRIPES


class StripedLock:
    """A fixed pool of locks shared out by key hash."""

    def __init__(self, stripes: int = DEFAULT_LOCK_STRIPES):
        if stripes <= 0:
            raise ValueError("stripes must be positive")
        self._locks = [Lock() for _ in range(stripes)]

    def for_key(self, key) -> Lock:
        return self._locks[hash(key) % len(self._locks)]

    def __len__(self):
        return len(self._locks)
