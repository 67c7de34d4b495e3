from __future__ import annotations

import time
from typing import Callable, Optional, Protocol


class CounterStore(Protocol):
    def increment(self, key: str, window_seconds: float) -> tuple[int, float]:
        """Bump the counter for *key* and return ``(count, reset_at)``."""
        ...

    def peek(self, key: str) -> Optional[tuple[int, float]]:
        """Current ``(count, reset_at)`` for *key* without counting, or None."""
        ...

    def reset(self, key: str) -> None:
        ...

    def clear(self) -> None:
        ...


class InMemoryCounterStore:
    """Fixed-window counters for a single API process.

    Entries expire ``window_seconds`` after the first hit in the window.
    Expired entries are replaced on the next increment, and all expired
    entries are swept at most once per ``purge_interval`` seconds.
    """

    def __init__(
        self,
        clock: Callable[[], float] = time.time,
        purge_interval: float = 5 * 60,
    ) -> None:
        self._clock = clock
        self._purge_interval = purge_interval
        self._entries: dict[str, dict[str, float]] = {}
        self._last_purge = clock()

    def increment(self, key: str, window_seconds: float) -> tuple[int, float]:
        now = self._clock()
        if now - self._last_purge >= self._purge_interval:
            self.purge_expired()
        entry = self._entries.get(key)
        if entry is None or entry["reset_at"] <= now:
            entry = {"count": 0, "reset_at": now + window_seconds}
            self._entries[key] = entry
        entry["count"] += 1
        return int(entry["count"]), entry["reset_at"]

    def peek(self, key: str) -> Optional[tuple[int, float]]:
        entry = self._entries.get(key)
        if entry is None or entry["reset_at"] <= self._clock():
            return None
        return int(entry["count"]), entry["reset_at"]

    def reset(self, key: str) -> None:
        self._entries.pop(key, None)

    def purge_expired(self) -> int:
        now = self._clock()
        self._last_purge = now
        expired = [k for k, e in self._entries.items() if e["reset_at"] <= now]
        for key in expired:
            del self._entries[key]
        return len(expired)

    def clear(self) -> None:
        self._entries.clear()

    def __len__(self) -> int:
        return len(self._entries)
