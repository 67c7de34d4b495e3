from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime, timezone

from fastapi import Request

from .store import CounterStore, InMemoryCounterStore

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RateLimitPreset:
    max_requests: int
    window_seconds: float


PRESETS: dict[str, RateLimitPreset] = {
    # contact / inquiry forms
    "contact_form": RateLimitPreset(max_requests=5, window_seconds=15 * 60),
    "api": RateLimitPreset(max_requests=30, window_seconds=60),
    "auth": RateLimitPreset(max_requests=5, window_seconds=15 * 60),
    # search / browse
    "search": RateLimitPreset(max_requests=60, window_seconds=60),
}


@dataclass(frozen=True)
class RateLimitResult:
    success: bool
    limit: int
    remaining: int
    reset_at: datetime

    def headers(self) -> dict[str, str]:
        return {
            "X-RateLimit-Limit": str(self.limit),
            "X-RateLimit-Remaining": str(self.remaining),
            "X-RateLimit-Reset": self.reset_at.isoformat(),
        }


class RateLimiter:
    def __init__(self, store: CounterStore | None = None) -> None:
        self.store: CounterStore = store if store is not None else InMemoryCounterStore()

    def check(
        self, identifier: str, endpoint: str, preset: RateLimitPreset,
    ) -> RateLimitResult:
        """Count one request from *identifier* against *endpoint*."""
        key = f"{identifier}:{endpoint}"
        count, reset_at = self.store.increment(key, preset.window_seconds)
        success = count <= preset.max_requests
        if not success:
            logger.info("Rate limit exceeded for %s (%d requests)", key, count)
        return RateLimitResult(
            success=success,
            limit=preset.max_requests,
            remaining=max(0, preset.max_requests - count),
            reset_at=datetime.fromtimestamp(reset_at, tz=timezone.utc),
        )

    def peek(
        self, identifier: str, endpoint: str, preset: RateLimitPreset,
    ) -> RateLimitResult:
        """State of *identifier* against *endpoint* without counting a request."""
        key = f"{identifier}:{endpoint}"
        current = self.store.peek(key)
        if current is None:
            return RateLimitResult(
                success=True,
                limit=preset.max_requests,
                remaining=preset.max_requests,
                reset_at=datetime.now(timezone.utc),
            )
        count, reset_at = current
        return RateLimitResult(
            success=count < preset.max_requests,
            limit=preset.max_requests,
            remaining=max(0, preset.max_requests - count),
            reset_at=datetime.fromtimestamp(reset_at, tz=timezone.utc),
        )


def get_client_ip(request: Request) -> str:
    """Best-effort client address, honouring common proxy headers."""
    forwarded_for = request.headers.get("x-forwarded-for")
    if forwarded_for:
        return forwarded_for.split(",")[0].strip()

    for header in ("x-real-ip", "cf-connecting-ip"):
        value = request.headers.get(header)
        if value:
            return value.strip()

    if request.client and request.client.host:
        return request.client.host
    return "unknown"


_limiter = RateLimiter()


def get_rate_limiter() -> RateLimiter:
    """FastAPI dependency; override it to inject a different store."""
    return _limiter
