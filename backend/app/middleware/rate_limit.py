"""In-memory sliding-window limiter for PIN verification.

State lives in the process; every API replica throttles on its own.
"""

from __future__ import annotations

import time
from collections import defaultdict

from fastapi import HTTPException, status


class InMemoryRateLimiter:
    """Sliding-window in-memory rate limiter keyed by an arbitrary string."""

    def __init__(self, window_seconds: int = 60, max_attempts: int = 5) -> None:
        self._window = window_seconds
        self._max = max_attempts
        self._attempts: dict[str, list[float]] = defaultdict(list)

    def check(self, key: str) -> None:
        """Record an attempt for *key*; raise HTTP 429 once the window is full."""
        now = time.time()
        recent = [t for t in self._attempts[key] if now - t < self._window]
        self._attempts[key] = recent
        if len(recent) >= self._max:
            raise HTTPException(
                status_code=status.HTTP_429_TOO_MANY_REQUESTS,
                detail=f"Too many PIN attempts. Try again in {self._window} seconds.",
            )
        recent.append(now)

    def clear(self, key: str) -> None:
        """Forget attempts for *key* after a successful verification."""
        self._attempts.pop(key, None)

    def reset(self) -> None:
        self._attempts.clear()
