"""In-memory guard against admin-token guessing.

Only failed attempts count against a client. For multi-replica
deployments the window state has to move to a shared store.
"""

from __future__ import annotations

import time
from typing import Callable

from fastapi import HTTPException, status


class FailedAttemptLimiter:
    """Sliding-window count of failed attempts keyed by an arbitrary string."""

    def __init__(
        self,
        window_seconds: int = 60,
        max_attempts: int = 5,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self._window = window_seconds
        self._max = max_attempts
        self._clock = clock
        self._failures: dict[str, list[float]] = {}

    def _recent(self, key: str) -> list[float]:
        now = self._clock()
        recent = [t for t in self._failures.get(key, ()) if now - t < self._window]
        if recent:
            self._failures[key] = recent
        else:
            # forget clients whose failures all aged out
            self._failures.pop(key, None)
        return recent

    def check(self, key: str) -> None:
        """Raise HTTP 429 if *key* already used up its failures in the window."""
        if len(self._recent(key)) >= self._max:
            raise HTTPException(
                status_code=status.HTTP_429_TOO_MANY_REQUESTS,
                detail=f"Too many attempts. Try again in {self._window} seconds.",
            )

    def record_failure(self, key: str) -> None:
        self._failures[key] = self._recent(key) + [self._clock()]

    def reset(self, key: str) -> None:
        self._failures.pop(key, None)
