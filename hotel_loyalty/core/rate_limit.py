# hotel_loyalty/core/rate_limit.py
"""
In-memory fixed-window rate limiter.

Окно ключа начинается с его первого запроса и длится window секунд.
Счётчики живут только в памяти процесса и обнуляются при рестарте.
"""
from __future__ import annotations

import math
import threading
import time
from dataclasses import dataclass
from typing import Callable


@dataclass(frozen=True)
class RateLimitResult:
    allowed: bool
    limit: int
    remaining: int
    reset_after: float


class FixedWindowRateLimiter:
    def __init__(
        self,
        limit: int = 100,
        window: float = 15 * 60,
        clock: Callable[[], float] = time.monotonic,
    ):
        if limit <= 0:
            raise ValueError("limit must be positive")
        if window <= 0:
            raise ValueError("window must be positive")
        self.limit = limit
        self.window = float(window)
        self._clock = clock
        self._lock = threading.Lock()
        # key -> (window_start, count)
        self._buckets: dict[str, tuple[float, int]] = {}
        self._next_prune = clock() + self.window

    def hit(self, key: str) -> RateLimitResult:
        with self._lock:
            now = self._clock()
            if now >= self._next_prune:
                self._prune(now)

            start, count = self._buckets.get(key, (now, 0))
            if now - start >= self.window:
                start, count = now, 0

            count += 1
            self._buckets[key] = (start, count)

        reset_after = max(0.0, start + self.window - now)
        return RateLimitResult(
            allowed=count <= self.limit,
            limit=self.limit,
            remaining=max(0, self.limit - count),
            reset_after=reset_after,
        )

    def _prune(self, now: float) -> None:
        expired = [k for k, (start, _) in self._buckets.items() if now - start >= self.window]
        for k in expired:
            del self._buckets[k]
        self._next_prune = now + self.window


def client_identity(peer: str | None, forwarded_for: str | None, trusted_hops: int = 1) -> str:
    """
    Адрес клиента с учётом доверенных прокси (аналог trust proxy = N).
    Цепочка: X-Forwarded-For + адрес сокета, справа отбрасываем N доверенных.
    """
    chain = [p.strip() for p in (forwarded_for or "").split(",") if p.strip()]
    chain.append(peer or "unknown")

    hops = max(0, int(trusted_hops))
    index = max(0, len(chain) - 1 - hops)
    return chain[index]


def retry_after_seconds(result: RateLimitResult) -> int:
    return int(math.ceil(result.reset_after))
