# utils/rate_limiter.py
"""
Limitador de ritmo (token-bucket, async) para el cliente del feed.

Uso:
>>> from fetcher.radar_api import RADAR_LIMITER
>>> async with RADAR_LIMITER:
...     data = await sess.get(...)

El bucket se rellena entero al cumplirse cada ventana de *interval* segundos.
Si está vacío, la corutina duerme (fuera del lock) hasta el siguiente relleno.
"""

from __future__ import annotations

import asyncio
import time
from typing import Optional

__all__ = ["RateLimiter"]


class RateLimiter:
    """Token-bucket para limitar *max_calls* por *interval* segundos."""

    def __init__(self, max_calls: int, interval: float = 60.0) -> None:
        if max_calls <= 0:
            raise ValueError("max_calls debe ser > 0")
        if interval <= 0:
            raise ValueError("interval debe ser > 0")

        self.max_calls = int(max_calls)
        self.interval = float(interval)
        self._tokens = self.max_calls
        self._last_reset = time.monotonic()
        self._lock = asyncio.Lock()

    async def __aenter__(self) -> "RateLimiter":
        await self.acquire()
        return self

    async def __aexit__(self, exc_type, exc, tb) -> Optional[bool]:
        return False  # no swallow

    @property
    def available(self) -> int:
        self._refill_if_needed()
        return self._tokens

    async def acquire(self) -> None:
        """Consume 1 token. Duerme si el bucket está vacío."""
        while True:
            async with self._lock:
                self._refill_if_needed()
                if self._tokens > 0:
                    self._tokens -= 1
                    return
                sleep_for = self._time_until_reset()
            await asyncio.sleep(sleep_for)

    # ───────────────── helpers ──────────────────────────────
    def _refill_if_needed(self) -> None:
        now = time.monotonic()
        if now - self._last_reset >= self.interval:
            self._tokens = self.max_calls
            self._last_reset = now

    def _time_until_reset(self) -> float:
        return max(0.0, self.interval - (time.monotonic() - self._last_reset))
