"""Tracking of GitHub REST rate limit headers."""

from __future__ import annotations

import asyncio
import logging
from datetime import datetime
from typing import Mapping

from .config import RateLimitInfo, UTC

LOGGER = logging.getLogger(__name__)


class RateLimiter:
    """Async-safe record of the rate limit budget reported by GitHub."""

    def __init__(self, *, low_watermark: int = 10) -> None:
        self._lock = asyncio.Lock()
        self._info: RateLimitInfo | None = None
        self._low_watermark = max(low_watermark, 0)

    async def record(self, info: RateLimitInfo) -> None:
        """Update the limiter with the latest rate limit payload."""

        async with self._lock:
            # Store a fresh copy to avoid mutating the caller's data.
            self._info = RateLimitInfo(
                limit=info.limit,
                remaining=info.remaining,
                reset_at=info.reset_at,
            )
        if info.remaining <= self._low_watermark:
            LOGGER.warning(
                "GitHub rate limit low (%s remaining); resets at %s",
                info.remaining,
                info.reset_at.isoformat(),
            )

    async def record_headers(self, headers: Mapping[str, str]) -> RateLimitInfo | None:
        """Parse ``X-RateLimit-*`` response headers and record them if present."""

        info = parse_rate_limit_headers(headers)
        if info is not None:
            await self.record(info)
        return info

    async def reset(self) -> None:
        """Forget the recorded budget, e.g. after switching tokens."""

        async with self._lock:
            self._info = None

    async def remaining(self) -> int | None:
        """Return the last known remaining budget, if any."""

        async with self._lock:
            return self._info.remaining if self._info else None


def parse_rate_limit_headers(headers: Mapping[str, str]) -> RateLimitInfo | None:
    remaining = headers.get("X-RateLimit-Remaining")
    reset = headers.get("X-RateLimit-Reset")
    if remaining is None or reset is None:
        return None
    try:
        limit = headers.get("X-RateLimit-Limit")
        return RateLimitInfo(
            limit=int(limit) if limit is not None else None,
            remaining=int(remaining),
            reset_at=datetime.fromtimestamp(int(reset), tz=UTC),
        )
    except (TypeError, ValueError):
        LOGGER.debug("Ignoring malformed rate limit headers: %s / %s", remaining, reset)
        return None


__all__ = ["RateLimiter", "parse_rate_limit_headers"]
