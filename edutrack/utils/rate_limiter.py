"""
Rate limiting for API endpoints
"""
import time
import logging
from collections import deque
from typing import Callable, Deque, Dict, Optional
from fastapi import Request, HTTPException

from edutrack.config import settings

logger = logging.getLogger(__name__)


class RateLimiter:
    """
    In-memory sliding-window rate limiter keyed by caller

    Each client keeps a deque of request timestamps from the last hour;
    the minute window is counted from the tail of the same deque. Clients
    with no request in the last hour are dropped.
    """

    MINUTE = 60
    HOUR = 3600
    SWEEP_INTERVAL = 60

    def __init__(
        self,
        requests_per_minute: int = 60,
        requests_per_hour: int = 1000,
        clock: Callable[[], float] = time.time
    ):
        self.requests_per_minute = requests_per_minute
        self.requests_per_hour = requests_per_hour
        self.clock = clock
        self.history: Dict[str, Deque[float]] = {}
        self._last_sweep = clock()

    def _get_client_id(self, request: Request) -> str:
        """Authenticated user when set on the request state, otherwise the client address"""
        # Identity headers are not verified yet when the middleware runs
        if hasattr(request.state, "user_id"):
            return f"user:{request.state.user_id}"
        return f"ip:{request.client.host if request.client else 'unknown'}"

    def _trim(self, timestamps: Deque[float], now: float) -> None:
        while timestamps and timestamps[0] <= now - self.HOUR:
            timestamps.popleft()

    def _sweep(self, now: float) -> None:
        """Remove clients whose whole history fell out of the hour window"""
        for client_id in list(self.history.keys()):
            self._trim(self.history[client_id], now)
            if not self.history[client_id]:
                del self.history[client_id]
        self._last_sweep = now

    def _retry_after(self, timestamps: Deque[float], limit: int, window: int, now: float) -> Optional[int]:
        """Seconds until the window frees a slot, None while under the limit"""
        in_window = [ts for ts in timestamps if ts > now - window]
        if len(in_window) < limit:
            return None
        return max(int(in_window[-limit] + window - now) + 1, 1)

    async def check_rate_limit(self, request: Request) -> None:
        """
        Record a request or reject it

        Raises:
            HTTPException: 429 if rate limit exceeded
        """
        client_id = self._get_client_id(request)
        now = self.clock()

        if now - self._last_sweep >= self.SWEEP_INTERVAL:
            self._sweep(now)

        timestamps = self.history.get(client_id, deque())
        self._trim(timestamps, now)

        for limit, window, label in (
            (self.requests_per_minute, self.MINUTE, "minute"),
            (self.requests_per_hour, self.HOUR, "hour"),
        ):
            retry_after = self._retry_after(timestamps, limit, window, now)
            if retry_after is not None:
                logger.warning(f"Rate limit exceeded ({label}): {client_id}")
                raise HTTPException(
                    status_code=429,
                    detail={
                        "error": "rate_limit_exceeded",
                        "message": f"Too many requests. Limit: {limit} requests per {label}",
                        "retry_after": retry_after
                    }
                )

        timestamps.append(now)
        self.history[client_id] = timestamps

    def reset(self) -> None:
        self.history.clear()
        self._last_sweep = self.clock()


# Global instance
rate_limiter = RateLimiter(
    requests_per_minute=settings.RATE_LIMIT_PER_MINUTE,
    requests_per_hour=settings.RATE_LIMIT_PER_HOUR
)
