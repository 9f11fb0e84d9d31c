"""Sliding-window rate limiter."""
import asyncio

import pytest
from fastapi import HTTPException
from starlette.requests import Request

from edutrack.utils.rate_limiter import RateLimiter


class FakeClock:
    def __init__(self, now=1_000_000.0):
        self.now = now

    def __call__(self):
        return self.now


def make_request(user_id=None, host="10.0.0.1"):
    headers = [(b"x-user-id", user_id.encode())] if user_id else []
    return Request({"type": "http", "headers": headers, "client": (host, 1234)})


def hit(limiter, request):
    asyncio.run(limiter.check_rate_limit(request))


@pytest.mark.unit
class TestRateLimiter:
    def test_minute_limit(self):
        limiter = RateLimiter(requests_per_minute=2, requests_per_hour=100)
        request = make_request("u1")

        hit(limiter, request)
        hit(limiter, request)
        with pytest.raises(HTTPException) as exc_info:
            hit(limiter, request)

        assert exc_info.value.status_code == 429
        assert exc_info.value.detail["error"] == "rate_limit_exceeded"
        assert 1 <= exc_info.value.detail["retry_after"] <= 61

    def test_minute_window_slides(self):
        clock = FakeClock()
        limiter = RateLimiter(requests_per_minute=1, requests_per_hour=100, clock=clock)

        hit(limiter, make_request())
        clock.now += 61
        hit(limiter, make_request())

    def test_clients_counted_by_address(self):
        limiter = RateLimiter(requests_per_minute=1, requests_per_hour=100)
        hit(limiter, make_request(host="10.0.0.1"))
        hit(limiter, make_request(host="10.0.0.2"))

    def test_identity_header_does_not_reset_the_limit(self):
        limiter = RateLimiter(requests_per_minute=1, requests_per_hour=100)
        hit(limiter, make_request("u1"))
        with pytest.raises(HTTPException):
            hit(limiter, make_request("u2"))

    def test_authenticated_user_on_request_state(self):
        limiter = RateLimiter(requests_per_minute=1, requests_per_hour=100)
        first = make_request()
        first.state.user_id = "u1"
        second = make_request()
        second.state.user_id = "u2"

        hit(limiter, first)
        hit(limiter, second)
        assert set(limiter.history) == {"user:u1", "user:u2"}

    def test_idle_clients_are_evicted(self):
        clock = FakeClock()
        limiter = RateLimiter(requests_per_minute=10, requests_per_hour=100, clock=clock)

        for i in range(500):
            hit(limiter, make_request(host=f"10.1.{i // 256}.{i % 256}"))
        assert len(limiter.history) == 500

        clock.now += 2 * 3600
        hit(limiter, make_request(host="10.9.9.9"))

        assert list(limiter.history) == ["ip:10.9.9.9"]
