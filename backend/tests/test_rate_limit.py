"""
SiteAdmin Backend - Rate Limiter Unit Tests
===========================================

What:  Tests for FixedWindowRateLimiter and client_origin().
How:   A fake clock drives the window; no sleeping.
"""

import pytest
from starlette.requests import Request

from siteadmin.exceptions import RateLimitExceededError
from siteadmin.middleware.rate_limit import (
    EMAIL_MESSAGE,
    LOGIN_MESSAGE,
    FixedWindowRateLimiter,
    client_origin,
    email_limiter,
    login_limiter,
)


class FakeClock:
    def __init__(self, start: float = 1000.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


def make_request(headers=None, client=("203.0.113.7", 50000)) -> Request:
    scope = {
        "type": "http",
        "method": "POST",
        "path": "/api/admin-login",
        "headers": [(k.lower().encode(), v.encode()) for k, v in (headers or {}).items()],
        "client": client,
    }
    return Request(scope)


class TestFixedWindow:
    """Tests for the fixed window counter."""

    def test_login_limit_allows_five(self):
        """Five attempts per window pass, the sixth is refused."""
        clock = FakeClock()
        limiter = login_limiter(clock)

        for expected in range(1, 6):
            assert limiter.hit("1.2.3.4") == expected

        with pytest.raises(RateLimitExceededError) as exc_info:
            limiter.hit("1.2.3.4")
        assert exc_info.value.message == LOGIN_MESSAGE
        assert exc_info.value.retry_after == 900

    def test_email_limit_allows_three(self):
        clock = FakeClock()
        limiter = email_limiter(clock)
        for _ in range(3):
            limiter.hit("1.2.3.4")

        clock.advance(20)
        with pytest.raises(RateLimitExceededError) as exc_info:
            limiter.hit("1.2.3.4")
        assert exc_info.value.message == EMAIL_MESSAGE
        assert exc_info.value.retry_after == 40

    def test_window_resets_after_expiry(self):
        """Once the window has passed the origin starts from zero."""
        clock = FakeClock()
        limiter = FixedWindowRateLimiter("test", 2, 60, "stop", clock)
        limiter.hit("a")
        limiter.hit("a")

        clock.advance(60)
        assert limiter.hit("a") == 1

    def test_refused_hits_still_count(self):
        """Hammering during a blocked window does not extend it."""
        clock = FakeClock()
        limiter = FixedWindowRateLimiter("test", 1, 60, "stop", clock)
        limiter.hit("a")
        for _ in range(3):
            with pytest.raises(RateLimitExceededError):
                limiter.hit("a")

        clock.advance(60)
        assert limiter.hit("a") == 1

    def test_origins_counted_separately(self):
        clock = FakeClock()
        limiter = FixedWindowRateLimiter("test", 1, 60, "stop", clock)
        limiter.hit("a")
        assert limiter.hit("b") == 1

    def test_reset_clears_counts(self):
        limiter = FixedWindowRateLimiter("test", 1, 60, "stop", FakeClock())
        limiter.hit("a")
        limiter.reset()
        assert limiter.hit("a") == 1


class TestClientOrigin:
    """Tests for the limiter key."""

    def test_rightmost_forwarded_for_entry_wins(self):
        """With one proxy hop the entry the proxy appended is the key, not the client's own."""
        request = make_request({"X-Forwarded-For": "198.51.100.1, 10.0.0.2"})
        assert client_origin(request, trust_proxy=True) == "10.0.0.2"

    def test_client_supplied_prefix_does_not_change_key(self):
        """Rotating the left part of the header keeps the same key."""
        keys = {
            client_origin(make_request({"X-Forwarded-For": f"10.0.0.{i}, 198.51.100.1"}))
            for i in range(10)
        }
        assert keys == {"198.51.100.1"}

    def test_proxy_hops_counts_from_the_right(self):
        request = make_request({"X-Forwarded-For": "1.1.1.1, 198.51.100.1, 10.0.0.2"})
        assert client_origin(request, trust_proxy=True, proxy_hops=2) == "198.51.100.1"

    def test_fewer_entries_than_hops_uses_leftmost(self):
        request = make_request({"X-Forwarded-For": "198.51.100.1"})
        assert client_origin(request, trust_proxy=True, proxy_hops=3) == "198.51.100.1"

    def test_forwarded_for_ignored_without_trust_proxy(self):
        request = make_request({"X-Forwarded-For": "198.51.100.1"})
        assert client_origin(request, trust_proxy=False) == "203.0.113.7"

    def test_socket_peer_without_header(self):
        assert client_origin(make_request()) == "203.0.113.7"

    def test_unknown_without_peer(self):
        assert client_origin(make_request(client=None)) == "unknown"
