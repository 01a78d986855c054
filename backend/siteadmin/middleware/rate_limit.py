"""
SiteAdmin Backend - Fixed Window Rate Limiting
==============================================

What:  Per-origin request limits for the login and contact-mail routes.
How:   Each limiter counts hits per client origin in a fixed window that opens
       at the origin's first hit and resets once window_seconds have passed.
       It runs as a route dependency, before the body is validated, so every
       attempt counts whether or not the body is valid.
Who:   POST /api/admin-login (5 per 15 minutes) and POST /api/send-email
       (3 per minute). Each app instance owns its own limiters.

Algorithm: Fixed Window Counter
    1. Look up (count, window_end) for the origin
    2. If the window has ended, start a new one: count = 0
    3. count += 1
    4. If count > limit → 429 with Retry-After = seconds until window_end

Deployment note:
    State is in process memory. Multiple workers each keep their own counts.
"""

import logging
import threading
import time
from typing import Callable, Dict, Tuple

from starlette.requests import Request

from siteadmin.exceptions import RateLimitExceededError

logger = logging.getLogger(__name__)

LOGIN_LIMIT = 5
LOGIN_WINDOW_SECONDS = 15 * 60
LOGIN_MESSAGE = "För många inloggningsförsök, försök igen om 15 min."

EMAIL_LIMIT = 3
EMAIL_WINDOW_SECONDS = 60
EMAIL_MESSAGE = "För många mailförsök, försök igen om en minut."

# Prune expired windows every N hits
CLEANUP_EVERY = 1000


def client_origin(request: Request, trust_proxy: bool = True, proxy_hops: int = 1) -> str:
    """
    Network origin used as the limiter key.

    Each trusted proxy appends the address it received the request from, so
    with trust_proxy the key is the entry proxy_hops places from the right of
    X-Forwarded-For. Anything left of it was sent by the client and is ignored.
    Without trust_proxy (or without the header) the socket peer address.
    """
    if trust_proxy:
        forwarded = request.headers.get("x-forwarded-for", "")
        entries = [entry.strip() for entry in forwarded.split(",") if entry.strip()]
        if entries:
            return entries[max(0, len(entries) - proxy_hops)]
    if request.client and request.client.host:
        return request.client.host
    return "unknown"


class FixedWindowRateLimiter:
    """
    In-memory fixed window counter keyed by client origin.

    Args:
        name:            Scope used in log lines ("login", "email")
        limit:           Hits allowed per window
        window_seconds:  Window length
        message:         Rejection message returned to the client
        clock:           Monotonic time source (tests pass a fake)
    """

    def __init__(
        self,
        name: str,
        limit: int,
        window_seconds: float,
        message: str,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.name = name
        self.limit = limit
        self.window_seconds = window_seconds
        self.message = message
        self._clock = clock
        self._hits: Dict[str, Tuple[int, float]] = {}
        self._lock = threading.Lock()
        self._since_cleanup = 0

    def hit(self, key: str) -> int:
        """
        Record one request for key.

        Returns:
            The number of hits in the current window.

        Raises:
            RateLimitExceededError: The hit exceeds the limit
        """
        now = self._clock()
        with self._lock:
            count, window_end = self._hits.get(key, (0, now + self.window_seconds))
            if now >= window_end:
                count = 0
                window_end = now + self.window_seconds
            count += 1
            self._hits[key] = (count, window_end)

            self._since_cleanup += 1
            if self._since_cleanup >= CLEANUP_EVERY:
                self._cleanup(now)

        if count > self.limit:
            retry_after = max(1, int(window_end - now + 0.999))
            logger.warning(
                "Rate limit '%s' exceeded for %s: %d hits in %ds window",
                self.name,
                key,
                count,
                self.window_seconds,
            )
            raise RateLimitExceededError(
                message=self.message,
                retry_after=retry_after,
                context={"limiter": self.name, "origin": key},
            )
        return count

    def reset(self) -> None:
        with self._lock:
            self._hits.clear()

    def _cleanup(self, now: float) -> None:
        expired = [key for key, (_, window_end) in self._hits.items() if window_end <= now]
        for key in expired:
            del self._hits[key]
        self._since_cleanup = 0
        if expired:
            logger.debug("Rate limit '%s': pruned %d expired windows", self.name, len(expired))


def login_limiter(clock: Callable[[], float] = time.monotonic) -> FixedWindowRateLimiter:
    return FixedWindowRateLimiter("login", LOGIN_LIMIT, LOGIN_WINDOW_SECONDS, LOGIN_MESSAGE, clock)


def email_limiter(clock: Callable[[], float] = time.monotonic) -> FixedWindowRateLimiter:
    return FixedWindowRateLimiter("email", EMAIL_LIMIT, EMAIL_WINDOW_SECONDS, EMAIL_MESSAGE, clock)
