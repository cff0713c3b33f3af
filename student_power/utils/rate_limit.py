"""In-memory fixed-window rate limiting.

State lives in process memory: it resets on restart and is not shared
between instances, so deployments must be single-instance or sticky-routed.
"""

import asyncio
import logging
import math
import threading
import time
from dataclasses import dataclass
from datetime import UTC, datetime
from typing import Callable, Optional

from fastapi import Depends, Request, Response

from student_power.config import RATE_LIMIT_POLICIES, RateLimitPolicy, get_settings
from student_power.exceptions import RateLimitExceededError

logger = logging.getLogger(__name__)


def _now_ms() -> int:
    return int(time.time() * 1000)


def format_reset_time(reset_at_ms: int) -> str:
    """Epoch milliseconds as an ISO-8601 UTC timestamp ending in Z."""
    moment = datetime.fromtimestamp(reset_at_ms / 1000, tz=UTC)
    return moment.isoformat(timespec="milliseconds").replace("+00:00", "Z")


@dataclass(frozen=True, slots=True)
class RateLimitDecision:
    """Outcome of a single rate limit check.

    Attributes:
        allowed: Whether the request may proceed.
        remaining: Requests left in the current window.
        reset_at_ms: Epoch milliseconds when the window resets.
    """

    allowed: bool
    remaining: int
    reset_at_ms: int

    def retry_after_seconds(self, now_ms: int) -> int:
        """Whole seconds until the window resets, at least 1."""
        return max(1, math.ceil((self.reset_at_ms - now_ms) / 1000))

    @property
    def reset_at_iso(self) -> str:
        """Window reset time as an ISO-8601 UTC string."""
        return format_reset_time(self.reset_at_ms)


@dataclass(slots=True)
class _WindowEntry:
    count: int
    reset_at_ms: int


class FixedWindowRateLimiter:
    """Per-identifier request counter over fixed time windows.

    The check-then-increment sequence runs under a lock so two concurrent
    callers can never both observe ``count == max_requests`` and both be
    admitted.

    Usage:
        limiter = FixedWindowRateLimiter()
        decision = limiter.check("upload-10.0.0.1", 60_000, 5)
        if not decision.allowed:
            ...

    Attributes:
        clock: Callable returning the current time in epoch milliseconds.
    """

    def __init__(self, clock: Callable[[], int] = _now_ms) -> None:
        """Initialize an empty limiter.

        Args:
            clock: Time source in epoch milliseconds (injectable for tests).
        """
        self.clock = clock
        self._entries: dict[str, _WindowEntry] = {}
        self._lock = threading.Lock()

    def check(
        self, identifier: str, window_ms: int, max_requests: int
    ) -> RateLimitDecision:
        """Count one request for identifier and decide whether to admit it.

        Args:
            identifier: Client key, typically ``"{scope}-{client_ip}"``.
            window_ms: Window length in milliseconds.
            max_requests: Requests admitted per window.

        Returns:
            RateLimitDecision with the window's reset timestamp.
        """
        with self._lock:
            now = self.clock()
            entry = self._entries.get(identifier)

            if entry is None or now > entry.reset_at_ms:
                reset_at = now + window_ms
                self._entries[identifier] = _WindowEntry(1, reset_at)
                return RateLimitDecision(
                    allowed=True, remaining=max_requests - 1, reset_at_ms=reset_at
                )

            entry.count += 1
            if entry.count > max_requests:
                return RateLimitDecision(
                    allowed=False, remaining=0, reset_at_ms=entry.reset_at_ms
                )
            return RateLimitDecision(
                allowed=True,
                remaining=max_requests - entry.count,
                reset_at_ms=entry.reset_at_ms,
            )

    def check_policy(
        self, identifier: str, policy: RateLimitPolicy
    ) -> RateLimitDecision:
        """Run check() with the window and budget of a configured policy."""
        return self.check(identifier, policy.window_ms, policy.max_requests)

    def sweep(self) -> int:
        """Drop entries whose window has already ended.

        Returns:
            Number of entries removed.
        """
        with self._lock:
            now = self.clock()
            expired = [
                key for key, entry in self._entries.items() if now > entry.reset_at_ms
            ]
            for key in expired:
                del self._entries[key]
        return len(expired)

    def reset(self) -> None:
        """Forget every tracked identifier."""
        with self._lock:
            self._entries.clear()

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)


class RateLimitSweeper:
    """Background task that periodically sweeps expired limiter entries.

    Runs on a fixed interval independent of request traffic, bounding
    memory growth from one-off or abandoned identifiers.
    """

    def __init__(
        self, limiter: FixedWindowRateLimiter, interval_seconds: float
    ) -> None:
        """Initialize sweeper.

        Args:
            limiter: Limiter to sweep.
            interval_seconds: Delay between sweeps.
        """
        self._limiter = limiter
        self._interval = interval_seconds
        self._task: Optional[asyncio.Task] = None

    @property
    def running(self) -> bool:
        """Whether the sweep loop is active."""
        return self._task is not None and not self._task.done()

    def start(self) -> None:
        """Start the sweep loop on the running event loop."""
        if self.running:
            return
        self._task = asyncio.create_task(self._run(), name="rate-limit-sweeper")
        logger.info(
            "Rate limit sweeper started",
            extra={"interval_seconds": self._interval},
        )

    async def stop(self) -> None:
        """Cancel the sweep loop and wait for it to finish."""
        if self._task is None:
            return
        self._task.cancel()
        try:
            await self._task
        except asyncio.CancelledError:
            pass
        self._task = None
        logger.info("Rate limit sweeper stopped")

    async def _run(self) -> None:
        while True:
            await asyncio.sleep(self._interval)
            removed = self._limiter.sweep()
            if removed:
                logger.debug(
                    "Swept expired rate limit entries",
                    extra={"removed": removed, "tracked": len(self._limiter)},
                )


# Process-wide limiter shared by all request handlers
rate_limiter = FixedWindowRateLimiter()


def get_rate_limiter() -> FixedWindowRateLimiter:
    """Get the process-wide limiter (overridable as a FastAPI dependency)."""
    return rate_limiter


def create_sweeper() -> RateLimitSweeper:
    """Create a sweeper for the process-wide limiter using settings."""
    settings = get_settings()
    return RateLimitSweeper(rate_limiter, settings.RATE_LIMIT_SWEEP_INTERVAL_SECONDS)


def get_client_ip(request: Request) -> str:
    """Resolve the client address, preferring proxy headers.

    Args:
        request: Incoming HTTP request.

    Returns:
        First X-Forwarded-For hop, else X-Real-IP, else the socket peer,
        else ``"unknown"``.
    """
    forwarded = request.headers.get("x-forwarded-for")
    if forwarded:
        first_hop = forwarded.split(",")[0].strip()
        if first_hop:
            return first_hop

    real_ip = request.headers.get("x-real-ip")
    if real_ip and real_ip.strip():
        return real_ip.strip()

    if request.client and request.client.host:
        return request.client.host

    return "unknown"


class RateLimit:
    """FastAPI dependency enforcing one configured policy.

    Raises RateLimitExceededError on denial; on success sets the
    ``X-RateLimit-Remaining`` header on the response.

    Usage:
        @router.post("/upload", dependencies=[Depends(RateLimit("upload"))])
    """

    def __init__(self, scope: str) -> None:
        """Initialize dependency for a policy name.

        Args:
            scope: Key into RATE_LIMIT_POLICIES.
        """
        if scope not in RATE_LIMIT_POLICIES:
            raise KeyError(f"Unknown rate limit policy '{scope}'")
        self.scope = scope
        self.policy = RATE_LIMIT_POLICIES[scope]

    def __call__(
        self,
        request: Request,
        response: Response,
        limiter: FixedWindowRateLimiter = Depends(get_rate_limiter),
    ) -> RateLimitDecision:
        """Check the limit for the requesting client."""
        identifier = f"{self.scope}-{get_client_ip(request)}"
        decision = limiter.check_policy(identifier, self.policy)

        if not decision.allowed:
            logger.warning(
                "Rate limit exceeded",
                extra={"scope": self.scope, "identifier": identifier},
            )
            raise RateLimitExceededError(
                scope=self.scope,
                reset_at_ms=decision.reset_at_ms,
                retry_after_seconds=decision.retry_after_seconds(limiter.clock()),
            )

        response.headers["X-RateLimit-Remaining"] = str(decision.remaining)
        return decision
