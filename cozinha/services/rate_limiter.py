"""Per-identity fixed-window rate limiter built on the limits library."""

import math
import time
from dataclasses import dataclass

from limits import RateLimitItemPerSecond
from limits.storage import MemoryStorage, Storage
from limits.strategies import FixedWindowRateLimiter as FixedWindowStrategy

from cozinha.exceptions import RateLimitedError
from cozinha.utils.logging import get_logger

logger = get_logger(__name__)


@dataclass(frozen=True)
class RateLimitDecision:
    """Outcome of a single admission attempt."""

    allowed: bool
    limit: int
    remaining: int
    reset_after: float  # seconds until the current window ends


class FixedWindowRateLimiter:
    """Admission control gate counting requests per caller in fixed windows.

    The first request from an identity opens a window; every attempt inside
    it, admitted or not, increments the count. Once the window has elapsed
    the next attempt opens a fresh one. Counters live in ``storage``, which
    the caller may own and share; expired windows are dropped by the storage.
    """

    def __init__(self, max_requests: int = 5, window_ms: int = 60_000, storage: Storage | None = None):
        """Initialize the limiter.

        Args:
            max_requests: Requests admitted per identity per window
            window_ms: Window length in milliseconds, rounded up to whole seconds
            storage: Counter storage (in-process memory when omitted)
        """
        if max_requests < 1:
            raise ValueError("max_requests must be at least 1")
        if window_ms <= 0:
            raise ValueError("window_ms must be positive")

        self.max_requests = max_requests
        self.window = math.ceil(window_ms / 1000)
        self.storage = storage or MemoryStorage()
        self.strategy = FixedWindowStrategy(self.storage)
        self.item = RateLimitItemPerSecond(max_requests, self.window, namespace="chat")

    def hit(self, identity: str) -> RateLimitDecision:
        """Record an attempt for ``identity`` and report whether it is admitted."""
        allowed = self.strategy.hit(self.item, identity)
        stats = self.strategy.get_window_stats(self.item, identity)

        return RateLimitDecision(
            allowed=allowed,
            limit=self.max_requests,
            remaining=stats.remaining,
            reset_after=max(0.0, stats.reset_time - time.time()),
        )

    def check(self, identity: str) -> RateLimitDecision:
        """Like :meth:`hit`, but raise when the attempt is over budget.

        Raises:
            RateLimitedError: If the identity has used up its window
        """
        decision = self.hit(identity)
        if not decision.allowed:
            logger.warning(f"Rate limit exceeded for {identity}, window resets in {decision.reset_after:.1f}s")
            raise RateLimitedError(retry_after=decision.reset_after)
        return decision
