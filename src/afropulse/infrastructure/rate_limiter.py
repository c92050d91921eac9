"""
Token bucket rate limiter for outbound catalog calls.

Hey future me – the old search handler kept a module-global "last call time /
call count" pair. That made every test depend on wall-clock time. This limiter
is an explicit object that gets PASSED INTO the client, and both the clock and
the sleep function are injectable, so tests advance a fake clock instead of
actually waiting.

ALGORITHM: Token Bucket
- Bucket holds max_tokens
- Tokens refill at refill_rate per second
- Each request consumes 1 token
- Empty bucket: wait until one token has refilled

No 429 backoff here - retry policy is deliberately out of scope. The client
raises RateLimitExceededError and the adapter fails for this run.

USAGE:
    limiter = RateLimiter.per_minute(20)

    async with limiter:
        response = await client.get(url)
"""

import asyncio
import logging
import time
from collections.abc import Awaitable, Callable
from dataclasses import dataclass, field

logger = logging.getLogger(__name__)

Clock = Callable[[], float]
Sleep = Callable[[float], Awaitable[None]]


@dataclass
class RateLimiterConfig:
    """Configuration for rate limiter."""

    max_tokens: int = 20  # Bucket size (burst)
    refill_rate: float = 20 / 60  # Tokens per second


@dataclass
class RateLimiter:
    """Token Bucket Rate Limiter with injectable time source.

    Attributes:
        config: Rate limiter configuration
        clock: Monotonic seconds source (time.monotonic in production)
        sleep: Awaitable sleep (asyncio.sleep in production)
        name: Label for log lines
    """

    config: RateLimiterConfig = field(default_factory=RateLimiterConfig)
    clock: Clock = time.monotonic
    sleep: Sleep = asyncio.sleep
    name: str = "default"

    # Internal state (not in __init__ signature)
    _tokens: float = field(default=0.0, init=False)
    _last_refill: float = field(default=0.0, init=False)
    _lock: asyncio.Lock = field(default_factory=asyncio.Lock, init=False)

    def __post_init__(self) -> None:
        """Start with a full bucket."""
        if self.config.max_tokens < 1 or self.config.refill_rate <= 0:
            raise ValueError("max_tokens must be >= 1 and refill_rate > 0")
        self._tokens = float(self.config.max_tokens)
        self._last_refill = self.clock()

    @classmethod
    def per_minute(
        cls,
        requests_per_minute: int,
        *,
        clock: Clock = time.monotonic,
        sleep: Sleep = asyncio.sleep,
        name: str = "catalog",
    ) -> "RateLimiter":
        """Allow `requests_per_minute` calls per rolling minute, bursting up to that many."""
        return cls(
            config=RateLimiterConfig(
                max_tokens=requests_per_minute,
                refill_rate=requests_per_minute / 60.0,
            ),
            clock=clock,
            sleep=sleep,
            name=name,
        )

    def _refill_tokens(self) -> None:
        now = self.clock()
        elapsed = max(0.0, now - self._last_refill)
        self._tokens = min(
            float(self.config.max_tokens), self._tokens + elapsed * self.config.refill_rate
        )
        self._last_refill = now

    async def acquire(self) -> None:
        """Acquire one token, waiting if necessary."""
        async with self._lock:
            self._refill_tokens()

            while self._tokens < 1.0:
                wait_time = (1.0 - self._tokens) / self.config.refill_rate
                logger.debug(
                    "RateLimiter[%s]: no tokens available, waiting %.2fs",
                    self.name,
                    wait_time,
                )
                await self.sleep(wait_time)
                self._refill_tokens()

            self._tokens -= 1.0
            logger.debug(
                "RateLimiter[%s]: token acquired, %.1f remaining", self.name, self._tokens
            )

    async def __aenter__(self) -> "RateLimiter":
        await self.acquire()
        return self

    async def __aexit__(
        self, exc_type: type | None, exc_val: Exception | None, exc_tb: object
    ) -> None:
        return None

    @property
    def available_tokens(self) -> float:
        """Current available tokens (for debugging and tests)."""
        self._refill_tokens()
        return self._tokens


__all__ = ["RateLimiter", "RateLimiterConfig"]
