import asyncio
import logging
from typing import Awaitable, Callable, Tuple, Type, TypeVar

from storefront.errors import TransientError

logger = logging.getLogger(__name__)

T = TypeVar("T")


class RetryPolicy:
    """Bounded retry for idempotent reads. Never wrap order or cart mutations in one."""

    def __init__(
        self,
        max_attempts: int = 3,
        delay: float = 1.0,
        backoff: float = 1.0,
        retry_on: Tuple[Type[BaseException], ...] = (TransientError,),
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ):
        if max_attempts < 1:
            raise ValueError("max_attempts must be at least 1")
        self.max_attempts = max_attempts
        self.delay = delay
        self.backoff = backoff
        self.retry_on = retry_on
        self._sleep = sleep

    async def run(self, operation: Callable[[], Awaitable[T]], label: str = "request") -> T:
        delay = self.delay
        for attempt in range(1, self.max_attempts + 1):
            try:
                return await operation()
            except self.retry_on as exc:
                if attempt == self.max_attempts:
                    logger.error("%s failed after %d attempts: %s", label, attempt, exc)
                    raise
                logger.info("Retrying %s (%d/%d) after %.1fs...", label, attempt, self.max_attempts - 1, delay)
                await self._sleep(delay)
                delay *= self.backoff
        raise AssertionError("unreachable")
