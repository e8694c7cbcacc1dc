import asyncio
import logging
from typing import Any, Awaitable, Callable, Optional

from config import PROVIDER_MAX_RETRIES, PROVIDER_RETRY_BASE_DELAY

logger = logging.getLogger(__name__)


def linear_backoff(attempt: int, base_delay: float) -> float:
    """Delay before the next try after ``attempt`` (1-based) failed."""
    return attempt * base_delay


def retry_all(exc: BaseException) -> bool:
    return True


class RetryPolicy:
    """Bounded retry with backoff, shared by every provider.

    ``retry_on`` decides whether a raised exception is worth another attempt;
    anything it rejects propagates immediately. After ``max_attempts`` the last
    exception propagates unchanged.
    """

    def __init__(
        self,
        max_attempts: int = PROVIDER_MAX_RETRIES,
        base_delay: float = PROVIDER_RETRY_BASE_DELAY,
        backoff: Callable[[int, float], float] = linear_backoff,
        retry_on: Callable[[BaseException], bool] = retry_all,
        sleep: Callable[[float], Awaitable[Any]] = asyncio.sleep,
    ):
        if max_attempts < 1:
            raise ValueError("max_attempts must be at least 1")
        self.max_attempts = max_attempts
        self.base_delay = base_delay
        self.backoff = backoff
        self.retry_on = retry_on
        self._sleep = sleep

    async def run(self, func: Callable[..., Awaitable[Any]], *args, label: Optional[str] = None, **kwargs) -> Any:
        label = label or getattr(func, "__qualname__", "call")
        for attempt in range(1, self.max_attempts + 1):
            try:
                return await func(*args, **kwargs)
            except Exception as e:
                if not self.retry_on(e):
                    logger.warning(f"{label} failed with non-retryable error: {e}")
                    raise
                if attempt == self.max_attempts:
                    logger.warning(f"{label} failed after {attempt} attempts: {e}")
                    raise
                delay = self.backoff(attempt, self.base_delay)
                logger.warning(f"{label} attempt {attempt} failed ({e}), retrying in {delay:g}s")
                await self._sleep(delay)
