"""
Exponential backoff for rate-limited generative calls
"""
import asyncio
from typing import Any, Awaitable, Callable

import structlog

from planvision.core.config import settings
from .exceptions import ExternalServiceError, RateLimitError

logger = structlog.get_logger()

RATE_LIMIT_MARKERS = ("429", "resource_exhausted", "too many requests", "rate limit")


def is_rate_limited(error: BaseException) -> bool:
    """Return True when an error signals upstream throttling"""
    if isinstance(error, RateLimitError):
        return True
    if isinstance(error, ExternalServiceError):
        return False

    for attr in ("status_code", "status", "code"):
        if getattr(error, attr, None) == 429:
            return True

    message = str(error).lower()
    return any(marker in message for marker in RATE_LIMIT_MARKERS)


class RetryPolicy:
    """Retries a call while it fails with rate-limit errors, doubling the wait each time"""

    def __init__(
        self,
        max_retries: int = None,
        initial_delay: float = None,
        max_delay: float = None,
        sleep: Callable[[float], Awaitable[Any]] = asyncio.sleep,
        classify: Callable[[BaseException], bool] = is_rate_limited,
    ):
        self.max_retries = settings.RETRY_MAX_RETRIES if max_retries is None else max_retries
        self.initial_delay = settings.RETRY_INITIAL_DELAY if initial_delay is None else initial_delay
        self.max_delay = settings.RETRY_MAX_DELAY if max_delay is None else max_delay
        self._sleep = sleep
        self._classify = classify

    def calculate_delay(self, attempt: int) -> float:
        """Calculate exponential backoff delay for a zero-based attempt"""
        delay = self.initial_delay * (2 ** attempt)
        return min(delay, self.max_delay)

    async def execute(self, func: Callable[..., Awaitable[Any]], *args, **kwargs) -> Any:
        """
        Execute an async function, retrying on rate-limit errors

        Args:
            func: Async function to execute
            *args, **kwargs: Arguments to pass to the function

        Returns:
            Function result

        Raises:
            ExternalServiceError: If retries are exhausted
            Exception: Any non rate-limit error, unchanged
        """
        attempt = 0
        while True:
            try:
                return await func(*args, **kwargs)
            except Exception as e:
                if not self._classify(e):
                    raise

                if attempt >= self.max_retries:
                    logger.error(
                        "Rate limit retries exhausted",
                        call=getattr(func, "__name__", repr(func)),
                        attempts=attempt + 1,
                        error=str(e),
                    )
                    raise ExternalServiceError(
                        f"Rate limit retries exhausted after {attempt + 1} attempts: {e}"
                    ) from e

                delay = self.calculate_delay(attempt)
                logger.warning(
                    "Rate limited, backing off",
                    call=getattr(func, "__name__", repr(func)),
                    retry=attempt + 1,
                    max_retries=self.max_retries,
                    delay_seconds=delay,
                )
                await self._sleep(delay)
                attempt += 1

