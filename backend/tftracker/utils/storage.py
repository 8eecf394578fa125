import asyncio
from collections.abc import Awaitable, Callable
from typing import TypeVar

import asyncpg

from tftracker.config import config
from tftracker.utils.logging import logger

T = TypeVar("T")

TRANSIENT_STORAGE_ERRORS: tuple[type[BaseException], ...] = (
    ConnectionError,
    TimeoutError,
    asyncpg.PostgresConnectionError,
    asyncpg.InterfaceError,
    asyncpg.SerializationError,
    asyncpg.DeadlockDetectedError,
)


def get_retry_delay_seconds(attempt: int) -> float:
    return config.recalc_retry_base_delay_seconds * (2 ** (attempt - 1))


async def with_storage_retry(operation: Callable[[], Awaitable[T]], description: str) -> T:
    """
    Run a storage operation, retrying transient failures with exponential backoff.

    After `config.recalc_retry_attempts` attempts the last error is raised to the caller.
    """
    max_attempts = max(int(config.recalc_retry_attempts), 1)
    for attempt in range(1, max_attempts + 1):
        try:
            return await operation()
        except TRANSIENT_STORAGE_ERRORS as exc:
            if attempt >= max_attempts:
                logger.error("Giving up on %s after %s attempts: %r", description, attempt, exc)
                raise

            delay = get_retry_delay_seconds(attempt)
            logger.warning(
                "Transient storage failure during %s (attempt %s/%s), retrying in %.2fs: %r",
                description,
                attempt,
                max_attempts,
                delay,
                exc,
            )
            await asyncio.sleep(delay)

    raise AssertionError("unreachable")
