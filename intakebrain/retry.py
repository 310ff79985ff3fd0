"""Retry helper for model calls (exponential backoff + advertised rate-limit waits)."""
from __future__ import annotations

import asyncio
import logging
import re
from typing import Awaitable, Callable, Optional, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")

Sleep = Callable[[float], Awaitable[None]]

RATE_LIMIT_WAIT = re.compile(r"try again in (\d+)ms", re.IGNORECASE)


def advertised_wait_ms(error: BaseException) -> Optional[int]:
    """
    Wait time a rate-limit error asks for, in milliseconds.

    Returns None unless the message mentions a rate limit and embeds
    "try again in <N>ms".
    """
    message = str(error)
    if "rate limit" not in message.lower():
        return None
    match = RATE_LIMIT_WAIT.search(message)
    return int(match.group(1)) if match else None


async def retry_with_backoff(
    operation: Callable[[], Awaitable[T]],
    max_attempts: int = 3,
    base_delay_ms: int = 1000,
    *,
    rate_limit_buffer_ms: int = 100,
    sleep: Sleep = asyncio.sleep,
) -> T:
    """
    Run ``operation`` up to ``max_attempts`` times.

    Rate-limit errors that advertise a wait sleep for that wait plus
    ``rate_limit_buffer_ms``. Any other error sleeps
    ``base_delay_ms * 2**attempt``. The last error is re-raised once all
    attempts are used; callers decide how to degrade.
    """
    if max_attempts < 1:
        raise ValueError("max_attempts must be >= 1")

    last_error: Optional[BaseException] = None

    for attempt in range(max_attempts):
        try:
            return await operation()
        except Exception as e:
            last_error = e
            is_last = attempt == max_attempts - 1
            logger.warning(f"Attempt {attempt + 1}/{max_attempts} failed: {e}")

            if is_last:
                break

            wait_ms = advertised_wait_ms(e)
            if wait_ms is not None:
                delay_ms = wait_ms + rate_limit_buffer_ms
                logger.info(f"Rate limit hit, waiting {delay_ms}ms before retry {attempt + 2}/{max_attempts}")
            else:
                delay_ms = base_delay_ms * (2 ** attempt)
                logger.info(f"Retrying in {delay_ms}ms")

            await sleep(delay_ms / 1000)

    assert last_error is not None
    raise last_error
