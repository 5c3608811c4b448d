from __future__ import annotations

import asyncio
import logging
from typing import Awaitable, Callable, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")

DEFAULT_RETRY_DELAY_SECONDS: float = 0.5


async def retry_once(
    operation: Callable[[], Awaitable[T]],
    *,
    delay_seconds: float = DEFAULT_RETRY_DELAY_SECONDS,
) -> T:
    """Run ``operation``; if it fails, wait ``delay_seconds`` and run it once more.

    ``operation`` is a factory, not an awaitable: the retry re-issues the request
    instead of re-awaiting a call that already failed. The second failure
    propagates.
    """

    try:
        return await operation()
    except Exception as exc:
        logger.debug("Operation failed, retrying once in %.2fs: %s", delay_seconds, exc)
        await asyncio.sleep(delay_seconds)
        return await operation()
