"""Exponential-backoff retry for transient GitHub failures."""

from __future__ import annotations

import asyncio
import logging
from typing import Awaitable, Callable, TypeVar

from tailored_ai.domain.exceptions import GitHubUnavailableError

logger = logging.getLogger(__name__)

T = TypeVar("T")

Sleep = Callable[[float], Awaitable[None]]


async def with_retry(
    operation: Callable[[], Awaitable[T]],
    *,
    max_attempts: int = 3,
    base_delay: float = 1.0,
    sleep: Sleep = asyncio.sleep,
) -> T:
    """Run *operation*, retrying only on :class:`GitHubUnavailableError`.

    The wait before attempt ``n + 1`` is ``base_delay * 2 ** (n - 1)``.  Any
    other exception (4xx translations included) propagates immediately.
    """
    attempts = max(1, max_attempts)
    for attempt in range(1, attempts + 1):
        try:
            return await operation()
        except GitHubUnavailableError as exc:
            if attempt >= attempts:
                raise
            wait = base_delay * (2 ** (attempt - 1))
            logger.warning(
                "GitHub unavailable on attempt %d/%d: %s. Retrying in %.1fs",
                attempt,
                attempts,
                exc,
                wait,
            )
            await sleep(wait)
    raise AssertionError("unreachable")  # pragma: no cover
