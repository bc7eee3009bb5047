"""Exponential-backoff retry for awaitable operations.

One loop shared by every call site that talks to the network. Call sites decide
which failures are transient through ``is_transient`` and what exhaustion means
for them (the snapshot fetcher turns it into "no observations", the notifier
lets it propagate).
"""

from __future__ import annotations

import asyncio
from logging import getLogger
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Awaitable, Callable

log = getLogger(__name__)

type Sleep = Callable[[float], Awaitable[None]]


def backoff_delay(base_delay: float, attempt: int) -> float:
    """Delay to wait after the ``attempt``-th failure (1-based)."""

    return base_delay * 2 ** (attempt - 1)


async def retry_async[T](
    operation: Callable[[], Awaitable[T]],
    *,
    attempts: int,
    base_delay: float,
    is_transient: Callable[[BaseException], bool],
    operation_name: str = "operation",
    sleep: Sleep = asyncio.sleep,
    min_delay: Callable[[BaseException], float | None] | None = None,
) -> T:
    """Run ``operation`` until it succeeds, retrying transient failures.

    The last failure is re-raised once ``attempts`` tries are used up. Failures for
    which ``is_transient`` returns ``False`` are re-raised on the spot. ``min_delay``
    may name a wait the failure itself asks for (a ``Retry-After`` header, say); the
    longer of that and the backoff delay is used.
    """

    if attempts < 1:
        raise ValueError("attempts must be at least 1")

    attempt = 1
    while True:
        try:
            return await operation()
        except Exception as exc:
            if not is_transient(exc):
                log.debug("%s failed with non-transient %r", operation_name, exc)
                raise
            if attempt >= attempts:
                log.error("%s failed after %s attempt(s): %s", operation_name, attempts, exc)
                raise
            delay = backoff_delay(base_delay, attempt)
            requested = min_delay(exc) if min_delay is not None else None
            if requested is not None:
                delay = max(delay, requested)
            log.warning(
                "%s failed on attempt %s/%s (%s); retrying in %.0fms",
                operation_name,
                attempt,
                attempts,
                exc,
                delay * 1000,
            )
            await sleep(delay)
            attempt += 1
