"""Latency bound for asynchronous operations.

``with_timeout`` races an operation against a timer. It does not cancel the
operation when the timer wins: the operation keeps running in the background
and its outcome is discarded.
"""

from __future__ import annotations

import asyncio
import inspect
import logging
from typing import Any, Awaitable, Callable

from ..config import DEFAULT_TIMEOUT_MS
from ..validation.validator import ArgumentError

logger = logging.getLogger(__name__)

# Operations that lost a race; referenced until done so they are not collected.
_background: set[asyncio.Future] = set()


class FunctionTimeoutError(TimeoutError):
    """Raised when a wrapped operation does not settle within its time limit."""

    def __init__(self, milliseconds: int | float) -> None:
        super().__init__(f"Function execution took more than {milliseconds} ms")
        self.milliseconds = milliseconds


def _discard_outcome(future: asyncio.Future) -> None:
    _background.discard(future)
    if future.cancelled():
        return
    exc = future.exception()
    if exc is not None:
        logger.debug("timed out operation later failed: %r", exc)
    else:
        logger.debug("timed out operation later completed")


def with_timeout(
    operation: Callable[..., Any], milliseconds: int | float | None = None
) -> Callable[..., Awaitable[Any]]:
    """Wrap ``operation`` so each call fails after ``milliseconds`` (default 1000)."""
    if not callable(operation):
        raise ArgumentError('"operation" must be callable')
    if not milliseconds:
        milliseconds = DEFAULT_TIMEOUT_MS
    if isinstance(milliseconds, bool) or not isinstance(milliseconds, (int, float)):
        raise ArgumentError('"milliseconds" must be a number')
    if milliseconds < 0:
        raise ArgumentError('"milliseconds" must not be negative')
    limit = milliseconds
    name = getattr(operation, "__qualname__", repr(operation))

    async def wrapped(*args: Any, **kwargs: Any) -> Any:
        result = operation(*args, **kwargs)
        if not inspect.isawaitable(result):
            return result
        future = asyncio.ensure_future(result)
        try:
            await asyncio.wait({future}, timeout=limit / 1000)
        finally:
            if not future.done():
                _background.add(future)
                future.add_done_callback(_discard_outcome)
        if future.done():
            return future.result()
        logger.warning("%s exceeded %s ms", name, limit)
        raise FunctionTimeoutError(limit)

    return wrapped
