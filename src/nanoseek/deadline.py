"""Caller-supplied deadlines for resolve and download calls."""

import asyncio
from typing import Awaitable, Optional, TypeVar

from .exceptions import DownloadCancelledError

T = TypeVar("T")


async def run_with_deadline(
    awaitable: Awaitable[T],
    deadline_seconds: Optional[float],
    locator: str,
) -> T:
    """
    Await ``awaitable``, failing with DownloadCancelledError once the deadline passes.

    The in-flight request is cancelled, so no further candidate is tried.
    Without a deadline the awaitable runs unbounded.
    """
    if deadline_seconds is None:
        return await awaitable
    try:
        return await asyncio.wait_for(awaitable, timeout=deadline_seconds)
    except asyncio.TimeoutError as e:
        raise DownloadCancelledError(locator, deadline_seconds) from e
