"""Run blocking state-file IO without stalling the ticker's event loop."""

from __future__ import annotations

import asyncio
import atexit
from concurrent.futures import ThreadPoolExecutor
from functools import partial
from typing import Any, Callable, TypeVar

T = TypeVar("T")

IO_WORKERS = 2
WAKEUP_POLL_S = 0.1

_executor: ThreadPoolExecutor | None = None


def _io_executor() -> ThreadPoolExecutor:
    global _executor
    if _executor is None:
        _executor = ThreadPoolExecutor(
            max_workers=IO_WORKERS, thread_name_prefix="remote-deck-io"
        )
        atexit.register(shutdown_io_executor)
    return _executor


def shutdown_io_executor() -> None:
    global _executor
    if _executor is not None:
        _executor.shutdown(wait=False, cancel_futures=True)
        _executor = None


async def run_blocking(func: Callable[..., T], /, *args: Any, **kwargs: Any) -> T:
    """Await `func(*args, **kwargs)` executed on the IO worker threads."""
    if not callable(func):
        raise TypeError("func must be callable")
    loop = asyncio.get_running_loop()
    future = loop.run_in_executor(_io_executor(), partial(func, *args, **kwargs))
    # Executor completion wakeups can be missed on some loops; poll instead.
    while True:
        try:
            return await asyncio.wait_for(asyncio.shield(future), WAKEUP_POLL_S)
        except asyncio.TimeoutError:
            continue
