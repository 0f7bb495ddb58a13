"""Periodic firing source that advances believed elapsed time.

The ticker knows nothing about the belief. Each `start` hands out a new
generation number that is passed to every firing, letting the owner discard
firings from a ticker that belonged to an earlier track or transport state.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable, Callable
from contextlib import suppress

logger = logging.getLogger(__name__)

DEFAULT_INTERVAL_S = 1.0


class ProgressTicker:
    """Restartable asyncio loop invoking `on_tick(generation)` every interval."""

    def __init__(
        self,
        on_tick: Callable[[int], Awaitable[None]],
        *,
        interval_s: float = DEFAULT_INTERVAL_S,
    ) -> None:
        if interval_s <= 0:
            raise ValueError("interval_s must be > 0")
        self._on_tick = on_tick
        self._interval_s = interval_s
        self._generation = 0
        self._task: asyncio.Task[None] | None = None

    @property
    def generation(self) -> int:
        return self._generation

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    def start(self) -> int:
        """(Re)start firing from a fresh phase and return the new generation."""
        self.stop()
        self._generation += 1
        self._task = asyncio.get_running_loop().create_task(
            self._run(self._generation)
        )
        return self._generation

    def stop(self) -> None:
        """Stop firing; the current generation becomes stale.

        Called from inside a firing, the running loop is detached rather than
        cancelled so the firing completes and the loop exits afterwards.
        """
        task = self._task
        if task is None:
            return
        self._task = None
        self._generation += 1
        if task is not _current_task():
            task.cancel()

    async def aclose(self) -> None:
        task = self._task
        self.stop()
        if task is not None and task is not _current_task():
            with suppress(asyncio.CancelledError):
                await task

    def is_current(self, generation: int) -> bool:
        return self._task is not None and generation == self._generation

    async def _run(self, generation: int) -> None:
        try:
            while generation == self._generation:
                await asyncio.sleep(self._interval_s)
                if generation != self._generation:
                    break
                await self._on_tick(generation)
        except asyncio.CancelledError:
            pass
        except Exception:  # pragma: no cover - tick safety net
            logger.exception("Progress ticker stopped after an unexpected error.")


def _current_task() -> asyncio.Task[object] | None:
    try:
        return asyncio.current_task()
    except RuntimeError:
        return None
