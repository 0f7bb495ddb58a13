"""HTTP transport for the remote playback daemon.

Each command becomes a GET against the daemon's command endpoints. Requests run
as detached asyncio tasks: `send` returns immediately, outcomes are only logged,
and delivery order on the wire is not guaranteed under rapid input.
"""

from __future__ import annotations

import asyncio
import logging

import httpx

from .remote_transport import (
    PauseOrResume,
    Seek,
    SetVolume,
    StartTrack,
    Stop,
    TransportCommand,
    describe_command,
)

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT_S = 5.0


def command_path(command: TransportCommand) -> str:
    """Map a command to its daemon endpoint path."""
    if isinstance(command, StartTrack):
        return f"/play/{command.track_id}"
    if isinstance(command, PauseOrResume):
        return "/pause"
    if isinstance(command, Stop):
        return "/stop"
    if isinstance(command, Seek):
        return f"/seek/{command.seconds:g}"
    if isinstance(command, SetVolume):
        return f"/volume/{command.percent}"
    raise TypeError(f"Unsupported transport command: {command!r}")


class HttpRemoteTransport:
    """Fire-and-forget command sender backed by `httpx.AsyncClient`."""

    def __init__(
        self,
        base_url: str,
        *,
        timeout: float = DEFAULT_TIMEOUT_S,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self._client = client or httpx.AsyncClient(
            base_url=self.base_url, timeout=timeout
        )
        self._pending: set[asyncio.Task[None]] = set()

    @property
    def pending_count(self) -> int:
        return len(self._pending)

    def send(self, command: TransportCommand) -> None:
        path = command_path(command)
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            logger.warning(
                "Dropped daemon command %s: no running event loop.",
                describe_command(command),
            )
            return
        task = loop.create_task(self._deliver(command, path))
        self._pending.add(task)
        task.add_done_callback(self._pending.discard)

    async def drain(self) -> None:
        """Wait for in-flight commands to settle."""
        while self._pending:
            await asyncio.gather(*list(self._pending), return_exceptions=True)

    async def aclose(self) -> None:
        await self.drain()
        await self._client.aclose()

    async def _deliver(self, command: TransportCommand, path: str) -> None:
        label = describe_command(command)
        try:
            response = await self._client.get(f"{self.base_url}{path}")
            response.raise_for_status()
        except httpx.TimeoutException:
            logger.warning(
                "Daemon command %s timed out after %ss.", label, self.timeout
            )
        except httpx.HTTPStatusError as exc:
            logger.warning(
                "Daemon rejected command %s: HTTP %s.",
                label,
                exc.response.status_code,
            )
        except httpx.HTTPError as exc:
            logger.warning("Daemon command %s failed: %s", label, exc)
        else:
            logger.debug("Daemon accepted command %s.", label)
