"""Recording transport for deterministic testing and offline runs."""

from __future__ import annotations

import logging

from .remote_transport import TransportCommand, describe_command

logger = logging.getLogger(__name__)


class FakeRemoteTransport:
    """In-memory transport that records every command it is handed."""

    def __init__(self, *, fail: bool = False) -> None:
        self.sent: list[TransportCommand] = []
        self.closed = False
        self._fail = fail

    def send(self, command: TransportCommand) -> None:
        if self._fail:
            raise ConnectionError(f"fake transport refused {describe_command(command)}")
        self.sent.append(command)
        logger.debug("Fake transport received: %s", describe_command(command))

    async def aclose(self) -> None:
        self.closed = True

    def clear(self) -> None:
        self.sent.clear()
