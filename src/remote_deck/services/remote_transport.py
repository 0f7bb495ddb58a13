"""Remote daemon command contract.

`SyncEngine` talks to the playback daemon only through one-way command messages.
Implementations (HTTP/fake) deliver them best-effort; nothing a daemon replies is
ever fed back into the playback belief.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Protocol


@dataclass(frozen=True)
class TransportCommand:
    """Marker base type for daemon-bound commands."""

    pass


@dataclass(frozen=True)
class StartTrack(TransportCommand):
    """Start playing a catalog track from its beginning."""

    track_id: int


@dataclass(frozen=True)
class PauseOrResume(TransportCommand):
    """Toggle the daemon between paused and playing."""

    pass


@dataclass(frozen=True)
class Stop(TransportCommand):
    """Stop playback."""

    pass


@dataclass(frozen=True)
class Seek(TransportCommand):
    """Seek to an absolute position in seconds, as requested by the caller."""

    seconds: float


@dataclass(frozen=True)
class SetVolume(TransportCommand):
    """Set daemon output volume in percent."""

    percent: int


class RemoteTransport(Protocol):
    """Fire-and-forget command sink consumed by `SyncEngine`."""

    def send(self, command: TransportCommand) -> None: ...

    async def aclose(self) -> None: ...


def describe_command(command: TransportCommand) -> str:
    """Return a short human-readable label for logs."""
    if isinstance(command, StartTrack):
        return f"start track {command.track_id}"
    if isinstance(command, PauseOrResume):
        return "pause/resume"
    if isinstance(command, Stop):
        return "stop"
    if isinstance(command, Seek):
        return f"seek to {command.seconds:g}s"
    if isinstance(command, SetVolume):
        return f"set volume {command.percent}%"
    return type(command).__name__
