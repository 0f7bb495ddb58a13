"""Catalog and playback belief models shared by services and the CLI.

`PlaybackBelief` is the locally held, possibly stale model of what the remote
daemon is doing. It is immutable; `SyncEngine` replaces it wholesale on every
transition.
"""

from __future__ import annotations

from dataclasses import dataclass

from remote_deck.utils.time_format import progress_percent

DEFAULT_VOLUME_PERCENT = 80


@dataclass(frozen=True)
class Track:
    """Track entry of a catalog collection."""

    id: int
    title: str
    artist: str
    album: str
    duration_seconds: float | None = None
    cover_url: str | None = None


@dataclass(frozen=True)
class Album:
    """Album summary listed by the catalog."""

    album: str
    artist: str
    track_count: int = 0
    cover_url: str | None = None
    id: int | None = None


@dataclass(frozen=True)
class TrackMetadata:
    """Denormalized now-playing snapshot of a track."""

    title: str
    artist: str
    album: str
    cover_url: str | None = None

    @classmethod
    def from_track(cls, track: Track) -> TrackMetadata:
        return cls(
            title=track.title,
            artist=track.artist,
            album=track.album,
            cover_url=track.cover_url,
        )


@dataclass(frozen=True)
class PlaybackBelief:
    """Snapshot of believed transport state exposed to the UI."""

    current_track_id: int | None = None
    metadata: TrackMetadata | None = None
    is_playing: bool = False
    elapsed_seconds: float = 0.0
    duration_seconds: float = 0.0
    volume_percent: int = DEFAULT_VOLUME_PERCENT

    @property
    def progress_percent(self) -> float:
        return progress_percent(self.elapsed_seconds, self.duration_seconds)

    @property
    def has_metadata(self) -> bool:
        return self.metadata is not None

    @property
    def is_complete(self) -> bool:
        """Whether the believed position reached the end of a known duration."""
        return (
            self.duration_seconds > 0
            and self.elapsed_seconds >= self.duration_seconds
        )
