"""Service events emitted by `SyncEngine` to UI/CLI subscribers."""

from __future__ import annotations

from dataclasses import dataclass

from remote_deck.models import PlaybackBelief, TrackMetadata


@dataclass(frozen=True)
class BeliefChanged:
    """Emitted after every belief transition."""

    belief: PlaybackBelief


@dataclass(frozen=True)
class TrackChanged:
    """Emitted when a new track is selected."""

    track_id: int
    metadata: TrackMetadata


@dataclass(frozen=True)
class PlaybackFinished:
    """Emitted when the last reachable track of the queue completed."""

    track_id: int


@dataclass(frozen=True)
class QueueChanged:
    """Emitted when the browsed collection was replaced."""

    album: str
    track_count: int
