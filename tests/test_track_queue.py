"""Tests for queue lookup and navigation."""

from __future__ import annotations

from remote_deck.models import Track
from remote_deck.services.track_queue import TrackQueue


def _tracks(*ids: int) -> list[Track]:
    return [Track(id=i, title=f"T{i}", artist="A", album="Al") for i in ids]


def test_index_of_and_missing_id() -> None:
    queue = TrackQueue(_tracks(10, 20, 30))
    assert queue.index_of(20) == 1
    assert queue.index_of(99) is None
    assert len(queue) == 3


def test_neighbor_has_no_wraparound() -> None:
    queue = TrackQueue(_tracks(10, 20, 30))
    assert queue.neighbor(10, 1).id == 20  # type: ignore[union-attr]
    assert queue.neighbor(20, -1).id == 10  # type: ignore[union-attr]
    assert queue.neighbor(30, 1) is None
    assert queue.neighbor(10, -1) is None
    assert queue.neighbor(99, 1) is None


def test_neighbor_rejects_other_directions() -> None:
    queue = TrackQueue(_tracks(10, 20, 30))
    assert queue.neighbor(10, 2) is None
    assert queue.neighbor(20, 0) is None


def test_set_tracks_clears_pointer() -> None:
    queue = TrackQueue(_tracks(10, 20))
    assert queue.select(20) == 1
    assert queue.current is not None and queue.current.id == 20
    queue.set_tracks(_tracks(20, 30))
    assert queue.current_index is None
    assert queue.current is None


def test_select_unknown_id_clears_pointer() -> None:
    queue = TrackQueue(_tracks(10, 20))
    queue.select(10)
    assert queue.select(99) is None
    assert queue.current_index is None


def test_empty_queue_navigation() -> None:
    queue = TrackQueue()
    assert queue.index_of(1) is None
    assert queue.neighbor(1, 1) is None
    assert list(queue) == []
