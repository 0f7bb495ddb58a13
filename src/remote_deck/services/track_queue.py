"""Ordered track sequence of the currently browsed collection."""

from __future__ import annotations

from collections.abc import Iterable, Iterator

from remote_deck.models import Track


class TrackQueue:
    """Navigation over an ordered track list with an optional current pointer.

    The pointer is either None or a valid index into the sequence. Replacing the
    sequence clears it. Navigation never wraps around.
    """

    def __init__(self, tracks: Iterable[Track] = ()) -> None:
        self._tracks: tuple[Track, ...] = tuple(tracks)
        self._current_index: int | None = None

    def __len__(self) -> int:
        return len(self._tracks)

    def __iter__(self) -> Iterator[Track]:
        return iter(self._tracks)

    @property
    def tracks(self) -> tuple[Track, ...]:
        return self._tracks

    @property
    def current_index(self) -> int | None:
        return self._current_index

    @property
    def current(self) -> Track | None:
        if self._current_index is None:
            return None
        return self._tracks[self._current_index]

    def set_tracks(self, tracks: Iterable[Track]) -> None:
        self._tracks = tuple(tracks)
        self._current_index = None

    def index_of(self, track_id: int) -> int | None:
        for index, track in enumerate(self._tracks):
            if track.id == track_id:
                return index
        return None

    def select(self, track_id: int) -> int | None:
        """Point at `track_id`; an unknown id clears the pointer."""
        self._current_index = self.index_of(track_id)
        return self._current_index

    def clear_selection(self) -> None:
        self._current_index = None

    def neighbor(self, track_id: int, direction: int) -> Track | None:
        """Return the adjacent track in `direction` (+1/-1), or None at a boundary."""
        if direction not in (1, -1):
            return None
        index = self.index_of(track_id)
        if index is None:
            return None
        target = index + direction
        if 0 <= target < len(self._tracks):
            return self._tracks[target]
        return None
