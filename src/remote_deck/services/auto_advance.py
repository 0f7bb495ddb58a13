"""Track-completion detection with a per-track guard.

Completion is level-triggered: elapsed time is pinned at the duration cap and
stays there across many ticks. Remembering the last handled track id turns it
into a single decision per track.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass

from remote_deck.models import PlaybackBelief, Track
from remote_deck.services.track_queue import TrackQueue

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class AdvanceDecision:
    """Outcome of a newly detected completion.

    `next_track` is None when the completed track was the last one reachable.
    """

    completed_track_id: int
    next_track: Track | None


class AutoAdvanceController:
    """Decides, at most once per track, what follows a completed track."""

    def __init__(self) -> None:
        self._last_handled_track_id: int | None = None

    @property
    def last_handled_track_id(self) -> int | None:
        return self._last_handled_track_id

    def reset(self) -> None:
        """Re-arm detection, e.g. after a new track was selected."""
        self._last_handled_track_id = None

    def evaluate(
        self, belief: PlaybackBelief, queue: TrackQueue
    ) -> AdvanceDecision | None:
        track_id = belief.current_track_id
        if not belief.is_playing or track_id is None or not belief.is_complete:
            return None
        if self._last_handled_track_id == track_id:
            return None
        self._last_handled_track_id = track_id
        next_track = queue.neighbor(track_id, 1)
        logger.debug(
            "Track %s completed; next track: %s",
            track_id,
            next_track.id if next_track else None,
        )
        return AdvanceDecision(completed_track_id=track_id, next_track=next_track)
