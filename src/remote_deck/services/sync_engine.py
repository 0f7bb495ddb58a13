"""Playback belief orchestration between UI intent and the remote daemon.

`SyncEngine` is the single writer of the playback belief. Every intent performs
one atomic transition under the engine lock, then hands a one-way command to
the transport. Nothing the daemon does is observable, so the belief advances on
its own: a progress ticker moves elapsed time while playing, and completion is
inferred locally to auto-advance through the queue. Transport, catalog and
persistence failures are logged and absorbed; intents never raise.
"""

from __future__ import annotations

import asyncio
import logging
import math
from collections.abc import Awaitable, Iterable
from dataclasses import dataclass, field, replace
from typing import Any, Callable

from remote_deck.events import (
    BeliefChanged,
    PlaybackFinished,
    QueueChanged,
    TrackChanged,
)
from remote_deck.models import PlaybackBelief, Track, TrackMetadata
from remote_deck.services.auto_advance import AutoAdvanceController
from remote_deck.services.catalog_client import CatalogClient, CatalogError
from remote_deck.services.progress_ticker import DEFAULT_INTERVAL_S, ProgressTicker
from remote_deck.services.remote_transport import (
    PauseOrResume,
    RemoteTransport,
    Seek,
    SetVolume,
    StartTrack,
    Stop,
    TransportCommand,
    describe_command,
)
from remote_deck.services.track_queue import TrackQueue
from remote_deck.state_store import BeliefStore, restore_belief

logger = logging.getLogger(__name__)

TICK_STEP_S = 1.0
NEXT = 1
PREVIOUS = -1


@dataclass
class _Effects:
    """Commands and events of one transition, released once the lock is dropped."""

    commands: list[TransportCommand] = field(default_factory=list)
    events: list[object] = field(default_factory=list)
    finished: PlaybackFinished | None = None


class SyncEngine:
    """Owns the playback belief and emits events to subscribers."""

    def __init__(
        self,
        *,
        transport: RemoteTransport,
        store: BeliefStore | None = None,
        catalog: CatalogClient | None = None,
        emit_event: Callable[[object], Awaitable[None]] | None = None,
        initial_state: PlaybackBelief | None = None,
        queue: TrackQueue | None = None,
        tick_interval_s: float = DEFAULT_INTERVAL_S,
    ) -> None:
        self._transport = transport
        self._store = store
        self._catalog = catalog
        self._emit_event = emit_event
        state = initial_state or PlaybackBelief()
        if state.current_track_id is None and state.is_playing:
            state = replace(state, is_playing=False)
        self._state = state
        self._queue = queue or TrackQueue()
        self._lock = asyncio.Lock()
        self._advance = AutoAdvanceController()
        self._ticker = ProgressTicker(self._on_tick, interval_s=tick_interval_s)
        self._ticker_key: tuple[float, int] | None = None
        self._selection_epoch = 0
        self._persist_tasks: set[asyncio.Task[None]] = set()

    @classmethod
    def from_store(
        cls,
        store: BeliefStore,
        *,
        transport: RemoteTransport,
        **kwargs: Any,
    ) -> SyncEngine:
        """Build an engine seeded with the last saved belief, presented paused."""
        initial_state = restore_belief(store.load())
        return cls(
            transport=transport, store=store, initial_state=initial_state, **kwargs
        )

    @property
    def state(self) -> PlaybackBelief:
        return self._state

    @property
    def queue(self) -> TrackQueue:
        return self._queue

    @property
    def ticker_running(self) -> bool:
        return self._ticker.running

    @property
    def last_handled_track_id(self) -> int | None:
        return self._advance.last_handled_track_id

    async def start(self) -> None:
        """Align the ticker with the current belief."""
        async with self._lock:
            self._sync_ticker()

    async def shutdown(self) -> None:
        """Stop ticking and flush pending persistence."""
        async with self._lock:
            self._ticker_key = None
        await self._ticker.aclose()
        if self._persist_tasks:
            await asyncio.gather(*list(self._persist_tasks), return_exceptions=True)
        if self._store is not None:
            await self._store.flush()

    def replace_queue(self, tracks: Iterable[Track]) -> None:
        """Replace the browsed collection; the queue pointer follows the belief."""
        self._queue.set_tracks(tracks)
        if self._state.current_track_id is not None:
            self._queue.select(self._state.current_track_id)

    async def load_collection(self, album_name: str) -> list[Track]:
        """Fetch an album's tracks from the catalog and make them the queue."""
        if self._catalog is None:
            logger.warning("No catalog configured; cannot load %r.", album_name)
            return []
        try:
            tracks = await self._catalog.fetch_collection_tracks(album_name)
        except CatalogError as exc:
            logger.warning("Error loading album tracks for %r: %s", album_name, exc)
            tracks = []
        async with self._lock:
            self.replace_queue(tracks)
        await self._emit(QueueChanged(album=album_name, track_count=len(tracks)))
        return tracks

    async def select_track(self, track: Track) -> None:
        """Start `track` from the beginning."""
        effects = _Effects()
        async with self._lock:
            self._begin_track(track, effects)
            state = self._settle(effects)
        await self._release(state, effects)

    async def toggle_play_pause(self) -> None:
        """Flip the believed transport flag and ask the daemon to pause/resume."""
        effects = _Effects(commands=[PauseOrResume()])
        async with self._lock:
            if self._state.current_track_id is not None:
                self._state = replace(self._state, is_playing=not self._state.is_playing)
            state = self._settle(effects)
        await self._release(state, effects)

    async def seek(self, target_seconds: float) -> None:
        """Move believed position; the daemon receives the requested value as-is."""
        try:
            target = float(target_seconds)
        except (TypeError, ValueError):
            logger.debug("Ignoring seek to non-numeric position %r.", target_seconds)
            return
        if not math.isfinite(target):
            logger.debug("Ignoring seek to non-finite position %r.", target_seconds)
            return
        effects = _Effects(commands=[Seek(target)])
        async with self._lock:
            self._state = replace(
                self._state,
                elapsed_seconds=_clamp_elapsed(target, self._state.duration_seconds),
            )
            state = self._settle(effects)
        await self._release(state, effects)

    async def seek_ratio(self, ratio: float) -> None:
        """Seek to a fraction of the known duration (no-op while unknown)."""
        duration = self._state.duration_seconds
        if duration <= 0:
            return
        await self.seek(duration * ratio)

    async def set_volume(self, percent: float) -> None:
        try:
            numeric = float(percent)
        except (TypeError, ValueError):
            logger.debug("Ignoring non-numeric volume %r.", percent)
            return
        if not math.isfinite(numeric):
            logger.debug("Ignoring non-finite volume %r.", percent)
            return
        volume = _clamp(round(numeric), 0, 100)
        effects = _Effects(commands=[SetVolume(volume)])
        async with self._lock:
            self._state = replace(self._state, volume_percent=volume)
            state = self._settle(effects)
        await self._release(state, effects)

    async def stop(self) -> None:
        """Stop playback; metadata stays so "last played" remains visible."""
        effects = _Effects(commands=[Stop()])
        async with self._lock:
            self._state = replace(
                self._state,
                is_playing=False,
                elapsed_seconds=0.0,
                current_track_id=None,
            )
            self._advance.reset()
            self._queue.clear_selection()
            state = self._settle(effects)
        await self._release(state, effects)

    async def advance_relative(self, direction: int) -> None:
        """Select the adjacent queue track; boundaries and gaps are no-ops."""
        effects = _Effects()
        async with self._lock:
            track_id = self._state.current_track_id
            target = (
                None if track_id is None else self._queue.neighbor(track_id, direction)
            )
            if target is None:
                logger.debug(
                    "No track to move to (direction=%s, current=%s).",
                    direction,
                    track_id,
                )
                return
            self._begin_track(target, effects)
            state = self._settle(effects)
        await self._release(state, effects)

    async def next_track(self) -> None:
        await self.advance_relative(NEXT)

    async def previous_track(self) -> None:
        await self.advance_relative(PREVIOUS)

    async def tick(self) -> None:
        """Apply one ticker firing regardless of the ticker's schedule."""
        await self._advance_clock(generation=None)

    async def _on_tick(self, generation: int) -> None:
        await self._advance_clock(generation=generation)

    async def _advance_clock(self, *, generation: int | None) -> None:
        effects = _Effects()
        async with self._lock:
            if generation is not None and not self._ticker.is_current(generation):
                return
            previous = self._state
            if not previous.is_playing or previous.duration_seconds <= 0:
                return
            elapsed = min(
                previous.elapsed_seconds + TICK_STEP_S, previous.duration_seconds
            )
            self._state = replace(previous, elapsed_seconds=elapsed)
            state = self._settle(effects)
        if state == previous:
            return
        await self._release(state, effects)

    def _begin_track(self, track: Track, effects: _Effects) -> None:
        """Make `track` current from the start. Caller holds the lock."""
        self._advance.reset()
        self._selection_epoch += 1
        duration = (
            track.duration_seconds
            if track.duration_seconds is not None
            else self._state.duration_seconds
        )
        metadata = TrackMetadata.from_track(track)
        self._state = replace(
            self._state,
            current_track_id=track.id,
            metadata=metadata,
            is_playing=True,
            elapsed_seconds=0.0,
            duration_seconds=max(0.0, float(duration)),
        )
        self._queue.select(track.id)
        logger.info("Playing track %s: %s - %s", track.id, track.artist, track.title)
        effects.commands.append(StartTrack(track.id))
        effects.events.append(TrackChanged(track_id=track.id, metadata=metadata))

    def _settle(self, effects: _Effects) -> PlaybackBelief:
        """Resolve completion and align the ticker. Caller holds the lock.

        A completed track hands over to its successor within the same
        transition, so no intent can slip in between completion and advance.
        """
        decision = self._advance.evaluate(self._state, self._queue)
        if decision is not None and decision.next_track is not None:
            logger.info(
                "Track %s completed; advancing to %s.",
                decision.completed_track_id,
                decision.next_track.id,
            )
            self._begin_track(decision.next_track, effects)
        elif decision is not None:
            logger.info(
                "Track %s completed at end of queue; playback finished.",
                decision.completed_track_id,
            )
            self._state = replace(self._state, is_playing=False)
            effects.finished = PlaybackFinished(track_id=decision.completed_track_id)
        self._sync_ticker()
        return self._state

    def _sync_ticker(self) -> None:
        state = self._state
        should_run = state.is_playing and state.duration_seconds > 0
        key = (state.duration_seconds, self._selection_epoch) if should_run else None
        if key == self._ticker_key and (key is None or self._ticker.running):
            return
        self._ticker_key = key
        if key is None:
            self._ticker.stop()
        else:
            self._ticker.start()

    async def _release(self, state: PlaybackBelief, effects: _Effects) -> None:
        # Persist and dispatch before awaiting subscribers, which may start the
        # next transition.
        self._schedule_persist(state)
        for command in effects.commands:
            self._dispatch(command)
        for event in effects.events:
            await self._emit(event)
        await self._emit(BeliefChanged(state))
        if effects.finished is not None:
            await self._emit(effects.finished)

    def _dispatch(self, command: TransportCommand) -> None:
        try:
            self._transport.send(command)
        except Exception as exc:
            logger.warning(
                "Failed to send daemon command %s: %s", describe_command(command), exc
            )

    def _schedule_persist(self, state: PlaybackBelief) -> None:
        if self._store is None:
            return
        task = asyncio.get_running_loop().create_task(self._store.save(state))
        self._persist_tasks.add(task)
        task.add_done_callback(self._persist_tasks.discard)

    async def _emit(self, event: object) -> None:
        if self._emit_event is None:
            return
        try:
            await self._emit_event(event)
        except Exception:
            logger.exception("Event subscriber failed for %s.", type(event).__name__)


def _clamp(value: int, min_value: int, max_value: int) -> int:
    return max(min_value, min(value, max_value))


def _clamp_elapsed(target: float, duration: float) -> float:
    if duration > 0:
        return max(0.0, min(target, duration))
    return max(0.0, target)
