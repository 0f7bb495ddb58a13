"""JSON persistence for the last known playback belief.

The record lives under one fixed key of a JSON document. Loading is tolerant of
missing, unreadable or corrupt files: all of them degrade to "nothing saved"
instead of aborting startup. Saving is best-effort and never raises to callers.
"""

from __future__ import annotations

import json
import logging
import math
import time
from contextlib import suppress
from dataclasses import asdict, replace
from pathlib import Path
from typing import Any
from uuid import uuid4

from remote_deck.models import DEFAULT_VOLUME_PERCENT, PlaybackBelief, TrackMetadata
from remote_deck.utils.async_utils import run_blocking

logger = logging.getLogger(__name__)

STATE_KEY = "player_state"


def _coerce_belief(data: dict[str, Any]) -> PlaybackBelief:
    """Coerce an untyped JSON record into a `PlaybackBelief` with safe defaults."""

    def _int_or_none(value: Any) -> int | None:
        if isinstance(value, bool):
            return None
        return value if isinstance(value, int) else None

    def _seconds_or_zero(value: Any) -> float:
        if isinstance(value, bool) or not isinstance(value, (int, float)):
            return 0.0
        numeric = float(value)
        if not math.isfinite(numeric) or numeric < 0:
            return 0.0
        return numeric

    def _volume_or_default(value: Any) -> int:
        if isinstance(value, bool) or not isinstance(value, (int, float)):
            return DEFAULT_VOLUME_PERCENT
        if not math.isfinite(value):
            return DEFAULT_VOLUME_PERCENT
        return max(0, min(100, int(value)))

    def _metadata_or_none(value: Any) -> TrackMetadata | None:
        if not isinstance(value, dict):
            return None
        title = value.get("title")
        if not isinstance(title, str):
            return None
        cover_url = value.get("cover_url")
        return TrackMetadata(
            title=title,
            artist=value["artist"] if isinstance(value.get("artist"), str) else "",
            album=value["album"] if isinstance(value.get("album"), str) else "",
            cover_url=cover_url if isinstance(cover_url, str) else None,
        )

    return PlaybackBelief(
        current_track_id=_int_or_none(data.get("current_track_id")),
        metadata=_metadata_or_none(data.get("metadata")),
        is_playing=data.get("is_playing") is True,
        elapsed_seconds=_seconds_or_zero(data.get("elapsed_seconds")),
        duration_seconds=_seconds_or_zero(data.get("duration_seconds")),
        volume_percent=_volume_or_default(data.get("volume_percent")),
    )


def restore_belief(saved: PlaybackBelief | None) -> PlaybackBelief:
    """Build the startup belief from a saved record.

    Playback is always presented as paused after a fresh load: the daemon's real
    state is unknown until the next explicit play intent.
    """
    if saved is None:
        return PlaybackBelief()
    elapsed = saved.elapsed_seconds
    if saved.duration_seconds > 0:
        elapsed = min(elapsed, saved.duration_seconds)
    return replace(
        saved,
        is_playing=False,
        elapsed_seconds=max(0.0, elapsed),
        volume_percent=max(0, min(100, saved.volume_percent)),
    )


def load_belief(path: Path) -> PlaybackBelief | None:
    """Load the saved belief record, or None when absent or unusable."""
    try:
        raw = path.read_text(encoding="utf-8")
    except FileNotFoundError:
        logger.info("No saved player state at %s.", path)
        return None
    except OSError as exc:
        logger.warning("Failed to read state file %s: %s; ignoring it.", path, exc)
        return None

    try:
        data = json.loads(raw)
    except json.JSONDecodeError:
        logger.warning("State file at %s is invalid JSON; ignoring it.", path)
        return None

    record = data.get(STATE_KEY) if isinstance(data, dict) else None
    if not isinstance(record, dict):
        logger.warning("State file at %s has no player state record; ignoring it.", path)
        return None
    return _coerce_belief(record)


def save_belief(path: Path, belief: PlaybackBelief) -> None:
    """Persist the belief atomically via write-then-replace."""
    path.parent.mkdir(parents=True, exist_ok=True)
    tmp_path = path.with_name(f"{path.name}.{uuid4().hex}.tmp")
    payload = json.dumps({STATE_KEY: asdict(belief)}, indent=2, sort_keys=True)
    delay_s = 0.02
    try:
        for attempt in range(4):
            tmp_path.write_text(payload, encoding="utf-8")
            try:
                tmp_path.replace(path)
                return
            except OSError as exc:
                if not _is_retryable_windows_replace_error(exc) or attempt >= 3:
                    raise
                time.sleep(delay_s)
                delay_s = min(0.25, delay_s * 2.0)
    finally:
        with suppress(OSError):
            tmp_path.unlink()


def _is_retryable_windows_replace_error(exc: OSError) -> bool:
    """Return whether an atomic replace failure is likely transient on Windows."""
    winerror = getattr(exc, "winerror", None)
    if winerror in {32, 5, 2}:
        return True
    errno = getattr(exc, "errno", None)
    if errno in {13, 16}:
        return True
    text = str(exc).lower()
    return "used by another process" in text or "permission denied" in text


class BeliefStore:
    """Durable slot for the belief with coalesced, best-effort async writes."""

    def __init__(self, path: Path) -> None:
        self.path = path
        self._pending: PlaybackBelief | None = None
        self._writing = False

    def load(self) -> PlaybackBelief | None:
        return load_belief(self.path)

    async def save(self, belief: PlaybackBelief) -> None:
        """Queue `belief` for writing; only the newest pending snapshot is kept."""
        self._pending = belief
        if self._writing:
            return
        self._writing = True
        try:
            while self._pending is not None:
                snapshot, self._pending = self._pending, None
                try:
                    await run_blocking(save_belief, self.path, snapshot)
                except OSError as exc:
                    logger.warning(
                        "Failed to persist player state to %s: %s", self.path, exc
                    )
        finally:
            self._writing = False

    async def flush(self) -> None:
        """Write any snapshot left pending by an interrupted writer."""
        if self._pending is not None and not self._writing:
            await self.save(self._pending)
