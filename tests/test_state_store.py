"""Tests for belief persistence."""

from __future__ import annotations

import asyncio
import json
from pathlib import Path

import pytest

from remote_deck.models import PlaybackBelief, TrackMetadata
from remote_deck.state_store import (
    STATE_KEY,
    BeliefStore,
    load_belief,
    restore_belief,
    save_belief,
)


def _playing_belief() -> PlaybackBelief:
    return PlaybackBelief(
        current_track_id=7,
        metadata=TrackMetadata(
            title="Song", artist="Artist", album="Album", cover_url="/c/1"
        ),
        is_playing=True,
        elapsed_seconds=42.0,
        duration_seconds=200.0,
        volume_percent=55,
    )


def test_belief_roundtrip(tmp_path) -> None:
    path = tmp_path / "state.json"
    belief = _playing_belief()

    save_belief(path, belief)

    assert load_belief(path) == belief


def test_record_is_stored_under_fixed_key(tmp_path) -> None:
    path = tmp_path / "state.json"
    save_belief(path, _playing_belief())

    data = json.loads(path.read_text(encoding="utf-8"))

    assert set(data) == {STATE_KEY}
    assert set(data[STATE_KEY]) == {
        "current_track_id",
        "metadata",
        "is_playing",
        "elapsed_seconds",
        "duration_seconds",
        "volume_percent",
    }


def test_missing_file_is_absent(tmp_path) -> None:
    assert load_belief(tmp_path / "missing.json") is None


def test_corrupt_json_is_absent(tmp_path, caplog) -> None:
    path = tmp_path / "state.json"
    path.write_text("{bad json", encoding="utf-8")

    assert load_belief(path) is None
    assert any("invalid JSON" in record.message for record in caplog.records)


def test_record_without_key_is_absent(tmp_path) -> None:
    path = tmp_path / "state.json"
    path.write_text('{"something_else": {}}', encoding="utf-8")
    assert load_belief(path) is None
    path.write_text("[1, 2]", encoding="utf-8")
    assert load_belief(path) is None


def test_invalid_fields_fall_back_to_defaults(tmp_path) -> None:
    path = tmp_path / "state.json"
    path.write_text(
        json.dumps(
            {
                STATE_KEY: {
                    "current_track_id": True,
                    "metadata": {"artist": "No title"},
                    "is_playing": "yes",
                    "elapsed_seconds": -4,
                    "duration_seconds": "long",
                    "volume_percent": 400,
                }
            }
        ),
        encoding="utf-8",
    )

    belief = load_belief(path)

    assert belief == PlaybackBelief(volume_percent=100)


def test_restore_never_resumes_playback() -> None:
    restored = restore_belief(_playing_belief())

    assert restored.is_playing is False
    assert restored.current_track_id == 7
    assert restored.metadata is not None and restored.metadata.title == "Song"
    assert restored.elapsed_seconds == 42.0


def test_restore_clamps_elapsed_to_duration() -> None:
    saved = PlaybackBelief(
        current_track_id=1, elapsed_seconds=500.0, duration_seconds=200.0
    )
    assert restore_belief(saved).elapsed_seconds == 200.0


def test_restore_without_record_uses_defaults() -> None:
    assert restore_belief(None) == PlaybackBelief()
    assert restore_belief(None).volume_percent == 80


def test_save_replace_failure_keeps_previous_file(tmp_path, monkeypatch) -> None:
    path = tmp_path / "state.json"
    original = PlaybackBelief(current_track_id=1)
    save_belief(path, original)

    def fail_replace(self: Path, target: Path) -> None:
        del target
        if self.suffix == ".tmp":
            raise OSError("replace failed")

    monkeypatch.setattr(Path, "replace", fail_replace)

    with pytest.raises(OSError):
        save_belief(path, PlaybackBelief(current_track_id=2))

    assert load_belief(path) == original


def test_store_save_failure_is_logged_not_raised(tmp_path, monkeypatch, caplog) -> None:
    store = BeliefStore(tmp_path / "state.json")

    def fail_save(path: Path, belief: PlaybackBelief) -> None:
        raise OSError("disk full")

    monkeypatch.setattr("remote_deck.state_store.save_belief", fail_save)

    asyncio.run(store.save(PlaybackBelief(current_track_id=3)))

    assert any("Failed to persist" in record.message for record in caplog.records)


def test_store_coalesces_to_latest_snapshot(tmp_path, monkeypatch) -> None:
    store = BeliefStore(tmp_path / "state.json")
    written: list[PlaybackBelief] = []
    gate = asyncio.Event()

    async def slow_blocking(func, /, *args, **kwargs):
        await gate.wait()
        written.append(args[1])
        return func(*args, **kwargs)

    monkeypatch.setattr("remote_deck.state_store.run_blocking", slow_blocking)

    async def run() -> None:
        first = asyncio.create_task(store.save(PlaybackBelief(volume_percent=1)))
        await asyncio.sleep(0)
        await store.save(PlaybackBelief(volume_percent=2))
        await store.save(PlaybackBelief(volume_percent=3))
        gate.set()
        await first

    asyncio.run(run())

    assert [b.volume_percent for b in written] == [1, 3]
    assert store.load() == PlaybackBelief(volume_percent=3)
