"""Tests for the now-playing renderable."""

from __future__ import annotations

from remote_deck.models import PlaybackBelief, TrackMetadata
from remote_deck.ui.now_playing import render_now_playing, render_progress_bar


def test_progress_bar_fill() -> None:
    assert render_progress_bar(0, width=4) == "----"
    assert render_progress_bar(50, width=4) == "##--"
    assert render_progress_bar(150, width=4) == "####"


def test_render_nothing_playing() -> None:
    text = render_now_playing(PlaybackBelief()).plain
    assert "Nothing playing" in text
    assert "stopped" in text
    assert "0:00" in text and "--:--" in text
    assert "vol 80% (high)" in text


def test_render_playing_track() -> None:
    belief = PlaybackBelief(
        current_track_id=1,
        metadata=TrackMetadata(title="Song", artist="Artist", album="Album"),
        is_playing=True,
        elapsed_seconds=30,
        duration_seconds=120,
        volume_percent=20,
    )
    text = render_now_playing(belief).plain
    assert "Song" in text and "Artist" in text and "(Album)" in text
    assert "playing" in text
    assert "0:30" in text and "2:00" in text
    assert "vol 20% (low)" in text


def test_render_stopped_keeps_last_metadata() -> None:
    belief = PlaybackBelief(
        metadata=TrackMetadata(title="Last", artist="Artist", album="Album"),
    )
    text = render_now_playing(belief).plain
    assert "Last" in text
    assert "stopped" in text
