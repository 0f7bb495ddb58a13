"""Rich renderables for the now-playing line."""

from __future__ import annotations

from rich.text import Text

from remote_deck.models import PlaybackBelief
from remote_deck.utils.time_format import format_time_pair, volume_level

BAR_WIDTH = 24


def render_progress_bar(percent: float, width: int = BAR_WIDTH) -> str:
    filled = int(round(max(0.0, min(100.0, percent)) / 100.0 * width))
    return "#" * filled + "-" * (width - filled)


def render_now_playing(belief: PlaybackBelief) -> Text:
    """Render title/artist/album, transport, time pair and volume."""
    text = Text(no_wrap=True)
    if belief.metadata is None:
        text.append("Nothing playing", style="dim")
    else:
        text.append(belief.metadata.title or "Untitled", style="bold")
        if belief.metadata.artist:
            text.append(f"  {belief.metadata.artist}")
        if belief.metadata.album:
            text.append(f"  ({belief.metadata.album})", style="dim")
    text.append("\n")
    if belief.is_playing:
        text.append("playing ", style="green")
    elif belief.current_track_id is None:
        text.append("stopped ", style="dim")
    else:
        text.append("paused  ", style="yellow")
    position, duration = format_time_pair(
        belief.elapsed_seconds, belief.duration_seconds
    )
    text.append(f"{position} [{render_progress_bar(belief.progress_percent)}] {duration}")
    text.append(
        f"  vol {belief.volume_percent}% ({volume_level(belief.volume_percent)})"
    )
    return text
