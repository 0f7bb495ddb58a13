"""Time and progress formatting helpers for now-playing displays."""

from __future__ import annotations

import math
from typing import Literal

VolumeLevel = Literal["off", "low", "high"]


def format_time(seconds: float) -> str:
    """Format seconds as M:SS, or H:MM:SS past one hour."""
    return _format_seconds(seconds, force_hours=False)


def format_duration(seconds: float | None) -> str:
    """Format a track duration, using a placeholder when it is unknown."""
    if seconds is None or not _is_positive(seconds):
        return "--:--"
    return format_time(seconds)


def format_time_pair(elapsed: float, duration: float) -> tuple[str, str]:
    """Format elapsed time and duration with consistent width."""
    hours_mode = _needs_hours(elapsed) or _needs_hours(duration)
    position = _format_seconds(elapsed, force_hours=hours_mode)
    if not _is_positive(duration):
        placeholder = "--:--:--" if hours_mode else "--:--"
        return position, placeholder
    return position, _format_seconds(duration, force_hours=hours_mode)


def progress_percent(elapsed: float, duration: float) -> float:
    """Return playback progress in [0, 100]; 0 while the duration is unknown."""
    if not _is_positive(duration):
        return 0.0
    ratio = _coerce_seconds(elapsed) / float(duration) * 100.0
    return max(0.0, min(100.0, ratio))


def volume_level(percent: int) -> VolumeLevel:
    """Bucket a volume percentage for icon selection."""
    if percent <= 0:
        return "off"
    if percent < 50:
        return "low"
    return "high"


def _is_positive(value: float) -> bool:
    try:
        numeric = float(value)
    except (TypeError, ValueError):
        return False
    return math.isfinite(numeric) and numeric > 0


def _needs_hours(seconds: float) -> bool:
    return _coerce_seconds(seconds) >= 3600


def _format_seconds(seconds: float, *, force_hours: bool) -> str:
    total = _coerce_seconds(seconds)
    hours = total // 3600
    if hours > 0 or force_hours:
        minutes = (total // 60) % 60
        return f"{hours}:{minutes:02d}:{total % 60:02d}"
    return f"{total // 60}:{total % 60:02d}"


def _coerce_seconds(value: float) -> int:
    try:
        numeric = float(value)
    except (TypeError, ValueError):
        return 0
    if not math.isfinite(numeric):
        return 0
    return max(0, int(numeric))
