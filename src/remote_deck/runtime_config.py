"""Runtime configuration normalization helpers.

These helpers keep CLI flag interpretation deterministic across entrypoints.
"""

from __future__ import annotations

import math
from urllib.parse import urlsplit

DEFAULT_DAEMON_URL = "http://127.0.0.1:8000"
DEFAULT_TIMEOUT_S = 5.0
TIMEOUT_MIN_S = 0.5
TIMEOUT_MAX_S = 60.0


def resolve_log_level(*, verbose: bool, quiet: bool) -> str:
    """Resolve effective log level from CLI flags.

    Precedence is deterministic: --quiet overrides --verbose.
    """
    if quiet:
        return "WARNING"
    if verbose:
        return "DEBUG"
    return "INFO"


def normalize_daemon_url(value: str | None) -> str:
    """Return a daemon base URL without trailing slash.

    Raises `ValueError` for values that are not absolute http(s) URLs.
    """
    if value is None or not value.strip():
        return DEFAULT_DAEMON_URL
    candidate = value.strip()
    if "://" not in candidate:
        candidate = f"http://{candidate}"
    parts = urlsplit(candidate)
    if parts.scheme not in {"http", "https"} or not parts.netloc:
        raise ValueError(f"Invalid daemon URL: {value!r}")
    return candidate.rstrip("/")


def normalize_timeout(value: float | None) -> float:
    """Clamp request timeout seconds into the supported range."""
    if value is None or not math.isfinite(value):
        return DEFAULT_TIMEOUT_S
    return max(TIMEOUT_MIN_S, min(TIMEOUT_MAX_S, float(value)))
