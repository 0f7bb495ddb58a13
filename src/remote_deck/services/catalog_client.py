"""Catalog HTTP client for album listings and album track collections.

Rows are parsed tolerantly: a missing or invalid duration is a valid "unknown"
track, while rows without a usable integer id are skipped.
"""

from __future__ import annotations

import logging
import math
from typing import Any
from urllib.parse import quote

import httpx

from remote_deck.models import Album, Track

logger = logging.getLogger(__name__)


class CatalogError(Exception):
    """Catalog request or payload failure."""


class CatalogClient:
    """Read-only client for the daemon's catalog endpoints."""

    def __init__(
        self,
        base_url: str,
        *,
        timeout: float = 10.0,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self._client = client or httpx.AsyncClient(timeout=timeout)

    async def aclose(self) -> None:
        await self._client.aclose()

    async def fetch_albums(self) -> list[Album]:
        rows = await self._get_list("/albums")
        albums = [album for album in map(_parse_album, rows) if album is not None]
        logger.debug("Catalog listed %d albums.", len(albums))
        return albums

    async def fetch_collection_tracks(self, album_name: str) -> list[Track]:
        """Return the ordered tracks of `album_name`."""
        rows = await self._get_list(f"/album/{quote(album_name, safe='')}")
        tracks = [track for track in map(_parse_track, rows) if track is not None]
        logger.debug("Catalog returned %d tracks for %r.", len(tracks), album_name)
        return tracks

    def album_cover_url(self, album: Album) -> str | None:
        if album.cover_url:
            return album.cover_url
        if album.id is not None and album.id > 0:
            return f"{self.base_url}/album-cover/{album.id}"
        return None

    async def _get_list(self, path: str) -> list[Any]:
        url = f"{self.base_url}{path}"
        try:
            response = await self._client.get(url)
            response.raise_for_status()
            payload = response.json()
        except httpx.TimeoutException as exc:
            raise CatalogError(f"Catalog request timed out after {self.timeout}s") from exc
        except httpx.HTTPStatusError as exc:
            raise CatalogError(
                f"Catalog request {path} failed: HTTP {exc.response.status_code}"
            ) from exc
        except httpx.HTTPError as exc:
            raise CatalogError(f"Cannot reach catalog at {self.base_url}: {exc}") from exc
        except ValueError as exc:
            raise CatalogError(f"Catalog response for {path} is not JSON") from exc
        if not isinstance(payload, list):
            raise CatalogError(f"Catalog response for {path} is not a list")
        return payload


def _parse_track(row: Any) -> Track | None:
    if not isinstance(row, dict):
        logger.warning("Skipping catalog track row that is not an object: %r", row)
        return None
    track_id = row.get("id")
    if isinstance(track_id, bool) or not isinstance(track_id, int):
        logger.warning("Skipping catalog track without an integer id: %r", row)
        return None
    return Track(
        id=track_id,
        title=_str_or_default(row.get("title"), ""),
        artist=_str_or_default(row.get("artist"), ""),
        album=_str_or_default(row.get("album"), ""),
        duration_seconds=_duration_or_none(row.get("durationSeconds")),
        cover_url=_str_or_none(row.get("coverUrl")),
    )


def _parse_album(row: Any) -> Album | None:
    if not isinstance(row, dict) or not isinstance(row.get("album"), str):
        logger.warning("Skipping catalog album row without a name: %r", row)
        return None
    track_count = row.get("trackCount")
    if isinstance(track_count, str) and track_count.strip().isdigit():
        track_count = int(track_count)
    album_id = row.get("id")
    return Album(
        album=row["album"],
        artist=_str_or_default(row.get("artist"), ""),
        track_count=track_count
        if isinstance(track_count, int) and not isinstance(track_count, bool)
        else 0,
        cover_url=_str_or_none(row.get("coverUrl")),
        id=album_id
        if isinstance(album_id, int) and not isinstance(album_id, bool)
        else None,
    )


def _duration_or_none(value: Any) -> float | None:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return None
    numeric = float(value)
    if not math.isfinite(numeric) or numeric < 0:
        return None
    return numeric


def _str_or_default(value: Any, default: str) -> str:
    return value if isinstance(value, str) else default


def _str_or_none(value: Any) -> str | None:
    return value if isinstance(value, str) and value else None
