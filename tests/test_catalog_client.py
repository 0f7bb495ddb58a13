"""Tests for the catalog HTTP client and engine collection loading."""

from __future__ import annotations

import asyncio

import httpx
import pytest

from remote_deck.events import QueueChanged
from remote_deck.models import Album, Track
from remote_deck.services.catalog_client import CatalogClient, CatalogError
from remote_deck.services.fake_transport import FakeRemoteTransport
from remote_deck.services.sync_engine import SyncEngine

ALBUM_ROWS = [
    {"album": "Blue Train", "artist": "Coltrane", "trackCount": 5, "id": 4},
    {"album": "Kind of Blue", "artist": "Davis", "trackCount": "6"},
    {"artist": "missing name"},
]

TRACK_ROWS = [
    {
        "id": 1,
        "title": "Blue Train",
        "artist": "Coltrane",
        "album": "Blue Train",
        "durationSeconds": 643,
    },
    {"id": 2, "title": "Moment's Notice", "artist": "Coltrane", "album": "Blue Train"},
    {"id": "3", "title": "bad id"},
    "not a row",
    {"id": 4, "title": "Locomotion", "durationSeconds": "n/a"},
]


def _catalog(handler) -> CatalogClient:
    return CatalogClient(
        "http://daemon.local",
        client=httpx.AsyncClient(transport=httpx.MockTransport(handler)),
    )


def _routes(request: httpx.Request) -> httpx.Response:
    if request.url.path == "/albums":
        return httpx.Response(200, json=ALBUM_ROWS)
    if request.url.path == "/album/Blue Train":
        return httpx.Response(200, json=TRACK_ROWS)
    return httpx.Response(404)


def test_fetch_albums_parses_rows() -> None:
    albums = asyncio.run(_catalog(_routes).fetch_albums())
    assert albums == [
        Album(album="Blue Train", artist="Coltrane", track_count=5, id=4),
        Album(album="Kind of Blue", artist="Davis", track_count=6),
    ]


def test_fetch_collection_tracks_tolerates_missing_duration() -> None:
    tracks = asyncio.run(_catalog(_routes).fetch_collection_tracks("Blue Train"))
    assert [track.id for track in tracks] == [1, 2, 4]
    assert tracks[0].duration_seconds == 643
    assert tracks[1].duration_seconds is None
    assert tracks[2].duration_seconds is None
    assert tracks[2].artist == ""


def test_http_failure_raises_catalog_error() -> None:
    with pytest.raises(CatalogError, match="HTTP 404"):
        asyncio.run(_catalog(_routes).fetch_collection_tracks("Unknown"))


def test_non_list_payload_raises_catalog_error() -> None:
    def handler(_request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, json={"error": "nope"})

    with pytest.raises(CatalogError, match="not a list"):
        asyncio.run(_catalog(handler).fetch_albums())


def test_invalid_json_raises_catalog_error() -> None:
    def handler(_request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, content=b"<html>")

    with pytest.raises(CatalogError, match="not JSON"):
        asyncio.run(_catalog(handler).fetch_albums())


def test_album_cover_url() -> None:
    catalog = _catalog(_routes)
    assert (
        catalog.album_cover_url(Album(album="a", artist="b", id=4))
        == "http://daemon.local/album-cover/4"
    )
    assert catalog.album_cover_url(Album(album="a", artist="b")) is None
    assert (
        catalog.album_cover_url(Album(album="a", artist="b", cover_url="/x.png"))
        == "/x.png"
    )


def test_engine_load_collection_replaces_queue() -> None:
    events: list[object] = []

    async def emit_event(event: object) -> None:
        events.append(event)

    async def run() -> list[Track]:
        engine = SyncEngine(
            transport=FakeRemoteTransport(),
            catalog=_catalog(_routes),
            emit_event=emit_event,
        )
        tracks = await engine.load_collection("Blue Train")
        assert [track.id for track in engine.queue] == [1, 2, 4]
        assert engine.queue.current_index is None
        await engine.shutdown()
        return tracks

    tracks = asyncio.run(run())
    assert len(tracks) == 3
    assert QueueChanged(album="Blue Train", track_count=3) in events


def test_engine_load_collection_failure_empties_queue(caplog) -> None:
    async def run() -> None:
        engine = SyncEngine(transport=FakeRemoteTransport(), catalog=_catalog(_routes))
        await engine.load_collection("Blue Train")
        assert len(engine.queue) == 3
        tracks = await engine.load_collection("Unknown")
        assert tracks == []
        assert len(engine.queue) == 0
        await engine.shutdown()

    asyncio.run(run())
    assert any("Error loading album tracks" in r.message for r in caplog.records)
