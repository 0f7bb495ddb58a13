"""Command-line interface for remote-deck."""

from __future__ import annotations

import argparse
import asyncio
import logging
import sys
from pathlib import Path

from rich.console import Console
from rich.table import Table

from . import __version__
from .events import PlaybackFinished, TrackChanged
from .logging_utils import setup_logging
from .paths import log_dir, state_path
from .runtime_config import (
    DEFAULT_DAEMON_URL,
    normalize_daemon_url,
    normalize_timeout,
    resolve_log_level,
)
from .services.catalog_client import CatalogClient, CatalogError
from .services.http_transport import HttpRemoteTransport
from .services.sync_engine import SyncEngine
from .state_store import BeliefStore, restore_belief
from .ui.now_playing import render_now_playing
from .utils.time_format import format_duration

logger = logging.getLogger(__name__)
console = Console()


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="remote-deck",
        description="Drive a remote playback daemon with a locally predicted state.",
    )
    parser.add_argument(
        "--version", action="version", version=f"%(prog)s {__version__}"
    )
    parser.add_argument("--verbose", action="store_true", help="Enable verbose output")
    parser.add_argument(
        "--quiet", action="store_true", help="Only show warnings and errors"
    )
    parser.add_argument("--log-file", help="Write logs to a file path")
    parser.add_argument(
        "--daemon-url",
        default=DEFAULT_DAEMON_URL,
        help=f"Playback daemon base URL (default: {DEFAULT_DAEMON_URL}).",
    )
    parser.add_argument(
        "--timeout", type=float, help="Daemon request timeout in seconds."
    )
    parser.add_argument("--state-file", help="Saved player state JSON path")

    commands = parser.add_subparsers(dest="command", required=True)
    commands.add_parser("status", help="Show the last known playback state.")
    commands.add_parser("albums", help="List catalog albums.")
    play = commands.add_parser("play", help="Play an album until it ends.")
    play.add_argument("album", help="Album name as listed by the catalog")
    play.add_argument(
        "--track", type=int, default=1, help="1-based track number to start from"
    )
    commands.add_parser("toggle", help="Pause or resume playback.")
    commands.add_parser("stop", help="Stop playback.")
    volume = commands.add_parser("volume", help="Set volume in percent (0-100).")
    volume.add_argument("percent", type=int)
    seek = commands.add_parser("seek", help="Seek to a position in seconds.")
    seek.add_argument("seconds", type=float)
    return parser


def _store_for(args: argparse.Namespace) -> BeliefStore:
    return BeliefStore(state_path(args.state_file))


async def _run_status(args: argparse.Namespace) -> int:
    belief = restore_belief(_store_for(args).load())
    console.print(render_now_playing(belief))
    return 0


async def _run_albums(args: argparse.Namespace, base_url: str, timeout: float) -> int:
    catalog = CatalogClient(base_url, timeout=timeout)
    try:
        albums = await catalog.fetch_albums()
    except CatalogError as exc:
        logger.warning("Failed to load albums: %s", exc)
        console.print(f"[red]Could not load albums:[/red] {exc}")
        return 1
    finally:
        await catalog.aclose()
    table = Table(title="Albums")
    table.add_column("Album")
    table.add_column("Artist")
    table.add_column("Tracks", justify="right")
    for album in albums:
        table.add_row(album.album, album.artist, str(album.track_count))
    console.print(table)
    return 0


async def _run_play(args: argparse.Namespace, base_url: str, timeout: float) -> int:
    finished = asyncio.Event()

    async def on_event(event: object) -> None:
        if isinstance(event, TrackChanged):
            console.print(
                f"[bold]{event.metadata.title}[/bold]  {event.metadata.artist}"
            )
        elif isinstance(event, PlaybackFinished):
            finished.set()

    transport = HttpRemoteTransport(base_url, timeout=timeout)
    catalog = CatalogClient(base_url, timeout=timeout)
    engine = SyncEngine.from_store(
        _store_for(args), transport=transport, catalog=catalog, emit_event=on_event
    )
    try:
        tracks = await engine.load_collection(args.album)
        if not 1 <= args.track <= len(tracks):
            console.print(
                f"[red]Album {args.album!r} has no track {args.track}"
                f" ({len(tracks)} tracks loaded).[/red]"
            )
            return 1
        for number, track in enumerate(tracks, start=1):
            console.print(
                f"{number:>3}. {track.title}  [dim]{format_duration(track.duration_seconds)}[/dim]"
            )
        await engine.select_track(tracks[args.track - 1])
        try:
            await finished.wait()
        except asyncio.CancelledError:
            await engine.stop()
            raise
        console.print(render_now_playing(engine.state))
        return 0
    finally:
        await engine.shutdown()
        await transport.aclose()
        await catalog.aclose()


async def _run_intent(args: argparse.Namespace, base_url: str, timeout: float) -> int:
    transport = HttpRemoteTransport(base_url, timeout=timeout)
    engine = SyncEngine.from_store(_store_for(args), transport=transport)
    try:
        if args.command == "toggle":
            await engine.toggle_play_pause()
        elif args.command == "stop":
            await engine.stop()
        elif args.command == "volume":
            await engine.set_volume(args.percent)
        elif args.command == "seek":
            await engine.seek(args.seconds)
        console.print(render_now_playing(engine.state))
        return 0
    finally:
        await engine.shutdown()
        await transport.aclose()


async def run_command(args: argparse.Namespace, base_url: str, timeout: float) -> int:
    if args.command == "status":
        return await _run_status(args)
    if args.command == "albums":
        return await _run_albums(args, base_url, timeout)
    if args.command == "play":
        return await _run_play(args, base_url, timeout)
    return await _run_intent(args, base_url, timeout)


def main() -> int:
    parser = build_parser()
    args = parser.parse_args()
    try:
        base_url = normalize_daemon_url(args.daemon_url)
    except ValueError as exc:
        parser.error(str(exc))
    timeout = normalize_timeout(args.timeout)
    try:
        level = resolve_log_level(verbose=args.verbose, quiet=args.quiet)
        setup_logging(
            log_dir=log_dir(),
            level=level,
            log_file=Path(args.log_file) if args.log_file else None,
            command=args.command,
        )
        logger.info("Starting remote-deck %s", args.command)
        return asyncio.run(run_command(args, base_url, timeout))
    except KeyboardInterrupt:
        print("Interrupted.", file=sys.stderr)
        return 130
    except Exception as exc:  # pragma: no cover - top-level safety net
        logger.exception("Unhandled error: %s", exc)
        print("Unexpected error. Re-run with --verbose for details.", file=sys.stderr)
        return 1


if __name__ == "__main__":
    raise SystemExit(main())
