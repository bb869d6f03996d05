"""
Command line interface for Commute Packer.

Usage:
    commute-packer build --catalog catalog.jsonl --topic python --min 850 --max 950
    commute-packer build-v2 --catalog catalog.jsonl --topic python --level beginner --target 900
    commute-packer top-up --catalog catalog.jsonl --remaining 420 --topic python
    commute-packer watched --history history.json --user u1 --video vid1 --topic python
    commute-packer history --history history.json --user u1 --limit 10

Exit codes: 0 on success (under-filled packs included), 1 when assembly
or history storage fails, 2 for invalid arguments.
"""

from __future__ import annotations

import argparse
import json
import logging
import sys
from pathlib import Path
from typing import List, Optional

from commute_packer import __version__
from commute_packer.builder import (
    AssemblyError,
    CandidateSourceError,
    JsonlCatalogSource,
    PackerConfig,
    PackMode,
    WatchHistoryStore,
    assemble_pack,
    fill_remaining,
)
from commute_packer.builder.selection import DEFAULT_OVERBOOK_PCT
from commute_packer.builder.sources import HistoryStoreError
from commute_packer.core.models import Candidate, Level
from commute_packer.core.utils import serialize_pack

logger = logging.getLogger("commute_packer")

EXIT_OK = 0
EXIT_FAILURE = 1
EXIT_USAGE = 2


def _add_common_arguments(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("--catalog", type=Path, required=True, help="JSONL candidate catalog")
    parser.add_argument("--exclude", nargs="*", default=[], metavar="ID", help="Video ids to skip")
    parser.add_argument("--json", action="store_true", help="Print the result as JSON")
    parser.add_argument("-v", "--verbose", action="store_true", help="Debug logging")


def _add_pack_arguments(parser: argparse.ArgumentParser) -> None:
    _add_common_arguments(parser)
    parser.add_argument("--topic", required=True, help="Topic tag to build the pack for")
    parser.add_argument("--block", nargs="*", default=[], metavar="SOURCE", help="Source ids to block")
    parser.add_argument("--history", type=Path, help="Watch history JSON (needs --user)")
    parser.add_argument("--user", help="User whose watched videos are excluded")
    parser.add_argument("--seed", type=int, help="Seed recorded with the pack")
    parser.add_argument("--output", type=Path, help="Directory for pack_metadata.json")
    parser.add_argument("--strict", action="store_true", help="Full schema validation of the catalog")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="commute-packer",
        description="Assemble educational video packs that fit a commute.",
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    sub = parser.add_subparsers(dest="command", required=True)

    build = sub.add_parser("build", help="Pack a [min, max] window (level optional)")
    _add_pack_arguments(build)
    build.add_argument("--min", dest="min_sec", type=int, required=True, help="Window minimum (s)")
    build.add_argument("--max", dest="max_sec", type=int, required=True, help="Window maximum (s)")
    build.add_argument("--level", help="Optional level filter")

    build_v2 = sub.add_parser("build-v2", help="Pack target ±60s at an exact level")
    _add_pack_arguments(build_v2)
    build_v2.add_argument("--target", type=int, required=True, help="Commute length (s)")
    build_v2.add_argument("--level", required=True, help="beginner, intermediate or advanced")

    top_up = sub.add_parser("top-up", help="Fill the remaining seconds of a commute")
    _add_common_arguments(top_up)
    top_up.add_argument("--remaining", type=int, required=True, help="Seconds left to fill")
    top_up.add_argument("--topic", help="Optional topic tag filter")
    top_up.add_argument(
        "--overbook", type=float, default=DEFAULT_OVERBOOK_PCT,
        help=f"Allowed overshoot fraction (default {DEFAULT_OVERBOOK_PCT})",
    )

    watched = sub.add_parser("watched", help="Record a watched video in the history")
    watched.add_argument("--history", type=Path, required=True, help="Watch history JSON")
    watched.add_argument("--user", required=True, help="Viewer id")
    watched.add_argument("--video", required=True, help="Watched video id")
    watched.add_argument("--topic", required=True, help="Topic the video was watched under")
    watched.add_argument("--duration", type=int, default=0, help="Video length (s)")
    watched.add_argument("--completion", type=float, default=100, help="Percent watched, 0-100")
    watched.add_argument("--json", action="store_true", help="Print the record as JSON")
    watched.add_argument("-v", "--verbose", action="store_true", help="Debug logging")

    history = sub.add_parser("history", help="Show or clear watch history")
    history.add_argument("--history", type=Path, required=True, help="Watch history JSON")
    history.add_argument("--user", help="Viewer id (required unless --clear)")
    history.add_argument("--topic", help="Optional topic filter")
    history.add_argument("--limit", type=int, default=50, help="Most recent records to show")
    history.add_argument("--clear", action="store_true", help="Remove every record")
    history.add_argument("--json", action="store_true", help="Print records as JSON")
    history.add_argument("-v", "--verbose", action="store_true", help="Debug logging")
    return parser


def _config_from_args(args: argparse.Namespace) -> PackerConfig:
    level = Level.parse(args.level) if args.level else None
    common = dict(
        topic=args.topic,
        level=level,
        catalog_path=args.catalog,
        strict_catalog=args.strict,
        history_path=args.history,
        user_id=args.user,
        excluded_ids=list(args.exclude),
        blocked_source_ids=list(args.block),
        seed=args.seed,
        output_dir=args.output,
    )
    if args.command == "build-v2":
        return PackerConfig(mode=PackMode.V2, target_seconds=args.target, **common)
    return PackerConfig(
        mode=PackMode.LEGACY,
        min_duration_sec=args.min_sec,
        max_duration_sec=args.max_sec,
        **common,
    )


def _format_items(items: tuple[Candidate, ...]) -> List[str]:
    lines = []
    for i, c in enumerate(items, start=1):
        minutes, seconds = divmod(c.duration_sec, 60)
        title = c.title or c.id
        source = f" [{c.source_title or c.source_id}]" if (c.source_title or c.source_id) else ""
        lines.append(f"{i:2d}. {minutes:2d}:{seconds:02d}  {title}{source}")
    return lines


def _run_pack(args: argparse.Namespace) -> int:
    config = _config_from_args(args)
    result = assemble_pack(config)
    pack = result.pack

    if args.json:
        print(json.dumps(
            serialize_pack(pack, topic=config.topic, mode=config.mode.value, warnings=list(result.warnings)),
            indent=2,
        ))
        return EXIT_OK

    for line in _format_items(pack.items):
        print(line)
    print(
        f"Total: {pack.total_duration_sec}s in window "
        f"{pack.window.min_duration_sec}-{pack.window.max_duration_sec}s"
        f"{' (under-filled)' if pack.under_filled else ''}"
    )
    return EXIT_OK


def _run_top_up(args: argparse.Namespace) -> int:
    try:
        candidates = JsonlCatalogSource(args.catalog).load_all()
    except CandidateSourceError as e:
        raise AssemblyError(f"Failed to load catalog: {e}") from e

    result = fill_remaining(
        candidates,
        args.remaining,
        excluded_ids=args.exclude,
        topic=args.topic,
        overbook_pct=args.overbook,
    )

    if args.json:
        print(json.dumps(result.to_dict(), indent=2))
        return EXIT_OK

    for line in _format_items(result.items):
        print(line)
    print(f"Total: {result.total_duration_sec}s of {args.remaining}s ({result.strategy})")
    return EXIT_OK


def _run_watched(args: argparse.Namespace) -> int:
    store = WatchHistoryStore(args.history)
    if store.has_watched(args.user, args.video):
        logger.info(f"{args.video} already in history for {args.user}; recording repeat view")

    record = store.add_watched(
        args.user,
        args.video,
        args.topic,
        duration_sec=args.duration,
        completion_percent=args.completion,
    )

    if args.json:
        print(json.dumps(record.to_dict(), indent=2))
    else:
        print(f"Recorded {record.video_id} ({record.topic}) for {record.user_id}")
    return EXIT_OK


def _run_history(args: argparse.Namespace) -> int:
    store = WatchHistoryStore(args.history)
    if args.clear:
        store.clear()
        print(f"Cleared {args.history}")
        return EXIT_OK
    if not args.user:
        raise ValueError("--user is required unless --clear is given")
    if args.limit <= 0:
        raise ValueError(f"--limit must be positive: {args.limit}")

    records = store.get_history(args.user, args.topic, limit=args.limit)

    if args.json:
        print(json.dumps([r.to_dict() for r in records], indent=2))
        return EXIT_OK

    for r in records:
        print(f"{r.watched_at}  {r.video_id}  {r.topic}  {r.completion_percent:g}%")
    print(f"{len(records)} record(s) for {args.user}")
    return EXIT_OK


_COMMANDS = {
    "build": _run_pack,
    "build-v2": _run_pack,
    "top-up": _run_top_up,
    "watched": _run_watched,
    "history": _run_history,
}


def main(argv: Optional[List[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(message)s",
    )

    try:
        return _COMMANDS[args.command](args)
    except ValueError as e:
        logger.error(f"Invalid request: {e}")
        return EXIT_USAGE
    except (AssemblyError, HistoryStoreError) as e:
        logger.error(str(e))
        return EXIT_FAILURE


if __name__ == "__main__":
    sys.exit(main())
