#!/usr/bin/env python3

# ruff: noqa: T201

from __future__ import annotations

import argparse
import asyncio
import json
import logging
import sys
from pathlib import Path
from signal import SIGINT, signal
from typing import TYPE_CHECKING, Any

from dotenv import load_dotenv

from arcdiff.app import build_service
from arcdiff.common.logging import configure_logging
from arcdiff.config import ConfigurationError
from arcdiff.config.pipeline import KNOWN_SOURCES
from arcdiff.domain.serialization import diff_data_to_payload, item_link_to_payload
from arcdiff.domain.snapshot import LinkRelation

if TYPE_CHECKING:
    from collections.abc import Sequence
    from types import FrameType

    from arcdiff.app import ReconciliationService
    from arcdiff.domain.types import ProviderId


def _positive_int(value: str) -> int:
    number = int(value)
    if number < 1:
        raise argparse.ArgumentTypeError(f"expected a positive integer, got {value}")
    return number


def _parse_args(argv: Sequence[str]) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        prog="arcdiff", description="Reconcile item catalogs of several data providers"
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging")
    commands = parser.add_subparsers(dest="command", required=True)

    diff = commands.add_parser("diff", help="Fetch all providers and print the diff report")
    diff.add_argument(
        "--sources",
        type=str,
        help=f"Comma-separated providers to compare ({', '.join(KNOWN_SOURCES)})",
    )
    diff.add_argument("--output", type=Path, help="Write JSON to this file instead of stdout")
    diff.add_argument("--top", type=_positive_int, help="Only emit the N most severe items")
    diff.add_argument("--no-raw", action="store_true", help="Omit raw provider payloads")

    snapshot = commands.add_parser("snapshot", help="Print the stored MetaForge snapshot")
    snapshot.add_argument("--output", type=Path, help="Write JSON to this file instead of stdout")
    snapshot.add_argument("--top", type=_positive_int, help="Only emit the first N items")
    snapshot.add_argument("--no-raw", action="store_true", help="Omit raw provider payloads")

    links = commands.add_parser("links", help="Print stored relations of one MetaForge item")
    links.add_argument("item_id", help="MetaForge item id")
    links.add_argument(
        "--relation",
        choices=[relation.value for relation in LinkRelation],
        help="Only this relation kind",
    )
    links.add_argument("--output", type=Path, help="Write JSON to this file instead of stdout")

    return parser.parse_args(list(argv))


def _parse_sources(value: str | None) -> tuple[ProviderId, ...] | None:
    if value is None:
        return None
    sources: list[ProviderId] = []
    for candidate in (part.strip().lower() for part in value.split(",")):
        if not candidate:
            continue
        if candidate not in KNOWN_SOURCES:
            raise ValueError(f"Unknown provider: {candidate}")
        if candidate not in sources:
            sources.append(candidate)
    if not sources:
        raise ValueError("--sources needs at least one provider")
    return tuple(sources)


async def _run(service: ReconciliationService, args: argparse.Namespace) -> Any:
    if args.command == "diff":
        response = await service.diff_data(args.sources)
        return diff_data_to_payload(response, include_raw=not args.no_raw, limit=args.top)
    if args.command == "snapshot":
        response = await service.snapshot_data()
        return diff_data_to_payload(response, include_raw=not args.no_raw, limit=args.top)
    relation = LinkRelation(args.relation) if args.relation else None
    links = await service.item_links(args.item_id, relation=relation)
    return [item_link_to_payload(link) for link in links]


def _emit(payload: Any, output: Path | None) -> None:
    rendered = json.dumps(payload, indent=2, ensure_ascii=False)
    if output is None:
        print(rendered)
        return
    output.parent.mkdir(parents=True, exist_ok=True)
    output.write_text(rendered + "\n", encoding="utf-8")
    print(f"Wrote {output}", file=sys.stderr)


def main(argv: Sequence[str] | None = None) -> None:
    """Main application entry point."""
    try:
        args = _parse_args(sys.argv[1:] if argv is None else argv)
        if args.command == "diff":
            args.sources = _parse_sources(args.sources)
    except ValueError as exc:
        print(f"Error: {exc}", file=sys.stderr)
        sys.exit(2)

    configure_logging(level=logging.DEBUG if args.verbose else logging.INFO)

    try:
        service = build_service()
        payload = asyncio.run(_run(service, args))
    except ConfigurationError as exc:
        print(f"Configuration error: {exc}", file=sys.stderr)
        sys.exit(2)
    except Exception as e:  # noqa: BLE001
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)

    _emit(payload, args.output)


def sigint_handler(_signal_received: int, _frame: FrameType | None) -> None:
    """Handle SIGINT (Ctrl+C) gracefully."""
    print("\nClosed by user (Ctrl+C)")
    sys.exit(0)


def run() -> None:
    """Console script entry point: load ``.env`` and handle Ctrl+C."""
    load_dotenv()
    signal(SIGINT, sigint_handler)
    main()


if __name__ == "__main__":
    run()
