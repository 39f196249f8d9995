"""Operator CLI for scraping games and inspecting the cache.

Usage::

    python -m nextwipe.cli scrape rust
    python -m nextwipe.cli scrape --all --no-cache
    python -m nextwipe.cli status
    python -m nextwipe.cli serve

``scrape`` runs the same strategy chains as the API.  Without
``--no-cache`` results are written to the cache store exactly as a
``?refresh=true`` request would; with it they are only printed.
"""

from __future__ import annotations

import argparse
import asyncio
import json
import sys
from typing import Any

from nextwipe.config.settings import Settings


async def _close(components: dict[str, Any]) -> None:
    await components["browser_manager"].close()
    await components["http_client"].aclose()


async def _handle_scrape(args: argparse.Namespace, app_settings: Settings) -> int:
    """Scrape one game (or every game) and print each record as JSON."""
    from nextwipe.main import _build_all
    from nextwipe.utils.errors import NextWipeError

    components = _build_all(app_settings)
    wipe_service = components["wipe_service"]
    scrapers = components["scrapers"]

    game_ids = list(scrapers) if args.all else [args.game]
    unknown = [g for g in game_ids if g not in scrapers]
    if unknown:
        print(f"Unknown game(s): {', '.join(unknown)}", file=sys.stderr)
        print(f"Known games: {', '.join(sorted(scrapers))}", file=sys.stderr)
        await _close(components)
        return 1

    failures = 0
    try:
        for game_id in game_ids:
            try:
                if args.no_cache:
                    payload = (await scrapers[game_id].scrape()).to_payload()
                else:
                    payload = (await wipe_service.get_wipe(game_id, force_refresh=True)).to_payload()
            except NextWipeError as exc:
                failures += 1
                print(f"{game_id}: FAILED ({exc})", file=sys.stderr)
                continue
            print(f"{game_id}:")
            print(json.dumps(payload, indent=2))
    finally:
        await _close(components)

    return 1 if failures else 0


async def _handle_status(app_settings: Settings) -> int:
    """Print every cached record with its validation verdict."""
    from nextwipe.main import _build_all
    from nextwipe.services.cache_validator import get_smart_cache_duration, validate_cached_data

    components = _build_all(app_settings)
    wipe_service = components["wipe_service"]

    print("Cache Status")
    print("=" * 72)
    try:
        for game_id, profile in wipe_service.profiles.items():
            cached = await wipe_service.read_cached(game_id)
            if cached is None:
                print(f"  {game_id:<14} (no cache)")
                continue
            verdict = validate_cached_data(
                cached,
                max_cache_age=get_smart_cache_duration(cached.event_type, cached.confirmed),
            )
            state = "valid" if verdict.is_valid else f"stale: {verdict.reason}"
            confirmed = "confirmed" if cached.confirmed else "estimated"
            print(f"  {game_id:<14} next={cached.next_wipe}  {confirmed:<9}  {state}")
            print(f"  {'':<14} source={cached.source}  scraped={cached.scraped_at}")
    finally:
        await _close(components)

    return 0


def _handle_serve(app_settings: Settings) -> int:
    import uvicorn

    uvicorn.run(
        "nextwipe.main:app",
        host=app_settings.app_host,
        port=app_settings.app_port,
        reload=(app_settings.app_env == "development"),
    )
    return 0


# ---------------------------------------------------------------------------
# Argument parser
# ---------------------------------------------------------------------------


def _build_parser() -> argparse.ArgumentParser:
    """Build the argparse parser for the nextwipe CLI."""
    parser = argparse.ArgumentParser(
        prog="python -m nextwipe.cli",
        description="Scrape game wipe schedules and inspect the cache.",
    )
    subparsers = parser.add_subparsers(dest="command")

    scrape_parser = subparsers.add_parser("scrape", help="Run scrapers for one or all games")
    target = scrape_parser.add_mutually_exclusive_group(required=True)
    target.add_argument("game", nargs="?", help="Game id, e.g. rust or poe2")
    target.add_argument("--all", action="store_true", help="Scrape every tracked game")
    scrape_parser.add_argument(
        "--no-cache",
        action="store_true",
        help="Print results without writing the cache",
    )

    subparsers.add_parser("status", help="Show cached records and their validity")
    subparsers.add_parser("serve", help="Run the API server with uvicorn")

    return parser


def main(argv: list[str] | None = None) -> None:
    """CLI entry point: parse the subcommand and dispatch to its handler."""
    parser = _build_parser()
    args = parser.parse_args(argv)

    if args.command is None:
        parser.print_help()
        sys.exit(1)

    app_settings = Settings()

    if args.command == "scrape":
        exit_code = asyncio.run(_handle_scrape(args, app_settings))
    elif args.command == "status":
        exit_code = asyncio.run(_handle_status(app_settings))
    elif args.command == "serve":
        exit_code = _handle_serve(app_settings)
    else:
        parser.print_help()
        exit_code = 1

    sys.exit(exit_code)


if __name__ == "__main__":
    main()
