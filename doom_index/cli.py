"""
Doom Index command line interface

Usage:
    doom-index <command> [args]

Commands:
    evaluate    Run one minute evaluation and print the outcome as JSON
    watch       Evaluate at every minute boundary until interrupted
    archive     List archived generations, newest first
    serve       Run the HTTP API (uvicorn)
"""

from __future__ import annotations

import argparse
import asyncio
import json
import logging
import sys
import time
from typing import Any

from dotenv import load_dotenv

from doom_index.config import Settings
from doom_index.models.errors import error_to_dict
from doom_index.models.result import Err
from doom_index.services.container import ServiceContainer, build_container

logger = logging.getLogger("doom_index.cli")


def _print_json(data: Any) -> None:
    print(json.dumps(data, indent=2, ensure_ascii=False))


def seconds_until_next_minute(now: float | None = None) -> float:
    now = time.time() if now is None else now
    return 60.0 - (now % 60.0)


async def run_evaluate(container: ServiceContainer) -> int:
    result = await container.generation.evaluate_minute()
    if isinstance(result, Err):
        _print_json({"ok": False, "error": error_to_dict(result.error)})
        return 1
    _print_json({"ok": True, **result.value.to_dict()})
    return 0


async def run_watch(container: ServiceContainer, iterations: int | None = None) -> int:
    """Evaluate once per minute, aligned to the minute boundary."""
    failures = 0
    count = 0
    while iterations is None or count < iterations:
        if count:
            await asyncio.sleep(seconds_until_next_minute())
        result = await container.generation.evaluate_minute()
        count += 1
        if isinstance(result, Err):
            failures += 1
            logger.error("Evaluation failed: %s", result.error.message)
            continue
        evaluation = result.value
        if evaluation.generated:
            logger.info("Generated %s -> %s", evaluation.archive_id, evaluation.image_url)
        else:
            logger.info("Skipped %s (%s)", evaluation.minute_bucket, evaluation.skip_reason)
    return 1 if failures else 0


async def run_archive(
    container: ServiceContainer,
    limit: int = 20,
    cursor: str | None = None,
    start_date: str | None = None,
    end_date: str | None = None,
) -> int:
    result = await container.archive.list_images(
        limit=limit, cursor=cursor, start_date=start_date, end_date=end_date
    )
    if isinstance(result, Err):
        _print_json({"ok": False, "error": error_to_dict(result.error)})
        return 1
    page = result.value
    _print_json({
        "ok": True,
        "items": [item.model_dump() for item in page.items],
        "cursor": page.cursor,
        "has_more": page.has_more,
    })
    return 0


async def _dispatch(args: argparse.Namespace, settings: Settings) -> int:
    container = build_container(settings)
    try:
        if args.command == "evaluate":
            return await run_evaluate(container)
        if args.command == "watch":
            return await run_watch(container, iterations=args.iterations)
        return await run_archive(
            container,
            limit=args.limit,
            cursor=args.cursor,
            start_date=args.start_date,
            end_date=args.end_date,
        )
    finally:
        await container.aclose()


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="doom-index",
        description="Doom Index — one deterministic painting per minute from market caps",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument("--log-level", default=None, help="Override DOOM_LOG_LEVEL")

    subparsers = parser.add_subparsers(dest="command", help="Command to run")

    subparsers.add_parser("evaluate", help="Run one minute evaluation")

    watch_parser = subparsers.add_parser("watch", help="Evaluate at every minute boundary")
    watch_parser.add_argument(
        "--iterations",
        type=int,
        default=None,
        help="Stop after this many evaluations (default: run until interrupted)",
    )

    archive_parser = subparsers.add_parser("archive", help="List archived generations")
    archive_parser.add_argument("--limit", type=int, default=20)
    archive_parser.add_argument("--cursor", default=None)
    archive_parser.add_argument("--start-date", default=None, help="YYYY-MM-DD (inclusive)")
    archive_parser.add_argument("--end-date", default=None, help="YYYY-MM-DD (inclusive)")

    serve_parser = subparsers.add_parser("serve", help="Run the HTTP API")
    serve_parser.add_argument("--host", default="127.0.0.1")
    serve_parser.add_argument("--port", type=int, default=8000)

    return parser


def main(argv: list[str] | None = None) -> int:
    """Doom Index CLI entry point."""
    load_dotenv()
    parser = build_parser()
    args = parser.parse_args(argv)

    if args.command is None:
        parser.print_help()
        return 0

    settings = Settings()
    level = args.log_level or settings.doom_log_level
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format="%(asctime)s %(name)s %(levelname)s %(message)s",
        stream=sys.stderr,
    )

    if args.command == "serve":
        import uvicorn

        uvicorn.run("doom_index.main:app", host=args.host, port=args.port, log_level=level.lower())
        return 0

    try:
        return asyncio.run(_dispatch(args, settings))
    except KeyboardInterrupt:
        logger.info("Interrupted")
        return 130


if __name__ == "__main__":
    sys.exit(main())
