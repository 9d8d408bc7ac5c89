"""Command-line interface for depscope."""

from __future__ import annotations

import argparse
import asyncio
import logging
import sys
from pathlib import Path

from depscope.config import load_config
from depscope.coordinator import DependencyAnalyser
from depscope.errors import AnalysisError
from depscope.pipeline import LEVELS, run, run_staged
from depscope.renderer import render_json, render_text, write_report

logger = logging.getLogger("depscope")


async def _stream(path: Path, delay: float) -> int:
    status = 0

    def _on_error(error: AnalysisError) -> None:
        nonlocal status
        status = 1
        print(f"Error: {error}")

    async with DependencyAnalyser(workers=1) as analyser:
        await analyser.analyze_dependencies_stream(path, delay=delay).subscribe(
            lambda event: print(", ".join(event)),
            _on_error,
            lambda: print("Analysis complete."),
        )
    return status


async def _staged(paths: list[Path], workers: int | None) -> None:
    async with DependencyAnalyser(workers=workers) as analyser:
        await run_staged(analyser, *paths)


def main(argv: list[str] | None = None) -> None:
    parser = argparse.ArgumentParser(
        prog="depscope",
        description="Static dependency analysis of Java source trees.",
    )
    parser.add_argument(
        "level",
        choices=[*LEVELS, "stream", "staged"],
        help="Report granularity, the incremental stream, or a staged class/package/project run",
    )
    parser.add_argument(
        "paths",
        nargs="+",
        type=Path,
        help="Source file or directory (staged takes CLASS_FILE PACKAGE_DIR PROJECT_DIR)",
    )
    parser.add_argument("--json", action="store_true", default=None, help="Emit JSON instead of text")
    parser.add_argument(
        "-o",
        "--output",
        type=Path,
        default=None,
        help="Write the report to this file instead of stdout",
    )
    parser.add_argument("--workers", type=int, default=None, help="Worker pool size")
    parser.add_argument(
        "--delay",
        type=float,
        default=None,
        help="Seconds to wait before each stream event (default: 0)",
    )
    parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help="Enable verbose (debug) output",
    )

    args = parser.parse_args(argv)

    logging.basicConfig(level=logging.WARNING, format="%(message)s")
    if args.verbose:
        logging.getLogger("depscope").setLevel(logging.DEBUG)

    anchor = args.paths[-1] if args.paths[-1].is_dir() else args.paths[-1].parent
    config = load_config(anchor).merged(
        workers=args.workers,
        stream_delay=args.delay,
        output_format="json" if args.json else None,
    )

    if args.level == "staged":
        if len(args.paths) != 3:
            parser.error("staged needs CLASS_FILE PACKAGE_DIR PROJECT_DIR")
        # Staged runs report through the log.
        logging.getLogger("depscope").setLevel(logging.DEBUG if args.verbose else logging.INFO)
    elif len(args.paths) != 1:
        parser.error(f"{args.level} takes exactly one path")

    try:
        if args.level == "stream":
            if asyncio.run(_stream(args.paths[0], config.stream_delay)):
                sys.exit(1)
            return
        if args.level == "staged":
            asyncio.run(_staged(args.paths, config.workers))
            return
        report = asyncio.run(run(args.level, args.paths[0], config))
    except AnalysisError as e:
        logger.error("Error: %s", e)
        sys.exit(1)

    as_json = config.output_format == "json"
    if args.output is not None:
        write_report(report, args.output, as_json=as_json)
        logger.info("Generated %s", args.output)
    else:
        print(render_json(report) if as_json else render_text(report))
