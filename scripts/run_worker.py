#!/usr/bin/env python3
"""
Run the media job worker against the configured infrastructure.

Usage:
    python scripts/run_worker.py [--once] [--queue-missing] [--status] [--env ENV]

Options:
    --once           Process the jobs pending right now, then exit
    --queue-missing  Queue missing jobs for every entity before starting
    --setup          Create job indexes and the chunk collection first
    --status         Print the processing status of every entity and exit
    --env            Settings environment (defaults to MEDIA_PIPELINE__APP__ENVIRONMENT)
"""

from __future__ import annotations

import argparse
import asyncio
import signal
from dataclasses import dataclass
from pathlib import Path

from media_pipeline.application.pipeline import Pipeline, build_pipeline
from media_pipeline.commons.settings import get_settings
from media_pipeline.commons.telemetry import configure_logging, get_logger

logger = get_logger("media_pipeline.scripts.run_worker")


@dataclass
class WorkerArgs:
    """Parsed command line arguments."""

    once: bool
    queue_missing: bool
    setup: bool
    status: bool
    environment: str | None
    config_dir: Path | None


def parse_args() -> WorkerArgs:
    """Parse command line arguments."""
    parser = argparse.ArgumentParser(
        description="Run the media processing job worker",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=__doc__,
    )
    parser.add_argument(
        "--once", action="store_true", help="Drain pending jobs once and exit"
    )
    parser.add_argument(
        "--queue-missing",
        action="store_true",
        help="Queue missing jobs for all entities before running",
    )
    parser.add_argument(
        "--setup",
        action="store_true",
        help="Create indexes and the chunk collection before running",
    )
    parser.add_argument(
        "--status",
        action="store_true",
        help="Print per-entity processing status and exit",
    )
    parser.add_argument("--env", default=None, help="Settings environment name")
    parser.add_argument(
        "--config-dir",
        type=Path,
        default=None,
        help="Directory containing appsettings*.json",
    )

    args = parser.parse_args()
    return WorkerArgs(
        once=args.once,
        queue_missing=args.queue_missing,
        setup=args.setup,
        status=args.status,
        environment=args.env,
        config_dir=args.config_dir,
    )


async def print_status(pipeline: Pipeline) -> None:
    """Print one line per entity with its artifacts and active jobs."""
    status = await pipeline.admission.get_processing_status()
    for entity in status.entities:
        active = ",".join(t.value for t in entity.active_job_types) or "-"
        variants = ",".join(q for q, present in entity.variants.items() if present)
        print(
            f"{entity.entity_id}\t{entity.title}\t"
            f"video={entity.has_video} transcript={entity.has_transcript} "
            f"summary={entity.has_summary} variants={variants or '-'} "
            f"active={active}"
        )
    print(
        f"{status.total_entities} entities, {status.needing_transcript} need a "
        f"transcript, {status.needing_transcode} need transcoding"
    )


async def run(args: WorkerArgs, pipeline: Pipeline) -> int:
    """Run the worker until interrupted, or once with ``--once``.

    Returns:
        Number of jobs processed by a ``--once`` run, otherwise 0.
    """
    if args.setup:
        await pipeline.setup()

    if args.status:
        await print_status(pipeline)
        return 0

    if args.queue_missing:
        queued = await pipeline.admission.queue_missing_for_all_entities()
        logger.info("Queued missing jobs", extra={"queued": len(queued)})

    if args.once:
        return await pipeline.worker.run_once()

    loop = asyncio.get_running_loop()
    for sig in (signal.SIGINT, signal.SIGTERM):
        loop.add_signal_handler(sig, pipeline.worker.stop)

    pipeline.worker.start()
    await pipeline.worker.wait_closed()
    return 0


async def main_async(args: WorkerArgs) -> int:
    settings = get_settings(args.config_dir, args.environment)
    configure_logging(
        level=settings.telemetry.log_level,
        format_type=settings.telemetry.log_format,
        service=settings.app.name,
    )
    pipeline = build_pipeline(settings)
    try:
        return await run(args, pipeline)
    finally:
        await pipeline.close()


def main() -> None:
    """Main entry point."""
    args = parse_args()
    processed = asyncio.run(main_async(args))
    if args.once:
        print(f"Processed {processed} job(s)")


if __name__ == "__main__":
    main()
