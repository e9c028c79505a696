"""
Command-line entry point: run one ingestion pass and print the summary.
"""

import argparse
import asyncio
import json
import signal
import sys

import structlog

from award_scraper.config import MAX_CONTRACTS
from award_scraper.errors import IngestError
from award_scraper.pipeline import Pipeline, build_pipeline

# Configure structured logging
structlog.configure(
    processors=[
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.add_log_level,
        structlog.processors.JSONRenderer()
    ],
    logger_factory=structlog.PrintLoggerFactory(file=sys.stderr),
)

logger = structlog.get_logger()


def _install_signal_handlers(pipeline: Pipeline, task: asyncio.Task) -> None:
    """Close the browser on SIGTERM/SIGINT, then stop the run."""
    loop = asyncio.get_running_loop()

    async def shutdown(sig: signal.Signals) -> None:
        logger.info("shutdown_signal_received", signal=sig.name)
        await pipeline.close()
        task.cancel()

    for sig in (signal.SIGTERM, signal.SIGINT):
        try:
            loop.add_signal_handler(sig, lambda s=sig: asyncio.create_task(shutdown(s)))
        except NotImplementedError:
            # Windows event loops have no signal handler support
            pass


async def run_ingest(limit: int, persist: bool) -> dict:
    """Run the complete ingestion pipeline once."""
    pipeline = build_pipeline()
    _install_signal_handlers(pipeline, asyncio.current_task())

    try:
        summary = await pipeline.orchestrator.ingest(limit=limit, persist=persist)
        return summary.model_dump(mode="json")
    finally:
        await pipeline.close()


def main():
    """Main entry point."""
    parser = argparse.ArgumentParser(description="Ingest DoD contract awards")
    parser.add_argument("--limit", type=int, default=MAX_CONTRACTS,
                        help="Maximum number of articles to process")
    parser.add_argument("--save", action="store_true",
                        help="Upsert extracted events into Supabase")
    args = parser.parse_args()

    try:
        result = asyncio.run(run_ingest(args.limit, args.save))
    except asyncio.CancelledError:
        logger.info("ingest_interrupted")
        sys.exit(1)
    except IngestError as e:
        logger.error("ingest_failed", error=e.message, url=e.url)
        sys.exit(1)

    print(json.dumps(result, indent=2, ensure_ascii=False))
    sys.exit(0)


if __name__ == "__main__":
    main()
