"""Command line entry point.

Usage:
    catalog-enrich catalog.xlsx -o catalog_enriched.xlsx
    catalog-enrich catalog.xlsx --metric-only --pattern-fallback
    catalog-enrich --sample ToolCatalog_Sample.xlsx
"""
import argparse
import asyncio
import signal
import sys
from pathlib import Path
from typing import List, Optional

import structlog

from catalog_enricher.config import configure_logging, settings
from catalog_enricher.errors.exceptions import EnrichmentError
from catalog_enricher.models.progress import ProgressSnapshot
from catalog_enricher.services.browser import BrowserLauncher
from catalog_enricher.services.job_store import JobStore
from catalog_enricher.services.orchestrator import ResolutionOrchestrator, apply_pattern_fallback
from catalog_enricher.services.suppliers import build_strategy_registry
from catalog_enricher.services.tabular import read_records, write_records, write_sample

logger = structlog.get_logger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="catalog-enrich",
        description="Fill missing tool dimensions in a catalog from supplier websites",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=__doc__,
    )
    parser.add_argument("input", nargs="?", type=Path, help="Catalog workbook (.xlsx)")
    parser.add_argument(
        "-o", "--output", type=Path,
        help="Enriched workbook (default: <input>_enriched.xlsx)",
    )
    parser.add_argument(
        "--metric-only", action="store_true", default=None,
        help="Reject non-metric values instead of converting inches",
    )
    parser.add_argument(
        "--pattern-fallback", action="store_true",
        help="Infer still-missing values from part-number patterns after resolution",
    )
    parser.add_argument(
        "--no-browser", action="store_true",
        help="Skip the headless browser step",
    )
    parser.add_argument(
        "--concurrency", type=int, default=None,
        help=f"Records resolved in parallel (default: {settings.max_concurrency})",
    )
    parser.add_argument(
        "--sample", type=Path, metavar="PATH",
        help="Write a sample catalog to PATH and exit",
    )
    parser.add_argument("--log-level", default=settings.log_level)
    return parser


def log_progress(snapshot: ProgressSnapshot) -> None:
    logger.info(
        "progress",
        percent=snapshot.percent,
        completed=snapshot.completed,
        total=snapshot.total,
        success=snapshot.success_count,
        failed=snapshot.fail_count,
        current=snapshot.current_item,
    )


def default_output(input_path: Path) -> Path:
    return input_path.with_name(f"{input_path.stem}_enriched.xlsx")


async def enrich(args: argparse.Namespace) -> int:
    records = read_records(args.input)
    output = args.output or default_output(args.input)

    browser_enabled = settings.browser_enabled and not args.no_browser
    browser = BrowserLauncher() if browser_enabled else None
    registry = build_strategy_registry(
        browser=browser,
        metric_only=args.metric_only,
        browser_enabled=browser_enabled,
    )
    orchestrator = ResolutionOrchestrator(registry, max_concurrency=args.concurrency)
    store = JobStore(orchestrator)
    job_id = store.create_job(records)

    loop = asyncio.get_running_loop()
    try:
        loop.add_signal_handler(signal.SIGINT, store.cancel, job_id)
    except (NotImplementedError, RuntimeError):
        # Signal handlers are unavailable on some platforms (Windows)
        pass

    try:
        final = await store.start_resolution(job_id, sink=log_progress)
    finally:
        try:
            loop.remove_signal_handler(signal.SIGINT)
        except (NotImplementedError, RuntimeError):
            pass
        await registry.aclose()
        if browser is not None:
            await browser.aclose()

    enriched = store.get_records(job_id)
    if args.pattern_fallback:
        inferred = apply_pattern_fallback(enriched)
        logger.info("pattern_fallback_finished", records=len(inferred))

    write_records(enriched, output)
    print(
        f"{final.completed}/{final.total} processed, "
        f"{final.success_count} succeeded, {final.fail_count} failed -> {output}"
    )
    return 0


def main(argv: Optional[List[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    configure_logging(args.log_level)

    if args.sample:
        write_sample(args.sample)
        print(f"Sample catalog written to {args.sample}")
        return 0
    if args.input is None:
        parser.error("an input workbook is required (or use --sample PATH)")
    if args.concurrency is not None and args.concurrency < 1:
        parser.error("--concurrency must be at least 1")

    try:
        return asyncio.run(enrich(args))
    except EnrichmentError as e:
        logger.error("enrichment_failed", error=e.message)
        print(f"Error: {e.message}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())
