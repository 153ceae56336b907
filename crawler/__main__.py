"""Entry point for the delivery menu crawler.

Usage::

    python -m crawler --base-url https://www.example.pk --city lahore
    python -m crawler --max-pages 3 --max-concurrency 20     # cap in-flight fetches
    python -m crawler --deadline 120                         # give up after 2 minutes
    python -m crawler --stream                               # print restaurants as they arrive
    python -m crawler --output-dir data/
"""

import argparse
import asyncio
import logging
import sys
from collections import Counter
from collections.abc import Sequence
from pathlib import Path
from typing import Any

from dotenv import load_dotenv

load_dotenv()

from pydantic import ValidationError

from crawler.config import CrawlerSettings
from crawler.errors import ConfigurationError, CrawlError, CrawlTimeoutError
from crawler.fetcher import DocumentFetcher
from crawler.log import configure_logging
from crawler.models import Restaurant
from crawler.orchestrator import Crawler, CrawlMode
from crawler.output import write_results

logger = logging.getLogger(__name__)


async def _next_or_done(
    queue: asyncio.Queue[Any], done: asyncio.Event
) -> Any | None:
    """Next queued value, or ``None`` once *done* is set and nothing is left."""
    getter = asyncio.ensure_future(queue.get())
    stopper = asyncio.ensure_future(done.wait())
    await asyncio.wait(
        {getter, stopper}, return_when=asyncio.FIRST_COMPLETED
    )
    stopper.cancel()
    if getter.done():
        return getter.result()
    getter.cancel()
    return None


async def _print_stream(
    items: asyncio.Queue[Restaurant],
    errors: asyncio.Queue[CrawlError],
    done: asyncio.Event,
    seen_items: list[Restaurant],
    seen_errors: list[CrawlError],
) -> None:
    """Print one JSON line per restaurant as the crawl produces them."""

    def drain_errors() -> None:
        while not errors.empty():
            error = errors.get_nowait()
            seen_errors.append(error)
            logger.info("Crawl error: %s", error)

    while not (done.is_set() and items.empty()):
        restaurant = await _next_or_done(items, done)
        drain_errors()
        if restaurant is None:
            continue
        seen_items.append(restaurant)
        sys.stdout.write(restaurant.model_dump_json() + "\n")
        sys.stdout.flush()
    drain_errors()


async def run(
    settings: CrawlerSettings,
    stream: bool = False,
    output_dir: str = "data",
    fetcher: DocumentFetcher | None = None,
) -> int:
    """Execute one crawl and write its output.

    *fetcher* defaults to an HTTP fetcher built from *settings*.

    1. Crawl every listing page and every restaurant detail page.
    2. (Stream mode) print restaurants as they complete.
    3. Save restaurants and errors as JSON.
    4. Log summary statistics.

    Returns:
        Process exit code.
    """
    restaurants: list[Restaurant] = []
    errors: list[CrawlError] = []
    timed_out = False

    # --- Step 1: Crawl --------------------------------------------------------
    logger.info("Step 1/3: Crawling %s …", settings.listing_url)
    if stream:
        items: asyncio.Queue[Restaurant] = asyncio.Queue()
        error_queue: asyncio.Queue[CrawlError] = asyncio.Queue()
        done = asyncio.Event()
        crawler = Crawler(
            settings,
            mode=CrawlMode.STREAM,
            out_items=items,
            out_errors=error_queue,
            done=done,
            fetcher=fetcher,
        )
        printer = asyncio.create_task(
            _print_stream(items, error_queue, done, restaurants, errors)
        )
        try:
            await crawler.run()
        except CrawlTimeoutError as exc:
            logger.error("%s", exc)
            timed_out = True
        finally:
            await printer
    else:
        crawler = Crawler(settings, fetcher=fetcher)
        try:
            await crawler.run()
        except CrawlTimeoutError as exc:
            logger.error("%s; writing partial results", exc)
            timed_out = True
        restaurants = list(crawler.result.restaurants)
        errors = list(crawler.result.errors)

    # --- Step 2: Save ----------------------------------------------------------
    logger.info("Step 2/3: Writing results …")
    write_results(
        restaurants, errors, source=settings.listing_url, output_dir=Path(output_dir)
    )

    # --- Summary --------------------------------------------------------------
    logger.info("Step 3/3: Summary")
    _log_summary(restaurants, errors)
    return 1 if timed_out else 0


def _pct(part: int, total: int) -> float:
    return (part / total * 100) if total else 0.0


def _log_summary(
    restaurants: Sequence[Restaurant], errors: Sequence[CrawlError]
) -> None:
    """Log summary statistics about crawled data."""
    total = len(restaurants)
    with_menu = sum(1 for r in restaurants if r.menu)
    with_rating = sum(1 for r in restaurants if r.rating)
    with_image = sum(1 for r in restaurants if r.image_url)
    servings = sum(r.servings_count for r in restaurants)
    by_stage = Counter(e.stage.value for e in errors)

    logger.info("=" * 50)
    logger.info("CRAWL SUMMARY")
    logger.info("-" * 50)
    logger.info("Total restaurants: %d", total)
    logger.info("  With menu:    %d (%.0f%%)", with_menu, _pct(with_menu, total))
    logger.info("  With rating:  %d (%.0f%%)", with_rating, _pct(with_rating, total))
    logger.info("  With image:   %d (%.0f%%)", with_image, _pct(with_image, total))
    logger.info("Total servings: %d", servings)
    logger.info("Errors: %d", len(errors))
    for stage, count in sorted(by_stage.items()):
        logger.info("  %-16s %d", stage, count)
    logger.info("=" * 50)


def main() -> None:
    parser = argparse.ArgumentParser(
        description="Crawl a food-delivery listing and every restaurant menu on it."
    )
    parser.add_argument("--base-url", help="Site root (default: BASE_URL env).")
    parser.add_argument("--city", help="City slug (default: CITY env).")
    parser.add_argument(
        "--max-pages", type=int, help="Listing pages to crawl (default: MAX_PAGES env or 10)."
    )
    parser.add_argument(
        "--max-concurrency",
        type=int,
        help="Maximum in-flight page fetches (default: unbounded).",
    )
    parser.add_argument(
        "--deadline",
        type=float,
        dest="deadline_seconds",
        help="Abort the crawl after this many seconds.",
    )
    parser.add_argument(
        "--stream",
        action="store_true",
        help="Print each restaurant as a JSON line as soon as it is crawled.",
    )
    parser.add_argument(
        "--output-dir",
        default="data",
        help="Output directory for JSON files (default: data/).",
    )
    args = parser.parse_args()

    overrides = {
        key: value
        for key, value in {
            "base_url": args.base_url,
            "city": args.city,
            "max_pages": args.max_pages,
            "max_concurrency": args.max_concurrency,
            "deadline_seconds": args.deadline_seconds,
        }.items()
        if value is not None
    }
    try:
        settings = CrawlerSettings(**overrides)
    except ValidationError as exc:
        parser.error(str(exc))

    configure_logging(settings.app_env, settings.debug)

    try:
        code = asyncio.run(
            run(settings, stream=args.stream, output_dir=args.output_dir)
        )
    except ConfigurationError as exc:
        parser.error(str(exc))
    sys.exit(code)


if __name__ == "__main__":
    main()
