"""Concurrent crawl of a paginated delivery listing and every restaurant on it.

One task runs per listing page and one per restaurant card found on that
page.  A page task only finishes once all of its card tasks have, and the
run only finishes once all page tasks have.  Every result and error goes
through a single inbox queue to one aggregator task, which is the only
writer of the collected results (collect mode) or of the caller's output
queues (stream mode).
"""

from __future__ import annotations

import asyncio
import contextlib
import enum
import logging
import time
from collections.abc import AsyncIterator
from dataclasses import dataclass
from typing import Union

from bs4 import BeautifulSoup, Tag

from crawler.config import CrawlerSettings
from crawler.detail import detail_url, parse_menu
from crawler.durations import parse_duration
from crawler.errors import (
    ConfigurationError,
    CrawlError,
    CrawlTimeoutError,
    DetailFetchError,
    ListingFetchError,
)
from crawler.fetcher import DocumentFetcher, HttpDocumentFetcher
from crawler.listing import DurationParser, extract_summary, find_cards
from crawler.models import Restaurant
from crawler.selectors import DEFAULT_SELECTORS, SiteSelectors

logger = logging.getLogger(__name__)

_Message = Union[Restaurant, CrawlError, None]


class CrawlMode(str, enum.Enum):
    COLLECT = "collect"
    STREAM = "stream"


@dataclass(frozen=True)
class CrawlResult:
    """Everything one collect-mode crawl produced.

    Restaurants and errors are in completion order, not page/card order.
    """

    restaurants: tuple[Restaurant, ...]
    errors: tuple[CrawlError, ...]
    pages: int
    elapsed_seconds: float


class Crawler:
    """Crawl ``max_pages`` listing pages and the detail page of every card.

    In ``CrawlMode.COLLECT`` results are buffered and exposed through
    ``result`` once ``run()`` returns.  In ``CrawlMode.STREAM`` each
    restaurant is put on *out_items* and each error on *out_errors* as it
    completes, and *done* is set after the last of them.

    Raises:
        ConfigurationError: If the base URL or city is empty, or if stream
            mode is requested without all three output handles.
    """

    def __init__(
        self,
        settings: CrawlerSettings,
        *,
        mode: CrawlMode = CrawlMode.COLLECT,
        out_items: asyncio.Queue[Restaurant] | None = None,
        out_errors: asyncio.Queue[CrawlError] | None = None,
        done: asyncio.Event | None = None,
        fetcher: DocumentFetcher | None = None,
        selectors: SiteSelectors = DEFAULT_SELECTORS,
        duration_parser: DurationParser = parse_duration,
    ) -> None:
        if not settings.base_url:
            raise ConfigurationError("base_url must be set")
        if not settings.city:
            raise ConfigurationError("city must be set")
        if mode is CrawlMode.STREAM and (
            out_items is None or out_errors is None or done is None
        ):
            raise ConfigurationError(
                "out_items, out_errors and done must be provided in stream mode"
            )

        self._settings = settings
        self._base_url = settings.base_url
        self._listing_url = settings.listing_url
        self._max_pages = settings.max_pages
        self._mode = mode
        self._out_items = out_items
        self._out_errors = out_errors
        self._done = done
        self._fetcher = fetcher
        self._selectors = selectors
        self._duration_parser = duration_parser

        self._semaphore: asyncio.Semaphore | None = None
        self._restaurants: list[Restaurant] = []
        self._errors: list[CrawlError] = []
        self._restaurant_count = 0
        self._error_count = 0
        self._started = False
        self._finished = False
        self._elapsed = 0.0

        logger.debug("Created crawler for %s (mode=%s)", self._listing_url, mode.value)

    @property
    def listing_url(self) -> str:
        return self._listing_url

    @property
    def max_pages(self) -> int:
        return self._max_pages

    def page_url(self, page_no: int) -> str:
        return f"{self._listing_url}?&Search_PageNo={page_no}"

    @property
    def result(self) -> CrawlResult:
        """Collected restaurants and errors of a finished collect-mode run."""
        if self._mode is not CrawlMode.COLLECT:
            raise RuntimeError("results are only collected in collect mode")
        if not self._finished:
            raise RuntimeError("crawl has not finished")
        return CrawlResult(
            restaurants=tuple(self._restaurants),
            errors=tuple(self._errors),
            pages=self._max_pages,
            elapsed_seconds=self._elapsed,
        )

    # ------------------------------------------------------------------
    # Run
    # ------------------------------------------------------------------

    async def run(self) -> None:
        """Crawl every page and restaurant, returning when all are done.

        Raises:
            CrawlTimeoutError: If ``deadline_seconds`` expired.  Everything
                produced before the deadline has still been delivered.
            RuntimeError: If called more than once.
        """
        if self._started:
            raise RuntimeError("Crawler.run() can only be called once")
        self._started = True

        if self._settings.max_concurrency is not None:
            self._semaphore = asyncio.Semaphore(self._settings.max_concurrency)

        t0 = time.monotonic()
        logger.info(
            "Starting crawl of %s (%d pages)", self._listing_url, self._max_pages
        )

        inbox: asyncio.Queue[_Message] = asyncio.Queue()
        aggregator = asyncio.create_task(self._aggregate(inbox))
        timed_out = False
        try:
            async with self._open_fetcher() as fetcher:
                try:
                    async with asyncio.timeout(self._settings.deadline_seconds):
                        await self._crawl_pages(fetcher, inbox)
                except TimeoutError:
                    timed_out = True
        finally:
            # None marks the end of input; every worker has returned by now
            await inbox.put(None)
            await aggregator
            self._elapsed = time.monotonic() - t0
            self._finished = True

        logger.info(
            "Fetched %d restaurants with %d errors in %.2fs",
            self._restaurant_count,
            self._error_count,
            self._elapsed,
        )
        if timed_out:
            logger.error(
                "Crawl deadline of %ss expired; outstanding work was cancelled",
                self._settings.deadline_seconds,
            )
            raise CrawlTimeoutError(
                f"crawl did not finish within {self._settings.deadline_seconds}s"
            )

    @contextlib.asynccontextmanager
    async def _open_fetcher(self) -> AsyncIterator[DocumentFetcher]:
        if self._fetcher is not None:
            yield self._fetcher
            return
        async with HttpDocumentFetcher(
            timeout=self._settings.request_timeout,
            user_agent=self._settings.user_agent,
        ) as fetcher:
            yield fetcher

    async def _fetch(self, fetcher: DocumentFetcher, url: str) -> BeautifulSoup:
        if self._semaphore is None:
            return await fetcher.fetch(url)
        async with self._semaphore:
            return await fetcher.fetch(url)

    # ------------------------------------------------------------------
    # Workers
    # ------------------------------------------------------------------

    async def _crawl_pages(
        self, fetcher: DocumentFetcher, inbox: asyncio.Queue[_Message]
    ) -> None:
        async with asyncio.TaskGroup() as pages:
            for page_no in range(self._max_pages):
                pages.create_task(self._crawl_page(page_no, fetcher, inbox))

    async def _crawl_page(
        self,
        page_no: int,
        fetcher: DocumentFetcher,
        inbox: asyncio.Queue[_Message],
    ) -> None:
        url = self.page_url(page_no)
        logger.debug("Pulling page #%d: %s", page_no, url)
        try:
            document = await self._fetch(fetcher, url)
            cards = find_cards(document, self._selectors)
        except Exception as exc:
            logger.error("Error while reading listing page #%d: %s", page_no, exc)
            await inbox.put(ListingFetchError(page_no, cause=exc, detail=url))
            return

        logger.debug("Found %d restaurants on page %d", len(cards), page_no)
        async with asyncio.TaskGroup() as restaurants:
            for index, card in enumerate(cards):
                restaurants.create_task(
                    self._crawl_card(page_no, index, card, fetcher, inbox)
                )

    async def _crawl_card(
        self,
        page_no: int,
        index: int,
        card: Tag,
        fetcher: DocumentFetcher,
        inbox: asyncio.Queue[_Message],
    ) -> None:
        try:
            restaurant, errors = extract_summary(
                card, self._selectors, self._duration_parser
            )
        except Exception as exc:
            # Nothing usable on this card; the page's other cards carry on
            logger.exception("Error reading card %d on page #%d", index, page_no)
            await inbox.put(
                ListingFetchError(page_no, cause=exc, detail=f"card {index}")
            )
            return
        for error in errors:
            await inbox.put(error)

        if restaurant.url:
            restaurant = await self._attach_menu(restaurant, fetcher, inbox)
        else:
            logger.debug("No detail link for %r; skipping menu", restaurant.title)
        await inbox.put(restaurant)

    async def _attach_menu(
        self,
        restaurant: Restaurant,
        fetcher: DocumentFetcher,
        inbox: asyncio.Queue[_Message],
    ) -> Restaurant:
        url = detail_url(self._base_url, restaurant.url)
        logger.debug("Requesting detail page %s", url)
        try:
            document = await self._fetch(fetcher, url)
            menu, errors = parse_menu(document, url, self._selectors)
        except Exception as exc:
            logger.error("Error while reading detail page %s: %s", url, exc)
            await inbox.put(DetailFetchError(url, cause=exc))
            return restaurant

        for error in errors:
            await inbox.put(error)
        return restaurant.model_copy(update={"menu": menu})

    # ------------------------------------------------------------------
    # Aggregation
    # ------------------------------------------------------------------

    async def _aggregate(self, inbox: asyncio.Queue[_Message]) -> None:
        stream = self._mode is CrawlMode.STREAM
        while True:
            message = await inbox.get()
            if message is None:
                break
            if isinstance(message, CrawlError):
                self._error_count += 1
                if stream:
                    await self._out_errors.put(message)
                else:
                    self._errors.append(message)
            else:
                self._restaurant_count += 1
                if stream:
                    await self._out_items.put(message)
                else:
                    self._restaurants.append(message)
        if stream:
            self._done.set()


async def crawl(settings: CrawlerSettings, **kwargs) -> CrawlResult:
    """Run a collect-mode crawl and return its result.

    Keyword arguments are passed through to ``Crawler``.
    """
    crawler = Crawler(settings, mode=CrawlMode.COLLECT, **kwargs)
    await crawler.run()
    return crawler.result
