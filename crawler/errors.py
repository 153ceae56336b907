"""Error types raised and recorded while crawling.

Stage-tagged ``CrawlError`` values are never raised out of a crawl; they
are collected alongside the results (or streamed) so one broken page or
card does not abort the run.  Only ``ConfigurationError`` and
``CrawlTimeoutError`` escape to the caller.
"""

from __future__ import annotations

import enum
from typing import Any


class CrawlStage(str, enum.Enum):
    """Extraction step that produced an error."""

    LISTING_FETCH = "listing_fetch"
    RATING_PARSE = "rating_parse"
    DURATION_PARSE = "duration_parse"
    DETAIL_FETCH = "detail_fetch"
    PRICE_PARSE = "price_parse"


class FetchError(Exception):
    """Raised by a document fetcher when a page cannot be retrieved."""

    def __init__(self, url: str, reason: str) -> None:
        super().__init__(f"failed to fetch {url}: {reason}")
        self.url = url
        self.reason = reason


class ConfigurationError(ValueError):
    """Raised when a crawler is constructed with invalid settings."""

    pass


class CrawlTimeoutError(TimeoutError):
    """Raised by ``Crawler.run`` when the crawl deadline expires."""

    pass


class CrawlError(Exception):
    """A non-fatal failure tagged with the stage and item that produced it.

    Args:
        source: Page number for listing errors, otherwise the restaurant
            or detail-page URL.
        cause: The underlying exception, if any.
        detail: The raw text that failed to parse, if any.
    """

    stage: CrawlStage

    def __init__(
        self,
        source: int | str,
        *,
        cause: BaseException | None = None,
        detail: str | None = None,
    ) -> None:
        super().__init__(source, cause, detail)
        self.source = source
        self.cause = cause
        self.detail = detail

    def __str__(self) -> str:
        parts = [f"[{self.stage.value}] {self.source}"]
        if self.detail is not None:
            parts.append(f"value={self.detail!r}")
        if self.cause is not None:
            parts.append(str(self.cause))
        return " ".join(parts)

    def to_dict(self) -> dict[str, Any]:
        return {
            "stage": self.stage.value,
            "source": self.source,
            "detail": self.detail,
            "cause": str(self.cause) if self.cause is not None else None,
        }


class ListingFetchError(CrawlError):
    stage = CrawlStage.LISTING_FETCH


class RatingParseError(CrawlError):
    stage = CrawlStage.RATING_PARSE


class DurationParseError(CrawlError):
    stage = CrawlStage.DURATION_PARSE


class DetailFetchError(CrawlError):
    stage = CrawlStage.DETAIL_FETCH


class PriceParseError(CrawlError):
    stage = CrawlStage.PRICE_PARSE
