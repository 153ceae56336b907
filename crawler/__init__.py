"""Food-delivery listing and menu crawler.

Usage::

    python -m crawler --base-url https://www.example.pk --city lahore
    python -m crawler --stream                     # JSON lines as restaurants complete
    python -m crawler --max-concurrency 20         # cap in-flight fetches
"""

from crawler.config import CrawlerSettings
from crawler.errors import (
    ConfigurationError,
    CrawlError,
    CrawlStage,
    CrawlTimeoutError,
    FetchError,
)
from crawler.models import Meal, Restaurant, Serving
from crawler.orchestrator import Crawler, CrawlMode, CrawlResult, crawl

__all__ = [
    "Crawler",
    "CrawlMode",
    "CrawlResult",
    "CrawlerSettings",
    "crawl",
    "Restaurant",
    "Meal",
    "Serving",
    "CrawlError",
    "CrawlStage",
    "ConfigurationError",
    "CrawlTimeoutError",
    "FetchError",
]
