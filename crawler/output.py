"""Write crawled restaurant data to JSON files."""

import json
import logging
from collections.abc import Sequence
from datetime import datetime, timezone
from pathlib import Path
from typing import Any

from crawler.errors import CrawlError
from crawler.models import Restaurant

logger = logging.getLogger(__name__)


def build_payload(
    restaurants: Sequence[Restaurant],
    errors: Sequence[CrawlError],
    source: str,
) -> dict[str, Any]:
    """JSON-ready document describing one crawl."""
    return {
        "restaurants": [r.model_dump(mode="json") for r in restaurants],
        "errors": [e.to_dict() for e in errors],
        "scraped_at": datetime.now(timezone.utc).isoformat(),
        "source": source,
        "count": len(restaurants),
        "error_count": len(errors),
    }


def write_results(
    restaurants: Sequence[Restaurant],
    errors: Sequence[CrawlError],
    source: str,
    output_dir: Path = Path("data"),
) -> Path:
    """Write crawled restaurants and errors to ``restaurants.json``.

    Args:
        restaurants: Completed restaurants, menus included.
        errors: Stage-tagged errors recorded during the crawl.
        source: Listing URL the crawl started from.
        output_dir: Directory to write into (created if missing).

    Returns:
        Path to the written file.
    """
    output_dir.mkdir(parents=True, exist_ok=True)
    path = output_dir / "restaurants.json"

    payload = build_payload(restaurants, errors, source)
    with open(path, "w", encoding="utf-8") as f:
        json.dump(payload, f, indent=2, ensure_ascii=False)

    logger.info(
        "Wrote %d restaurants and %d errors → %s", len(restaurants), len(errors), path
    )
    return path
