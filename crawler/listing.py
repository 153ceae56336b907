"""Extract restaurant summaries from listing-page cards."""

from __future__ import annotations

import logging
from collections.abc import Callable
from datetime import timedelta
from typing import Any

from bs4 import BeautifulSoup, Tag

from crawler.durations import parse_duration
from crawler.errors import CrawlError, DurationParseError, RatingParseError
from crawler.models import Restaurant
from crawler.selectors import DEFAULT_SELECTORS, SiteSelectors

logger = logging.getLogger(__name__)

DurationParser = Callable[[str], timedelta]

_MAX_RATING = 5


def find_cards(
    document: BeautifulSoup,
    selectors: SiteSelectors = DEFAULT_SELECTORS,
) -> list[Tag]:
    """Return the restaurant cards on a listing page in document order."""
    return document.select(selectors.listing_card)


def _text(card: Tag, selector: str) -> str:
    node = card.select_one(selector)
    return node.get_text(strip=True) if node is not None else ""


def _attr(card: Tag, selector: str, attr: str) -> str | None:
    node = card.select_one(selector)
    if node is None or not node.has_attr(attr):
        return None
    return str(node[attr])


def _parse_rating(raw: str) -> int:
    rating = int(raw.strip())
    if not 0 <= rating <= _MAX_RATING:
        raise ValueError(f"rating {rating} outside 0..{_MAX_RATING}")
    return rating


def _delivery_text(card: Tag, selector: str) -> str:
    block = card.select_one(selector)
    if block is None:
        return ""
    children = block.find_all(recursive=False)
    if not children:
        return ""
    return children[-1].get_text(strip=True)


def extract_summary(
    card: Tag,
    selectors: SiteSelectors = DEFAULT_SELECTORS,
    duration_parser: DurationParser = parse_duration,
) -> tuple[Restaurant, list[CrawlError]]:
    """Build a menu-less ``Restaurant`` from one listing card.

    Missing optional fields keep their zero value without an error.  A
    rating or delivery time that is present but unparseable (including any
    exception raised by *duration_parser*) is reported as a stage-tagged
    error; that field stays at its zero value and the remaining fields
    are still extracted, so the card is always returned.

    Returns:
        The restaurant summary and the errors recorded while parsing it.
    """
    errors: list[CrawlError] = []
    fields: dict[str, Any] = {
        "image_url": _attr(card, selectors.card_image, "src"),
        "url": _attr(card, selectors.card_link, "href") or "",
        "title": _text(card, selectors.card_title),
        "cuisine": _text(card, selectors.card_cuisine),
    }
    source = fields["url"] or fields["title"]

    raw_rating = _attr(card, selectors.card_rating, selectors.card_rating_attr)
    if raw_rating is not None:
        try:
            fields["rating"] = _parse_rating(raw_rating)
        except ValueError as exc:
            logger.warning("Error parsing rating %r for %s: %s", raw_rating, source, exc)
            errors.append(RatingParseError(source, cause=exc, detail=raw_rating))

    raw_delivery = _delivery_text(card, selectors.card_delivery_time)
    if raw_delivery:
        try:
            fields["delivery_time"] = duration_parser(raw_delivery)
        except Exception as exc:
            logger.warning(
                "Error parsing delivery time %r for %s: %s", raw_delivery, source, exc
            )
            errors.append(DurationParseError(source, cause=exc, detail=raw_delivery))

    restaurant = Restaurant(**fields)
    logger.debug(
        "Parsed restaurant %r (url=%s, rating=%d, cuisine=%r, delivery=%s)",
        restaurant.title,
        restaurant.url,
        restaurant.rating,
        restaurant.cuisine,
        restaurant.delivery_time,
    )
    return restaurant, errors
