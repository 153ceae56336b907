"""Extract a restaurant's menu from its detail page."""

from __future__ import annotations

import logging
import re

from bs4 import BeautifulSoup, Comment, NavigableString, Tag

from crawler.errors import CrawlError, PriceParseError
from crawler.models import Meal, Serving
from crawler.selectors import DEFAULT_SELECTORS, SiteSelectors

logger = logging.getLogger(__name__)

_PRICE_RE = re.compile(r"\d+")


def detail_url(base_url: str, path: str) -> str:
    """Absolute URL of a detail page linked from a listing card."""
    if path.startswith(("http://", "https://")):
        return path
    return f"{base_url}{path}"


def _item_name(item: Tag, selectors: SiteSelectors) -> str:
    """Direct text of the name node, leaving out the nested description."""
    node = item.select_one(selectors.item_name)
    if node is None:
        return ""
    return "".join(
        str(s)
        for s in node.children
        if isinstance(s, NavigableString) and not isinstance(s, Comment)
    ).strip()


def _raw_price(serving: Tag, selectors: SiteSelectors) -> str:
    """Hidden numeric field first, then the second token of the visible price."""
    hidden = serving.select_one(selectors.serving_hidden_price)
    if hidden is not None and hidden.has_attr("value"):
        return str(hidden["value"]).strip()

    node = serving.select_one(selectors.serving_price_text)
    parts = node.get_text(strip=True).split() if node is not None else []
    # e.g. "Rs. 450"
    return parts[1] if len(parts) > 1 else ""


def _parse_servings(
    item: Tag,
    selectors: SiteSelectors,
    source: str,
    errors: list[CrawlError],
) -> list[Serving]:
    servings: list[Serving] = []
    for node in item.select(selectors.serving):
        kind_node = node.select_one(selectors.serving_kind)
        kind = kind_node.get_text(strip=True) if kind_node is not None else ""
        raw = _raw_price(node, selectors)
        try:
            if not _PRICE_RE.fullmatch(raw):
                raise ValueError(f"invalid price for serving {kind!r}")
            price = int(raw)
        except ValueError as exc:
            logger.warning("Error converting price %r to integer for %s", raw[:40], source)
            errors.append(PriceParseError(source, cause=exc, detail=raw))
            continue
        servings.append(Serving(kind=kind, price=price))
    return servings


def parse_menu(
    document: BeautifulSoup,
    source: str,
    selectors: SiteSelectors = DEFAULT_SELECTORS,
) -> tuple[tuple[Meal, ...], list[CrawlError]]:
    """Walk the menu sections of a detail page in document order.

    A serving whose price cannot be read is skipped and reported; its
    siblings and the rest of the menu are unaffected.

    Args:
        document: Parsed detail page.
        source: Detail page URL, used to tag errors.
        selectors: Site layout.

    Returns:
        The menu items and the errors recorded while parsing them.
    """
    meals: list[Meal] = []
    errors: list[CrawlError] = []

    for section in document.select(selectors.menu_category):
        label = section.select_one(selectors.category_label)
        category = label.get_text(strip=True) if label is not None else ""

        for item in section.select(selectors.menu_item):
            desc_node = item.select_one(selectors.item_description)
            description = desc_node.get_text(strip=True) if desc_node is not None else ""
            meal = Meal(
                category=category,
                name=_item_name(item, selectors),
                description=description or None,
                servings=tuple(_parse_servings(item, selectors, source, errors)),
            )
            meals.append(meal)

    logger.debug(
        "Parsed %d menu items (%d servings) from %s",
        len(meals),
        sum(len(m.servings) for m in meals),
        source,
    )
    return tuple(meals), errors
