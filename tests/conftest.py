"""Pytest configuration and fixtures."""

import asyncio
from collections.abc import Iterable, Sequence
from typing import Optional

import pytest
from bs4 import BeautifulSoup

from crawler.config import CrawlerSettings
from crawler.errors import FetchError

BASE_URL = "https://food.test"
CITY = "lahore"

# (kind, hidden price value or None, visible price text or None)
ServingRow = tuple[str, Optional[str], Optional[str]]
# (name, description or None, servings)
ItemRow = tuple[str, Optional[str], Sequence[ServingRow]]
# (category label, items)
SectionRow = tuple[str, Sequence[ItemRow]]


def page_url(page_no: int) -> str:
    return f"{BASE_URL}/{CITY}/delivery?&Search_PageNo={page_no}"


def card_html(
    *,
    href: str | None = "/restaurant/1",
    title: str | None = "Pizza Point",
    image: str | None = "/img/1.jpg",
    rating: str | None = "4",
    cuisine: str | None = "Italian, Fast Food",
    delivery: str | None = "30-40 min",
) -> str:
    """One listing card; pass ``None`` to leave a field out of the markup."""
    parts = ["<article>", '<div class="item-pic">']
    if href is not None:
        parts.append(f'<a href="{href}">View menu</a>')
    if image is not None:
        parts.append(f'<img src="{image}"/>')
    parts.append('</div><div class="item-title">')
    if title is not None:
        parts.append(f'<a href="{href or "#"}">{title}</a>')
    if rating is not None:
        parts.append(f'<span class="item-star-rating" data-rating="{rating}"></span>')
    parts.append('</div><div class="item-meta">')
    if cuisine is not None:
        parts.append(f'<div class="item-address">{cuisine}</div>')
    if delivery is not None:
        parts.append(
            '<div class="row-fluid">'
            f'<div class="span4"><span>Delivery</span><span>{delivery}</span></div>'
            '<div class="span4"><span>Minimum</span><span>Rs. 300</span></div>'
            "</div>"
        )
    parts.append("</div></article>")
    return "".join(parts)


def listing_html(cards: Iterable[str]) -> str:
    return (
        "<html><body><header>Restaurants</header>"
        f'<section id="listing-container">{"".join(cards)}</section>'
        "</body></html>"
    )


def detail_html(sections: Sequence[SectionRow]) -> str:
    parts = ['<html><body><div class="tab-content">']
    for category, items in sections:
        parts.append(f'<div class="tab-pane mspan7-menu"><h4> {category} </h4>')
        for name, description, servings in items:
            small = f"<small>{description}</small>" if description else ""
            parts.append(
                f'<div class="menu-item"><div class="menu-item-name">\n  {name}\n  {small}</div>'
                '<div class="menu-subitems">'
            )
            for kind, hidden, text in servings:
                parts.append(f'<div class="menu-subitem"><span class="subitem-name"> {kind} </span>')
                if text is not None:
                    parts.append(f'<div class="subitem-price"><span>{text}</span></div>')
                if hidden is not None:
                    parts.append(f'<input type="hidden" id="ItemPrice" value="{hidden}"/>')
                parts.append("</div>")
            parts.append("</div></div>")
        parts.append("</div>")
    parts.append("</div></body></html>")
    return "".join(parts)


def simple_menu(prefix: str = "Item") -> str:
    """Detail page with one category, one item and two servings."""
    return detail_html(
        [("Mains", [(f"{prefix} A", None, [("Regular", "450", None), ("Large", "650", None)])])]
    )


def soup(html: str) -> BeautifulSoup:
    return BeautifulSoup(html, "html.parser")


class StubFetcher:
    """In-memory ``DocumentFetcher`` serving canned HTML by URL.

    Unknown URLs fail with ``FetchError``.  Tracks every requested URL and
    the peak number of concurrent fetches.
    """

    def __init__(self, pages: dict[str, str] | None = None, delay: float = 0.0) -> None:
        self.pages = dict(pages or {})
        self.delay = delay
        self.requested: list[str] = []
        self.in_flight = 0
        self.max_in_flight = 0

    async def fetch(self, url: str) -> BeautifulSoup:
        self.requested.append(url)
        self.in_flight += 1
        self.max_in_flight = max(self.max_in_flight, self.in_flight)
        try:
            await asyncio.sleep(self.delay)
            if url not in self.pages:
                raise FetchError(url, "HTTP 404")
            return soup(self.pages[url])
        finally:
            self.in_flight -= 1


class GatedFetcher(StubFetcher):
    """``StubFetcher`` whose *gated* URLs block until ``gate`` is set."""

    def __init__(self, pages: dict[str, str], gated: Iterable[str]) -> None:
        super().__init__(pages)
        self.gated = set(gated)
        self.gate = asyncio.Event()
        self.blocked = asyncio.Event()

    async def fetch(self, url: str) -> BeautifulSoup:
        if url in self.gated:
            self.blocked.set()
            await self.gate.wait()
        return await super().fetch(url)


@pytest.fixture
def settings() -> CrawlerSettings:
    """Two-page crawl settings pointing at the fake site."""
    return CrawlerSettings(_env_file=None, base_url=BASE_URL, city=CITY, max_pages=2)


@pytest.fixture
def two_page_site() -> dict[str, str]:
    """Page 0 lists two restaurants, page 1 lists one."""
    return {
        page_url(0): listing_html(
            [
                card_html(href="/restaurant/1", title="Pizza Point"),
                card_html(href="/restaurant/2", title="Karahi House", rating="5"),
            ]
        ),
        page_url(1): listing_html([card_html(href="/restaurant/3", title="Burger Lab")]),
        f"{BASE_URL}/restaurant/1": simple_menu("Pizza"),
        f"{BASE_URL}/restaurant/2": simple_menu("Karahi"),
        f"{BASE_URL}/restaurant/3": simple_menu("Burger"),
    }
