"""Fetch pages over HTTP and parse them with BeautifulSoup."""

from __future__ import annotations

import logging
from types import TracebackType
from typing import Protocol

import httpx
from bs4 import BeautifulSoup

from crawler.errors import FetchError

logger = logging.getLogger(__name__)

DEFAULT_USER_AGENT = "Mozilla/5.0 (compatible; DeliveryMenuCrawler/1.0)"
DEFAULT_TIMEOUT = 15.0


class DocumentFetcher(Protocol):
    """Anything that turns a URL into a queryable document."""

    async def fetch(self, url: str) -> BeautifulSoup:
        """Return the parsed document at *url* or raise ``FetchError``."""
        ...


class HttpDocumentFetcher:
    """``DocumentFetcher`` backed by a shared ``httpx.AsyncClient``.

    Use as an async context manager; the client is closed on exit unless
    it was passed in by the caller.
    """

    def __init__(
        self,
        *,
        timeout: float = DEFAULT_TIMEOUT,
        user_agent: str = DEFAULT_USER_AGENT,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        self._owns_client = client is None
        self._client = client or httpx.AsyncClient(
            timeout=timeout,
            follow_redirects=True,
            headers={"User-Agent": user_agent},
        )

    async def __aenter__(self) -> HttpDocumentFetcher:
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        if self._owns_client:
            await self._client.aclose()

    async def fetch(self, url: str) -> BeautifulSoup:
        """GET *url* and return parsed soup.

        Raises:
            FetchError: On an invalid URL, transport errors, non-2xx
                responses, or a response that is not HTML.
        """
        try:
            resp = await self._client.get(url)
            resp.raise_for_status()
        except httpx.HTTPStatusError as exc:
            raise FetchError(url, f"HTTP {exc.response.status_code}") from exc
        except (httpx.HTTPError, httpx.InvalidURL) as exc:
            raise FetchError(url, str(exc) or type(exc).__name__) from exc

        content_type = resp.headers.get("content-type", "")
        if "text/html" not in content_type:
            raise FetchError(url, f"unexpected content type {content_type!r}")

        logger.debug("Fetched %s (%d bytes)", url, len(resp.content))
        return BeautifulSoup(resp.text, "html.parser")
