"""Tests for the command-line crawl runner."""

import json
from pathlib import Path

import pytest
from conftest import BASE_URL, GatedFetcher, StubFetcher, page_url

from crawler.__main__ import run
from crawler.config import CrawlerSettings


def _saved(output_dir: Path) -> dict:
    return json.loads((output_dir / "restaurants.json").read_text(encoding="utf-8"))


async def test_stream_run_prints_each_restaurant(
    settings: CrawlerSettings,
    two_page_site: dict[str, str],
    capsys: pytest.CaptureFixture[str],
    tmp_path: Path,
) -> None:
    """Test that stream mode prints one JSON line per restaurant and saves everything."""
    del two_page_site[f"{BASE_URL}/restaurant/2"]

    code = await run(
        settings, stream=True, output_dir=str(tmp_path), fetcher=StubFetcher(two_page_site)
    )

    assert code == 0
    lines = capsys.readouterr().out.splitlines()
    assert len(lines) == 3
    assert sorted(json.loads(line)["title"] for line in lines) == [
        "Burger Lab",
        "Karahi House",
        "Pizza Point",
    ]
    data = _saved(tmp_path)
    assert data["count"] == 3
    assert data["error_count"] == 1
    assert data["errors"][0]["stage"] == "detail_fetch"


async def test_collect_run_saves_results(
    settings: CrawlerSettings,
    two_page_site: dict[str, str],
    capsys: pytest.CaptureFixture[str],
    tmp_path: Path,
) -> None:
    """Test that collect mode writes results without printing them."""
    code = await run(settings, output_dir=str(tmp_path), fetcher=StubFetcher(two_page_site))

    assert code == 0
    assert capsys.readouterr().out == ""
    data = _saved(tmp_path)
    assert data["count"] == 3
    assert data["errors"] == []


@pytest.mark.parametrize("stream", [False, True])
async def test_deadline_writes_partial_results(
    settings: CrawlerSettings,
    two_page_site: dict[str, str],
    tmp_path: Path,
    stream: bool,
) -> None:
    """Test that an expired deadline exits with 1 after saving what finished."""
    fetcher = GatedFetcher(two_page_site, gated=[page_url(1)])

    code = await run(
        settings.model_copy(update={"deadline_seconds": 0.2}),
        stream=stream,
        output_dir=str(tmp_path),
        fetcher=fetcher,
    )

    assert code == 1
    titles = {r["title"] for r in _saved(tmp_path)["restaurants"]}
    assert titles == {"Pizza Point", "Karahi House"}
