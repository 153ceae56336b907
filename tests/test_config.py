"""Tests for crawler settings."""

import pytest
from pydantic import ValidationError

from crawler.config import CrawlerSettings


def test_listing_url_normalises_slashes() -> None:
    """Test that stray slashes in base URL and city are removed."""
    settings = CrawlerSettings(_env_file=None, base_url="https://food.test/", city="/karachi/")
    assert settings.base_url == "https://food.test"
    assert settings.listing_url == "https://food.test/karachi/delivery"


def test_settings_read_from_environment(monkeypatch: pytest.MonkeyPatch) -> None:
    """Test that settings fall back to environment variables."""
    monkeypatch.setenv("BASE_URL", "https://env.test")
    monkeypatch.setenv("CITY", "islamabad")
    monkeypatch.setenv("MAX_PAGES", "3")
    monkeypatch.setenv("MAX_CONCURRENCY", "8")

    settings = CrawlerSettings(_env_file=None)

    assert settings.listing_url == "https://env.test/islamabad/delivery"
    assert settings.max_pages == 3
    assert settings.max_concurrency == 8
    assert settings.deadline_seconds is None


@pytest.mark.parametrize(
    "overrides",
    [
        {"max_pages": -1},
        {"max_concurrency": 0},
        {"deadline_seconds": 0},
        {"app_env": "qa"},
    ],
)
def test_invalid_settings_rejected(overrides: dict) -> None:
    """Test validation of numeric limits and environment names."""
    with pytest.raises(ValidationError):
        CrawlerSettings(_env_file=None, base_url="https://food.test", city="lahore", **overrides)
