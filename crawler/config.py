from typing import Literal, Optional

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from crawler.fetcher import DEFAULT_TIMEOUT, DEFAULT_USER_AGENT


class CrawlerSettings(BaseSettings):
    """Crawler configuration using pydantic-settings.

    Construct one explicitly and hand it to ``Crawler``; values come from
    keyword arguments, then environment variables, then ``.env``.
    """

    model_config = SettingsConfigDict(
        env_file=".env", env_file_encoding="utf-8", case_sensitive=False
    )

    # Target site
    base_url: str = Field(
        default="", description="Site root, e.g. https://www.example.pk"
    )
    city: str = Field(default="", description="City slug in listing URLs")
    max_pages: int = Field(
        default=10, ge=0, description="Number of listing pages to crawl"
    )

    # Runtime limits
    max_concurrency: Optional[int] = Field(
        default=None,
        ge=1,
        description="Maximum in-flight page fetches (unset = unbounded)",
    )
    deadline_seconds: Optional[float] = Field(
        default=None, gt=0, description="Abort the crawl after this many seconds"
    )
    request_timeout: float = Field(
        default=DEFAULT_TIMEOUT, gt=0, description="Per-request timeout in seconds"
    )
    user_agent: str = Field(default=DEFAULT_USER_AGENT)

    # Application
    app_env: Literal["development", "staging", "production"] = Field(
        default="development", description="Environment (drives log level/format)"
    )
    debug: bool = Field(default=False, description="Debug mode")

    @field_validator("base_url")
    @classmethod
    def _strip_trailing_slash(cls, value: str) -> str:
        return value.strip().rstrip("/")

    @field_validator("city")
    @classmethod
    def _strip_slashes(cls, value: str) -> str:
        return value.strip().strip("/")

    @property
    def listing_url(self) -> str:
        """Base listing URL; pages append ``?&Search_PageNo=<n>``."""
        return f"{self.base_url}/{self.city}/delivery"
