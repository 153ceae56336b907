"""Environment-driven logging setup for the crawler CLI."""

from __future__ import annotations

import json
import logging
from datetime import datetime, timezone

_LEVELS: dict[str, int] = {
    "development": logging.DEBUG,
    "staging": logging.INFO,
    "production": logging.ERROR,
}

_TEXT_FORMAT = "%(asctime)s [%(levelname)s] %(name)s — %(message)s"


class JsonFormatter(logging.Formatter):
    """Render each record as one compact JSON object."""

    def format(self, record: logging.LogRecord) -> str:
        payload = {
            "time": datetime.fromtimestamp(record.created, timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        if record.exc_info:
            payload["exc_info"] = self.formatException(record.exc_info)
        return json.dumps(payload, default=str, sort_keys=True)


def configure_logging(app_env: str = "development", debug: bool = False) -> None:
    """Configure the root logger for *app_env*.

    development → DEBUG, human-readable; staging → INFO; production →
    ERROR as JSON lines.  *debug* forces DEBUG in any environment.
    """
    level = logging.DEBUG if debug else _LEVELS.get(app_env, logging.INFO)
    handler = logging.StreamHandler()
    if app_env == "production":
        handler.setFormatter(JsonFormatter())
    else:
        handler.setFormatter(logging.Formatter(_TEXT_FORMAT, datefmt="%H:%M:%S"))
    logging.basicConfig(level=level, handlers=[handler], force=True)
    # httpx logs every request at INFO
    logging.getLogger("httpx").setLevel(max(level, logging.WARNING))
