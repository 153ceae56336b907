"""Parse human-readable delivery estimates into ``timedelta`` values."""

import re
from datetime import timedelta

# Maps unit spellings → seconds per unit
_UNIT_SECONDS: dict[str, int] = {
    "s": 1,
    "sec": 1,
    "secs": 1,
    "second": 1,
    "seconds": 1,
    "m": 60,
    "min": 60,
    "mins": 60,
    "minute": 60,
    "minutes": 60,
    "h": 3600,
    "hr": 3600,
    "hrs": 3600,
    "hour": 3600,
    "hours": 3600,
}

# One "<amount> <unit>" term; amount may be a range like "30-40" or "30 – 40"
_TERM_RE = re.compile(
    r"(?P<low>\d+(?:\.\d+)?)"
    r"(?:\s*[-–—]\s*(?P<high>\d+(?:\.\d+)?))?"
    r"\s*(?P<unit>[a-z]+)\.?",
    re.IGNORECASE,
)

_FILLER_RE = re.compile(r"[\s,]+|\band\b", re.IGNORECASE)


def parse_duration(text: str) -> timedelta:
    """Convert text like ``'45 mins'``, ``'1 hr 30 min'`` or ``'30-40 min'``.

    Ranges resolve to their upper bound.

    Raises:
        ValueError: If *text* is empty, contains anything besides
            amount/unit terms, or is too large for a ``timedelta``.
    """
    raw = text.strip()
    if not raw:
        raise ValueError("empty duration")

    total = 0.0
    pos = 0
    matched = False
    for m in _TERM_RE.finditer(raw):
        if _FILLER_RE.sub("", raw[pos : m.start()]):
            raise ValueError(f"unrecognised duration: {text!r}")
        unit = m.group("unit").lower()
        if unit not in _UNIT_SECONDS:
            raise ValueError(f"unknown duration unit {unit!r} in {text!r}")
        amount = float(m.group("high") or m.group("low"))
        total += amount * _UNIT_SECONDS[unit]
        pos = m.end()
        matched = True

    if not matched or _FILLER_RE.sub("", raw[pos:]):
        raise ValueError(f"unrecognised duration: {text!r}")
    try:
        return timedelta(seconds=total)
    except OverflowError as exc:
        raise ValueError(f"duration out of range: {text!r}") from exc
