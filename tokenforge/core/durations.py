"""Human readable duration parsing (``"15 minutes"`` -> milliseconds)."""

import re
from collections.abc import Callable

MAX_DURATION_LENGTH = 100

_SECOND = 1000
_MINUTE = _SECOND * 60
_HOUR = _MINUTE * 60
_DAY = _HOUR * 24
_WEEK = _DAY * 7
_YEAR = _DAY * 365.25

_UNITS: dict[str, float] = {
    "years": _YEAR,
    "year": _YEAR,
    "yrs": _YEAR,
    "yr": _YEAR,
    "y": _YEAR,
    "weeks": _WEEK,
    "week": _WEEK,
    "w": _WEEK,
    "days": _DAY,
    "day": _DAY,
    "d": _DAY,
    "hours": _HOUR,
    "hour": _HOUR,
    "hrs": _HOUR,
    "hr": _HOUR,
    "h": _HOUR,
    "minutes": _MINUTE,
    "minute": _MINUTE,
    "mins": _MINUTE,
    "min": _MINUTE,
    "m": _MINUTE,
    "seconds": _SECOND,
    "second": _SECOND,
    "secs": _SECOND,
    "sec": _SECOND,
    "s": _SECOND,
    "milliseconds": 1,
    "millisecond": 1,
    "msecs": 1,
    "msec": 1,
    "ms": 1,
}

_PATTERN = re.compile(
    r"^(?P<value>-?(?:\d+)?\.?\d+) *(?P<unit>[a-z]+)?$",
    re.IGNORECASE,
)

DurationParser = Callable[[str], float]


def parse_duration(text: str) -> float:
    """Convert a duration string to milliseconds.

    A bare number is read as milliseconds. Negative and fractional values are
    accepted (``"-1 minute"``, ``"1.5h"``). Raises ``ValueError`` when the
    text is not a recognised duration.
    """
    if not isinstance(text, str) or not text or len(text) > MAX_DURATION_LENGTH:
        raise ValueError(f"Invalid duration: {text!r}")
    match = _PATTERN.match(text.strip())
    if match is None:
        raise ValueError(f"Invalid duration: {text!r}")
    unit = (match.group("unit") or "ms").lower()
    if unit not in _UNITS:
        raise ValueError(f"Unknown duration unit {unit!r} in {text!r}")
    return float(match.group("value")) * _UNITS[unit]
