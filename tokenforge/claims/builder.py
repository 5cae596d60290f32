"""Construction of the ``iat``, ``nbf`` and ``exp`` time claims."""

import math
import time
from datetime import UTC, datetime, timedelta

from tokenforge.core.durations import DurationParser, parse_duration
from tokenforge.core.errors import BadConfigError, ClaimError, ClaimViolation
from tokenforge.core.settings import DEFAULT_EXPIRY_MS

TIME_CLAIMS = ("iat", "nbf", "exp")

Offset = int | float | str
Timestamp = datetime | int | float

_EPOCH = datetime(1970, 1, 1, tzinfo=UTC)


def now_ms() -> int:
    return time.time_ns() // 1_000_000


def to_epoch_ms(timestamp: Timestamp | None) -> int:
    """Milliseconds since the epoch for ``timestamp``, or for now when None.

    Naive datetimes are interpreted in local time. Fractional milliseconds
    (e.g. ``time.time() * 1000``) are floored.
    """
    if timestamp is None:
        return now_ms()
    if isinstance(timestamp, datetime):
        return (timestamp.astimezone(UTC) - _EPOCH) // timedelta(milliseconds=1)
    if isinstance(timestamp, bool) or not isinstance(timestamp, int | float):
        raise BadConfigError("timestamp must be a datetime or epoch milliseconds")
    if not math.isfinite(timestamp):
        raise BadConfigError("timestamp must be finite")
    return math.floor(timestamp)


def resolve_offset(name: str, offset: Offset, parse: DurationParser = parse_duration) -> float:
    """Convert a millisecond number or duration string into milliseconds."""
    if isinstance(offset, str):
        try:
            value = parse(offset)
        except ValueError as exc:
            raise ClaimError(
                f"Invalid {name} offset",
                [ClaimViolation(field=name, message=f"{offset!r} is not a valid duration")],
                cause=exc,
            ) from exc
    elif isinstance(offset, int | float) and not isinstance(offset, bool):
        value = offset
    else:
        raise ClaimError(
            f"Invalid {name} offset",
            [ClaimViolation(field=name, message="Offset must be milliseconds or a duration string")],
        )
    if not math.isfinite(value):
        raise ClaimError(
            f"Invalid {name} offset",
            [ClaimViolation(field=name, message="Offset must be finite")],
        )
    return value


def build_time_claims(
    base_ms: int,
    iat: Offset | None = None,
    nbf: Offset | None = None,
    exp: Offset | None = None,
    *,
    default_expiry_ms: int = DEFAULT_EXPIRY_MS,
    parse_duration: DurationParser = parse_duration,
) -> dict[str, int]:
    """Build whole-second time claims relative to ``base_ms``.

    Each claim is ``floor((base_ms + offset) / 1000)``. ``iat`` and ``nbf``
    default to no offset and ``exp`` to ``default_expiry_ms``. Flooring
    ``nbf`` keeps a fresh token usable immediately.
    """
    offsets = {
        "iat": 0 if iat is None else iat,
        "nbf": 0 if nbf is None else nbf,
        "exp": default_expiry_ms if exp is None else exp,
    }
    return {
        name: int((base_ms + resolve_offset(name, offset, parse_duration)) // 1000)
        for name, offset in offsets.items()
    }
