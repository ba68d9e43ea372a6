"""Human-readable rendering of timestamps and durations."""

import math
from datetime import datetime, timezone
from typing import Any

from pydantic import TypeAdapter, ValidationError

UNKNOWN = "unknown"
TIMESTAMP_FORMAT = "%d/%m/%Y, %H:%M:%S"

_datetime_adapter: TypeAdapter[datetime] = TypeAdapter(datetime)


def parse_timestamp(value: Any) -> datetime:
    """Parse a repository timestamp into an aware UTC datetime.

    Naive values are taken to be UTC.

    Raises:
        ValueError: If the value is not a recognizable timestamp

    """
    try:
        parsed = _datetime_adapter.validate_python(value)
    except ValidationError as e:
        raise ValueError(f"Invalid timestamp: {value!r}") from e
    if parsed.tzinfo is None:
        return parsed.replace(tzinfo=timezone.utc)
    return parsed.astimezone(timezone.utc)


def format_timestamp(value: Any) -> str:
    """Render a timestamp as ``DD/MM/YYYY, HH:MM:SS`` in UTC.

    Absent or unparseable values render as ``"unknown"``.
    """
    if value is None or value == "":
        return UNKNOWN
    try:
        return parse_timestamp(value).strftime(TIMESTAMP_FORMAT)
    except ValueError:
        return UNKNOWN


def format_duration(milliseconds: float) -> str:
    """Render a duration as ``"<H>h <M>m <S>s"``.

    Negative values clamp to zero and there is no day rollover.
    """
    seconds = max(0, math.floor(milliseconds / 1000 + 0.5))
    hours, remainder = divmod(seconds, 3600)
    minutes, secs = divmod(remainder, 60)
    return f"{hours}h {minutes}m {secs}s"


def elapsed_milliseconds(start: datetime, stop: datetime) -> float:
    """Milliseconds between two datetimes."""
    return (stop - start).total_seconds() * 1000
