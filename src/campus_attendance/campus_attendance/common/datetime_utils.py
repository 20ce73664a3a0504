from __future__ import annotations

import math
import re
from datetime import date, datetime, time, timedelta
from typing import Any, Iterator, Optional

from ..core.exceptions import DataError, ValidationError

_CLOCK_12H = re.compile(r"^(\d{1,2}):(\d{2})(?::(\d{2}))?\s*([AaPp][Mm])$")


def parse_iso_date(value: str) -> date:
    """Parse YYYY-MM-DD string into date."""
    try:
        return datetime.strptime(str(value).strip(), "%Y-%m-%d").date()
    except ValueError:
        raise ValidationError("Invalid date (expected YYYY-MM-DD)", details={"value": value})


def parse_clock(value: Any, field_name: str = "time") -> time:
    """Parse a wall-clock time.

    Accepts ``HH:MM``, ``HH:MM:SS`` and the ``h:MM AM/PM`` form used by
    schedule spreadsheets.
    """

    if isinstance(value, time):
        return value
    text = str(value or "").strip()
    if not text:
        raise ValidationError(f"{field_name} is required", details={"field": field_name})

    m = _CLOCK_12H.match(text)
    if m:
        hours, minutes = int(m.group(1)), int(m.group(2))
        seconds = int(m.group(3) or 0)
        if not 1 <= hours <= 12:
            raise ValidationError(f"Invalid {field_name}: {text}", details={"field": field_name, "value": text})
        period = m.group(4).upper()
        if period == "PM" and hours != 12:
            hours += 12
        if period == "AM" and hours == 12:
            hours = 0
        return time(hours, minutes, seconds)

    for fmt in ("%H:%M", "%H:%M:%S"):
        try:
            return datetime.strptime(text, fmt).time()
        except ValueError:
            continue
    raise ValidationError(
        f"Invalid {field_name}: {text} (expected HH:MM or h:MM AM/PM)",
        details={"field": field_name, "value": text},
    )


def coerce_timestamp(value: Any, field_name: str) -> Optional[datetime]:
    """Turn a raw attendance timestamp into a datetime.

    Raw events come from capture devices and imports; anything that is not a
    datetime or an ISO-8601 string is a data error. Schedules are campus
    wall-clock times, so timestamps carrying a UTC offset are rejected too.
    """

    if value is None or value == "":
        return None
    parsed = None
    if isinstance(value, datetime):
        parsed = value
    elif isinstance(value, str):
        try:
            parsed = datetime.fromisoformat(value.strip())
        except ValueError:
            pass
    if parsed is None:
        raise DataError(f"Malformed timestamp in {field_name}", details={"field": field_name, "value": str(value)})
    if parsed.tzinfo is not None:
        raise DataError(
            f"Timestamp in {field_name} must be local time without a UTC offset",
            details={"field": field_name, "value": str(value)},
        )
    return parsed


def minutes_late(actual: datetime, scheduled_start: datetime) -> int:
    """Whole minutes after the scheduled start, rounding partial minutes up."""
    seconds = (actual - scheduled_start).total_seconds()
    if seconds <= 0:
        return 0
    return int(math.ceil(seconds / 60))


def iter_dates(start: date, end: date) -> Iterator[date]:
    d = start
    while d <= end:
        yield d
        d += timedelta(days=1)


def now_local() -> datetime:
    """Current local time.

    Note: Wrapped so tests can patch/mocked easier.
    """
    return datetime.now()
