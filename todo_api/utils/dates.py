from datetime import datetime, date, UTC
from typing import Optional, Union


def utcnow() -> datetime:
    """Current time as a naive UTC datetime, the form every timestamp column stores."""
    return datetime.now(UTC).replace(tzinfo=None)


def parse_timestamp(value: Union[str, date, datetime, None]) -> Optional[datetime]:
    """Parse a date-only or date+time value into a naive UTC datetime.

    Accepts ``2024-01-05``, ``2024-01-05T09:30``, ``2024-01-05 09:30:00`` and
    offset-aware ISO-8601 strings (converted to UTC). Empty strings and None
    yield None. Raises ValueError for anything else.
    """
    if value is None:
        return None
    if isinstance(value, datetime):
        parsed = value
    elif isinstance(value, date):
        parsed = datetime(value.year, value.month, value.day)
    elif isinstance(value, str):
        value = value.strip()
        if not value:
            return None
        parsed = datetime.fromisoformat(value)
    else:
        raise ValueError(f"invalid timestamp: {value!r}")
    if parsed.tzinfo is not None:
        parsed = parsed.astimezone(UTC).replace(tzinfo=None)
    return parsed


def humanize(value: Optional[datetime]) -> str:
    if value is None:
        return "no time set"
    if value.hour == 0 and value.minute == 0 and value.second == 0:
        return value.strftime("%a %d %b %Y")
    return value.strftime("%a %d %b %Y %H:%M UTC")
