"""Date parsing utilities"""

from datetime import date, datetime, time, timezone
from typing import Optional


def parse_transfer_date(value: str | None) -> Optional[datetime]:
    """
    Parse a created_at override into an aware UTC datetime.

    Accepts a plain ISO date (midnight UTC) or an ISO datetime; naive
    datetimes are taken as UTC. Returns None when the value does not parse.
    """
    if value is None or not value.strip():
        return None

    text = value.strip()
    try:
        if len(text) == 10:
            return datetime.combine(date.fromisoformat(text), time.min, tzinfo=timezone.utc)
        parsed = datetime.fromisoformat(text)
    except ValueError:
        return None

    if parsed.tzinfo is None:
        return parsed.replace(tzinfo=timezone.utc)
    return parsed.astimezone(timezone.utc)
