"""Timestamp parsing shared by the normalizers."""

import re
from datetime import UTC, datetime, tzinfo

# NS sends "+0100", fromisoformat is happier with "+01:00"
_COMPACT_OFFSET = re.compile(r"([+-]\d{2})(\d{2})$")


def parse_timestamp(value: object, default_tz: tzinfo = UTC) -> datetime | None:
    """Parse an ISO 8601 timestamp into an aware datetime.

    Accepts ``Z``, ``+HH:MM`` and ``+HHMM`` offset suffixes. Naive timestamps are
    interpreted in ``default_tz``. Returns None for anything that does not parse.
    """
    if not isinstance(value, str):
        return None
    text = value.strip()
    if not text:
        return None

    if text.endswith(("Z", "z")):
        text = text[:-1] + "+00:00"
    elif "T" in text:
        text = _COMPACT_OFFSET.sub(r"\1:\2", text)

    try:
        parsed = datetime.fromisoformat(text)
    except ValueError:
        return None

    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=default_tz)
    return parsed


def minutes_between(start: datetime, end: datetime) -> int:
    """Whole minutes from start to end, rounded to the nearest minute."""
    return round((end - start).total_seconds() / 60)
