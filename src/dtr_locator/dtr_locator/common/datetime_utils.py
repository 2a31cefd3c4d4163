from __future__ import annotations

import re
from datetime import date, datetime, time
from typing import Optional

from ..core.exceptions import ValidationError

_TIME_RE = re.compile(r"^(\d{1,2}):(\d{2})(?::(\d{2}))?$")
_DATE_RE = re.compile(r"^\d{4}-\d{2}-\d{2}$")


def parse_iso_date(value: str) -> date:
    """Parse YYYY-MM-DD string into date."""
    return datetime.strptime(value, "%Y-%m-%d").date()


def now_local() -> datetime:
    """Current local time.

    Note: Wrapped so tests can patch/mocked easier.
    """
    return datetime.now()


def normalize_date_text(value: object) -> str:
    """Return a date as a `YYYY-MM-DD` string.

    Accepts `date`/`datetime` objects or ISO strings (a trailing `T...` part is
    dropped, the way browsers send date inputs).
    """

    if isinstance(value, datetime):
        return value.strftime("%Y-%m-%d")
    if isinstance(value, date):
        return value.isoformat()

    text = str(value or "").strip().split("T")[0].split(" ")[0]
    if not _DATE_RE.match(text):
        raise ValidationError(f"Invalid date (YYYY-MM-DD): {value!r}")
    try:
        parse_iso_date(text)
    except ValueError:
        raise ValidationError(f"Invalid date (YYYY-MM-DD): {value!r}")
    return text


def normalize_time_text(value: object) -> Optional[str]:
    """Return a time-of-day as zero-padded `HH:MM:SS`, or None when blank.

    Zero padding keeps lexicographic comparison equal to chronological order.
    """

    if value is None:
        return None
    if isinstance(value, time):
        return value.strftime("%H:%M:%S")

    text = str(value).strip()
    if not text:
        return None

    m = _TIME_RE.match(text)
    if not m:
        raise ValidationError(f"Invalid time (HH:MM): {value!r}")
    hours, minutes, seconds = int(m.group(1)), int(m.group(2)), int(m.group(3) or 0)
    if hours > 23 or minutes > 59 or seconds > 59:
        raise ValidationError(f"Invalid time (HH:MM): {value!r}")
    return f"{hours:02d}:{minutes:02d}:{seconds:02d}"


def hhmm(value: str) -> str:
    """`HH:MM` prefix of a normalized time string."""
    return value[:5]


def compose_wall_clock(date_text: str, time_text: str) -> str:
    """Join a date and a time-of-day into a `YYYY-MM-DD HH:MM:SS` literal.

    Plain string concatenation; no datetime object is built, so no timezone
    or DST rule can shift the result.
    """

    return f"{normalize_date_text(date_text)} {normalize_time_text(time_text)}"
