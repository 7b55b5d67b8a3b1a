"""
Lenient date parsing.

Shared by the date rules, the date correctors and warehouse coercion.
"""

from datetime import date, datetime
from typing import Any

# Tried in order; day-first before month-first as both sources are Vietnamese
DATE_FORMATS: tuple[str, ...] = (
    "%Y-%m-%d",
    "%d/%m/%Y",
    "%m/%d/%Y",
    "%d-%m-%Y",
    "%Y/%m/%d",
    "%Y%m%d",
)


def parse_date(value: Any) -> date | None:
    """
    Parse a date from the formats the sources are known to emit.

    Accepts date and datetime instances, the formats in DATE_FORMATS and
    ISO 8601 timestamps. Returns None for anything else; never raises.
    """
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if not isinstance(value, str):
        return None

    text = value.strip()
    if not text:
        return None

    for fmt in DATE_FORMATS:
        try:
            return datetime.strptime(text, fmt).date()
        except ValueError:
            continue

    try:
        return datetime.fromisoformat(text.replace("Z", "+00:00")).date()
    except ValueError:
        return None


def parse_timestamp(value: Any) -> datetime | None:
    """Parse an ISO timestamp or any date accepted by parse_date (at midnight)."""
    if isinstance(value, datetime):
        return value
    if isinstance(value, str):
        try:
            return datetime.fromisoformat(value.strip().replace("Z", "+00:00"))
        except ValueError:
            pass
    parsed = parse_date(value)
    if parsed is None:
        return None
    return datetime.combine(parsed, datetime.min.time())


def is_iso_date(value: Any) -> bool:
    """True for strings that already read YYYY-MM-DD and denote a real date."""
    if not isinstance(value, str) or len(value) != 10:
        return False
    try:
        return date.fromisoformat(value).isoformat() == value
    except ValueError:
        return False


def is_iso_timestamp(value: Any) -> bool:
    """True for ISO dates and ISO date-times written as strings."""
    if is_iso_date(value):
        return True
    if not isinstance(value, str):
        return False
    try:
        datetime.fromisoformat(value)
    except ValueError:
        return False
    return True


def format_iso(value: Any) -> str | None:
    """
    Render a parseable date or timestamp in ISO form.

    ISO strings keep their time part; every other accepted format is
    reduced to ``YYYY-MM-DD``. Returns None when nothing parses.
    """
    if isinstance(value, (date, datetime)):
        return value.isoformat()
    if isinstance(value, str) and is_iso_timestamp(value.strip()):
        return value.strip()
    parsed = parse_date(value)
    return parsed.isoformat() if parsed is not None else None


def age_on(birth: date, today: date) -> int:
    """Completed years between ``birth`` and ``today``."""
    years = today.year - birth.year
    if (today.month, today.day) < (birth.month, birth.day):
        years -= 1
    return years
