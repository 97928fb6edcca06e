"""Field formatting shared by the TSPL and PDF label renderers."""

from datetime import UTC, datetime
from decimal import ROUND_HALF_UP, Decimal
from zoneinfo import ZoneInfo

ML_PER_OZ = Decimal("29.5735")

DEFAULT_TIMEZONE = "America/New_York"


def ml_from_oz(amount_oz: float | None) -> int:
    """Convert fluid ounces to whole millilitres, rounding half up.

    Args:
        amount_oz: Volume in ounces (None counts as zero).

    Returns:
        int: Rounded millilitres.
    """
    oz = Decimal(str(amount_oz or 0))
    return int((oz * ML_PER_OZ).quantize(Decimal("1"), rounding=ROUND_HALF_UP))


def format_oz(amount_oz: float | None) -> str:
    """Format ounces with two decimals."""
    return f"{float(amount_oz or 0):.2f}"


def to_local(value: str | datetime | None, timezone: str = DEFAULT_TIMEZONE) -> datetime | None:
    """Parse an ISO-8601 timestamp and convert it to the label time zone.

    Naive values are taken as UTC. Values that cannot be shifted into the
    zone (the ends of the datetime range) are returned unshifted.

    Args:
        value: ISO-8601 string or datetime.
        timezone: IANA time zone name.

    Returns:
        datetime | None: Aware datetime, or None if empty or unparsable.
    """
    if not value:
        return None
    if isinstance(value, datetime):
        dt = value
    else:
        try:
            dt = datetime.fromisoformat(str(value))
        except ValueError:
            return None
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=UTC)
    try:
        return dt.astimezone(ZoneInfo(timezone))
    except (OverflowError, ValueError):
        return dt


def _raw(value: str | datetime | None) -> str:
    return str(value) if value else ""


def format_date(value: str | datetime | None, timezone: str = DEFAULT_TIMEZONE) -> str:
    """Format a timestamp as a US short date, e.g. '3/7/2025'.

    Unparsable values are printed as given.
    """
    dt = to_local(value, timezone)
    if dt is None:
        return _raw(value)
    return f"{dt.month}/{dt.day}/{dt.year}"


def format_time(value: str | datetime | None, timezone: str = DEFAULT_TIMEZONE) -> str:
    """Format a timestamp as a US 12-hour time, e.g. '9:05:00 PM'."""
    dt = to_local(value, timezone)
    if dt is None:
        return ""
    hour = dt.hour % 12 or 12
    suffix = "AM" if dt.hour < 12 else "PM"
    return f"{hour}:{dt.minute:02d}:{dt.second:02d} {suffix}"


def format_datetime(value: str | datetime | None, timezone: str = DEFAULT_TIMEZONE) -> str:
    """Format a timestamp as '<date> <time>', or as given if unparsable."""
    dt = to_local(value, timezone)
    if dt is None:
        return _raw(value)
    return f"{format_date(dt, timezone)} {format_time(dt, timezone)}"
