"""
Period Module

Report period validation and civil-date rules.

A punch belongs to the calendar date it shows in the configured timezone.
Naive timestamps are already local wall-clock; aware ones are converted first.
"""

from calendar import monthrange
from datetime import date, datetime, timezone, tzinfo
from typing import Optional
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from .entities import ReportPeriod
from .errors import InvalidPeriod
from infrastructure.logger import get_logger

logger = get_logger("Period")

MIN_YEAR = 1
MAX_YEAR = 9999


def _to_int(value) -> Optional[int]:
    """Interpret a month/year value as an integer, or None if non-numeric."""
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, str):
        stripped = value.strip()
        if stripped.isdecimal():
            try:
                return int(stripped)
            except ValueError:
                return None
    return None


def parse_period(month, year) -> ReportPeriod:
    """
    Validate a month/year pair and build its inclusive boundaries.

    Args:
        month: Month number (1-12), int or numeric string
        year: Four-digit year, int or numeric string

    Returns:
        ReportPeriod from the 1st at 00:00:00 to the last day at 23:59:59

    Raises:
        InvalidPeriod: If either value is non-numeric or out of range
    """
    parsed_month = _to_int(month)
    parsed_year = _to_int(year)

    if parsed_month is None or parsed_year is None:
        raise InvalidPeriod(month, year)
    if not 1 <= parsed_month <= 12:
        raise InvalidPeriod(month, year, f"Month must be between 1 and 12, got {parsed_month}")
    if not MIN_YEAR <= parsed_year <= MAX_YEAR:
        raise InvalidPeriod(month, year, f"Year out of range: {parsed_year}")

    _, last_day = monthrange(parsed_year, parsed_month)
    return ReportPeriod(
        year=parsed_year,
        month=parsed_month,
        start=datetime(parsed_year, parsed_month, 1, 0, 0, 0),
        end=datetime(parsed_year, parsed_month, last_day, 23, 59, 59)
    )


def resolve_timezone(name: str) -> tzinfo:
    """Look up an IANA timezone, falling back to UTC when unknown."""
    if not name:
        return timezone.utc
    try:
        return ZoneInfo(name)
    except (ZoneInfoNotFoundError, ValueError) as e:
        logger.warning(f"Unknown timezone '{name}', using UTC: {e}")
        return timezone.utc


def to_local_wall_clock(instant: datetime, tz: tzinfo) -> datetime:
    """Return the naive wall-clock reading of an instant in the given zone."""
    if instant.tzinfo is None:
        return instant
    return instant.astimezone(tz).replace(tzinfo=None)


def civil_date(instant: datetime, tz: tzinfo) -> date:
    """Calendar date on which an instant falls in the given zone."""
    return to_local_wall_clock(instant, tz).date()
