"""Shared utility functions for SaaS Board."""

import logging
from datetime import datetime, timedelta, UTC

logger = logging.getLogger(__name__)


def now_utc() -> datetime:
    """Get current UTC time (timezone-aware)."""
    return datetime.now(UTC)


def start_of_day(moment: datetime) -> datetime:
    """Midnight (UTC) of the calendar day containing ``moment``."""
    return moment.astimezone(UTC).replace(hour=0, minute=0, second=0, microsecond=0)


def days_ago(days: int, moment: datetime | None = None) -> datetime:
    """Return ``moment`` (default: now) shifted back by ``days`` days."""
    return (moment or now_utc()) - timedelta(days=days)


def as_utc(value: datetime | None) -> datetime | None:
    """
    Normalize a datetime to timezone-aware UTC.

    SQLite hands back naive datetimes for timezone-aware columns; all values
    we write are UTC, so a naive value is interpreted as UTC.

    Args:
        value: Datetime to normalize, or None.

    Returns:
        Aware UTC datetime, or None.
    """
    if value is None:
        return None
    if value.tzinfo is None:
        return value.replace(tzinfo=UTC)
    return value.astimezone(UTC)


def setup_logging(level: str = "INFO") -> None:
    """
    Configure logging for the application.

    Args:
        level: Logging level name, e.g. "DEBUG" or "INFO".
    """
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )
