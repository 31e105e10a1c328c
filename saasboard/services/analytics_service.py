"""Event log — append-only recording plus grouped counting queries.

Calendar days are UTC days.
"""

import logging
from datetime import date, datetime
from typing import Any

from sqlalchemy import Date, distinct, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from saasboard.constants import DAILY_WINDOW_DAYS, EVENTS_PAGE_LIMIT, SUMMARY_WEEK_DAYS, TOP_EVENTS_LIMIT
from saasboard.errors import ValidationError
from saasboard.models.event import Event
from saasboard.utils import days_ago, now_utc, start_of_day

logger = logging.getLogger(__name__)


def _window(stmt, start: datetime | None, end: datetime | None):
    """Restrict to ``start <= created_at <= end``; a missing bound is open."""
    if start is not None:
        stmt = stmt.where(Event.created_at >= start)
    if end is not None:
        stmt = stmt.where(Event.created_at <= end)
    return stmt


def _as_date(value: Any) -> date:
    # PostgreSQL hands back a date; SQLite's DATE() a string
    if isinstance(value, date):
        return value
    return date.fromisoformat(str(value))


async def record_event(
    db: AsyncSession,
    user_id: int,
    event: str,
    metadata: dict[str, Any] | None = None,
) -> Event:
    if not event or not event.strip():
        raise ValidationError("Event name is required")

    row = Event(user_id=user_id, event=event, event_metadata=metadata)
    db.add(row)
    await db.commit()
    await db.refresh(row)
    return row


async def list_events(
    db: AsyncSession,
    user_id: int,
    start: datetime | None = None,
    end: datetime | None = None,
    limit: int = EVENTS_PAGE_LIMIT,
) -> list[Event]:
    """Raw events, newest first."""
    stmt = _window(select(Event).where(Event.user_id == user_id), start, end)
    result = await db.execute(stmt.order_by(Event.created_at.desc(), Event.id.desc()).limit(limit))
    return list(result.scalars().all())


async def event_counts(
    db: AsyncSession,
    user_id: int,
    start: datetime | None = None,
    end: datetime | None = None,
) -> list[dict[str, Any]]:
    """Counts grouped by event name within an optional inclusive window."""
    stmt = _window(
        select(Event.event, func.count(Event.id).label("count")).where(Event.user_id == user_id),
        start,
        end,
    )
    result = await db.execute(stmt.group_by(Event.event).order_by(Event.event))
    return [{"event": name, "count": count} for name, count in result.all()]


def _utc_day(dialect_name: str):
    """Calendar day of ``created_at`` in UTC.

    PostgreSQL would otherwise bucket by the session time zone. SQLite stores
    the UTC wall-clock value, so a plain ``DATE()`` is already a UTC day.
    """
    created_at = Event.created_at
    if dialect_name == "postgresql":
        created_at = func.timezone("UTC", created_at)
    return func.date(created_at, type_=Date).label("day")


async def daily_buckets(db: AsyncSession, user_id: int, window_days: int = DAILY_WINDOW_DAYS) -> list[dict[str, Any]]:
    """Per-day, per-event counts for the trailing ``window_days`` days, newest day first.

    The window opens at midnight ``window_days`` days ago, so that whole day counts.
    """
    since = start_of_day(days_ago(window_days))
    day = _utc_day(db.bind.dialect.name)
    result = await db.execute(
        select(day, Event.event, func.count(Event.id).label("count"))
        .where(Event.user_id == user_id, Event.created_at >= since)
        .group_by(day, Event.event)
        .order_by(day.desc(), Event.event)
    )
    return [{"day": _as_date(d), "event": name, "count": count} for d, name, count in result.all()]


async def top_events(db: AsyncSession, user_id: int, limit: int = TOP_EVENTS_LIMIT) -> list[dict[str, Any]]:
    """Event names by descending count; order among ties is up to the database."""
    count = func.count(Event.id).label("count")
    result = await db.execute(
        select(Event.event, count)
        .where(Event.user_id == user_id)
        .group_by(Event.event)
        .order_by(count.desc())
        .limit(limit)
    )
    return [{"event": name, "count": c} for name, c in result.all()]


async def summary(db: AsyncSession, user_id: int) -> dict[str, int]:
    now = now_utc()
    base = select(func.count(Event.id)).where(Event.user_id == user_id)

    total = await db.scalar(base) or 0
    today = await db.scalar(base.where(Event.created_at >= start_of_day(now))) or 0
    week = await db.scalar(base.where(Event.created_at >= days_ago(SUMMARY_WEEK_DAYS, now))) or 0
    unique = await db.scalar(
        select(func.count(distinct(Event.event))).where(Event.user_id == user_id)
    ) or 0

    return {
        "total_events": total,
        "today_events": today,
        "week_events": week,
        "unique_event_types": unique,
    }
