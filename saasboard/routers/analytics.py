"""Analytics routes — event tracking and aggregate queries for the current user."""

from datetime import datetime

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from saasboard.constants import (
    DAILY_WINDOW_DAYS,
    EVENTS_PAGE_LIMIT,
    MAX_DAILY_WINDOW_DAYS,
    MAX_EVENTS_PAGE_LIMIT,
    MAX_TOP_EVENTS_LIMIT,
    TOP_EVENTS_LIMIT,
)
from saasboard.db.session import get_db
from saasboard.models.user import User
from saasboard.schemas.analytics import (
    DailyAnalytics,
    EventCounts,
    EventList,
    EventOut,
    SummaryResponse,
    TopEvents,
    TrackRequest,
    TrackResponse,
)
from saasboard.services import analytics_service
from saasboard.services.auth_service import get_current_user

router = APIRouter(prefix="/api/analytics", tags=["analytics"])


@router.post("/track", response_model=TrackResponse, status_code=status.HTTP_201_CREATED)
async def track(
    data: TrackRequest,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    row = await analytics_service.record_event(db, user.id, data.event, data.metadata)
    return TrackResponse(message="Event tracked successfully", event=EventOut.model_validate(row))


@router.get("", response_model=EventList)
async def events(
    start_date: datetime | None = Query(None),
    end_date: datetime | None = Query(None),
    limit: int = Query(EVENTS_PAGE_LIMIT, ge=1, le=MAX_EVENTS_PAGE_LIMIT),
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    rows = await analytics_service.list_events(db, user.id, start_date, end_date, limit)
    return EventList(events=[EventOut.model_validate(r) for r in rows])


@router.get("/events", response_model=EventCounts)
async def event_counts(
    start_date: datetime | None = Query(None),
    end_date: datetime | None = Query(None),
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    counts = await analytics_service.event_counts(db, user.id, start_date, end_date)
    return EventCounts(event_counts=counts)


@router.get("/daily", response_model=DailyAnalytics)
async def daily(
    days: int = Query(DAILY_WINDOW_DAYS, ge=1, le=MAX_DAILY_WINDOW_DAYS),
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    buckets = await analytics_service.daily_buckets(db, user.id, days)
    return DailyAnalytics(daily=buckets)


@router.get("/top", response_model=TopEvents)
async def top(
    limit: int = Query(TOP_EVENTS_LIMIT, ge=1, le=MAX_TOP_EVENTS_LIMIT),
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    return TopEvents(top_events=await analytics_service.top_events(db, user.id, limit))


@router.get("/summary", response_model=SummaryResponse)
async def summary(
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    return SummaryResponse(summary=await analytics_service.summary(db, user.id))
