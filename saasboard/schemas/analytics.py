"""Analytics Pydantic schemas."""

from datetime import date, datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class TrackRequest(BaseModel):
    event: str = Field(max_length=128)
    metadata: dict[str, Any] | None = None


class EventOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    event: str
    metadata: dict[str, Any] | None = Field(None, validation_alias="event_metadata")
    created_at: datetime


class TrackResponse(BaseModel):
    message: str
    event: EventOut


class EventCount(BaseModel):
    event: str
    count: int


class DailyBucket(BaseModel):
    day: date
    event: str
    count: int


class AnalyticsSummary(BaseModel):
    total_events: int
    today_events: int
    week_events: int
    unique_event_types: int


class EventList(BaseModel):
    events: list[EventOut]


class EventCounts(BaseModel):
    event_counts: list[EventCount]


class DailyAnalytics(BaseModel):
    daily: list[DailyBucket]


class TopEvents(BaseModel):
    top_events: list[EventCount]


class SummaryResponse(BaseModel):
    summary: AnalyticsSummary
