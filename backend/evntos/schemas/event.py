"""
Pydantic schemas for event-related request/response validation.
"""

from datetime import datetime
from typing import Optional
from pydantic import BaseModel, Field


class EventCreate(BaseModel):
    title: str = Field(..., min_length=1, max_length=255)


class EventUpdate(BaseModel):
    """Full-document overwrite of every mutable event field."""

    title: str = Field(..., min_length=1, max_length=255)
    description: str = Field("", max_length=10000)
    image_url: str = Field("", max_length=1024)
    venue_name: str = Field("", max_length=255)
    venue_address: str = Field("", max_length=1000)
    map_link: str = Field("", max_length=1024)
    event_date: str = Field("", pattern=r"^(\d{4}-\d{2}-\d{2})?$")
    event_time: str = Field("", pattern=r"^(\d{2}:\d{2})?$")
    registration_open: bool = True


class EventResponse(BaseModel):
    id: str
    user_id: int
    title: str
    description: str
    image_url: str
    slug: str
    venue_name: str
    venue_address: str
    map_link: str
    event_date: str
    event_time: str
    registration_open: bool
    created_at: datetime

    model_config = {"from_attributes": True}


class PublicEventResponse(BaseModel):
    """What anonymous visitors of the public event page get to see."""

    id: str
    title: str
    description: str
    image_url: str
    slug: str
    venue_name: str
    venue_address: str
    map_link: str
    event_date: str
    event_time: str
    registration_open: bool

    model_config = {"from_attributes": True}


class EventSummary(EventResponse):
    guest_count: int = 0
    checked_in_count: int = 0


class EventListResponse(BaseModel):
    events: list[EventSummary]
    total: int
    page: int
    page_size: int


class EventDeleteResponse(BaseModel):
    message: str
    event_id: str
    registrations_deleted: int
    title: Optional[str] = None
