"""Pydantic schemas for event updates, festival updates, and the merged feed."""
from datetime import datetime
from typing import Optional
from pydantic import BaseModel


class UpdateCreate(BaseModel):
    message: str


class EventUpdateOut(BaseModel):
    id: str
    event_id: str
    user_id: str
    message: str
    created_at: datetime

    model_config = {"from_attributes": True}


class FestivalUpdateOut(BaseModel):
    id: str
    admin_id: str
    message: str
    created_at: datetime

    model_config = {"from_attributes": True}


class FeedItemOut(BaseModel):
    id: str
    kind: str  # festival, event
    message: str
    created_at: datetime
    author_id: Optional[str] = None
    event_id: Optional[str] = None

    model_config = {"from_attributes": True}


class FeedOut(BaseModel):
    items: list[FeedItemOut]
    unread_count: int
    last_read: Optional[datetime] = None
    errors: dict[str, str] = {}
