"""Pydantic schemas for Events.

Create and patch bodies are deliberately loose: required fields, categories
and protected columns are checked by the lifecycle engine so the API answers
with its ValidationError messages.
"""
import datetime as dt
from typing import Optional
from pydantic import BaseModel

from festhub.models.event import EventCategory


class EventCreate(BaseModel):
    name: Optional[str] = None
    category: Optional[str] = None
    date: Optional[dt.date] = None
    time: Optional[dt.time] = None
    venue: Optional[str] = None
    department: Optional[str] = None
    college: Optional[str] = None
    description: Optional[str] = None
    image_url: Optional[str] = None
    latitude: Optional[float] = None
    longitude: Optional[float] = None


class EventPatch(BaseModel):
    name: Optional[str] = None
    category: Optional[str] = None
    date: Optional[dt.date] = None
    time: Optional[dt.time] = None
    venue: Optional[str] = None
    department: Optional[str] = None
    college: Optional[str] = None
    description: Optional[str] = None
    image_url: Optional[str] = None
    latitude: Optional[float] = None
    longitude: Optional[float] = None

    # Unknown keys reach the lifecycle engine, which rejects them by name.
    model_config = {"extra": "allow"}


class EventOut(BaseModel):
    event_id: str
    name: str
    category: EventCategory
    organizer_id: str
    date: dt.date
    time: dt.time
    venue: str
    department: Optional[str] = None
    college: Optional[str] = None
    description: Optional[str] = None
    image_url: Optional[str] = None
    latitude: Optional[float] = None
    longitude: Optional[float] = None
    is_approved: bool
    star_count: int
    created_at: dt.datetime
    updated_at: dt.datetime
    is_starred: bool = False

    model_config = {"from_attributes": True}


class StarReconcileOut(BaseModel):
    corrected: dict[str, int]
