"""Event ORM model."""
import enum
import uuid

from sqlalchemy import (
    CheckConstraint, Column, String, Text, Integer, Float, Boolean, Date, Time, DateTime, ForeignKey,
    Enum as SAEnum,
)
from sqlalchemy.sql import func
from sqlalchemy.orm import relationship
from festhub.database import Base
from festhub.models.user import _utcnow


class EventCategory(str, enum.Enum):
    competition = "competition"
    workshop = "workshop"
    stall = "stall"
    exhibit = "exhibit"
    performance = "performance"
    lecture = "lecture"
    games = "games"
    food = "food"
    merch = "merch"
    art = "art"
    sport = "sport"


class Event(Base):
    __tablename__ = "events"
    __table_args__ = (CheckConstraint("star_count >= 0", name="ck_events_star_count_non_negative"),)

    event_id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    name = Column(String(255), nullable=False)
    category = Column(SAEnum(EventCategory), nullable=False)
    organizer_id = Column(String(36), ForeignKey("users.user_id"), nullable=False)
    date = Column(Date, nullable=False)
    time = Column(Time, nullable=False)
    venue = Column(String(255), nullable=False)
    department = Column(String(255), nullable=True)
    college = Column(String(255), nullable=True)
    description = Column(Text, nullable=True)
    image_url = Column(String(1024), nullable=True)
    latitude = Column(Float, nullable=True)
    longitude = Column(Float, nullable=True)
    is_approved = Column(Boolean, nullable=False, default=False)
    star_count = Column(Integer, nullable=False, default=0)
    created_at = Column(DateTime(timezone=True), default=_utcnow, server_default=func.now())
    updated_at = Column(DateTime(timezone=True), default=_utcnow, server_default=func.now(), onupdate=_utcnow)

    stars = relationship("StarredEvent", back_populates="event", cascade="all, delete-orphan")
    updates = relationship("EventUpdate", back_populates="event", cascade="all, delete-orphan")
