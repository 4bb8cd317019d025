"""StarredEvent ORM model: at most one row per (user, event)."""
import uuid

from sqlalchemy import Column, String, DateTime, ForeignKey, UniqueConstraint
from sqlalchemy.sql import func
from sqlalchemy.orm import relationship
from festhub.database import Base
from festhub.models.user import _utcnow


class StarredEvent(Base):
    __tablename__ = "starred_events"
    __table_args__ = (UniqueConstraint("user_id", "event_id", name="uq_starred_events_user_event"),)

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    user_id = Column(String(36), ForeignKey("users.user_id"), nullable=False)
    event_id = Column(String(36), ForeignKey("events.event_id"), nullable=False)
    created_at = Column(DateTime(timezone=True), default=_utcnow, server_default=func.now())

    event = relationship("Event", back_populates="stars")
