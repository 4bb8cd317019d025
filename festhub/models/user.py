"""User ORM model."""
import enum
import uuid
from datetime import datetime, timezone

from sqlalchemy import Column, String, Integer, Boolean, DateTime, Enum as SAEnum
from sqlalchemy.sql import func
from festhub.database import Base


def _utcnow():
    return datetime.now(timezone.utc)


class UserRole(str, enum.Enum):
    attendee = "attendee"
    organizer = "organizer"
    admin = "admin"


class User(Base):
    __tablename__ = "users"

    user_id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    auth_id = Column(String(255), nullable=False, unique=True)
    name = Column(String(150), nullable=False)
    email = Column(String(255), nullable=False, unique=True)
    phone = Column(String(30), nullable=True)
    college = Column(String(255), nullable=True)
    department = Column(String(255), nullable=True)
    course = Column(String(255), nullable=True)
    admission_year = Column(Integer, nullable=True)
    passout_year = Column(Integer, nullable=True)
    role = Column(SAEnum(UserRole), nullable=False, default=UserRole.attendee)
    role_elevation_requested = Column(Boolean, nullable=False, default=False)
    created_at = Column(DateTime(timezone=True), default=_utcnow, server_default=func.now())
    updated_at = Column(DateTime(timezone=True), default=_utcnow, server_default=func.now(), onupdate=_utcnow)
