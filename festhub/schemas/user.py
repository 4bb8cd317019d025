"""Pydantic schemas for Users."""
from datetime import datetime
from typing import Optional
from pydantic import BaseModel

from festhub.models.user import UserRole


class UserCreate(BaseModel):
    auth_id: str
    name: str
    email: str
    phone: Optional[str] = None
    college: Optional[str] = None
    department: Optional[str] = None
    course: Optional[str] = None
    admission_year: Optional[int] = None
    passout_year: Optional[int] = None


class UserUpdate(BaseModel):
    name: Optional[str] = None
    phone: Optional[str] = None
    college: Optional[str] = None
    department: Optional[str] = None
    course: Optional[str] = None
    admission_year: Optional[int] = None
    passout_year: Optional[int] = None


class UserOut(BaseModel):
    user_id: str
    auth_id: str
    name: str
    email: str
    phone: Optional[str] = None
    college: Optional[str] = None
    department: Optional[str] = None
    course: Optional[str] = None
    admission_year: Optional[int] = None
    passout_year: Optional[int] = None
    role: UserRole
    role_elevation_requested: bool
    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True}
