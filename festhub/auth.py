"""Resolve the acting principal for a request.

Sign-in happens at the hosted identity provider; requests name the acting
user with ``actor_user_id`` and every service call receives the resulting
Actor explicitly.
"""
from typing import Optional

from fastapi import Depends, Query
from sqlalchemy.orm import Session

from festhub.database import get_db
from festhub.errors import AuthorizationError
from festhub.models.user import User, UserRole
from festhub.services.lifecycle import Actor


def resolve_actor(db: Session, actor_user_id: str) -> Actor:
    user = db.query(User).filter(User.user_id == actor_user_id).first()
    if not user:
        raise AuthorizationError("Unknown actor")
    return Actor(user_id=user.user_id, role=UserRole(user.role))


def get_actor(
    actor_user_id: str = Query(..., description="ID of the user performing the request"),
    db: Session = Depends(get_db),
) -> Actor:
    return resolve_actor(db, actor_user_id)


def get_optional_actor(
    actor_user_id: Optional[str] = Query(None, description="ID of the viewing user, if signed in"),
    db: Session = Depends(get_db),
) -> Optional[Actor]:
    if actor_user_id is None:
        return None
    return resolve_actor(db, actor_user_id)
