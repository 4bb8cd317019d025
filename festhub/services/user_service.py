"""User registration, profile edits, and the organizer elevation workflow."""
import logging
from typing import Any

from sqlalchemy import or_
from sqlalchemy.orm import Session

from festhub.errors import AuthorizationError, ConflictError, NotFoundError
from festhub.models.user import User, UserRole
from festhub.services import lifecycle
from festhub.services.lifecycle import Actor, RoleDecision

logger = logging.getLogger(__name__)


def get_user(db: Session, user_id: str) -> User:
    user = db.query(User).filter(User.user_id == user_id).first()
    if not user:
        raise NotFoundError("User not found")
    return user


def register_user(db: Session, fields: dict[str, Any]) -> User:
    """New accounts always start as attendees with no pending request."""
    existing = (
        db.query(User)
        .filter(or_(User.email == fields["email"], User.auth_id == fields["auth_id"]))
        .first()
    )
    if existing:
        raise ConflictError("A user with this email or auth id already exists")
    user = User(**fields, role=UserRole.attendee, role_elevation_requested=False)
    db.add(user)
    db.commit()
    db.refresh(user)
    logger.info("Registered user %s (%s)", user.user_id, user.email)
    return user


def update_profile(db: Session, user_id: str, actor: Actor, fields: dict[str, Any]) -> User:
    if actor.user_id != user_id:
        raise AuthorizationError("Users may only edit their own profile")
    user = get_user(db, user_id)
    for field, value in lifecycle.edit_profile(user, fields).items():
        setattr(user, field, value)
    db.commit()
    db.refresh(user)
    logger.info("Updated profile of user %s", user_id)
    return user


def _apply(db: Session, user: User, decision: RoleDecision) -> User:
    if decision.changed:
        for field, value in decision.changes.items():
            setattr(user, field, value)
        db.commit()
        db.refresh(user)
    return user


def request_elevation(db: Session, user_id: str, actor: Actor) -> User:
    if actor.user_id != user_id:
        raise AuthorizationError("Users may only request elevation for themselves")
    user = get_user(db, user_id)
    decision = lifecycle.request_elevation(user)
    if decision.changed:
        logger.info("User %s requested organizer role", user_id)
    return _apply(db, user, decision)


def resolve_elevation(db: Session, user_id: str, actor: Actor, approve: bool) -> User:
    user = get_user(db, user_id)
    user = _apply(db, user, lifecycle.resolve_elevation(user, actor, approve))
    logger.info(
        "Elevation request of user %s %s by %s",
        user_id, "approved" if approve else "declined", actor.user_id,
    )
    return user


def list_elevation_requests(db: Session, actor: Actor) -> list[User]:
    lifecycle.require_admin(actor, "review elevation requests")
    return (
        db.query(User)
        .filter(User.role_elevation_requested.is_(True))
        .order_by(User.updated_at)
        .all()
    )
