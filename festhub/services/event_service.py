"""Event service: applies lifecycle decisions to the datastore.

Responsibilities:
- Submission: organizers' events wait for approval, admins' publish at once
- Admin approval / rejection (rejection deletes the record)
- Owner-or-admin editing and deletion
- Visibility: pending events are only visible to their organizer and admins
- Star-count read-repair on full event fetches
"""
import logging
import uuid
from pathlib import PurePosixPath
from typing import Any, Optional

from sqlalchemy import or_
from sqlalchemy.orm import Session

from festhub.config import settings
from festhub.errors import NotFoundError
from festhub.models.event import Event, EventCategory
from festhub.services import lifecycle, star_service
from festhub.services.lifecycle import Actor, Decision, Effect
from festhub.storage import ObjectStore

logger = logging.getLogger(__name__)


def _get_event(db: Session, event_id: str) -> Event:
    event = db.query(Event).filter(Event.event_id == event_id).first()
    if not event:
        raise NotFoundError("Event not found")
    return event


def _apply(db: Session, event: Event, decision: Decision) -> Optional[Event]:
    """Carry out a decision's effects; returns None once the event is deleted."""
    if Effect.delete in decision.effects:
        db.delete(event)
        db.commit()
        return None
    for field, value in decision.changes.items():
        setattr(event, field, value)
    db.commit()
    db.refresh(event)
    return event


def _visible_to(event: Event, actor: Optional[Actor]) -> bool:
    if event.is_approved:
        return True
    return actor is not None and (actor.is_admin or actor.user_id == event.organizer_id)


def create_event(db: Session, actor: Actor, fields: dict[str, Any]) -> Event:
    decision = lifecycle.submit(fields, actor)
    event = Event(**decision.changes)
    db.add(event)
    db.commit()
    db.refresh(event)
    logger.info(
        "Event '%s' (%s) submitted by %s as %s",
        event.name, event.event_id, actor.user_id, decision.state.value,
    )
    return event


def get_event(db: Session, event_id: str, actor: Optional[Actor] = None) -> Event:
    event = _get_event(db, event_id)
    if not _visible_to(event, actor):
        raise NotFoundError("Event not found")
    if settings.STAR_READ_REPAIR:
        star_service.reconcile_star_count(db, event)
    return event


def list_published(db: Session, category: Optional[EventCategory] = None, q: Optional[str] = None) -> list[Event]:
    query = db.query(Event).filter(Event.is_approved.is_(True))
    if category:
        query = query.filter(Event.category == category)
    if q:
        pattern = f"%{q.strip()}%"
        query = query.filter(or_(
            Event.name.ilike(pattern),
            Event.venue.ilike(pattern),
            Event.description.ilike(pattern),
            Event.department.ilike(pattern),
        ))
    return query.order_by(Event.date, Event.time).all()


def list_pending(db: Session, actor: Actor) -> list[Event]:
    lifecycle.require_admin(actor, "review pending events")
    return (
        db.query(Event)
        .filter(Event.is_approved.is_(False))
        .order_by(Event.created_at.desc())
        .all()
    )


def list_organized_by(db: Session, actor: Actor) -> list[Event]:
    """All of the actor's own events, pending ones included."""
    return (
        db.query(Event)
        .filter(Event.organizer_id == actor.user_id)
        .order_by(Event.date, Event.time)
        .all()
    )


def approve_event(db: Session, event_id: str, actor: Actor) -> Event:
    event = _get_event(db, event_id)
    event = _apply(db, event, lifecycle.approve(event, actor))
    logger.info("Event %s approved by %s", event_id, actor.user_id)
    return event


def reject_event(db: Session, event_id: str, actor: Actor) -> None:
    event = _get_event(db, event_id)
    _apply(db, event, lifecycle.reject(event, actor))
    logger.info("Event %s rejected and removed by %s", event_id, actor.user_id)


def update_event(db: Session, event_id: str, actor: Actor, patch: dict[str, Any]) -> Event:
    event = _get_event(db, event_id)
    decision = lifecycle.edit(event, actor, patch)
    if not decision.changes:
        return event
    event = _apply(db, event, decision)
    logger.info("Event %s updated by %s: %s", event_id, actor.user_id, sorted(decision.changes))
    return event


def delete_event(db: Session, event_id: str, actor: Actor) -> None:
    event = _get_event(db, event_id)
    _apply(db, event, lifecycle.delete(event, actor))
    logger.info("Event %s deleted by %s", event_id, actor.user_id)


def upload_image(
    db: Session,
    event_id: str,
    actor: Actor,
    store: ObjectStore,
    filename: str,
    data: bytes,
) -> Event:
    """Upload an event image and point image_url at it. Owner or admin only."""
    event = _get_event(db, event_id)
    # Authorize before anything reaches the store.
    lifecycle.edit(event, actor, {})
    suffix = PurePosixPath(filename or "").suffix.lower()
    url = store.upload(f"events/{event_id}/{uuid.uuid4().hex}{suffix}", data)
    return _apply(db, event, lifecycle.edit(event, actor, {"image_url": url}))
