"""Event and festival updates: append-only posts pushed to the change feed."""
import logging
from datetime import datetime
from typing import Any, Optional

from sqlalchemy.orm import Session

from festhub.config import settings
from festhub.errors import NotFoundError
from festhub.models.event import Event
from festhub.models.update import EventUpdate, FestivalUpdate
from festhub.notifications import NotificationAggregator
from festhub.realtime import ChangeFeed, EVENT_UPDATES, FESTIVAL_UPDATES
from festhub.services import lifecycle
from festhub.services.lifecycle import Actor

logger = logging.getLogger(__name__)


def _row(update, *columns: str) -> dict[str, Any]:
    return {column: getattr(update, column) for column in ("id", "message", "created_at") + columns}


def post_event_update(db: Session, feed: ChangeFeed, event_id: str, actor: Actor, message: str) -> EventUpdate:
    event = db.query(Event).filter(Event.event_id == event_id).first()
    if not event:
        raise NotFoundError("Event not found")
    text = lifecycle.post_event_update(event, actor, message)

    update = EventUpdate(event_id=event_id, user_id=actor.user_id, message=text)
    db.add(update)
    db.commit()
    db.refresh(update)
    logger.info("Update %s posted on event %s by %s", update.id, event_id, actor.user_id)
    # Pending events are private to their owner and admins
    if event.is_approved:
        feed.publish(EVENT_UPDATES, _row(update, "event_id", "user_id"))
    return update


def post_festival_update(db: Session, feed: ChangeFeed, actor: Actor, message: str) -> FestivalUpdate:
    text = lifecycle.post_festival_update(actor, message)

    update = FestivalUpdate(admin_id=actor.user_id, message=text)
    db.add(update)
    db.commit()
    db.refresh(update)
    logger.info("Festival update %s posted by %s", update.id, actor.user_id)
    feed.publish(FESTIVAL_UPDATES, _row(update, "admin_id"))
    return update


def list_event_updates(db: Session, event_id: str, limit: Optional[int] = None) -> list[EventUpdate]:
    query = (
        db.query(EventUpdate)
        .filter(EventUpdate.event_id == event_id)
        .order_by(EventUpdate.created_at.desc())
    )
    return query.limit(limit).all() if limit else query.all()


def list_recent_event_updates(db: Session, limit: Optional[int] = None) -> list[EventUpdate]:
    """Updates across published events only; pending events stay private."""
    query = (
        db.query(EventUpdate)
        .join(Event, Event.event_id == EventUpdate.event_id)
        .filter(Event.is_approved.is_(True))
        .order_by(EventUpdate.created_at.desc())
    )
    return query.limit(limit).all() if limit else query.all()


def list_festival_updates(db: Session, limit: Optional[int] = None) -> list[FestivalUpdate]:
    query = db.query(FestivalUpdate).order_by(FestivalUpdate.created_at.desc())
    return query.limit(limit).all() if limit else query.all()


def build_feed(db: Session, last_read: Optional[datetime] = None) -> NotificationAggregator:
    """Load the newest updates of both streams into a fresh aggregator."""
    limit = settings.UPDATES_FEED_LIMIT
    aggregator = NotificationAggregator(last_read=last_read)
    aggregator.load(
        lambda: list_festival_updates(db, limit),
        lambda: list_recent_event_updates(db, limit),
    )
    return aggregator
