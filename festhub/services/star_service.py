"""Star / unstar with a denormalized star_count.

Each operation is two ordered steps with no shared transaction: the
starred_events row change, then the counter change. Concurrent sessions can
make the counter drift; reconcile_star_count() repairs it from the rows.
"""
import logging

from sqlalchemy import case, func, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from festhub.errors import ConflictError, NotFoundError
from festhub.models.event import Event
from festhub.models.starred_event import StarredEvent

logger = logging.getLogger(__name__)


def _get_event(db: Session, event_id: str) -> Event:
    event = db.query(Event).filter(Event.event_id == event_id).first()
    if not event:
        raise NotFoundError("Event not found")
    return event


def _find_star(db: Session, user_id: str, event_id: str):
    return (
        db.query(StarredEvent)
        .filter(StarredEvent.user_id == user_id, StarredEvent.event_id == event_id)
        .first()
    )


def star(db: Session, user_id: str, event_id: str) -> Event:
    event = _get_event(db, event_id)
    if _find_star(db, user_id, event_id):
        raise ConflictError("Event is already starred")

    # Step 1: the row. The unique index catches a racing duplicate.
    db.add(StarredEvent(user_id=user_id, event_id=event_id))
    try:
        db.commit()
    except IntegrityError:
        db.rollback()
        raise ConflictError("Event is already starred")

    # Step 2: the counter, incremented in SQL rather than from a stale read.
    db.execute(
        update(Event)
        .where(Event.event_id == event_id)
        .values(star_count=Event.star_count + 1)
    )
    db.commit()
    db.refresh(event)
    logger.info("User %s starred event %s (star_count=%d)", user_id, event_id, event.star_count)
    return event


def unstar(db: Session, user_id: str, event_id: str) -> Event:
    event = _get_event(db, event_id)
    row = _find_star(db, user_id, event_id)
    if not row:
        raise NotFoundError("Event is not starred")

    db.delete(row)
    db.commit()

    db.execute(
        update(Event)
        .where(Event.event_id == event_id)
        .values(star_count=case((Event.star_count > 0, Event.star_count - 1), else_=0))
    )
    db.commit()
    db.refresh(event)
    logger.info("User %s unstarred event %s (star_count=%d)", user_id, event_id, event.star_count)
    return event


def count_stars(db: Session, event_id: str) -> int:
    return db.query(func.count(StarredEvent.id)).filter(StarredEvent.event_id == event_id).scalar()


def reconcile_star_count(db: Session, event: Event) -> bool:
    """Read-repair: reset star_count to the number of starred_events rows.

    Returns True when the stored counter had drifted and was corrected.
    """
    actual = count_stars(db, event.event_id)
    if event.star_count == actual:
        return False
    logger.warning(
        "Repairing star_count for event %s: stored %d, actual %d",
        event.event_id, event.star_count, actual,
    )
    event.star_count = actual
    db.commit()
    db.refresh(event)
    return True


def reconcile_all_star_counts(db: Session) -> dict[str, int]:
    """Repair every event's counter; returns {event_id: corrected count}."""
    actual_counts = dict(
        db.query(StarredEvent.event_id, func.count(StarredEvent.id))
        .group_by(StarredEvent.event_id)
        .all()
    )
    corrected = {}
    for event in db.query(Event).all():
        actual = actual_counts.get(event.event_id, 0)
        if event.star_count != actual:
            logger.warning(
                "Repairing star_count for event %s: stored %d, actual %d",
                event.event_id, event.star_count, actual,
            )
            event.star_count = actual
            corrected[event.event_id] = actual
    db.commit()
    logger.info("Star reconciliation corrected %d event(s)", len(corrected))
    return corrected


def starred_event_ids(db: Session, user_id: str) -> set[str]:
    rows = db.query(StarredEvent.event_id).filter(StarredEvent.user_id == user_id).all()
    return {event_id for (event_id,) in rows}


def starred_events(db: Session, user_id: str) -> list[Event]:
    return (
        db.query(Event)
        .join(StarredEvent, StarredEvent.event_id == Event.event_id)
        .filter(StarredEvent.user_id == user_id)
        .order_by(Event.date, Event.time)
        .all()
    )
