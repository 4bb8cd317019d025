"""Event API routes; delegates to event_service and star_service."""
import logging
from typing import Optional

from fastapi import APIRouter, Depends, File, Query, UploadFile, status
from sqlalchemy.orm import Session

from festhub.auth import get_actor, get_optional_actor
from festhub.database import get_db
from festhub.models.event import Event, EventCategory
from festhub.realtime import ChangeFeed, get_change_feed
from festhub.schemas.event import EventCreate, EventPatch, EventOut, StarReconcileOut
from festhub.schemas.update import EventUpdateOut, UpdateCreate
from festhub.services import event_service, lifecycle, star_service, update_service
from festhub.services.lifecycle import Actor
from festhub.storage import ObjectStore, get_object_store

logger = logging.getLogger(__name__)
router = APIRouter()


def _out(db: Session, events: list[Event], actor: Optional[Actor]) -> list[EventOut]:
    """Serialize events with the viewer's is_starred flag."""
    starred = star_service.starred_event_ids(db, actor.user_id) if actor else set()
    return [
        EventOut.model_validate(event).model_copy(update={"is_starred": event.event_id in starred})
        for event in events
    ]


@router.post("/", response_model=EventOut, status_code=status.HTTP_201_CREATED)
def submit_event(payload: EventCreate, actor: Actor = Depends(get_actor), db: Session = Depends(get_db)):
    """Submit an event. Admin submissions publish immediately, others await approval."""
    return event_service.create_event(db, actor, payload.model_dump(exclude_unset=True))


@router.get("/", response_model=list[EventOut])
def list_events(
    category: Optional[EventCategory] = Query(None),
    q: Optional[str] = Query(None, description="Search name, venue, description, department"),
    actor: Optional[Actor] = Depends(get_optional_actor),
    db: Session = Depends(get_db),
):
    """List published events ordered by date and time."""
    return _out(db, event_service.list_published(db, category=category, q=q), actor)


@router.get("/pending", response_model=list[EventOut])
def list_pending_events(actor: Actor = Depends(get_actor), db: Session = Depends(get_db)):
    """Events awaiting admin approval (admin only)."""
    return _out(db, event_service.list_pending(db, actor), actor)


@router.get("/mine", response_model=list[EventOut])
def list_my_events(actor: Actor = Depends(get_actor), db: Session = Depends(get_db)):
    """The actor's own events, including those still pending."""
    return _out(db, event_service.list_organized_by(db, actor), actor)


@router.post("/reconcile-stars", response_model=StarReconcileOut)
def reconcile_stars(actor: Actor = Depends(get_actor), db: Session = Depends(get_db)):
    """Recompute every star_count from the starred_events rows (admin only)."""
    lifecycle.require_admin(actor, "reconcile star counts")
    return StarReconcileOut(corrected=star_service.reconcile_all_star_counts(db))


@router.get("/{event_id}", response_model=EventOut)
def get_event(event_id: str, actor: Optional[Actor] = Depends(get_optional_actor), db: Session = Depends(get_db)):
    """Fetch one event; its star_count is repaired against the star rows."""
    return _out(db, [event_service.get_event(db, event_id, actor)], actor)[0]


@router.patch("/{event_id}", response_model=EventOut)
def update_event(event_id: str, payload: EventPatch, actor: Actor = Depends(get_actor), db: Session = Depends(get_db)):
    """Edit an event (organizer or admin). Approval state is untouched."""
    event = event_service.update_event(db, event_id, actor, payload.model_dump(exclude_unset=True))
    return _out(db, [event], actor)[0]


@router.delete("/{event_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_event(event_id: str, actor: Actor = Depends(get_actor), db: Session = Depends(get_db)):
    event_service.delete_event(db, event_id, actor)


@router.post("/{event_id}/approve", response_model=EventOut)
def approve_event(event_id: str, actor: Actor = Depends(get_actor), db: Session = Depends(get_db)):
    """Publish a pending event (admin only)."""
    return _out(db, [event_service.approve_event(db, event_id, actor)], actor)[0]


@router.post("/{event_id}/reject", status_code=status.HTTP_204_NO_CONTENT)
def reject_event(event_id: str, actor: Actor = Depends(get_actor), db: Session = Depends(get_db)):
    """Reject a pending event (admin only); the record is removed."""
    event_service.reject_event(db, event_id, actor)


@router.post("/{event_id}/star", response_model=EventOut)
def star_event(event_id: str, actor: Actor = Depends(get_actor), db: Session = Depends(get_db)):
    event_service.get_event(db, event_id, actor)
    return _out(db, [star_service.star(db, actor.user_id, event_id)], actor)[0]


@router.delete("/{event_id}/star", response_model=EventOut)
def unstar_event(event_id: str, actor: Actor = Depends(get_actor), db: Session = Depends(get_db)):
    event_service.get_event(db, event_id, actor)
    return _out(db, [star_service.unstar(db, actor.user_id, event_id)], actor)[0]


@router.post("/{event_id}/image", response_model=EventOut)
def upload_event_image(
    event_id: str,
    file: UploadFile = File(...),
    actor: Actor = Depends(get_actor),
    store: ObjectStore = Depends(get_object_store),
    db: Session = Depends(get_db),
):
    """Upload an image to the object store and attach its URL to the event."""
    event = event_service.upload_image(db, event_id, actor, store, file.filename, file.file.read())
    return _out(db, [event], actor)[0]


@router.get("/{event_id}/updates", response_model=list[EventUpdateOut])
def list_event_updates(
    event_id: str,
    actor: Optional[Actor] = Depends(get_optional_actor),
    db: Session = Depends(get_db),
):
    """Updates posted on one event, newest first."""
    event_service.get_event(db, event_id, actor)
    return update_service.list_event_updates(db, event_id)


@router.post("/{event_id}/updates", response_model=EventUpdateOut, status_code=status.HTTP_201_CREATED)
def post_event_update(
    event_id: str,
    payload: UpdateCreate,
    actor: Actor = Depends(get_actor),
    feed: ChangeFeed = Depends(get_change_feed),
    db: Session = Depends(get_db),
):
    """Post an update on an event (organizer or admin)."""
    return update_service.post_event_update(db, feed, event_id, actor, payload.message)
