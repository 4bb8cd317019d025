"""Festival update routes and the merged notification feed."""
import logging
from datetime import datetime
from typing import Optional

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from festhub.auth import get_actor
from festhub.database import get_db
from festhub.realtime import ChangeFeed, get_change_feed
from festhub.schemas.update import FeedItemOut, FeedOut, FestivalUpdateOut, UpdateCreate
from festhub.services import update_service
from festhub.services.lifecycle import Actor

logger = logging.getLogger(__name__)
router = APIRouter()


@router.get("/festival", response_model=list[FestivalUpdateOut])
def list_festival_updates(db: Session = Depends(get_db)):
    """Festival-wide announcements, newest first."""
    return update_service.list_festival_updates(db)


@router.post("/festival", response_model=FestivalUpdateOut, status_code=status.HTTP_201_CREATED)
def post_festival_update(
    payload: UpdateCreate,
    actor: Actor = Depends(get_actor),
    feed: ChangeFeed = Depends(get_change_feed),
    db: Session = Depends(get_db),
):
    """Post a festival-wide announcement (admin only)."""
    return update_service.post_festival_update(db, feed, actor, payload.message)


@router.get("/feed", response_model=FeedOut)
def get_feed(
    last_read: Optional[datetime] = Query(None, description="Client-held timestamp of the last time the feed was opened"),
    db: Session = Depends(get_db),
):
    """Merged festival + event updates with the unread count for last_read."""
    aggregator = update_service.build_feed(db, last_read=last_read)
    return FeedOut(
        items=[FeedItemOut.model_validate(item) for item in aggregator.feed],
        unread_count=aggregator.unread_count,
        last_read=aggregator.last_read,
        errors=aggregator.errors,
    )
