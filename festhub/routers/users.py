"""User API routes: registration, profile, and organizer elevation."""
import logging
from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from festhub.auth import get_actor
from festhub.database import get_db
from festhub.models.user import User
from festhub.schemas.event import EventOut
from festhub.schemas.user import UserCreate, UserUpdate, UserOut
from festhub.services import star_service, user_service
from festhub.services.lifecycle import Actor

logger = logging.getLogger(__name__)
router = APIRouter()


@router.post("/", response_model=UserOut, status_code=status.HTTP_201_CREATED)
def register_user(payload: UserCreate, db: Session = Depends(get_db)):
    """Create the profile for an identity-provider account. Everyone starts as attendee."""
    return user_service.register_user(db, payload.model_dump())


@router.get("/", response_model=list[UserOut])
def list_users(db: Session = Depends(get_db)):
    """List all users."""
    return db.query(User).order_by(User.created_at).all()


@router.get("/elevation-requests", response_model=list[UserOut])
def list_elevation_requests(actor: Actor = Depends(get_actor), db: Session = Depends(get_db)):
    """Attendees waiting for organizer rights (admin only)."""
    return user_service.list_elevation_requests(db, actor)


@router.get("/{user_id}", response_model=UserOut)
def get_user(user_id: str, db: Session = Depends(get_db)):
    """Fetch a single user by ID."""
    return user_service.get_user(db, user_id)


@router.patch("/{user_id}", response_model=UserOut)
def update_user(user_id: str, payload: UserUpdate, actor: Actor = Depends(get_actor), db: Session = Depends(get_db)):
    """Update one's own profile (partial update). Roles are never set here."""
    return user_service.update_profile(db, user_id, actor, payload.model_dump(exclude_unset=True))


@router.get("/{user_id}/starred", response_model=list[EventOut])
def list_starred_events(user_id: str, db: Session = Depends(get_db)):
    """Events the user has starred."""
    user_service.get_user(db, user_id)
    return [
        EventOut.model_validate(event).model_copy(update={"is_starred": True})
        for event in star_service.starred_events(db, user_id)
    ]


@router.post("/{user_id}/elevation-request", response_model=UserOut)
def request_elevation(user_id: str, actor: Actor = Depends(get_actor), db: Session = Depends(get_db)):
    """Ask for organizer rights. Asking again while pending changes nothing."""
    return user_service.request_elevation(db, user_id, actor)


@router.post("/{user_id}/elevation/approve", response_model=UserOut)
def approve_elevation(user_id: str, actor: Actor = Depends(get_actor), db: Session = Depends(get_db)):
    return user_service.resolve_elevation(db, user_id, actor, approve=True)


@router.post("/{user_id}/elevation/decline", response_model=UserOut)
def decline_elevation(user_id: str, actor: Actor = Depends(get_actor), db: Session = Depends(get_db)):
    return user_service.resolve_elevation(db, user_id, actor, approve=False)
