"""Event lifecycle and role-elevation state machine.

Pure decision functions: each takes the current persisted state, an explicit
actor, and the request, and returns a Decision describing the resulting state,
the column changes to apply, and the datastore effects. Nothing here reads or
writes the database; the services layer applies decisions.

Event states:
    Draft (not persisted) -> PendingApproval (is_approved=False)
                          -> Published (is_approved=True)
    PendingApproval -> Rejected (terminal, record deleted)

Role elevation runs over (role, role_elevation_requested):
    (attendee, False) --request--> (attendee, True)
    (attendee, True)  --approve--> (organizer, False)
    (attendee, True)  --decline--> (attendee, False)
"""
import enum
from dataclasses import dataclass, field
from datetime import date, time
from typing import Any, Optional

from festhub.errors import AuthorizationError, InvalidStateError, ValidationError
from festhub.models.event import EventCategory
from festhub.models.user import UserRole


class EventState(str, enum.Enum):
    draft = "Draft"
    pending_approval = "PendingApproval"
    published = "Published"
    rejected = "Rejected"


class Effect(str, enum.Enum):
    insert = "insert"
    update = "update"
    delete = "delete"


@dataclass(frozen=True)
class Actor:
    """The principal performing an operation, with the role it carries."""

    user_id: str
    role: UserRole

    @property
    def is_admin(self) -> bool:
        return self.role == UserRole.admin


@dataclass(frozen=True)
class Decision:
    state: EventState
    changes: dict[str, Any] = field(default_factory=dict)
    effects: tuple[Effect, ...] = ()


@dataclass(frozen=True)
class RoleDecision:
    role: UserRole
    role_elevation_requested: bool
    changes: dict[str, Any] = field(default_factory=dict)

    @property
    def changed(self) -> bool:
        return bool(self.changes)


REQUIRED_FIELDS = ("name", "category", "date", "time", "venue")
OPTIONAL_FIELDS = ("department", "college", "description", "image_url", "latitude", "longitude")
EDITABLE_FIELDS = REQUIRED_FIELDS + OPTIONAL_FIELDS
PROTECTED_FIELDS = ("event_id", "organizer_id", "is_approved", "star_count", "created_at", "updated_at")

# Profile fields an attendee must fill in before asking for organizer rights.
ELEVATION_PROFILE_FIELDS = ("name", "phone", "college", "department", "course")


def state_of(event) -> EventState:
    if event is None:
        return EventState.draft
    return EventState.published if event.is_approved else EventState.pending_approval


def _is_blank(value) -> bool:
    return value is None or (isinstance(value, str) and not value.strip())


def _normalize(name: str, value):
    """Coerce one event field to its stored type, raising ValidationError."""
    if value is None:
        return None
    try:
        if name == "category":
            return EventCategory(value)
        if name == "date" and not isinstance(value, date):
            return date.fromisoformat(value)
        if name == "time" and not isinstance(value, time):
            return time.fromisoformat(value)
        if name in ("latitude", "longitude"):
            return float(value)
    except (TypeError, ValueError):
        raise ValidationError(f"Invalid value for '{name}': {value!r}")
    if isinstance(value, str):
        return value.strip()
    return value


def _can_manage(event, actor: Actor) -> bool:
    return actor.is_admin or event.organizer_id == actor.user_id


def require_admin(actor: Actor, action: str) -> None:
    if not actor.is_admin:
        raise AuthorizationError(f"Only admins may {action}")


def submit(fields: dict[str, Any], actor: Actor) -> Decision:
    """Draft -> PendingApproval, or straight to Published when an admin submits."""
    if actor.role not in (UserRole.organizer, UserRole.admin):
        raise AuthorizationError("Only organizers and admins may create events")

    missing = [name for name in REQUIRED_FIELDS if _is_blank(fields.get(name))]
    if missing:
        raise ValidationError(f"Missing required fields: {', '.join(missing)}")

    changes = {}
    for name in EDITABLE_FIELDS:
        if name in fields:
            changes[name] = _normalize(name, fields[name])

    approved = actor.is_admin
    changes.update(organizer_id=actor.user_id, is_approved=approved, star_count=0)
    state = EventState.published if approved else EventState.pending_approval
    return Decision(state=state, changes=changes, effects=(Effect.insert,))


def approve(event, actor: Actor) -> Decision:
    require_admin(actor, "approve events")
    if state_of(event) != EventState.pending_approval:
        raise InvalidStateError("Only events pending approval can be approved")
    return Decision(state=EventState.published, changes={"is_approved": True}, effects=(Effect.update,))


def reject(event, actor: Actor) -> Decision:
    require_admin(actor, "reject events")
    if state_of(event) != EventState.pending_approval:
        raise InvalidStateError("Only events pending approval can be rejected")
    return Decision(state=EventState.rejected, effects=(Effect.delete,))


def edit(event, actor: Actor, patch: dict[str, Any]) -> Decision:
    """Apply a field patch. Never changes approval state, even for admins."""
    if not _can_manage(event, actor):
        raise AuthorizationError("Only the organizer or an admin may edit this event")

    protected = sorted(set(patch) & set(PROTECTED_FIELDS))
    if protected:
        raise ValidationError(f"Fields cannot be edited: {', '.join(protected)}")
    unknown = sorted(set(patch) - set(EDITABLE_FIELDS))
    if unknown:
        raise ValidationError(f"Unknown event fields: {', '.join(unknown)}")
    blanked = [name for name in REQUIRED_FIELDS if name in patch and _is_blank(patch[name])]
    if blanked:
        raise ValidationError(f"Required fields cannot be cleared: {', '.join(blanked)}")

    changes = {name: _normalize(name, value) for name, value in patch.items()}
    return Decision(state=state_of(event), changes=changes, effects=(Effect.update,) if changes else ())


def delete(event, actor: Actor) -> Decision:
    if not _can_manage(event, actor):
        raise AuthorizationError("Only the organizer or an admin may delete this event")
    return Decision(state=state_of(event), effects=(Effect.delete,))


def post_event_update(event, actor: Actor, message: Optional[str]) -> str:
    """Validate an event update and return the message to store."""
    if not _can_manage(event, actor):
        raise AuthorizationError("Only the organizer or an admin may post updates for this event")
    if _is_blank(message):
        raise ValidationError("Update message cannot be empty")
    return message.strip()


def post_festival_update(actor: Actor, message: Optional[str]) -> str:
    require_admin(actor, "post festival updates")
    if _is_blank(message):
        raise ValidationError("Update message cannot be empty")
    return message.strip()


def edit_profile(user, patch: dict[str, Any]) -> dict[str, Any]:
    """Validate a profile patch and return the cleaned values.

    Name can never be cleared. While an elevation request is pending, the
    fields it was granted on must stay filled too.
    """
    required = ELEVATION_PROFILE_FIELDS if user.role_elevation_requested else ("name",)
    blanked = [name for name in required if name in patch and _is_blank(patch[name])]
    if blanked:
        raise ValidationError(f"Profile fields cannot be cleared: {', '.join(blanked)}")
    return {name: value.strip() if isinstance(value, str) else value for name, value in patch.items()}


def request_elevation(user) -> RoleDecision:
    """Attendee asks for organizer rights. Repeating a pending request is a no-op."""
    if user.role != UserRole.attendee:
        raise InvalidStateError(f"Users with role '{UserRole(user.role).value}' cannot request elevation")
    if user.role_elevation_requested:
        return RoleDecision(role=UserRole.attendee, role_elevation_requested=True)

    incomplete = [name for name in ELEVATION_PROFILE_FIELDS if _is_blank(getattr(user, name, None))]
    if incomplete:
        raise ValidationError(f"Complete your profile before requesting elevation: {', '.join(incomplete)}")

    return RoleDecision(
        role=UserRole.attendee,
        role_elevation_requested=True,
        changes={"role_elevation_requested": True},
    )


def resolve_elevation(user, actor: Actor, approve: bool) -> RoleDecision:
    require_admin(actor, "resolve elevation requests")
    if not user.role_elevation_requested:
        raise InvalidStateError("User has no pending elevation request")

    if approve:
        return RoleDecision(
            role=UserRole.organizer,
            role_elevation_requested=False,
            changes={"role": UserRole.organizer, "role_elevation_requested": False},
        )
    return RoleDecision(
        role=UserRole(user.role),
        role_elevation_requested=False,
        changes={"role_elevation_requested": False},
    )
