"""Notification aggregator: one viewer-scoped feed from two update streams.

Festival-wide announcements and per-event updates are fetched independently
and merged newest first. Read state is a single client-held ``last_read``
timestamp; there are no per-user receipts on the server.

Items with equal ``created_at`` keep festival updates ahead of event updates,
then the order in which each stream delivered them.
"""
import itertools
import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Callable, Iterable, Optional

from festhub.realtime import ChangeFeed, EVENT_UPDATES, FESTIVAL_UPDATES

logger = logging.getLogger(__name__)

FESTIVAL = "festival"
EVENT = "event"

_KIND_BY_TABLE = {FESTIVAL_UPDATES: FESTIVAL, EVENT_UPDATES: EVENT}
_ALERT_TITLES = {FESTIVAL: "New Festival Update", EVENT: "New Event Update"}
ALERT_PREVIEW_LENGTH = 100


def as_utc(value) -> Optional[datetime]:
    """Parse ISO strings and treat naive datetimes (SQLite) as UTC."""
    if value is None:
        return None
    if isinstance(value, str):
        value = datetime.fromisoformat(value.replace("Z", "+00:00"))
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


def _field(row, name: str):
    if isinstance(row, dict):
        return row.get(name)
    return getattr(row, name, None)


@dataclass(frozen=True)
class FeedItem:
    id: str
    kind: str
    message: str
    created_at: datetime
    author_id: Optional[str] = None
    event_id: Optional[str] = None

    @property
    def key(self) -> tuple[str, str]:
        return self.kind, self.id

    @classmethod
    def festival(cls, row) -> "FeedItem":
        return cls(
            id=str(_field(row, "id")),
            kind=FESTIVAL,
            message=_field(row, "message"),
            created_at=as_utc(_field(row, "created_at")),
            author_id=_field(row, "admin_id"),
        )

    @classmethod
    def event(cls, row) -> "FeedItem":
        return cls(
            id=str(_field(row, "id")),
            kind=EVENT,
            message=_field(row, "message"),
            created_at=as_utc(_field(row, "created_at")),
            author_id=_field(row, "user_id"),
            event_id=_field(row, "event_id"),
        )


@dataclass(frozen=True)
class Alert:
    title: str
    description: str
    item: FeedItem
    unread_count: int


def preview(message: str, length: int = ALERT_PREVIEW_LENGTH) -> str:
    if len(message) <= length:
        return message
    return message[:length] + "..."


def merge(festival_updates: Iterable, event_updates: Iterable) -> list[FeedItem]:
    """Stable newest-first merge; festival items win timestamp ties.

    A row delivered twice (same kind and id) is kept once, at its first position.
    """
    candidates = [FeedItem.festival(row) for row in festival_updates]
    candidates.extend(FeedItem.event(row) for row in event_updates)
    seen = set()
    items = []
    for item in candidates:
        if item.key not in seen:
            seen.add(item.key)
            items.append(item)
    # sorted() stays stable with reverse=True
    return sorted(items, key=lambda item: item.created_at, reverse=True)


def unread_count(feed: Iterable[FeedItem], last_read: Optional[datetime]) -> int:
    if last_read is None:
        return sum(1 for _ in feed)
    last_read = as_utc(last_read)
    return sum(1 for item in feed if item.created_at > last_read)


Fetch = Callable[[], Iterable[Any]]


class NotificationAggregator:
    """In-memory feed for one viewer session.

    Mutated only from the thread delivering fetch results and change-feed
    inserts, so no locking is done here.
    """

    def __init__(self, last_read: Optional[datetime] = None, on_alert: Optional[Callable[[Alert], None]] = None):
        self.feed: list[FeedItem] = []
        self.last_read = as_utc(last_read)
        self.errors: dict[str, str] = {}
        self.alerts: list[Alert] = []
        self._on_alert = on_alert or self.alerts.append
        self._unread = 0
        self._sequence = itertools.count(1)
        self._applied_seq = 0
        self._handles: list[int] = []

    @property
    def unread_count(self) -> int:
        return self._unread

    def next_sequence(self) -> int:
        """Number a refresh request; later numbers supersede earlier ones."""
        return next(self._sequence)

    def load(self, fetch_festival: Fetch, fetch_event: Fetch, seq: Optional[int] = None) -> bool:
        """Fetch both streams and apply them; one failing stream does not sink the other."""
        if seq is None:
            seq = self.next_sequence()
        errors = {}
        festival = self._fetch(FESTIVAL, fetch_festival, errors)
        event = self._fetch(EVENT, fetch_event, errors)
        return self.apply(seq, festival, event, errors)

    @staticmethod
    def _fetch(kind: str, fetch: Fetch, errors: dict[str, str]) -> list:
        try:
            return list(fetch())
        except Exception as exc:
            logger.warning("Fetching %s updates failed, rendering the rest: %s", kind, exc)
            errors[kind] = str(exc)
            return []

    def apply(self, seq: int, festival_updates: Iterable, event_updates: Iterable,
              errors: Optional[dict[str, str]] = None) -> bool:
        """Install a refresh result unless a newer one was already applied."""
        if seq <= self._applied_seq:
            logger.debug("Discarding superseded feed response %d (applied %d)", seq, self._applied_seq)
            return False
        self._applied_seq = seq
        self.feed = merge(festival_updates, event_updates)
        self.errors = dict(errors or {})
        self._unread = unread_count(self.feed, self.last_read)
        return True

    def mark_read(self, now: Optional[datetime] = None) -> None:
        self.last_read = as_utc(now) if now is not None else datetime.now(timezone.utc)
        self._unread = unread_count(self.feed, self.last_read)

    def open_view(self, now: Optional[datetime] = None) -> list[FeedItem]:
        """Viewer opened the feed: mark everything read once and return it."""
        self.mark_read(now)
        return list(self.feed)

    def on_insert(self, table: str, row: dict[str, Any]) -> Optional[Alert]:
        """Change-feed handler: prepend the row, bump unread, and raise its alert together.

        A row the feed already holds (pushed after a load that fetched it) is
        ignored and raises no alert; returns None in that case.
        """
        kind = _KIND_BY_TABLE.get(table)
        if kind is None:
            raise ValueError(f"Not an update table: {table}")
        item = FeedItem.festival(row) if kind == FESTIVAL else FeedItem.event(row)
        if any(existing.key == item.key for existing in self.feed):
            logger.debug("Ignoring duplicate %s update %s", kind, item.id)
            return None
        self.feed.insert(0, item)
        self._unread += 1
        alert = Alert(
            title=_ALERT_TITLES[kind],
            description=preview(item.message),
            item=item,
            unread_count=self._unread,
        )
        self._on_alert(alert)
        return alert

    def attach(self, feed: ChangeFeed, event_id: Optional[str] = None) -> None:
        """Subscribe to both tables; event updates optionally narrowed to one event."""
        event_filter = {"event_id": event_id} if event_id else None
        self._handles.append(feed.subscribe(FESTIVAL_UPDATES, self.on_insert))
        self._handles.append(feed.subscribe(EVENT_UPDATES, self.on_insert, filter=event_filter))

    def detach(self, feed: ChangeFeed) -> None:
        for handle in self._handles:
            feed.unsubscribe(handle)
        self._handles = []
