"""In-process change feed: push row inserts to table subscribers.

Delivery is synchronous and in publish order, so each table's stream reaches
subscribers in the order rows were committed. Subscribers may narrow a table
with an equality filter, e.g. ``{"event_id": "..."}``.
"""
import itertools
import logging
from dataclasses import dataclass, field
from typing import Any, Callable, Optional

logger = logging.getLogger(__name__)

FESTIVAL_UPDATES = "festival_updates"
EVENT_UPDATES = "event_updates"

InsertCallback = Callable[[str, dict[str, Any]], None]


@dataclass(frozen=True)
class Subscription:
    handle: int
    table: str
    on_insert: InsertCallback
    filter: dict[str, Any] = field(default_factory=dict)

    def matches(self, row: dict[str, Any]) -> bool:
        return all(row.get(column) == value for column, value in self.filter.items())


class ChangeFeed:
    def __init__(self):
        self._handles = itertools.count(1)
        self._subscriptions: dict[int, Subscription] = {}

    def subscribe(self, table: str, on_insert: InsertCallback, filter: Optional[dict[str, Any]] = None) -> int:
        handle = next(self._handles)
        self._subscriptions[handle] = Subscription(handle, table, on_insert, dict(filter or {}))
        logger.debug("Subscription %d on %s (filter=%s)", handle, table, filter)
        return handle

    def unsubscribe(self, handle: int) -> None:
        self._subscriptions.pop(handle, None)

    def publish(self, table: str, row: dict[str, Any]) -> int:
        """Deliver an inserted row; returns the number of subscribers reached.

        A failing subscriber is logged and skipped; the rest still receive the row.
        """
        delivered = 0
        for sub in list(self._subscriptions.values()):
            if sub.table != table or not sub.matches(row):
                continue
            try:
                sub.on_insert(table, row)
            except Exception:
                logger.exception("Subscriber %d failed on %s insert", sub.handle, table)
                continue
            delivered += 1
        return delivered

    def subscriber_count(self, table: Optional[str] = None) -> int:
        return sum(1 for s in self._subscriptions.values() if table is None or s.table == table)


change_feed = ChangeFeed()


def get_change_feed() -> ChangeFeed:
    """FastAPI dependency; tests override it with a private feed."""
    return change_feed
