"""Tests for star / unstar and star_count read-repair."""
import pytest

from festhub.errors import ConflictError, NotFoundError
from festhub.models.event import Event
from festhub.models.starred_event import StarredEvent
from festhub.services import star_service
from tests.conftest import (
    create_admin, create_organizer, create_published_event, create_test_user, submit_event,
)


def _star(client, event_id, user_id):
    return client.post(f"/api/events/{event_id}/star?actor_user_id={user_id}")


def _unstar(client, event_id, user_id):
    return client.delete(f"/api/events/{event_id}/star?actor_user_id={user_id}")


class TestStarAPI:
    def test_two_users_star_then_one_unstars(self, client, db):
        admin = create_admin(client, db)
        event = create_published_event(client, admin["user_id"])
        first = create_test_user(client, name="First")
        second = create_test_user(client, name="Second")

        resp = _star(client, event["event_id"], first["user_id"])
        assert resp.status_code == 200
        assert resp.json()["star_count"] == 1
        assert resp.json()["is_starred"] is True

        assert _star(client, event["event_id"], second["user_id"]).json()["star_count"] == 2

        resp = _unstar(client, event["event_id"], first["user_id"])
        assert resp.status_code == 200
        assert resp.json()["star_count"] == 1
        assert resp.json()["is_starred"] is False

    def test_star_then_unstar_restores_count(self, client, db):
        admin = create_admin(client, db)
        event = create_published_event(client, admin["user_id"])
        user = create_test_user(client)

        _star(client, event["event_id"], user["user_id"])
        resp = _unstar(client, event["event_id"], user["user_id"])
        assert resp.json()["star_count"] == 0

    def test_duplicate_star_conflict(self, client, db):
        admin = create_admin(client, db)
        event = create_published_event(client, admin["user_id"])
        user = create_test_user(client)

        _star(client, event["event_id"], user["user_id"])
        resp = _star(client, event["event_id"], user["user_id"])
        assert resp.status_code == 409
        assert db.query(StarredEvent).count() == 1
        assert db.query(Event).one().star_count == 1

    def test_unstar_without_star_not_found(self, client, db):
        admin = create_admin(client, db)
        event = create_published_event(client, admin["user_id"])
        user = create_test_user(client)

        resp = _unstar(client, event["event_id"], user["user_id"])
        assert resp.status_code == 404
        assert db.query(Event).one().star_count == 0

    def test_star_missing_event(self, client, db):
        user = create_test_user(client)
        assert _star(client, "no-such-event", user["user_id"]).status_code == 404

    def test_listing_flags_viewer_stars(self, client, db):
        admin = create_admin(client, db)
        starred = create_published_event(client, admin["user_id"], name="Starred")
        create_published_event(client, admin["user_id"], name="Plain")
        user = create_test_user(client)
        _star(client, starred["event_id"], user["user_id"])

        listed = client.get(f"/api/events/?actor_user_id={user['user_id']}").json()
        flags = {e["name"]: e["is_starred"] for e in listed}
        assert flags == {"Starred": True, "Plain": False}

        mine = client.get(f"/api/users/{user['user_id']}/starred").json()
        assert [e["name"] for e in mine] == ["Starred"]

    def test_deleting_event_drops_its_stars(self, client, db):
        admin = create_admin(client, db)
        event = create_published_event(client, admin["user_id"])
        user = create_test_user(client)
        _star(client, event["event_id"], user["user_id"])

        client.delete(f"/api/events/{event['event_id']}?actor_user_id={admin['user_id']}")
        assert db.query(StarredEvent).count() == 0


class TestStarService:
    """Service-level behaviour: counter floor and read-repair."""

    def _event(self, client, db):
        admin = create_admin(client, db)
        event = create_published_event(client, admin["user_id"])
        return db.query(Event).filter(Event.event_id == event["event_id"]).one()

    def test_counter_never_negative(self, client, db):
        event = self._event(client, db)
        user = create_test_user(client)
        star_service.star(db, user["user_id"], event.event_id)

        # Another session already pulled the counter to zero.
        event.star_count = 0
        db.commit()

        star_service.unstar(db, user["user_id"], event.event_id)
        assert event.star_count == 0

        with pytest.raises(NotFoundError):
            star_service.unstar(db, user["user_id"], event.event_id)
        assert event.star_count == 0

    def test_duplicate_raises_conflict(self, client, db):
        event = self._event(client, db)
        user = create_test_user(client)
        star_service.star(db, user["user_id"], event.event_id)
        with pytest.raises(ConflictError):
            star_service.star(db, user["user_id"], event.event_id)

    def test_reconcile_repairs_drift(self, client, db):
        event = self._event(client, db)
        for name in ("A", "B"):
            user = create_test_user(client, name=name)
            star_service.star(db, user["user_id"], event.event_id)

        # Lost-update race left the counter too high.
        event.star_count = 5
        db.commit()

        assert star_service.reconcile_star_count(db, event) is True
        assert event.star_count == 2
        assert star_service.reconcile_star_count(db, event) is False

    def test_event_fetch_runs_read_repair(self, client, db):
        event = self._event(client, db)
        event.star_count = 3
        db.commit()

        resp = client.get(f"/api/events/{event.event_id}")
        assert resp.json()["star_count"] == 0

    def test_reconcile_all_endpoint(self, client, db):
        admin = create_admin(client, db, name="Chief")
        first = create_published_event(client, admin["user_id"], name="One")
        create_published_event(client, admin["user_id"], name="Two")
        db.query(Event).filter(Event.event_id == first["event_id"]).update({"star_count": 4})
        db.commit()

        resp = client.post(f"/api/events/reconcile-stars?actor_user_id={admin['user_id']}")
        assert resp.status_code == 200
        assert resp.json() == {"corrected": {first["event_id"]: 0}}

        attendee = create_test_user(client)
        resp = client.post(f"/api/events/reconcile-stars?actor_user_id={attendee['user_id']}")
        assert resp.status_code == 403


class TestPendingEventStars:
    def test_stranger_cannot_star_pending_event(self, client, db):
        organizer = create_organizer(client, db)
        pending = submit_event(client, organizer["user_id"]).json()
        stranger = create_test_user(client, name="Stranger")

        resp = _star(client, pending["event_id"], stranger["user_id"])
        assert resp.status_code == 404
        assert "Hackathon" not in resp.text
        assert _unstar(client, pending["event_id"], stranger["user_id"]).status_code == 404
        assert db.query(StarredEvent).count() == 0
        assert db.query(Event).one().star_count == 0

    def test_owner_can_star_own_pending_event(self, client, db):
        organizer = create_organizer(client, db)
        pending = submit_event(client, organizer["user_id"]).json()
        resp = _star(client, pending["event_id"], organizer["user_id"])
        assert resp.status_code == 200
        assert resp.json()["star_count"] == 1
