"""Tests for user registration, profiles, and the organizer elevation workflow."""
from tests.conftest import create_admin, create_test_user

COMPLETE_PROFILE = {
    "phone": "555-0101",
    "college": "NIT Trichy",
    "department": "CSE",
    "course": "BTech",
}


class TestUserCRUD:
    """User register / get / update / list."""

    def test_register_starts_as_attendee(self, client):
        data = create_test_user(client, name="Alice")
        assert data["name"] == "Alice"
        assert data["role"] == "attendee"
        assert data["role_elevation_requested"] is False
        assert "user_id" in data

    def test_role_cannot_be_chosen_at_registration(self, client):
        resp = client.post("/api/users/", json={
            "auth_id": "auth-x", "name": "Mallory", "email": "m@fest.test", "role": "admin",
        })
        assert resp.status_code == 201
        assert resp.json()["role"] == "attendee"

    def test_duplicate_email_conflict(self, client):
        payload = {"auth_id": "auth-1", "name": "Bob", "email": "bob@fest.test"}
        assert client.post("/api/users/", json=payload).status_code == 201
        resp = client.post("/api/users/", json={**payload, "auth_id": "auth-2"})
        assert resp.status_code == 409

    def test_get_user(self, client):
        user = create_test_user(client)
        resp = client.get(f"/api/users/{user['user_id']}")
        assert resp.status_code == 200
        assert resp.json()["name"] == "Test User"

    def test_get_user_not_found(self, client):
        resp = client.get("/api/users/00000000-0000-0000-0000-000000000000")
        assert resp.status_code == 404

    def test_update_own_profile(self, client):
        user = create_test_user(client)
        resp = client.patch(
            f"/api/users/{user['user_id']}?actor_user_id={user['user_id']}",
            json={"name": "Updated Name", "passout_year": 2027},
        )
        assert resp.status_code == 200
        assert resp.json()["name"] == "Updated Name"
        assert resp.json()["passout_year"] == 2027

    def test_cannot_update_someone_else(self, client):
        user = create_test_user(client, name="Owner")
        other = create_test_user(client, name="Other")
        resp = client.patch(
            f"/api/users/{user['user_id']}?actor_user_id={other['user_id']}",
            json={"name": "Hijacked"},
        )
        assert resp.status_code == 403

    def test_list_users(self, client):
        create_test_user(client, name="Alice")
        create_test_user(client, name="Bob")
        resp = client.get("/api/users/")
        assert resp.status_code == 200
        names = [u["name"] for u in resp.json()]
        assert "Alice" in names
        assert "Bob" in names


class TestElevation:
    """attendee -> (request) -> admin approve / decline."""

    def _request(self, client, user):
        return client.post(
            f"/api/users/{user['user_id']}/elevation-request?actor_user_id={user['user_id']}"
        )

    def test_request_then_approve(self, client, db):
        admin = create_admin(client, db)
        user = create_test_user(client, name="Asha", **COMPLETE_PROFILE)

        resp = self._request(client, user)
        assert resp.status_code == 200
        assert resp.json()["role_elevation_requested"] is True

        pending = client.get(f"/api/users/elevation-requests?actor_user_id={admin['user_id']}").json()
        assert [u["user_id"] for u in pending] == [user["user_id"]]

        resp = client.post(f"/api/users/{user['user_id']}/elevation/approve?actor_user_id={admin['user_id']}")
        assert resp.status_code == 200
        assert resp.json()["role"] == "organizer"
        assert resp.json()["role_elevation_requested"] is False

        # The new organizer can now submit events.
        resp = client.post(f"/api/events/?actor_user_id={user['user_id']}", json={
            "name": "Robo Race", "category": "competition", "date": "2025-05-02",
            "time": "10:00", "venue": "Ground",
        })
        assert resp.status_code == 201
        assert resp.json()["is_approved"] is False

    def test_request_then_decline(self, client, db):
        admin = create_admin(client, db)
        user = create_test_user(client, name="Ravi", **COMPLETE_PROFILE)
        self._request(client, user)

        resp = client.post(f"/api/users/{user['user_id']}/elevation/decline?actor_user_id={admin['user_id']}")
        assert resp.status_code == 200
        assert resp.json()["role"] == "attendee"
        assert resp.json()["role_elevation_requested"] is False

    def test_repeated_request_is_idempotent(self, client):
        user = create_test_user(client, **COMPLETE_PROFILE)
        first = self._request(client, user).json()
        second = self._request(client, user)
        assert second.status_code == 200
        assert second.json()["role_elevation_requested"] is True
        assert second.json()["updated_at"] == first["updated_at"]

    def test_incomplete_profile_rejected(self, client):
        user = create_test_user(client)
        resp = self._request(client, user)
        assert resp.status_code == 422
        assert "phone" in resp.json()["detail"]

    def test_request_for_someone_else_forbidden(self, client):
        user = create_test_user(client, name="Target", **COMPLETE_PROFILE)
        other = create_test_user(client, name="Other")
        resp = client.post(f"/api/users/{user['user_id']}/elevation-request?actor_user_id={other['user_id']}")
        assert resp.status_code == 403

    def test_admin_cannot_request(self, client, db):
        admin = create_admin(client, db)
        resp = self._request(client, admin)
        assert resp.status_code == 409

    def test_non_admin_cannot_resolve(self, client):
        user = create_test_user(client, name="Asha", **COMPLETE_PROFILE)
        self._request(client, user)
        resp = client.post(f"/api/users/{user['user_id']}/elevation/approve?actor_user_id={user['user_id']}")
        assert resp.status_code == 403

    def test_resolve_without_request_conflict(self, client, db):
        admin = create_admin(client, db)
        user = create_test_user(client)
        resp = client.post(f"/api/users/{user['user_id']}/elevation/approve?actor_user_id={admin['user_id']}")
        assert resp.status_code == 409


class TestProfileValidation:
    def _patch(self, client, user, body):
        return client.patch(f"/api/users/{user['user_id']}?actor_user_id={user['user_id']}", json=body)

    def test_null_name_rejected(self, client):
        user = create_test_user(client, name="Keep Me")
        resp = self._patch(client, user, {"name": None})
        assert resp.status_code == 422
        assert "name" in resp.json()["detail"]
        assert client.get(f"/api/users/{user['user_id']}").json()["name"] == "Keep Me"

    def test_blank_name_rejected(self, client):
        user = create_test_user(client)
        assert self._patch(client, user, {"name": "   "}).status_code == 422

    def test_optional_field_can_be_cleared_without_request(self, client):
        user = create_test_user(client, **COMPLETE_PROFILE)
        resp = self._patch(client, user, {"phone": None})
        assert resp.status_code == 200
        assert resp.json()["phone"] is None

    def test_pending_request_keeps_profile_complete(self, client):
        user = create_test_user(client, **COMPLETE_PROFILE)
        client.post(f"/api/users/{user['user_id']}/elevation-request?actor_user_id={user['user_id']}")

        resp = self._patch(client, user, {"college": ""})
        assert resp.status_code == 422
        assert "college" in resp.json()["detail"]
        assert client.get(f"/api/users/{user['user_id']}").json()["college"] == "NIT Trichy"
