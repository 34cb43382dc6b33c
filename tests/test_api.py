"""
Test Suite for the HTTP API
Login, recruitment CRUD, authorization and error responses.
"""
from datetime import datetime, timedelta, timezone

import pytest

from conftest import ADMIN_PASSWORD, JWT_SECRET
from hstl_tracker.app import create_app, route_methods
from hstl_tracker.config import AuthConfig
from hstl_tracker.api.routes import router
from hstl_tracker.core.errors import StoreError
from hstl_tracker.security.session_issuer import SessionIssuer, get_session_issuer

RECRUITMENTS = "/api/recruitments"


def create(client, headers, **body):
    return client.post(RECRUITMENTS, json=body, headers=headers)


def delete(client, headers, body):
    return client.request("DELETE", RECRUITMENTS, json=body, headers=headers)


class TestAuthEndpoint:

    def test_login_success(self, client):
        response = client.post("/api/auth", json={"password": ADMIN_PASSWORD})
        assert response.status_code == 200
        assert response.json()["token"]

    def test_issued_token_opens_session(self, client):
        token = client.post("/api/auth", json={"password": ADMIN_PASSWORD}).json()["token"]
        response = client.get("/api/auth/session", headers={"Authorization": f"Bearer {token}"})
        assert response.status_code == 200
        assert response.json()["isAdmin"] is True

    def test_login_wrong_password(self, client):
        response = client.post("/api/auth", json={"password": "nope"})
        assert response.status_code == 401
        assert response.json() == {"message": "Invalid password"}
        assert "token" not in response.json()

    def test_login_without_body(self, client):
        response = client.post("/api/auth")
        assert response.status_code == 401

    def test_login_wrong_method(self, client):
        response = client.get("/api/auth")
        assert response.status_code == 405
        assert response.headers["allow"] == "POST"
        assert "message" in response.json()

    def test_session_without_token(self, client):
        response = client.get("/api/auth/session")
        assert response.status_code == 401
        assert response.json() == {"message": "Unauthorized"}

    @pytest.mark.parametrize("auth", [
        AuthConfig(admin_password_hash="not-a-bcrypt-hash", jwt_secret=JWT_SECRET),
        AuthConfig(admin_password_hash=None, jwt_secret=JWT_SECRET),
    ], ids=["malformed-hash", "missing-hash"])
    def test_login_with_unusable_hash(self, app, client, auth):
        app.dependency_overrides[get_session_issuer] = lambda: SessionIssuer(auth)
        response = client.post("/api/auth", json={"password": ADMIN_PASSWORD})
        assert response.status_code == 500
        assert response.json() == {"message": "Internal server error"}
        assert ADMIN_PASSWORD not in response.text

    def test_login_without_signing_secret(self, app, client, password_hash):
        auth = AuthConfig(admin_password_hash=password_hash, jwt_secret=None)
        app.dependency_overrides[get_session_issuer] = lambda: SessionIssuer(auth)
        response = client.post("/api/auth", json={"password": ADMIN_PASSWORD})
        assert response.status_code == 500
        assert response.json() == {"message": "Internal server error"}
        assert ADMIN_PASSWORD not in response.text
        assert "token" not in response.json()


class TestRecruitmentCrud:
    """Create, list, update and delete with a valid token."""

    def test_list_is_public_and_empty(self, client):
        response = client.get(RECRUITMENTS)
        assert response.status_code == 200
        assert response.json() == []

    def test_create_then_list(self, client, auth_headers):
        response = create(client, auth_headers, hstlMember="A", recruitedMember="B")
        assert response.status_code == 201
        body = response.json()
        assert body["message"] == "Recruitment added successfully"
        created = body["recruitment"]
        assert created["_id"]
        assert created["paidOut"] == "Pending"

        listed = client.get(RECRUITMENTS).json()
        assert len(listed) == 1
        assert listed[0]["_id"] == created["_id"]
        assert listed[0]["hstlMember"] == "A"
        assert listed[0]["recruitedMember"] == "B"
        assert listed[0]["paidOut"] == "Pending"
        assert listed[0]["createdAt"] == created["createdAt"]

    def test_create_with_paid_status(self, client, auth_headers):
        response = create(client, auth_headers, hstlMember="A", recruitedMember="B", paidOut="Paid")
        assert response.json()["recruitment"]["paidOut"] == "Paid"

    def test_list_newest_first_and_search(self, client, auth_headers):
        create(client, auth_headers, hstlMember="Alice", recruitedMember="Bob")
        create(client, auth_headers, hstlMember="Carol", recruitedMember="Dave")

        listed = client.get(RECRUITMENTS).json()
        assert [r["hstlMember"] for r in listed] == ["Carol", "Alice"]

        found = client.get(RECRUITMENTS, params={"search": "bob"}).json()
        assert [r["hstlMember"] for r in found] == ["Alice"]

    def test_update_is_idempotent(self, client, auth_headers):
        record_id = create(client, auth_headers, hstlMember="A", recruitedMember="B").json()["recruitment"]["_id"]

        for _ in range(2):
            response = client.put(RECRUITMENTS, json={"id": record_id, "paidOut": "Paid"}, headers=auth_headers)
            assert response.status_code == 200
            assert response.json() == {"message": "Recruitment updated successfully"}

        listed = client.get(RECRUITMENTS).json()
        assert listed[0]["paidOut"] == "Paid"
        assert listed[0]["hstlMember"] == "A"

    def test_update_back_to_pending(self, client, auth_headers):
        record_id = create(client, auth_headers, hstlMember="A", recruitedMember="B", paidOut="Paid").json()["recruitment"]["_id"]
        client.put(RECRUITMENTS, json={"id": record_id, "paidOut": "Pending"}, headers=auth_headers)
        assert client.get(RECRUITMENTS).json()[0]["paidOut"] == "Pending"

    def test_update_unknown_id_succeeds(self, client, auth_headers):
        response = client.put(RECRUITMENTS, json={"id": "does-not-exist", "paidOut": "Paid"}, headers=auth_headers)
        assert response.status_code == 200
        assert client.get(RECRUITMENTS).json() == []

    def test_delete_is_idempotent(self, client, auth_headers):
        record_id = create(client, auth_headers, hstlMember="A", recruitedMember="B").json()["recruitment"]["_id"]

        first = delete(client, auth_headers, {"id": record_id})
        second = delete(client, auth_headers, {"id": record_id})
        assert first.status_code == 200
        assert second.status_code == 200
        assert second.json() == {"message": "Recruitment deleted successfully"}
        assert client.get(RECRUITMENTS).json() == []


class TestAuthorization:
    """Mutations without a valid token must not touch the store."""

    def _seed(self, client, auth_headers):
        return create(client, auth_headers, hstlMember="A", recruitedMember="B").json()["recruitment"]

    def _assert_rejected(self, client, headers, seeded):
        assert create(client, headers, hstlMember="X", recruitedMember="Y").status_code == 401
        assert client.put(RECRUITMENTS, json={"id": seeded["_id"], "paidOut": "Paid"}, headers=headers).status_code == 401
        assert delete(client, headers, {"id": seeded["_id"]}).status_code == 401
        assert client.get(RECRUITMENTS).json() == [seeded]

    def test_no_header(self, client, auth_headers):
        seeded = self._seed(client, auth_headers)
        self._assert_rejected(client, {}, seeded)

    def test_garbled_token(self, client, auth_headers):
        seeded = self._seed(client, auth_headers)
        self._assert_rejected(client, {"Authorization": "Bearer garbage"}, seeded)

    def test_malformed_header(self, client, auth_headers, token):
        seeded = self._seed(client, auth_headers)
        self._assert_rejected(client, {"Authorization": token}, seeded)

    def test_expired_token(self, client, auth_headers, auth_config):
        seeded = self._seed(client, auth_headers)
        stale = SessionIssuer(
            auth_config,
            clock=lambda: datetime.now(timezone.utc) - timedelta(hours=2),
        ).issue_token()
        self._assert_rejected(client, {"Authorization": f"Bearer {stale}"}, seeded)

    def test_expired_token_message(self, client, auth_config):
        stale = SessionIssuer(
            auth_config,
            clock=lambda: datetime.now(timezone.utc) - timedelta(hours=2),
        ).issue_token()
        response = create(client, {"Authorization": f"Bearer {stale}"}, hstlMember="A", recruitedMember="B")
        assert response.json() == {"message": "Invalid token"}

    def test_auth_checked_before_body(self, client):
        response = client.post(RECRUITMENTS, content=b"not json")
        assert response.status_code == 401


class TestValidation:

    def test_create_missing_recruited_member(self, client, auth_headers):
        response = create(client, auth_headers, hstlMember="A")
        assert response.status_code == 400
        assert response.json() == {"message": "Missing required fields"}
        assert client.get(RECRUITMENTS).json() == []

    def test_create_blank_member(self, client, auth_headers):
        response = create(client, auth_headers, hstlMember="   ", recruitedMember="B")
        assert response.status_code == 400
        assert client.get(RECRUITMENTS).json() == []

    def test_create_invalid_status(self, client, auth_headers):
        response = create(client, auth_headers, hstlMember="A", recruitedMember="B", paidOut="Maybe")
        assert response.status_code == 400
        assert "paidOut" in response.json()["message"]

    def test_update_missing_fields(self, client, auth_headers):
        assert client.put(RECRUITMENTS, json={"paidOut": "Paid"}, headers=auth_headers).status_code == 400
        assert client.put(RECRUITMENTS, json={"id": "abc"}, headers=auth_headers).status_code == 400

    def test_delete_missing_id(self, client, auth_headers):
        response = delete(client, auth_headers, {})
        assert response.status_code == 400
        assert response.json() == {"message": "Missing recruitment id"}

    def test_non_object_body(self, client, auth_headers):
        response = client.post(RECRUITMENTS, json=["A", "B"], headers=auth_headers)
        assert response.status_code == 400
        assert response.json() == {"message": "Invalid JSON body"}

    def test_deeply_nested_body(self, client, auth_headers):
        nested = "[" * 100000 + "]" * 100000
        response = client.post(
            RECRUITMENTS,
            content=nested.encode("utf-8"),
            headers={**auth_headers, "Content-Type": "application/json"},
        )
        assert response.status_code == 400
        assert response.json() == {"message": "Invalid JSON body"}
        assert client.get(RECRUITMENTS).json() == []


class TestErrorResponses:

    def test_unsupported_method_lists_allowed(self, client):
        response = client.patch(RECRUITMENTS, json={})
        assert response.status_code == 405
        allowed = {m.strip() for m in response.headers["allow"].split(",")}
        assert {"GET", "POST", "PUT", "DELETE"} <= allowed
        assert response.json() == {"message": "Method PATCH not allowed"}

    def test_session_wrong_method(self, client):
        response = client.put("/api/auth/session")
        assert response.status_code == 405
        assert response.headers["allow"] == "GET"

    def test_route_table_skips_pathless_entries(self, store):
        class MountedRouter:
            path = None
            methods = None

        application = create_app(store, setup_logging=False)
        application.router.routes.append(MountedRouter())
        table = route_methods(application, router, "/api")
        assert table["/api/auth"] == {"POST"}
        assert table["/api/auth/session"] == {"GET"}
        assert {"GET", "POST", "PUT", "DELETE"} <= table["/api/recruitments"]

    def test_unknown_route(self, client):
        response = client.get("/api/nothing-here")
        assert response.status_code == 404
        assert "message" in response.json()

    def test_store_failure_is_internal_error(self, client, store, monkeypatch):
        async def broken_list(search=None):
            raise StoreError("Failed to fetch recruitments")

        monkeypatch.setattr(store, "list", broken_list)
        response = client.get(RECRUITMENTS)
        assert response.status_code == 500
        assert response.json() == {"message": "Failed to fetch recruitments"}

    def test_health(self, client):
        assert client.get("/health").json() == {"status": "healthy"}
