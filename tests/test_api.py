"""End-to-end request pipeline scenarios over the full app."""

from __future__ import annotations

from scaffold.errors import StoreUnavailable
from scaffold.sessions import SessionStore
from scaffold.utils import sign_token

from .conftest import PASSWORD, request_records


def _login(client, username="alice", password=PASSWORD):
    return client.post("/api/login", json={"username": username, "password": password})


def _bearer(token: str) -> dict[str, str]:
    return {"Authorization": f"Bearer {token}"}


def test_health_is_ok_when_anonymous(client):
    response = client.get("/health")

    assert response.status_code == 200
    assert response.json() == {"ok": True}


def test_health_is_ok_when_authenticated(client, principal):
    _login(client)

    response = client.get("/health")

    assert response.status_code == 200
    assert response.json() == {"ok": True}


def test_login_protected_route_logout_cycle(client, principal):
    login = _login(client)

    assert login.status_code == 200
    assert login.json()["user"] == {
        "id": principal.id,
        "username": "alice",
        "displayName": "Alice",
    }
    assert "expiresAt" in login.json()
    signed_token = client.cookies.get("sid")
    assert signed_token
    set_cookie = login.headers["set-cookie"].lower()
    assert "httponly" in set_cookie
    assert "samesite=lax" in set_cookie

    me = client.get("/api/user")
    assert me.status_code == 200
    assert me.json()["username"] == "alice"

    logout = client.post("/api/logout")
    assert logout.status_code == 204

    client.cookies.clear()
    after = client.get("/api/user", headers=_bearer(signed_token))
    assert after.status_code == 401
    assert after.json() == {"message": "Not authenticated"}


def test_logout_twice_is_harmless(client, principal):
    _login(client)

    assert client.post("/api/logout").status_code == 204
    assert client.post("/api/logout").status_code == 204


def test_failed_logins_share_one_response_shape(client, principal):
    wrong_secret = _login(client, password="definitely-wrong")
    unknown_user = _login(client, username="mallory")

    assert wrong_secret.status_code == unknown_user.status_code == 401
    assert wrong_secret.json() == unknown_user.json() == {
        "message": "Invalid username or password"
    }
    assert "set-cookie" not in wrong_secret.headers


def test_tampered_cookie_is_unauthenticated(client, principal):
    _login(client)
    token = client.cookies.get("sid")
    client.cookies.clear()

    response = client.get("/api/user", headers=_bearer(token[:-2] + "xx"))

    assert response.status_code == 401


def test_relogin_discards_previous_session(client, principal):
    _login(client)
    first = client.cookies.get("sid")

    _login(client)

    client.cookies.clear()
    assert client.get("/api/user", headers=_bearer(first)).status_code == 401


def test_session_introspection(client, principal):
    anonymous = client.get("/api/session")
    assert anonymous.json() == {"authenticated": False, "expiresAt": None}

    _login(client)
    authenticated = client.get("/api/session")

    assert authenticated.status_code == 200
    assert authenticated.json()["authenticated"] is True
    assert authenticated.json()["expiresAt"]


def test_register_logs_in_and_rejects_duplicates(client):
    created = client.post(
        "/api/register",
        json={"username": "carol", "password": PASSWORD, "displayName": "Carol"},
    )

    assert created.status_code == 201
    assert created.json()["user"]["displayName"] == "Carol"
    assert client.get("/api/user").json()["username"] == "carol"

    duplicate = client.post(
        "/api/register", json={"username": "carol", "password": PASSWORD}
    )
    assert duplicate.status_code == 409


def test_malformed_login_payload_is_400_with_details(client):
    response = client.post("/api/login", json={"username": "alice"})

    assert response.status_code == 400
    body = response.json()
    assert body["message"] == "Invalid request payload"
    assert any(error["loc"][-1] == "password" for error in body["details"])


class _UnreachableStore(SessionStore):
    async def get(self, session_id):
        raise StoreUnavailable()

    async def put(self, session):
        raise StoreUnavailable()

    async def touch(self, session):
        raise StoreUnavailable()

    async def delete(self, session_id):
        raise StoreUnavailable()

    async def sweep_expired(self):
        raise StoreUnavailable()


def test_store_outage_is_503_not_401(app, client, settings):
    missing = client.get("/api/user")
    assert missing.status_code == 401

    app.state.auth.sessions = _UnreachableStore()
    token = sign_token("any-session-id", settings.secret_key)
    response = client.get("/api/user", headers=_bearer(token))

    assert response.status_code == 503
    assert response.json() == {"message": "Session store unavailable"}
    assert client.get("/health").status_code == 200


def test_api_requests_are_logged_and_health_is_not(client, request_log):
    client.get("/api/session")
    client.get("/health")

    records = request_records(request_log)
    assert [record.path for record in records] == ["/api/session"]
    assert records[0].body == '{"authenticated":false,"expiresAt":null}'
