"""Tests for login, logout and the session probe."""

from tests.conftest import login


def _session_header(response) -> str:
    return next(v for k, v in response.headers.multi_items() if k == "set-cookie" and v.startswith("session="))


def test_login_wrong_password(client, make_user):
    make_user("frank", "right")

    response = login(client, "frank", "wrong")

    assert response.status_code == 401
    assert response.json()["error"]["code"] == "AUTH_ERROR"
    assert "set-cookie" not in response.headers
    assert "session" not in client.cookies


def test_login_unknown_user(client):
    response = login(client, "nobody", "whatever")
    assert response.status_code == 401
    assert "set-cookie" not in response.headers


def test_login_sets_verifiable_session_cookie(client, ctx, make_user):
    uid = make_user("grace", "pw")

    response = login(client, "grace", "pw")

    assert response.status_code == 200
    assert response.json() == {"uid": uid, "name": "grace", "admin": False, "logged_in": True}
    assert ctx.tokens.verify(client.cookies["session"]) == uid


def test_session_cookie_attributes(client, make_user):
    make_user("heidi", "pw")

    header = _session_header(login(client, "heidi", "pw")).lower()

    assert "httponly" in header
    assert "samesite=strict" in header
    assert "max-age=3600" in header


def test_login_rejects_unknown_body_fields(client):
    response = client.post("/api/login", json={"user": "a", "password": "b", "admin": True})
    assert response.status_code == 400


def test_logout_expires_cookie(client, make_user):
    make_user("ivan", "pw")
    login(client, "ivan", "pw")

    response = client.get("/api/logout")

    assert response.status_code == 200
    header = _session_header(response).lower()
    assert header.startswith('session="";') or header.startswith("session=;")
    assert "1970" in header


def test_welcome_anonymous(client):
    response = client.get("/api/welcome")
    assert response.status_code == 200
    assert response.json()["logged_in"] is False


def test_welcome_logged_in(admin_client):
    response = admin_client.get("/api/welcome")
    assert response.status_code == 200
    data = response.json()
    assert data["logged_in"] is True
    assert data["admin"] is True


def test_welcome_forged_cookie(client):
    client.cookies.set("session", "not-a-token")
    response = client.get("/api/welcome")
    assert response.status_code == 401


def test_welcome_deleted_user_clears_cookie(client, ctx):
    client.cookies.set("session", ctx.tokens.issue({"uid": 12345}))

    response = client.get("/api/welcome")

    assert response.status_code == 403
    assert "1970" in _session_header(response)


def test_protected_endpoint_requires_session(client):
    response = client.get("/api/posts/config")
    assert response.status_code == 401


def test_expired_session_is_rejected(client, ctx, make_user):
    from datetime import datetime, timedelta, timezone

    from dailyposts.core.security import SessionTokenService

    uid = make_user("judy", "pw")
    past = datetime.now(timezone.utc) - timedelta(days=2)
    stale = SessionTokenService(ctx.settings.jwt_signature, timedelta(hours=1), ctx.mapper, clock=lambda: past)
    client.cookies.set("session", stale.issue({"uid": uid}))

    response = client.get("/api/posts/config")

    assert response.status_code == 401
    assert response.json()["error"]["code"] == "TOKEN_EXPIRED"
