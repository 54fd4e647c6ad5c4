from __future__ import annotations

from urllib.parse import parse_qs, urlparse


def _register(api, email: str = "ada@example.com"):  # type: ignore[no-untyped-def]
    return api.client.post(
        "/api/v1/user/register",
        json={"username": "ada", "email": email, "password": "hunter22"},
    )


def test_register_returns_a_working_verify_link(api) -> None:  # type: ignore[no-untyped-def]
    resp = _register(api)
    assert resp.status_code == 201
    body = resp.json()
    assert body["success"] is True

    url = urlparse(body["verifyUrl"])
    assert url.path == "/api/v1/user/verify"
    token = parse_qs(url.query)["token"][0]

    verified = api.client.get("/api/v1/user/verify", params={"token": token})
    assert verified.status_code == 200
    assert api.db["users"].docs[0]["isVerified"] is True

    again = api.client.post("/api/v1/user/resend-verification", json={"email": "ada@example.com"})
    assert again.status_code == 400
    assert again.json()["code"] == "already_verified"


def test_duplicate_email_is_a_conflict(api) -> None:  # type: ignore[no-untyped-def]
    _register(api)
    resp = _register(api, email="ADA@example.com")
    assert resp.status_code == 409
    assert resp.json()["code"] == "email_taken"


def test_login_sets_session_cookie_that_authenticates(api) -> None:  # type: ignore[no-untyped-def]
    _register(api)

    bad = api.client.post("/api/v1/user/login", json={"email": "ada@example.com", "password": "nope"})
    assert bad.status_code == 401
    assert "token" not in api.client.cookies

    resp = api.client.post(
        "/api/v1/user/login", json={"email": "ADA@example.com", "password": "hunter22"}
    )
    assert resp.status_code == 200
    body = resp.json()
    assert body["message"] == "Welcome back ada"
    assert body["user"]["email"] == "ada@example.com"
    assert "password" not in body["user"]
    set_cookie = resp.headers["set-cookie"]
    assert set_cookie.startswith("token=")
    assert "HttpOnly" in set_cookie

    notes = api.client.get("/api/v1/notification/")
    assert notes.status_code == 200

    out = api.client.post("/api/v1/user/logout")
    assert out.json()["message"] == "Logged out successfully."
    assert "token" not in api.client.cookies
    assert api.client.get("/api/v1/notification/").status_code == 401


def test_verify_without_token_is_rejected(api) -> None:  # type: ignore[no-untyped-def]
    resp = api.client.get("/api/v1/user/verify")
    assert resp.status_code == 400
    assert resp.json()["code"] == "verification_token_missing"
