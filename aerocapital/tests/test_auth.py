from __future__ import annotations

from fastapi.testclient import TestClient

from aerocapital.app import app

client = TestClient(app)


def _login_client(c):
    c.post("/auth/login", json={"username": "client", "password": "client123"})


def _login_admin(c):
    c.post("/auth/login", json={"username": "admin", "password": "admin123"})


# ── Login / Logout ───────────────────────────────────────────────────────


def test_login_success_client():
    resp = client.post("/auth/login", json={"username": "client", "password": "client123"})
    assert resp.status_code == 200
    body = resp.json()
    assert body["status"] == "ok"
    assert body["user"]["username"] == "client"
    assert body["user"]["role"] == "client"


def test_login_success_admin():
    resp = client.post("/auth/login", json={"username": "admin", "password": "admin123"})
    assert resp.status_code == 200
    assert resp.json()["user"]["role"] == "admin"


def test_login_wrong_password():
    resp = client.post("/auth/login", json={"username": "client", "password": "wrong"})
    assert resp.status_code == 401


def test_login_unknown_user():
    resp = client.post("/auth/login", json={"username": "nobody", "password": "x"})
    assert resp.status_code == 401


def test_repeated_failed_logins_are_rate_limited():
    c = TestClient(app)
    for _ in range(5):
        assert c.post("/auth/login", json={"username": "admin", "password": "bad"}).status_code == 401
    resp = c.post("/auth/login", json={"username": "admin", "password": "bad"})
    assert resp.status_code == 429


def test_locked_out_client_cannot_log_in_with_correct_password():
    c = TestClient(app)
    for _ in range(5):
        c.post("/auth/login", json={"username": "admin", "password": "bad"})
    resp = c.post("/auth/login", json={"username": "admin", "password": "admin123"})
    assert resp.status_code == 429
    assert "retry_after" in resp.json()["detail"]
    assert c.get("/auth/me").status_code == 401


def test_successful_logins_do_not_count_towards_lockout():
    c = TestClient(app)
    for _ in range(10):
        _login_client(c)
    resp = c.post("/auth/login", json={"username": "client", "password": "wrong"})
    assert resp.status_code == 401


def test_auth_me_when_logged_in():
    _login_client(client)
    resp = client.get("/auth/me")
    assert resp.status_code == 200
    assert resp.json()["username"] == "client"


def test_auth_me_not_logged_in():
    c = TestClient(app)  # fresh client, no session
    resp = c.get("/auth/me")
    assert resp.status_code == 401


def test_logout():
    _login_client(client)
    resp = client.post("/auth/logout")
    assert resp.status_code == 200
    assert resp.json()["status"] == "logged_out"
    # Session should be cleared
    resp = client.get("/auth/me")
    assert resp.status_code == 401


# ── Route protection ─────────────────────────────────────────────────────


def test_admin_aircraft_requires_login():
    c = TestClient(app)
    assert c.get("/admin/aircraft").status_code == 401


def test_admin_aircraft_requires_admin_role():
    c = TestClient(app)
    _login_client(c)
    assert c.get("/admin/aircraft").status_code == 403


def test_dashboard_allowed_for_admin():
    c = TestClient(app)
    _login_admin(c)
    assert c.get("/admin/dashboard").status_code == 200


def test_dashboard_allowed_for_super_admin():
    c = TestClient(app)
    c.post("/auth/login", json={"username": "owner", "password": "owner123"})
    assert c.get("/admin/dashboard").status_code == 200


# ── Public endpoints stay public ─────────────────────────────────────────


def test_health_is_public():
    c = TestClient(app)
    assert c.get("/health").status_code == 200


def test_listing_is_public():
    c = TestClient(app)
    assert c.get("/aircraft").status_code == 200


def test_inquiry_submission_is_public():
    c = TestClient(app)
    resp = c.post("/inquiries", json={
        "full_name": "Anon Buyer",
        "email": "anon@example.com",
        "subject": "Financing question",
        "message": "What terms do you offer on turboprops?",
        "inquiry_type": "financing",
    })
    assert resp.status_code == 201
