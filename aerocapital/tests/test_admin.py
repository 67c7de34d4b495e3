from __future__ import annotations

from fastapi.testclient import TestClient

from aerocapital.app import app

client = TestClient(app)


def _login_admin(c):
    c.post("/auth/login", json={"username": "admin", "password": "admin123"})


def _new_aircraft(**overrides):
    data = {
        "title": "Pilatus PC-12 NGX",
        "slug": "pilatus-pc-12-ngx",
        "status": "available",
        "manufacturer": "Pilatus",
        "model": "PC-12 NGX",
        "year_manufactured": 2021,
        "category": "turboprop",
        "price": 5_200_000,
        "passengers_capacity": 9,
        "features": ["Glass cockpit", "Executive interior"],
    }
    data.update(overrides)
    return data


def test_admin_list_includes_drafts():
    _login_admin(client)
    resp = client.get("/admin/aircraft")
    assert resp.status_code == 200
    assert "unpublished-phenom" in [a["slug"] for a in resp.json()]


def test_admin_create_aircraft_appears_in_listing():
    _login_admin(client)
    resp = client.post("/admin/aircraft", json=_new_aircraft())
    assert resp.status_code == 201
    body = resp.json()
    assert body["created_by"] == "admin"
    assert body["features"] == ["Glass cockpit", "Executive interior"]

    listing = client.get("/aircraft", params={"category": "turboprop"}).json()
    assert "pilatus-pc-12-ngx" in [a["slug"] for a in listing["items"]]


def test_admin_create_defaults_to_draft():
    _login_admin(client)
    data = _new_aircraft()
    del data["status"]
    resp = client.post("/admin/aircraft", json=data)
    assert resp.json()["status"] == "draft"
    assert client.get("/aircraft/pilatus-pc-12-ngx").status_code == 404


def test_admin_create_duplicate_slug_conflicts():
    _login_admin(client)
    resp = client.post("/admin/aircraft", json=_new_aircraft(slug="citation-cj4"))
    assert resp.status_code == 409


def test_admin_create_validation():
    _login_admin(client)
    assert client.post("/admin/aircraft", json=_new_aircraft(title="PC")).status_code == 422
    assert client.post("/admin/aircraft", json=_new_aircraft(slug="Bad Slug")).status_code == 422
    assert client.post("/admin/aircraft", json=_new_aircraft(year_manufactured=1850)).status_code == 422
    assert client.post("/admin/aircraft", json=_new_aircraft(year_manufactured=3000)).status_code == 422
    assert client.post("/admin/aircraft", json=_new_aircraft(price=-1)).status_code == 422
    assert client.post("/admin/aircraft", json=_new_aircraft(engines=9)).status_code == 422
    assert client.post("/admin/aircraft", json=_new_aircraft(category="blimp")).status_code == 422


def test_admin_update_aircraft():
    _login_admin(client)
    resp = client.put("/admin/aircraft/ac-2", json={"status": "sold", "price": None})
    assert resp.status_code == 200
    body = resp.json()
    assert body["status"] == "sold"
    assert body["price"] is None
    assert body["title"] == "Citation CJ4"


def test_admin_update_ignores_null_required_fields():
    _login_admin(client)
    resp = client.put("/admin/aircraft/ac-2", json={"title": None, "featured": True})
    assert resp.status_code == 200
    assert resp.json()["title"] == "Citation CJ4"
    assert resp.json()["featured"] is True


def test_admin_update_slug_conflict():
    _login_admin(client)
    resp = client.put("/admin/aircraft/ac-2", json={"slug": "citation-cj3"})
    assert resp.status_code == 409


def test_admin_update_unknown_aircraft():
    _login_admin(client)
    assert client.put("/admin/aircraft/nope", json={"featured": True}).status_code == 404


def test_admin_soft_delete_hides_from_public():
    _login_admin(client)
    resp = client.delete("/admin/aircraft/ac-2")
    assert resp.status_code == 200
    assert resp.json()["hard"] is False

    assert client.get("/aircraft/citation-cj4").status_code == 404
    assert "citation-cj4" not in [a["slug"] for a in client.get("/admin/aircraft").json()]
    deleted = client.get("/admin/aircraft", params={"include_deleted": True}).json()
    assert "citation-cj4" in [a["slug"] for a in deleted]


def test_admin_hard_delete():
    _login_admin(client)
    assert client.delete("/admin/aircraft/ac-2", params={"hard": True}).status_code == 200
    assert client.delete("/admin/aircraft/ac-2").status_code == 404


def test_admin_dashboard_summary():
    client.get("/aircraft", params={"search": "citation", "min_price": 1000})
    client.get("/aircraft", params={"search": "zeppelin"})
    client.post("/inquiries", json={
        "full_name": "Jane Pilot",
        "email": "jane@example.com",
        "subject": "Interested in the CJ4",
        "message": "Please send me the maintenance records.",
        "aircraft_id": "ac-2",
    })

    _login_admin(client)
    body = client.get("/admin/dashboard").json()

    assert body["inventory"]["total"] == 6
    assert body["inventory"]["by_status"] == {
        "available": 3, "pending": 1, "sold": 1, "draft": 1,
    }
    assert body["inventory"]["featured"] == 1
    assert body["inquiries"]["new"] == 1
    assert body["inquiries"]["by_type"] == {"aircraft": 1}
    assert body["searches"]["total"] == 2
    assert body["searches"]["zero_result_rate"] == 50.0
    assert body["searches"]["filter_usage"]["search"] == 100.0
    assert body["searches"]["filter_usage"]["price"] == 50.0
    assert body["searches"]["top_search_terms"][0]["count"] == 1
    assert body["inquiry_submissions"] == 1
