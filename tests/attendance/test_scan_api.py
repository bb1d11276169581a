import pytest
from flask import Flask

from src.qr_attendance.qr_attendance.attendance.controller import register


@pytest.fixture
def client(container):
    app = Flask(__name__)
    app.config["TESTING"] = True
    register(app, container)
    return app.test_client()


def test_scan_in_then_out(client, store):
    resp = client.post("/api/scan", json={"userId": "u1", "mode": "in", "location": "Aurora", "timestamp": "2024-03-03T09:00:00"})
    assert resp.status_code == 200
    body = resp.get_json()
    assert body["success"] is True
    assert body["outcome"] == "OPENED"
    assert body["message"].startswith("Clocked in")

    resp = client.post("/api/scan", json={"userId": "u1", "mode": "out", "timestamp": "2024-03-03T11:30:00"})
    body = resp.get_json()
    assert body["outcome"] == "CLOSED"
    assert body["hours_worked"] == 2.5
    assert store.read("users/u1/stats/totalHours") == 2.5


def test_scan_without_location_asks_for_one(client):
    resp = client.post("/api/scan", json={"userId": "u1", "mode": "in"})
    assert resp.status_code == 202
    assert resp.get_json()["outcome"] == "LOCATION_REQUIRED"


def test_scan_errors_map_to_status(client):
    assert client.post("/api/scan", json={"userId": "ghost", "mode": "in", "location": "Aurora"}).status_code == 404
    assert client.post("/api/scan", json={"userId": "u1", "mode": "out"}).status_code == 409
    assert client.post("/api/scan", json={"userId": "u1", "mode": "maybe"}).status_code == 400

    resp = client.post("/api/scan", data="not json", content_type="text/plain")
    assert resp.status_code == 400
    assert resp.get_json()["error"] == "InvalidScan"


def test_scan_image_requires_file(client):
    resp = client.post("/api/scan/image", data={"mode": "in"})
    assert resp.status_code == 400


def test_eligibility_endpoint(client, store):
    store.write("users/u1/events/haciendas/h1", {"scheduled": True, "attended": True})
    resp = client.get("/api/users/u1/eligibility")
    assert resp.status_code == 200
    assert resp.get_json()["tier"] == "orange"
    assert client.get("/api/users/ghost/eligibility").status_code == 404


def test_end_of_day_endpoint(client, store):
    store.write("users/u1/events/workshops/w1", {"scheduled": True, "date": "2024-03-03"})

    resp = client.post("/api/attendance/end-of-day", json={"date": "2024-03-03"})

    assert resp.status_code == 200
    assert resp.get_json()["entriesMarked"] == 1
    assert client.post("/api/attendance/end-of-day", json={"date": "03/03/2024"}).status_code == 400
