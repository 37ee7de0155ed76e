from __future__ import annotations

import pytest
from fastapi.testclient import TestClient

from tests.fakes import FakePowerClient

HCMC = {"lat": 10.762622, "lng": 106.660172}
BOX = {"corner_a": {"lat": 10.80, "lng": 106.70}, "corner_b": {"lat": 10.70, "lng": 106.60}}


def test_root_and_health(client: TestClient) -> None:
    assert client.get("/").json() == {"name": "pointclimate", "status": "ok"}
    health = client.get("/api/v1/health")
    assert health.status_code == 200
    assert health.json() == {"status": "ok"}
    assert health.headers["X-Content-Type-Options"] == "nosniff"


def test_create_point_and_wait_for_record(client: TestClient) -> None:
    resp = client.post("/api/v1/points", params={"wait": "true"}, json=HCMC)
    assert resp.status_code == 201, resp.text
    body = resp.json()
    assert body["id"] == 1
    assert body["origin"] == "direct"
    assert body["area_id"] is None
    assert body["state"] == "resolved"
    assert body["coordinate"] == HCMC
    assert len(body["record"]["period"]) == 6
    assert body["record"]["temperature"] is not None

    listed = client.get("/api/v1/points")
    assert [p["id"] for p in listed.json()] == [1]
    assert client.get("/api/v1/points/1").json()["state"] == "resolved"


def test_create_point_returns_pending_without_wait(client: TestClient) -> None:
    resp = client.post("/api/v1/points", json=HCMC)
    assert resp.status_code == 201, resp.text
    assert resp.json()["state"] in {"pending", "resolved"}


def test_create_point_rounds_coordinates(client: TestClient) -> None:
    resp = client.post(
        "/api/v1/points", params={"wait": "true"}, json={"lat": 10.1234567, "lng": 106.7654321}
    )
    assert resp.json()["coordinate"] == {"lat": 10.123457, "lng": 106.765432}


def test_create_point_rejects_out_of_range(client: TestClient) -> None:
    resp = client.post("/api/v1/points", json={"lat": 123.0, "lng": 0.0})
    assert resp.status_code == 422


def test_delete_point(client: TestClient) -> None:
    client.post("/api/v1/points", params={"wait": "true"}, json=HCMC)
    assert client.delete("/api/v1/points/1").status_code == 204
    assert client.get("/api/v1/points/1").status_code == 404
    assert client.delete("/api/v1/points/1").status_code == 404


def test_create_area_samples_ten_points(client: TestClient) -> None:
    resp = client.post("/api/v1/areas", params={"wait": "true"}, json=BOX)
    assert resp.status_code == 201, resp.text
    area = resp.json()
    assert area["state"] == "resolved"
    assert area["glyph"]
    assert area["box"] == {"north": 10.8, "south": 10.7, "east": 106.7, "west": 106.6}
    assert area["centroid"]["lat"] == pytest.approx(10.75)

    points = client.get(f"/api/v1/areas/{area['id']}/points").json()
    assert len(points) == 10
    assert {p["origin"] for p in points} == {"sampled"}
    assert {p["area_id"] for p in points} == {area["id"]}
    assert all(p["state"] == "resolved" for p in points)

    summary = client.get(f"/api/v1/areas/{area['id']}/summary").json()
    assert summary["point_count"] == 10
    assert summary["resolved_count"] == 10
    assert summary["avg_temperature"] is not None

    sampled = client.get("/api/v1/sampled-points", params={"area_id": area["id"]}).json()
    assert [p["id"] for p in sampled] == [p["id"] for p in points]


def test_ids_shared_between_points_and_areas(client: TestClient) -> None:
    client.post("/api/v1/points", params={"wait": "true"}, json=HCMC)
    client.post("/api/v1/areas", params={"wait": "true"}, json=BOX)
    client.post("/api/v1/points", params={"wait": "true"}, json=HCMC)

    direct = [p["id"] for p in client.get("/api/v1/points").json()]
    sampled = [p["id"] for p in client.get("/api/v1/sampled-points").json()]
    assert direct == [1, 12]
    assert sampled == list(range(2, 12))


def test_create_area_rejects_degenerate_box(client: TestClient) -> None:
    resp = client.post(
        "/api/v1/areas",
        json={"corner_a": {"lat": 10.8, "lng": 106.7}, "corner_b": {"lat": 10.8, "lng": 106.6}},
    )
    assert resp.status_code == 422
    assert client.get("/api/v1/areas").json() == []


def test_delete_area_cascades(client: TestClient) -> None:
    first = client.post("/api/v1/areas", params={"wait": "true"}, json=BOX).json()
    second = client.post("/api/v1/areas", params={"wait": "true"}, json=BOX).json()
    client.post("/api/v1/points", params={"wait": "true"}, json=HCMC)

    assert client.delete(f"/api/v1/areas/{first['id']}").status_code == 204
    assert client.get(f"/api/v1/areas/{first['id']}").status_code == 404
    assert client.get(f"/api/v1/areas/{first['id']}/points").status_code == 404
    remaining = client.get("/api/v1/sampled-points").json()
    assert len(remaining) == 10
    assert {p["area_id"] for p in remaining} == {second["id"]}
    assert len(client.get("/api/v1/points").json()) == 1
    assert client.delete(f"/api/v1/areas/{first['id']}").status_code == 404


def test_gesture_dispatch(client: TestClient) -> None:
    click = client.post(
        "/api/v1/gestures",
        json={"start": HCMC, "end": {"lat": 10.76265, "lng": 106.66012}},
    )
    assert click.status_code == 201, click.text
    assert click.json()["kind"] == "point"
    assert click.json()["area"] is None

    drag = client.post(
        "/api/v1/gestures",
        json={"start": BOX["corner_a"], "end": BOX["corner_b"]},
    )
    assert drag.json()["kind"] == "area"
    assert drag.json()["area"]["id"] == 1


@pytest.mark.parametrize("fake_power", [FakePowerClient.always_absent()])
def test_absent_archive_leaves_points_failed(client: TestClient) -> None:
    point = client.post("/api/v1/points", params={"wait": "true"}, json=HCMC).json()
    assert point["state"] == "failed"
    assert point["record"] is None

    area = client.post("/api/v1/areas", params={"wait": "true"}, json=BOX).json()
    assert area["state"] == "resolved"
    summary = client.get(f"/api/v1/areas/{area['id']}/summary").json()
    assert summary["failed_count"] == 10
    assert summary["avg_temperature"] is None
