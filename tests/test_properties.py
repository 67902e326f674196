# Property search API test suite: filters, rating annotation, paging, detail, and view tracking.
from __future__ import annotations

from fastapi.testclient import TestClient

from app import models
from app.db import SessionLocal

from helpers import create_property


def titles(payload: dict) -> set:
    return {p["title"] for p in payload["properties"]}


def test_search_annotates_average_rating(client: TestClient):
    create_property("Rated", 1000, ratings=[4, 5])
    create_property("Unrated", 1100)

    r = client.get("/api/properties")
    assert r.status_code == 200, r.text
    data = r.json()
    assert data["total_count"] == 2
    by_title = {p["title"]: p for p in data["properties"]}
    assert by_title["Rated"]["average_rating"] == 4.5
    assert by_title["Rated"]["review_count"] == 2
    assert by_title["Unrated"]["average_rating"] is None
    assert by_title["Unrated"]["review_count"] == 0


def test_amenity_filter_is_any_of(client: TestClient):
    create_property("Wifi Only", 900, amenities=["WiFi"])
    create_property("Gym Only", 900, amenities=["Gym"])
    create_property("Both", 900, amenities=["WiFi", "Gym"])
    create_property("Laundry Only", 900, amenities=["Laundry"])
    create_property("Bare", 900)

    r = client.get("/api/properties", params=[("amenity", "WiFi"), ("amenity", "Gym")])
    assert r.status_code == 200
    data = r.json()
    assert titles(data) == {"Wifi Only", "Gym Only", "Both"}
    # A listing with both amenities is returned once
    assert data["total_count"] == 3


def test_price_bounds_filter(client: TestClient):
    for price in (700, 1000, 1300, 1600):
        create_property(f"P{price}", price)

    r = client.get("/api/properties", params={"minPrice": "1000", "maxPrice": "1300"})
    assert titles(r.json()) == {"P1000", "P1300"}

    r = client.get("/api/properties", params={"minPrice": "1250.5"})
    assert titles(r.json()) == {"P1300", "P1600"}


def test_inverted_price_range_returns_nothing(client: TestClient):
    create_property("Mid", 1500)
    r = client.get("/api/properties", params={"minPrice": "2000", "maxPrice": "1000"})
    assert r.status_code == 200
    assert r.json() == {"properties": [], "total_count": 0}


def test_malformed_parameters_are_ignored(client: TestClient):
    create_property("A", 800)
    create_property("B", 1800)
    r = client.get("/api/properties", params={"minPrice": "lots", "maxPrice": "1e999", "beds": "many"})
    assert r.status_code == 200
    assert r.json()["total_count"] == 2


def test_location_and_beds_filters(client: TestClient):
    create_property("Camden Studio", 1200, borough="Camden", beds=1)
    create_property("Camden House", 2400, borough="Camden", beds=5)
    create_property("Hackney Flat", 1300, borough="Hackney", beds=2)

    r = client.get("/api/properties", params={"location": "camden"})
    assert titles(r.json()) == {"Camden Studio", "Camden House"}

    r = client.get("/api/properties", params={"beds": "4"})
    assert titles(r.json()) == {"Camden House"}

    r = client.get("/api/properties", params={"beds": "2"})
    assert titles(r.json()) == {"Hackney Flat"}


def test_paging_and_featured(client: TestClient):
    ids = [create_property(f"L{i}", 1000 + i) for i in range(8)]

    r = client.get("/api/properties", params={"take": "3", "skip": "2"})
    data = r.json()
    assert data["total_count"] == 8
    # Newest first: ids descending
    assert [p["id"] for p in data["properties"]] == sorted(ids, reverse=True)[2:5]

    r = client.get("/api/properties", params={"featured": "true"})
    assert len(r.json()["properties"]) == 6


def test_amenity_catalogue(client: TestClient):
    create_property("X", 1000, amenities=["Parking", "Heating"])
    r = client.get("/api/properties/amenities")
    assert r.status_code == 200
    assert [a["name"] for a in r.json()] == ["Heating", "Parking"]


def test_property_detail(client: TestClient):
    pid = create_property("Detail", 1234, amenities=["WiFi"], ratings=[3])
    r = client.get(f"/api/properties/{pid}")
    assert r.status_code == 200
    body = r.json()
    assert body["title"] == "Detail"
    assert body["amenities"] == ["WiFi"]
    assert body["average_rating"] == 3.0

    assert client.get("/api/properties/9999").status_code == 404


def test_view_tracking_creates_and_increments_stats(client: TestClient):
    pid = create_property("Viewed", 1000)
    for _ in range(2):
        r = client.post(f"/api/properties/{pid}/view")
        assert r.status_code == 200
        assert r.json() == {"success": True, "counted": True}

    db = SessionLocal()
    try:
        stat = db.query(models.PropertyStat).filter(models.PropertyStat.property_id == pid).one()
        assert stat.view_count == 2
        assert stat.last_viewed is not None
    finally:
        db.close()

    assert client.post("/api/properties/9999/view").status_code == 404
