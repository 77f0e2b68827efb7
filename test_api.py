"""
Test script to verify the HTTP API end to end
"""

from datetime import date, datetime, timedelta

from tablebook.services.booking_service import BookingService

FUTURE = date.today() + timedelta(days=7)


def booking_payload(**overrides):
    payload = {
        "table_id": "t2",
        "guest_name": "Anna",
        "guest_phone": "+7 912 345-67-89",
        "guest_count": 2,
        "date": FUTURE.isoformat(),
        "time": "19:00",
    }
    payload.update(overrides)
    return payload


def test_health(client):
    response = client.get("/api/health")
    assert response.status_code == 200
    assert response.json()["status"] == "healthy"


def test_create_and_list_restaurants(client, restaurant):
    response = client.post("/api/restaurants", json={"name": "Corner Cafe", "address": "1 Main St"})
    assert response.status_code == 201
    assert response.json()["work_starts"] == "10:00"
    assert response.json()["layout"] == []

    response = client.post("/api/restaurants", json={"name": "Broken", "work_starts": "25:00", "work_ends": "23:00"})
    assert response.status_code == 400

    listing = {r["name"]: r for r in client.get("/api/restaurants").json()}
    assert listing["Test Bistro"]["total_tables"] == 2
    assert listing["Test Bistro"]["free_tables"] == 2
    assert listing["Corner Cafe"]["total_tables"] == 0

    assert client.get("/api/restaurants/9999").status_code == 404


def test_restaurant_layout_keeps_text_and_decorations(client, restaurant):
    data = client.get(f"/api/restaurants/{restaurant.id}").json()
    assert [el["type"] for el in data["layout"]] == ["table", "table", "wall", "text"]


def test_update_layout(client, restaurant):
    layout = {
        "layout": [
            {"id": "a", "type": "table", "label": "A", "seats": 6, "shape": "circle", "floor_id": "main"},
            {"id": "p", "type": "plant", "floor_id": "main"},
        ],
        "floors": [{"id": "main", "name": "Main hall"}],
    }
    response = client.put(f"/api/restaurants/{restaurant.id}/layout", json=layout)
    assert response.status_code == 200
    data = response.json()
    assert [el["id"] for el in data["layout"]] == ["a", "p"]
    assert data["layout"][0]["seats"] == 6
    assert data["floors"] == [{"id": "main", "name": "Main hall"}]

    bad = {"layout": [{"id": "x", "type": "sofa"}]}
    assert client.put(f"/api/restaurants/{restaurant.id}/layout", json=bad).status_code == 422


def test_slots_endpoint(client, restaurant):
    response = client.get(f"/api/restaurants/{restaurant.id}/tables/t1/slots", params={"date": FUTURE.isoformat()})
    assert response.status_code == 200
    slots = response.json()["slots"]
    assert slots[0] == "10:00"
    assert slots[-1] == "22:00"

    missing = client.get(f"/api/restaurants/{restaurant.id}/tables/nope/slots", params={"date": FUTURE.isoformat()})
    assert missing.status_code == 404


def test_overnight_hours(client, restaurant):
    response = client.put(
        f"/api/restaurants/{restaurant.id}/hours", json={"work_starts": "22:00", "work_ends": "02:00"}
    )
    assert response.status_code == 200

    slots = client.get(
        f"/api/restaurants/{restaurant.id}/tables/t1/slots", params={"date": FUTURE.isoformat()}
    ).json()["slots"]
    assert slots == ["22:00", "22:30", "23:00", "23:30", "00:00", "00:30", "01:00"]

    response = client.post(f"/api/restaurants/{restaurant.id}/bookings", json=booking_payload(time="00:30"))
    assert response.json()["booking"]["date_time"].startswith((FUTURE + timedelta(days=1)).isoformat())


def test_submit_booking(client, restaurant):
    response = client.post(f"/api/restaurants/{restaurant.id}/bookings", json=booking_payload())
    assert response.status_code == 200
    data = response.json()
    assert data["success"] is True
    assert data["message"] == "Your booking request has been sent!"
    assert data["booking"]["status"] == "PENDING"
    assert data["booking"]["guest_phone"] == "+79123456789"

    slots = client.get(
        f"/api/restaurants/{restaurant.id}/tables/t2/slots", params={"date": FUTURE.isoformat()}
    ).json()["slots"]
    assert "19:00" not in slots

    upcoming = client.get(f"/api/restaurants/{restaurant.id}/tables/t2/bookings").json()
    assert [b["id"] for b in upcoming] == [data["booking"]["id"]]


def test_rejected_submissions_store_nothing(client, restaurant):
    url = f"/api/restaurants/{restaurant.id}/bookings"
    assert client.post(url, json=booking_payload(guest_count=5)).status_code == 400
    assert client.post(url, json=booking_payload(guest_phone="12345")).status_code == 400
    assert client.post(url, json=booking_payload(time=None)).status_code == 400
    assert client.post(url, json=booking_payload(time="10:10")).status_code == 400
    assert client.post(url, json=booking_payload(table_id="nope")).status_code == 404
    assert client.get(url).json() == []


def test_conflict_warning_round_trip(client, restaurant):
    url = f"/api/restaurants/{restaurant.id}/bookings"
    client.post(url, json=booking_payload(time="19:00"))

    data = client.post(url, json=booking_payload(time="17:00")).json()
    assert data["success"] is False
    assert data["booking"] is None
    assert data["warning"]["minutes_available"] == 120
    assert data["message"] == data["warning"]["message"]
    assert len(client.get(url).json()) == 1

    data = client.post(url, json=booking_payload(time="17:00", confirm_conflict=True)).json()
    assert data["success"] is True
    assert len(client.get(url).json()) == 2


def test_staff_status_changes(client, restaurant):
    booking = client.post(f"/api/restaurants/{restaurant.id}/bookings", json=booking_payload()).json()["booking"]
    url = f"/api/bookings/{booking['id']}/status"

    assert client.put(url, json={"status": "DECLINED"}).status_code == 400
    assert client.put(url, json={"status": "COMPLETED"}).status_code == 409

    response = client.put(url, json={"status": "CONFIRMED"})
    assert response.status_code == 200
    assert response.json()["status"] == "CONFIRMED"

    upcoming = client.get(f"/api/restaurants/{restaurant.id}/upcoming").json()
    assert [b["id"] for b in upcoming] == [booking["id"]]

    response = client.put(url, json={"status": "DECLINED"})
    assert response.json()["decline_reason"] == "Cancelled by staff"

    assert client.put(url, json={"status": "CONFIRMED"}).status_code == 409
    assert client.put("/api/bookings/9999/status", json={"status": "CONFIRMED"}).status_code == 404


def test_pending_requests_countdown(client, restaurant):
    client.post(f"/api/restaurants/{restaurant.id}/bookings", json=booking_payload())
    requests = client.get(f"/api/restaurants/{restaurant.id}/requests").json()
    assert len(requests) == 1
    assert 170 < requests[0]["seconds_left"] <= 180
    assert requests[0]["countdown"] in ("3:00", "2:59", "2:58")


def test_cleanup_expired(client, db, restaurant):
    created = datetime.now() - timedelta(minutes=4)
    BookingService(db).submit_booking(
        restaurant.id, "t1", "Anna", "+79123456789", 2, FUTURE, "13:00", now=created
    )
    client.post(f"/api/restaurants/{restaurant.id}/bookings", json=booking_payload())

    data = client.post("/api/bookings/cleanup-expired").json()
    assert data["updated"] == 1
    assert data["bookings"][0]["table_id"] == "t1"
    assert data["bookings"][0]["status"] == "DECLINED"

    requests = client.get(f"/api/restaurants/{restaurant.id}/requests").json()
    assert [r["booking"]["table_id"] for r in requests] == ["t2"]


def test_walk_in_and_free_table(client, restaurant):
    base = f"/api/restaurants/{restaurant.id}"
    assert client.post(f"{base}/tables/t1/walk-in", json={"guest_count": 3}).status_code == 400

    response = client.post(f"{base}/tables/t1/walk-in", json={"guest_count": 2})
    assert response.status_code == 201
    assert response.json()["status"] == "OCCUPIED"

    statuses = client.get(f"{base}/table-status").json()["statuses"]
    assert statuses == {"t1": "confirmed", "t2": "available"}

    occupied = client.get(f"{base}/occupied").json()
    assert [o["table_id"] for o in occupied] == ["t1"]

    listing = client.get("/api/restaurants").json()
    assert listing[0]["free_tables"] == 1

    response = client.post(f"{base}/tables/t1/free")
    assert response.status_code == 200
    assert response.json()["status"] == "COMPLETED"
    assert client.get(f"{base}/table-status").json()["statuses"]["t1"] == "available"
    assert client.post(f"{base}/tables/t1/free").status_code == 404
