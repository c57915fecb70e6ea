from __future__ import annotations

import sqlite3
import time
from concurrent.futures import ThreadPoolExecutor
from dataclasses import replace

import pytest
from fastapi.testclient import TestClient

from app import create_app
from hotel_backend.controllers.errors import GENERIC_STORE_MESSAGE
from hotel_backend.utils.config import get_settings


ADMIN_EMAIL = "admin@example.com"
ADMIN_PASSWORD = "admin-secret"


def _build_test_settings(tmp_path, filename: str, **overrides):
    values = {
        "database_path": tmp_path / filename,
        "availability_max_workers": 2,
        "booking_quota_per_user": 3,
        "admin_email": ADMIN_EMAIL,
        "admin_password": ADMIN_PASSWORD,
        "seed_demo_data": False,
    }
    values.update(overrides)
    return replace(get_settings(), **values)


@pytest.fixture
def client(tmp_path):
    app = create_app(_build_test_settings(tmp_path, "api_flow.db"))
    with TestClient(app) as test_client:
        yield test_client


def _login(client: TestClient, email: str, password: str) -> dict[str, str]:
    response = client.post("/api/v1/auth/login", json={"email": email, "password": password})
    assert response.status_code == 200
    return {"Authorization": f"Bearer {response.json()['token']}"}


def _register(client: TestClient, name: str, email: str) -> tuple[int, dict[str, str]]:
    response = client.post(
        "/api/v1/auth/register",
        json={"name": name, "email": email, "tel": "0812345678", "password": "password123"},
    )
    assert response.status_code == 200
    payload = response.json()
    return payload["id"], {"Authorization": f"Bearer {payload['token']}"}


def _create_catalogue(client: TestClient, admin: dict[str, str], name: str = "Test Hotel", total_rooms: int = 5):
    hotel = client.post(
        "/api/v1/hotels",
        json={
            "name": name,
            "address": "123 Test St",
            "district": "Test District",
            "province": "Test Province",
            "postalcode": "12345",
            "tel": "0212345678",
        },
        headers=admin,
    )
    assert hotel.status_code == 201
    hotel_id = hotel.json()["data"]["id"]
    room_type = client.post(
        "/api/v1/roomtypes",
        json={
            "hotelId": hotel_id,
            "name": "Test Room",
            "capacity": 2,
            "bedType": "King",
            "basePrice": 1000,
            "totalRooms": total_rooms,
            "facilities": ["Air conditioning", "Private bathroom"],
        },
        headers=admin,
    )
    assert room_type.status_code == 201
    return hotel_id, room_type.json()["data"]["id"]


def _book(client: TestClient, headers, hotel_id: int, room_type_id: int, user_id: int, checkin: str, checkout: str):
    return client.post(
        f"/api/v1/hotels/{hotel_id}/bookings",
        json={"checkinDate": checkin, "checkoutDate": checkout, "user": user_id, "roomType": room_type_id},
        headers=headers,
    )


# --- Availability ---


def test_room_type_availability_reports_remaining_rooms(client):
    admin = _login(client, ADMIN_EMAIL, ADMIN_PASSWORD)
    hotel_id, room_type_id = _create_catalogue(client, admin)
    user_id, guest = _register(client, "Guest", "guest@example.com")
    assert _book(client, guest, hotel_id, room_type_id, user_id, "2025-06-01", "2025-06-03").status_code == 200

    response = client.get(
        "/api/v1/availability/room-types",
        params={"hotelId": str(hotel_id), "checkInDate": "2025-06-01", "checkOutDate": "2025-06-03"},
    )

    assert response.status_code == 200
    body = response.json()
    assert body["success"] is True
    assert body["data"]["hotelId"] == hotel_id
    assert body["data"]["checkInDate"] == "2025-06-01"
    result = body["data"]["availableRoomTypes"][0]
    assert result["roomTypeId"] == room_type_id
    assert result["totalRooms"] == 5
    assert result["bookedRooms"] == 1
    assert result["availableRooms"] == 4
    assert result["isAvailable"] is True
    assert result["status"] == "available"
    assert result["roomTypeDetails"]["bedType"] == "King"
    assert result["dailyBookings"] == {"2025-06-01": 1, "2025-06-02": 1}


@pytest.mark.parametrize(
    "params, message",
    [
        ({"checkInDate": "2025-06-01"}, "Missing required parameter(s): hotelId, checkOutDate"),
        (
            {"hotelId": "1", "checkInDate": "invalid-date", "checkOutDate": "2025-06-03"},
            "Invalid date format. Please use YYYY-MM-DD format",
        ),
        (
            {"hotelId": "1", "checkInDate": "2025-06-03", "checkOutDate": "2025-06-01"},
            "Check-in date must be before check-out date",
        ),
    ],
)
def test_room_type_availability_rejects_bad_queries(client, params, message):
    response = client.get("/api/v1/availability/room-types", params=params)
    assert response.status_code == 400
    assert response.json() == {"success": False, "message": message}


def test_room_type_availability_for_unknown_hotel(client):
    response = client.get(
        "/api/v1/availability/room-types",
        params={"hotelId": "999", "checkInDate": "2025-06-01", "checkOutDate": "2025-06-03"},
    )
    assert response.status_code == 404
    assert response.json()["message"] == "No hotel with the id of 999"


def test_hotel_availability_excludes_fully_booked_hotels(client):
    admin = _login(client, ADMIN_EMAIL, ADMIN_PASSWORD)
    open_hotel, _ = _create_catalogue(client, admin, "Open Hotel", total_rooms=2)
    full_hotel, full_room = _create_catalogue(client, admin, "Full Hotel", total_rooms=1)
    user_id, guest = _register(client, "Guest", "guest@example.com")
    assert _book(client, guest, full_hotel, full_room, user_id, "2025-06-01", "2025-06-05").status_code == 200

    response = client.get(
        "/api/v1/availability/hotels",
        params={"checkInDate": "2025-06-02", "checkOutDate": "2025-06-03"},
    )

    assert response.status_code == 200
    hotels = response.json()["data"]["availableHotels"]
    assert [hotel["hotelId"] for hotel in hotels] == [open_hotel]
    assert hotels[0]["hotelName"] == "Open Hotel"
    assert hotels[0]["hasAvailableRooms"] is True


def test_hotel_availability_with_empty_catalogue(client):
    response = client.get(
        "/api/v1/availability/hotels",
        params={"checkInDate": "2025-06-01", "checkOutDate": "2025-06-03"},
    )
    assert response.status_code == 200
    assert response.json()["data"]["availableHotels"] == []


# --- Bookings ---


def test_booking_admission_rules_over_http(client):
    admin = _login(client, ADMIN_EMAIL, ADMIN_PASSWORD)
    hotel_id, room_type_id = _create_catalogue(client, admin)
    user_id, guest = _register(client, "Guest", "guest@example.com")
    other_id, _ = _register(client, "Other", "other@example.com")

    created = _book(client, guest, hotel_id, room_type_id, user_id, "2025-06-01", "2025-06-03")
    assert created.status_code == 200
    assert created.json()["data"]["user"] == user_id
    assert created.json()["data"]["roomType"] == room_type_id

    for_other = _book(client, guest, hotel_id, room_type_id, other_id, "2025-06-01", "2025-06-03")
    assert for_other.status_code == 403

    missing_hotel = _book(client, guest, 999, room_type_id, user_id, "2025-06-01", "2025-06-03")
    assert missing_hotel.status_code == 404

    assert _book(client, guest, hotel_id, room_type_id, user_id, "2025-07-01", "2025-07-03").status_code == 200
    assert _book(client, guest, hotel_id, room_type_id, user_id, "2025-08-01", "2025-08-03").status_code == 200
    over_quota = _book(client, guest, hotel_id, room_type_id, user_id, "2025-09-01", "2025-09-03")
    assert over_quota.status_code == 400
    assert over_quota.json()["message"] == f"The user with ID {user_id} has already made 3 Bookings"

    by_admin = _book(client, admin, hotel_id, room_type_id, user_id, "2025-09-01", "2025-09-03")
    assert by_admin.status_code == 200

    listing = client.get("/api/v1/bookings", headers=guest)
    assert listing.status_code == 200
    assert listing.json()["count"] == 4


def test_booking_requires_authentication_and_valid_body(client):
    unauthenticated = client.post(
        "/api/v1/hotels/1/bookings",
        json={"checkinDate": "2025-06-01", "checkoutDate": "2025-06-03", "user": 1, "roomType": 1},
    )
    assert unauthenticated.status_code == 401
    assert unauthenticated.json()["success"] is False

    _, guest = _register(client, "Guest", "guest@example.com")
    malformed = client.post("/api/v1/hotels/1/bookings", json={"checkinDate": "2025-06-01"}, headers=guest)
    assert malformed.status_code == 400
    assert malformed.json()["success"] is False


def test_booking_update_and_delete(client):
    admin = _login(client, ADMIN_EMAIL, ADMIN_PASSWORD)
    hotel_id, room_type_id = _create_catalogue(client, admin)
    user_id, guest = _register(client, "Guest", "guest@example.com")
    _, other = _register(client, "Other", "other@example.com")
    booking_id = _book(client, guest, hotel_id, room_type_id, user_id, "2025-06-01", "2025-06-03").json()["data"]["id"]

    moved = client.put(f"/api/v1/bookings/{booking_id}", json={"checkoutDate": "2025-06-05"}, headers=guest)
    assert moved.status_code == 200
    assert moved.json()["data"]["checkoutDate"] == "2025-06-05"

    assert client.get(f"/api/v1/bookings/{booking_id}", headers=other).status_code == 403
    assert client.delete(f"/api/v1/bookings/{booking_id}", headers=other).status_code == 403

    deleted = client.delete(f"/api/v1/bookings/{booking_id}", headers=guest)
    assert deleted.status_code == 200
    assert deleted.json() == {"success": True, "data": {}}
    assert client.get(f"/api/v1/bookings/{booking_id}", headers=guest).status_code == 404


# --- Hotels and room types ---


def test_hotel_listing_filters_sorts_and_paginates(client):
    admin = _login(client, ADMIN_EMAIL, ADMIN_PASSWORD)
    for name in ("Alpha Inn", "Beta Lodge", "Gamma Inn"):
        _create_catalogue(client, admin, name)

    filtered = client.get("/api/v1/hotels", params={"name": "Inn", "sort": "name"})
    assert filtered.status_code == 200
    assert [hotel["name"] for hotel in filtered.json()["data"]] == ["Alpha Inn", "Gamma Inn"]

    first_page = client.get("/api/v1/hotels", params={"sort": "-name", "limit": "2", "page": "1"})
    body = first_page.json()
    assert [hotel["name"] for hotel in body["data"]] == ["Gamma Inn", "Beta Lodge"]
    assert body["pagination"] == {"next": {"page": 2, "limit": 2}}

    unsupported = client.get("/api/v1/hotels", params={"price[gte]": "100"})
    assert unsupported.status_code == 400


def test_catalogue_writes_are_restricted(client):
    admin = _login(client, ADMIN_EMAIL, ADMIN_PASSWORD)
    hotel_id, room_type_id = _create_catalogue(client, admin)
    _, guest = _register(client, "Guest", "guest@example.com")

    denied = client.put(f"/api/v1/hotels/{hotel_id}", json={"name": "Renamed"}, headers=guest)
    assert denied.status_code == 403

    duplicate = client.post(
        "/api/v1/roomtypes",
        json={"hotelId": hotel_id, "name": "Test Room", "capacity": 2, "bedType": "King", "totalRooms": 1},
        headers=admin,
    )
    assert duplicate.status_code == 409

    deactivated = client.put(f"/api/v1/roomtypes/{room_type_id}", json={"isAvailable": False}, headers=admin)
    assert deactivated.status_code == 200
    assert deactivated.json()["data"]["isAvailable"] is False

    assert client.delete(f"/api/v1/hotels/{hotel_id}", headers=admin).status_code == 200
    assert client.get(f"/api/v1/roomtypes/{room_type_id}").status_code == 404


# --- Accounts and managers ---


def test_auth_session_lifecycle(client):
    user_id, headers = _register(client, "Guest", "guest@example.com")

    me = client.get("/api/v1/auth/me", headers=headers)
    assert me.status_code == 200
    assert me.json()["data"]["id"] == user_id
    assert me.json()["data"]["role"] == "user"

    bad_login = client.post("/api/v1/auth/login", json={"email": "guest@example.com", "password": "wrong"})
    assert bad_login.status_code == 401

    duplicate = client.post(
        "/api/v1/auth/register",
        json={"name": "Again", "email": "guest@example.com", "tel": "0812345678", "password": "password123"},
    )
    assert duplicate.status_code == 409

    assert client.get("/api/v1/auth/logout", headers=headers).status_code == 200
    assert client.get("/api/v1/auth/me", headers=headers).status_code == 401


def test_manager_acts_only_on_managed_hotels(client):
    admin = _login(client, ADMIN_EMAIL, ADMIN_PASSWORD)
    managed_hotel, managed_room = _create_catalogue(client, admin, "Managed Hotel")
    other_hotel, other_room = _create_catalogue(client, admin, "Other Hotel")
    manager_id, manager_token = _register(client, "Manager", "manager@example.com")
    guest_id, guest = _register(client, "Guest", "guest@example.com")

    not_yet = client.get("/api/v1/manager/hotels", headers=manager_token)
    assert not_yet.status_code == 403

    promoted = client.put(
        f"/api/v1/users/{manager_id}",
        json={"role": "manager", "managedHotels": [managed_hotel]},
        headers=admin,
    )
    assert promoted.status_code == 200
    assert promoted.json()["data"]["managedHotels"] == [managed_hotel]

    self_promotion = client.put(f"/api/v1/users/{guest_id}", json={"role": "admin"}, headers=guest)
    assert self_promotion.status_code == 403

    hotels = client.get("/api/v1/manager/hotels", headers=manager_token)
    assert [hotel["id"] for hotel in hotels.json()["data"]] == [managed_hotel]

    booking_id = _book(client, guest, managed_hotel, managed_room, guest_id, "2025-06-01", "2025-06-03").json()["data"]["id"]
    other_booking = _book(client, guest, other_hotel, other_room, guest_id, "2025-06-01", "2025-06-03").json()["data"]["id"]

    listing = client.get(f"/api/v1/manager/hotels/{managed_hotel}/bookings", headers=manager_token)
    assert [booking["id"] for booking in listing.json()["data"]] == [booking_id]
    assert client.get(f"/api/v1/manager/hotels/{other_hotel}/bookings", headers=manager_token).status_code == 403

    renamed = client.put(f"/api/v1/manager/hotels/{managed_hotel}", json={"name": "Managed Hotel Deluxe"}, headers=manager_token)
    assert renamed.status_code == 200
    assert renamed.json()["data"]["name"] == "Managed Hotel Deluxe"
    assert client.put(f"/api/v1/manager/hotels/{other_hotel}", json={"name": "Taken"}, headers=manager_token).status_code == 403

    created = client.post(
        f"/api/v1/manager/hotels/{managed_hotel}/roomtypes",
        json={"name": "Suite", "capacity": 3, "bedType": "Queen", "totalRooms": 2},
        headers=manager_token,
    )
    assert created.status_code == 201
    assert created.json()["data"]["hotelId"] == managed_hotel

    forbidden_room = client.delete(f"/api/v1/manager/roomtypes/{other_room}", headers=manager_token)
    assert forbidden_room.status_code == 403
    assert forbidden_room.json()["message"] == "Access denied. You do not have permission to manage this room type."

    assert client.delete(f"/api/v1/manager/bookings/{other_booking}", headers=manager_token).status_code == 403
    assert client.delete(f"/api/v1/manager/bookings/{booking_id}", headers=manager_token).status_code == 200


def test_users_listing_is_admin_only(client):
    admin = _login(client, ADMIN_EMAIL, ADMIN_PASSWORD)
    _, guest = _register(client, "Guest", "guest@example.com")

    assert client.get("/api/v1/users", headers=guest).status_code == 403

    listing = client.get("/api/v1/users", params={"role": "user"}, headers=admin)
    assert listing.status_code == 200
    assert [user["email"] for user in listing.json()["data"]] == ["guest@example.com"]


# --- Store failures ---


@pytest.fixture
def locking_client(tmp_path):
    settings = _build_test_settings(tmp_path, "store_failures.db", store_timeout_seconds=1.0)
    app = create_app(settings)
    with TestClient(app) as test_client:
        yield test_client, settings.database_path


def _hold_lock(database_path, mode: str) -> sqlite3.Connection:
    locker = sqlite3.connect(database_path, isolation_level=None)
    locker.execute(f"BEGIN {mode};")
    return locker


def test_locked_read_returns_503_with_retry_after(locking_client):
    client, database_path = locking_client
    admin = _login(client, ADMIN_EMAIL, ADMIN_PASSWORD)
    hotel_id, _ = _create_catalogue(client, admin)

    locker = _hold_lock(database_path, "EXCLUSIVE")
    try:
        response = client.get(
            "/api/v1/availability/room-types",
            params={"hotelId": hotel_id, "checkInDate": "2025-06-01", "checkOutDate": "2025-06-03"},
        )
    finally:
        locker.execute("ROLLBACK;")
        locker.close()

    assert response.status_code == 503
    assert response.headers["Retry-After"] == "1"
    assert response.json() == {"success": False, "message": GENERIC_STORE_MESSAGE}
    assert "locked" not in response.text


def test_locked_admission_returns_500_and_keeps_serving(locking_client):
    client, database_path = locking_client
    admin = _login(client, ADMIN_EMAIL, ADMIN_PASSWORD)
    hotel_id, room_type_id = _create_catalogue(client, admin)
    user_id, guest = _register(client, "Guest", "guest@example.com")
    assert client.get("/openapi.json").status_code == 200

    locker = _hold_lock(database_path, "IMMEDIATE")
    try:
        with ThreadPoolExecutor(max_workers=1) as executor:
            pending = executor.submit(
                _book, client, guest, hotel_id, room_type_id, user_id, "2025-06-01", "2025-06-03"
            )
            time.sleep(0.2)
            started = time.monotonic()
            docs = client.get("/openapi.json")
            elapsed = time.monotonic() - started
            booked = pending.result()
    finally:
        locker.execute("ROLLBACK;")
        locker.close()

    assert docs.status_code == 200
    assert elapsed < 0.5
    assert booked.status_code == 500
    assert "Retry-After" not in booked.headers
    assert booked.json() == {"success": False, "message": GENERIC_STORE_MESSAGE}
    assert client.get("/api/v1/bookings", headers=guest).json()["count"] == 0


def test_store_failure_hides_driver_text(locking_client):
    client, database_path = locking_client
    _, guest = _register(client, "Guest", "guest@example.com")

    conn = sqlite3.connect(database_path, isolation_level=None)
    conn.execute("DROP TABLE Bookings;")
    conn.close()

    response = client.get("/api/v1/bookings", headers=guest)
    assert response.status_code == 500
    assert response.json() == {"success": False, "message": GENERIC_STORE_MESSAGE}
    assert "no such table" not in response.text
