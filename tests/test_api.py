"""HTTP surface: public booking endpoints and the admin API."""
import httpx
import pytest
from fastapi.testclient import TestClient

from repair_booking.config import Settings
from repair_booking.email_service import EmailNotifier
from repair_booking.main import create_app

ADMIN_AUTH = ("admin", "secret")


def book(client, date="2024-05-01", slot=1, **fields):
    return client.post("/book", json={"date": date, "slot": slot, **fields})


def test_booking_scenario_end_to_end(client):
    response = book(client, name="A")
    assert response.status_code == 200
    assert response.json() == {"success": True, "id": 1}

    response = book(client, name="B")
    assert response.status_code == 400
    assert response.json() == {"error": "Slot already booked"}

    response = client.get("/availability", params={"date": "2024-05-01"})
    assert response.status_code == 200
    assert response.json() == [
        {"slot": 1, "label": "9:00 AM - 12:00 PM", "available": False},
        {"slot": 2, "label": "12:00 PM - 3:00 PM", "available": True},
        {"slot": 3, "label": "3:00 PM - 6:00 PM", "available": True},
    ]

    response = client.post("/admin/cancel", json={"id": 1}, auth=ADMIN_AUTH)
    assert response.status_code == 200
    assert response.json() == {"success": True}

    response = client.get("/availability", params={"date": "2024-05-01"})
    assert response.json()[0]["available"] is True


def test_availability_requires_date(client):
    response = client.get("/availability")

    assert response.status_code == 400
    assert "error" in response.json()


@pytest.mark.parametrize("body", [
    {},
    {"slot": 1},
    {"date": "2024-05-01"},
    {"date": "", "slot": 1},
])
def test_book_missing_fields(client, body):
    response = client.post("/book", json=body)

    assert response.status_code == 400
    assert "error" in response.json()


def test_book_rejects_non_numeric_slot(client):
    response = client.post("/book", json={"date": "2024-05-01", "slot": "morning"})

    assert response.status_code == 400


def test_book_accepts_numeric_string_slot(client):
    response = client.post("/book", json={"date": "2024-05-01", "slot": "2"})

    assert response.status_code == 200
    availability = client.get("/availability", params={"date": "2024-05-01"}).json()
    assert availability[1]["available"] is False


def test_book_notifies_after_response(client, notifier):
    book(client, name="Ann", email="ann@example.com", phone="555")

    assert [name for name, _ in notifier.sent] == ["booking_created", "booking_received"]
    assert notifier.sent[0][1].name == "Ann"


@pytest.mark.parametrize("method, path", [
    ("get", "/admin/bookings"),
    ("post", "/admin/cancel"),
    ("post", "/admin/complete"),
    ("get", "/admin"),
    ("get", "/admin.html"),
])
def test_admin_requires_credentials(client, method, path):
    response = getattr(client, method)(path)

    assert response.status_code == 401
    assert response.headers["www-authenticate"].startswith("Basic")


def test_admin_rejects_wrong_password(client):
    response = client.get("/admin/bookings", auth=("admin", "wrong"))

    assert response.status_code == 401
    assert response.headers["www-authenticate"].startswith("Basic")


def test_admin_lists_bookings_for_date(client):
    book(client, slot=2, name="B")
    book(client, slot=1, name="A", address="1 Main St", notes="Door bell broken")
    book(client, date="2024-05-02", slot=1, name="Other")
    client.post("/admin/complete", json={"id": 1}, auth=ADMIN_AUTH)

    response = client.get("/admin/bookings", params={"date": "2024-05-01"}, auth=ADMIN_AUTH)

    assert response.status_code == 200
    data = response.json()
    assert [(b["slot"], b["name"], b["status"]) for b in data] == [
        (1, "A", "booked"),
        (2, "B", "completed"),
    ]
    assert data[0]["label"] == "9:00 AM - 12:00 PM"
    assert data[0]["address"] == "1 Main St"
    assert data[0]["notes"] == "Door bell broken"


def test_admin_default_listing_is_upcoming_active(client):
    book(client, date="2000-01-01", name="past")
    book(client, date="2999-01-01", slot=2, name="future")
    book(client, date="2999-01-01", slot=1, name="future canceled")
    client.post("/admin/cancel", json={"id": 3}, auth=ADMIN_AUTH)

    upcoming = client.get("/admin/bookings", auth=ADMIN_AUTH).json()
    everything = client.get("/admin/bookings", params={"all": "true"}, auth=ADMIN_AUTH).json()

    assert [b["name"] for b in upcoming] == ["future"]
    assert [b["id"] for b in everything] == [1, 3, 2]


@pytest.mark.parametrize("path", ["/admin/cancel", "/admin/complete"])
def test_admin_transition_missing_id(client, path):
    response = client.post(path, json={}, auth=ADMIN_AUTH)

    assert response.status_code == 400


@pytest.mark.parametrize("path", ["/admin/cancel", "/admin/complete"])
def test_admin_transition_unknown_id(client, path):
    response = client.post(path, json={"id": 42}, auth=ADMIN_AUTH)

    assert response.status_code == 404
    assert response.json() == {"error": "Booking 42 not found"}


def test_admin_complete_and_invalid_transition(client, notifier):
    book(client, name="A")

    assert client.post("/admin/complete", json={"id": 1}, auth=ADMIN_AUTH).status_code == 200
    # Same transition again is accepted and changes nothing
    assert client.post("/admin/complete", json={"id": 1}, auth=ADMIN_AUTH).status_code == 200

    response = client.post("/admin/cancel", json={"id": 1}, auth=ADMIN_AUTH)
    assert response.status_code == 409
    assert "completed" in response.json()["error"]

    status_messages = [b.status for name, b in notifier.sent if name == "booking_status_changed"]
    assert status_messages == ["completed"]


def test_rebooking_a_canceled_slot(client):
    book(client, name="A")
    client.post("/admin/cancel", json={"id": 1}, auth=ADMIN_AUTH)

    response = book(client, name="B")

    assert response.status_code == 200
    assert response.json()["id"] == 2
    assert book(client, name="C").status_code == 400


def test_admin_page_is_served(client):
    response = client.get("/admin", auth=ADMIN_AUTH)

    assert response.status_code == 200
    assert "text/html" in response.headers["content-type"]
    assert "/admin/bookings" in response.text


def test_public_page_and_health(client):
    assert client.get("/").status_code == 200
    assert client.get("/static/booking.js").status_code == 200
    assert client.get("/health").json() == {"status": "ok"}


def test_admin_page_is_not_in_public_static_files(client):
    assert client.get("/static/admin.html").status_code == 404


def test_email_failure_does_not_affect_booking():
    def unreachable(request):
        raise httpx.ConnectError("connection refused", request=request)

    settings = Settings(
        database_url="sqlite://",
        email_api_key="re_test",
        email_from="shop@example.com",
        owner_email="owner@example.com",
    )
    notifier = EmailNotifier(settings, transport=httpx.MockTransport(unreachable))

    with TestClient(create_app(settings, notifier=notifier)) as client:
        response = book(client, name="A", email="a@example.com")

        assert response.status_code == 200
        assert response.json() == {"success": True, "id": 1}
        assert client.get("/availability", params={"date": "2024-05-01"}).json()[0]["available"] is False


def test_book_rejects_slot_outside_integer_range(client):
    response = client.post("/book", json={"date": "2024-05-01", "slot": 10**20})

    assert response.status_code == 400
    assert "error" in response.json()


@pytest.mark.parametrize("path", ["/admin/cancel", "/admin/complete"])
def test_admin_transition_rejects_id_outside_integer_range(client, path):
    response = client.post(path, json={"id": 10**20}, auth=ADMIN_AUTH)

    assert response.status_code == 400
    assert "error" in response.json()
