from datetime import datetime

from booking_intake.domain.bookings.exceptions import PersistenceError
from booking_intake.domain.bookings.router import UNEXPECTED_ERROR_MESSAGE, get_booking_service
from booking_intake.main import app
from booking_intake.models import Booking, BookingNumberSequence, Customer

from .factories import booking_payload


def test_health(client):
    assert client.get("/").status_code == 200
    assert client.get("/health").json() == {"status": "healthy"}


def test_create_booking(client, webhook, email_service):
    response = client.post("/bookings", json=booking_payload())

    assert response.status_code == 200
    body = response.json()
    assert body["success"] is True
    assert body["status"] == "pending"
    assert body["bookingNumber"].endswith("-0001")
    assert body["data"]["customerDetails"]["email"] == "jane@example.com"

    # Background tasks have run by the time the test client returns
    assert webhook.triggered == [body["bookingNumber"]]
    assert len(email_service.sent) == 2


def test_get_booking(client):
    number = client.post("/bookings", json=booking_payload()).json()["bookingNumber"]

    response = client.get(f"/bookings/{number}")

    assert response.status_code == 200
    body = response.json()
    assert body["success"] is True
    assert body["bookingNumber"] == number
    assert body["serviceDetails"]["frequency"] == "weekly"
    assert client.get(f"/bookings/{number}").json() == body


def test_get_unknown_booking(client):
    response = client.get("/bookings/CH-4040")
    assert response.status_code == 404
    assert response.json() == {"success": False, "message": "Booking not found"}


def test_missing_phone_is_rejected_before_any_write(client, session_factory, webhook):
    response = client.post("/bookings", json=booking_payload(customerDetails={"phone": ""}))

    assert response.status_code == 400
    body = response.json()
    assert body["success"] is False
    assert body["status"] == "error"
    assert body["bookingNumber"] == ""
    assert body["field"] == "phone"
    assert body["message"] == "Customer phone number is required"
    assert webhook.triggered == []

    with session_factory() as db:
        assert db.query(Customer).count() == 0
        assert db.query(Booking).count() == 0
        assert db.query(BookingNumberSequence).count() == 0


def test_missing_customer_details(client):
    payload = booking_payload()
    del payload["customerDetails"]

    response = client.post("/bookings", json=payload)

    assert response.status_code == 400
    assert response.json()["field"] == "firstName"


def test_unknown_service_type(client):
    response = client.post("/bookings", json=booking_payload(selectedService="Gutter Cleaning"))

    assert response.status_code == 400
    assert response.json()["message"] == "Unknown service type: Gutter Cleaning"


def test_store_failure_returns_generic_message(client):
    class FailingService:
        def create_booking(self, submission):
            raise PersistenceError("disk I/O error on bookings")

    app.dependency_overrides[get_booking_service] = lambda: FailingService()

    response = client.post("/bookings", json=booking_payload())

    assert response.status_code == 500
    body = response.json()
    assert body["message"] == UNEXPECTED_ERROR_MESSAGE
    assert "disk" not in response.text


def test_malformed_body(client):
    response = client.post("/bookings", json={"selectedService": "Regular Cleaning", "currentStep": "last"})
    assert response.status_code == 422
    assert response.json()["success"] is False


def test_list_and_stats(client):
    client.post("/bookings", json=booking_payload())
    client.post("/bookings", json=booking_payload(pricing={"totalPrice": 20}))

    listing = client.get("/bookings", params={"limit": 1}).json()
    assert listing["total"] == 2
    assert len(listing["bookings"]) == 1

    stats = client.get("/bookings/stats/summary").json()
    assert stats["total"] == 2
    assert stats["pending"] == 2
    assert stats["totalRevenue"] == 200


def test_status_update(client):
    number = client.post("/bookings", json=booking_payload()).json()["bookingNumber"]

    response = client.patch(f"/bookings/{number}/status", json={"status": "completed"})
    assert response.status_code == 200
    assert response.json()["status"] == "completed"

    assert client.patch(f"/bookings/{number}/status", json={"status": "lost"}).status_code == 400
    assert client.patch("/bookings/CH-4040/status", json={"status": "confirmed"}).status_code == 404


def test_booking_notifications(client):
    number = client.post("/bookings", json=booking_payload()).json()["bookingNumber"]

    body = client.get(f"/bookings/{number}/notifications").json()

    assert body["success"] is True
    types = {n["notificationType"] for n in body["notifications"]}
    assert types == {"booking_created", "booking_confirmation", "new_main_booking"}
    audit = next(n for n in body["notifications"] if n["kind"] == "audit")
    assert audit["metadata"]["bookingNumber"] == number


def test_failed_notifications_endpoint(client, email_service):
    email_service.fail_with = "Email service not configured"
    client.post("/bookings", json=booking_payload())

    body = client.get("/notifications").json()

    assert body["status"] == "failed"
    assert len(body["notifications"]) == 2
    assert all(n["status"] == "failed" for n in body["notifications"])

    unread = client.get("/notifications", params={"status": "unread"}).json()
    assert len(unread["notifications"]) == 1


def test_search_bookings(client):
    jane = client.post("/bookings", json=booking_payload()).json()["bookingNumber"]
    client.post("/bookings", json=booking_payload(customerDetails={"email": "sam@example.org"}))

    body = client.get("/bookings", params={"search": "JANE@"}).json()

    assert body["total"] == 1
    assert body["bookings"][0]["bookingNumber"] == jane
    assert client.get("/bookings", params={"search": jane}).json()["total"] == 1


def test_list_filtered_by_schedule_date(client):
    client.post("/bookings", json=booking_payload())
    client.post("/bookings", json=booking_payload(customerDetails={"scheduleDate": "2027-01-05"}))

    body = client.get("/bookings", params={"schedule_date": "2027-01-05"}).json()

    assert body["total"] == 1
    assert body["bookings"][0]["scheduleDate"] == "2027-01-05"


def test_todays_bookings(client):
    today = datetime.utcnow().date().isoformat()
    number = client.post(
        "/bookings", json=booking_payload(customerDetails={"scheduleDate": today})
    ).json()["bookingNumber"]
    client.post("/bookings", json=booking_payload(customerDetails={"scheduleDate": "1999-01-01"}))

    body = client.get("/bookings/today").json()

    assert body["success"] is True
    assert body["date"] == today
    assert [b["bookingNumber"] for b in body["bookings"]] == [number]


def test_empty_ndis_details_read_as_null(client):
    number = client.post(
        "/bookings", json=booking_payload(customerDetails={"ndisDetails": {}})
    ).json()["bookingNumber"]

    body = client.get(f"/bookings/{number}").json()

    assert body["customerDetails"]["ndisDetails"] is None
