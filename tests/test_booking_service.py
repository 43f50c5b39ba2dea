import re
from concurrent.futures import ThreadPoolExecutor
from datetime import date

import pytest
from sqlalchemy.exc import IntegrityError

from booking_intake.config import BOOKING_NUMBER_PREFIX
from booking_intake.domain.bookings.details import DETAIL_VARIANTS
from booking_intake.domain.bookings.exceptions import (
    BookingValidationError,
    DetailValidationError,
    PersistenceError,
    UnknownServiceType,
)
from booking_intake.domain.bookings.repository import BookingRepository
from booking_intake.domain.bookings.service import BOOKING_CREATED_MESSAGE, BookingService
from booking_intake.models import (
    Booking,
    BookingNumberSequence,
    Customer,
    CustomerCommercialDetails,
    CustomerNdisDetails,
    NdisCleaningDetails,
    RegularCleaningDetails,
)

from .factories import submission


def count(db, model):
    return db.query(model).count()


def test_create_and_read_back(db):
    service = BookingService(db)
    result = service.create_booking(submission())

    assert result["success"] is True
    assert result["status"] == "pending"
    assert result["message"] == BOOKING_CREATED_MESSAGE
    assert result["bookingNumber"] == f"{BOOKING_NUMBER_PREFIX}-0001"

    booking = service.get_booking_by_number(result["bookingNumber"])
    assert booking == result["data"]
    assert booking["status"] == "pending"
    assert booking["currentStep"] == 4
    assert booking["selectedService"] == "Regular Cleaning"
    assert booking["customerDetails"]["firstName"] == "Jane"
    assert booking["customerDetails"]["scheduleDate"] == "2026-11-02"
    assert booking["customerDetails"]["ndisDetails"] is None
    assert booking["serviceDetails"] == {
        "frequency": "weekly",
        "duration": 3.0,
        "specialRequests": "Inside the oven please",
    }
    assert booking["pricing"] == {"totalPrice": 180, "basePrice": 150}
    assert booking["createdAt"] is not None


def test_read_is_idempotent(db):
    service = BookingService(db)
    number = service.create_booking(submission())["bookingNumber"]
    assert service.get_booking_by_number(number) == service.get_booking_by_number(number)


def test_unknown_booking_number_is_none(db):
    assert BookingService(db).get_booking_by_number("CH-9999") is None


def test_booking_numbers_are_distinct(db):
    service = BookingService(db)
    numbers = {service.create_booking(submission())["bookingNumber"] for _ in range(5)}
    assert len(numbers) == 5


def test_ndis_booking_writes_one_row_per_table(db):
    service = BookingService(db)
    result = service.create_booking(
        submission(
            selectedService="NDIS Cleaning",
            customerDetails={"ndisDetails": {"ndisNumber": 430000123, "planManager": "Plan Co"}},
            serviceDetails={"frequency": "weekly", "duration": 2},
        )
    )

    assert count(db, Customer) == 1
    assert count(db, NdisCleaningDetails) == 1
    assert count(db, CustomerNdisDetails) == 1
    assert count(db, CustomerCommercialDetails) == 0
    assert count(db, Booking) == 1

    customer = result["data"]["customerDetails"]
    assert customer["ndisDetails"] == {"ndisNumber": "430000123", "planManager": "Plan Co"}
    assert customer["commercialDetails"] is None


def test_commercial_customer_details(db):
    result = BookingService(db).create_booking(
        submission(
            selectedService="Commercial Cleaning",
            customerDetails={"commercialDetails": {"businessName": "Acme", "abn": "51824753556"}},
            serviceDetails={"serviceType": "office", "staffCount": 2},
        )
    )
    commercial = result["data"]["customerDetails"]["commercialDetails"]
    assert commercial["businessName"] == "Acme"
    assert commercial["abn"] == "51824753556"
    assert commercial["contactPerson"] is None


def test_defaults_for_step_and_pricing(db):
    result = BookingService(db).create_booking(submission(currentStep=None, pricing=None))
    assert result["data"]["currentStep"] == 4
    assert result["data"]["pricing"] == {}


@pytest.mark.parametrize(
    "missing, message",
    [
        ("firstName", "Customer first name is required"),
        ("email", "Customer email is required"),
        ("phone", "Customer phone number is required"),
        ("address", "Service address is required"),
        ("scheduleDate", "Schedule date is required"),
    ],
)
def test_missing_customer_field_writes_nothing(db, missing, message):
    with pytest.raises(BookingValidationError) as exc_info:
        BookingService(db).create_booking(submission(customerDetails={missing: ""}))

    assert exc_info.value.field == missing
    assert exc_info.value.message == message
    assert count(db, Customer) == 0
    assert count(db, Booking) == 0


def test_first_missing_field_is_reported(db):
    with pytest.raises(BookingValidationError) as exc_info:
        BookingService(db).create_booking(
            submission(customerDetails={"lastName": None, "phone": None})
        )
    assert exc_info.value.field == "lastName"


def test_missing_service_selection(db):
    with pytest.raises(BookingValidationError) as exc_info:
        BookingService(db).create_booking(submission(selectedService=None))
    assert exc_info.value.message == "Service selection is required"


def test_unknown_service_writes_nothing(db):
    with pytest.raises(UnknownServiceType):
        BookingService(db).create_booking(submission(selectedService="Pool Cleaning"))
    assert count(db, Customer) == 0
    assert count(db, BookingNumberSequence) == 0
    for variant in DETAIL_VARIANTS.values():
        assert count(db, variant.model) == 0


def test_invalid_details_write_nothing(db):
    with pytest.raises(DetailValidationError):
        BookingService(db).create_booking(submission(serviceDetails={"duration": "all day"}))
    assert count(db, Customer) == 0
    assert count(db, RegularCleaningDetails) == 0


def test_failed_booking_insert_rolls_back_customer_and_details(db, monkeypatch):
    def failing_add_booking(_db, **_fields):
        raise IntegrityError("INSERT INTO bookings", {}, Exception("UNIQUE constraint failed"))

    monkeypatch.setattr(BookingRepository, "add_booking", staticmethod(failing_add_booking))

    with pytest.raises(PersistenceError):
        BookingService(db).create_booking(submission())

    assert count(db, Customer) == 0
    assert count(db, RegularCleaningDetails) == 0
    assert count(db, Booking) == 0


def test_update_status(db):
    service = BookingService(db)
    number = service.create_booking(submission())["bookingNumber"]

    booking = service.update_booking_status(number, "confirmed")
    assert booking["status"] == "confirmed"
    assert service.get_booking_by_number(number)["status"] == "confirmed"


def test_update_status_rejects_unknown_status(db):
    service = BookingService(db)
    number = service.create_booking(submission())["bookingNumber"]
    with pytest.raises(BookingValidationError) as exc_info:
        service.update_booking_status(number, "error")
    assert exc_info.value.field == "status"


def test_update_status_of_missing_booking(db):
    assert BookingService(db).update_booking_status("CH-9999", "confirmed") is None


def test_list_bookings_newest_first_with_status_filter(db):
    service = BookingService(db)
    first = service.create_booking(submission())["bookingNumber"]
    second = service.create_booking(
        submission(customerDetails={"firstName": "Sam", "lastName": "Lee"})
    )["bookingNumber"]
    service.update_booking_status(first, "cancelled")

    listing = service.list_bookings()
    assert listing["total"] == 2
    assert [b["bookingNumber"] for b in listing["bookings"]] == [second, first]
    assert listing["bookings"][0]["customerName"] == "Sam Lee"
    assert listing["bookings"][0]["totalPrice"] == 180

    cancelled = service.list_bookings(status="cancelled")
    assert cancelled["total"] == 1
    assert cancelled["bookings"][0]["bookingNumber"] == first


def test_stats(db):
    service = BookingService(db)
    service.create_booking(submission(pricing={"totalPrice": 100}))
    confirmed = service.create_booking(
        submission(pricing={"totalPrice": "250.50"}, customerDetails={"scheduleDate": "2026-12-24"})
    )["bookingNumber"]
    service.update_booking_status(confirmed, "confirmed")

    stats = service.get_booking_stats()
    assert stats["total"] == 2
    assert stats["pending"] == 1
    assert stats["confirmed"] == 1
    assert stats["cancelled"] == 0
    assert stats["totalRevenue"] == pytest.approx(350.5)

    december = service.get_booking_stats(start_date="2026-12-01", end_date="2026-12-31")
    assert december["total"] == 1
    assert december["totalRevenue"] == pytest.approx(250.5)


def test_concurrent_bookings_get_unique_numbers(session_factory):
    def create(_):
        session = session_factory()
        try:
            return BookingService(session).create_booking(submission())["bookingNumber"]
        finally:
            session.close()

    with ThreadPoolExecutor(max_workers=10) as pool:
        numbers = list(pool.map(create, range(100)))

    assert len(set(numbers)) == 100
    assert all(re.fullmatch(rf"{BOOKING_NUMBER_PREFIX}-\d{{4,}}", number) for number in numbers)

    with session_factory() as db:
        assert count(db, Booking) == 100
        assert count(db, Customer) == 100


def test_empty_customer_sub_records_read_as_null(db):
    result = BookingService(db).create_booking(
        submission(
            customerDetails={
                "ndisDetails": {},
                "commercialDetails": {"businessName": "", "abn": None},
                "endOfLeaseDetails": {"role": "tenant"},
            }
        )
    )

    customer = BookingService(db).get_booking_by_number(result["bookingNumber"])["customerDetails"]
    assert customer["ndisDetails"] is None
    assert customer["commercialDetails"] is None
    assert customer["endOfLeaseDetails"] == {"role": "tenant"}


def test_search_matches_email_or_booking_number(db):
    service = BookingService(db)
    jane = service.create_booking(submission())["bookingNumber"]
    sam = service.create_booking(
        submission(customerDetails={"firstName": "Sam", "email": "Sam.Lee@Example.org"})
    )["bookingNumber"]

    by_email = service.list_bookings(search="sam.lee@example")
    assert [b["bookingNumber"] for b in by_email["bookings"]] == [sam]
    assert by_email["total"] == 1

    by_number = service.list_bookings(search=jane.lower())
    assert [b["bookingNumber"] for b in by_number["bookings"]] == [jane]

    assert service.list_bookings(search="nobody@")["total"] == 0
    assert service.list_bookings(search="  ")["total"] == 2


def test_list_by_schedule_date(db):
    service = BookingService(db)
    service.create_booking(submission())
    december = service.create_booking(
        submission(customerDetails={"scheduleDate": "2026-12-24"})
    )["bookingNumber"]

    listing = service.list_bookings(schedule_date="2026-12-24")
    assert [b["bookingNumber"] for b in listing["bookings"]] == [december]


def test_todays_bookings_oldest_first(db):
    service = BookingService(db)
    first = service.create_booking(submission(customerDetails={"scheduleDate": "2026-11-02"}))
    service.create_booking(submission(customerDetails={"scheduleDate": "2026-11-03"}))
    second = service.create_booking(submission(customerDetails={"scheduleDate": "2026-11-02"}))

    today = service.get_todays_bookings(today=date(2026, 11, 2))

    assert today["date"] == "2026-11-02"
    assert today["total"] == 2
    assert [b["bookingNumber"] for b in today["bookings"]] == [
        first["bookingNumber"],
        second["bookingNumber"],
    ]
