"""
Booking transaction engine tests

Tests:
- Validation happens before any write
- Header, segment and passengers commit together or not at all
- Booking does not touch seat availability
- Notification failures never undo a booking
"""
from datetime import datetime
from decimal import Decimal

import pytest
import pytest_asyncio

from airbooking.core.security import CallerIdentity
from airbooking.models import Booking, BookingFlight, BookingPassenger, BookingStatus
from airbooking.models.seat import CabinClass
from airbooking.schemas import BookingCreate, PassengerInput
from airbooking.services import (
    BookingNotFoundError,
    BookingService,
    BookingValidationError,
    CabinInventoryAggregator,
    FlightNotFoundError,
    NotificationError,
    ReceiptNotifier,
    ReferenceExhaustedError,
    ReferenceGenerator,
)

DEPARTS = datetime(2030, 5, 1, 8, 0)
ARRIVES = datetime(2030, 5, 1, 14, 0)


def passenger(**overrides):
    data = {
        "first_name": "Ada",
        "last_name": "Lovelace",
        "email": "ada@example.com",
        "phone": "+44 20 7946 0000",
    }
    data.update(overrides)
    return PassengerInput(**data)


def booking_request(flight_id, passengers=None, **overrides):
    data = {
        "flight_id": flight_id,
        "cabin_class": "economy",
        "total_amount": Decimal("350.00"),
        "passengers": passengers if passengers is not None else [passenger()],
    }
    data.update(overrides)
    return BookingCreate(**data)


def scripted_choice(*references):
    symbols = iter("".join(references))
    return lambda alphabet: next(symbols)


class FailingNotifier(ReceiptNotifier):
    def __init__(self):
        self.calls = 0

    async def send_receipt(self, to_email, receipt):
        self.calls += 1
        raise NotificationError("mail config missing")


@pytest.fixture
def make_service(database, notifier):
    def factory(db, references=None, receipt_notifier=None):
        return BookingService(
            db=db,
            references=references or ReferenceGenerator(),
            notifier=receipt_notifier or notifier,
        )
    return factory


@pytest_asyncio.fixture
async def flight(builder, route):
    jfk, lax, aircraft = route
    return await builder.flight(aircraft.id, jfk.id, lax.id, DEPARTS, ARRIVES, base_price=Decimal("199.00"))


async def assert_no_booking_rows(builder):
    assert await builder.count(Booking) == 0
    assert await builder.count(BookingFlight) == 0
    assert await builder.count(BookingPassenger) == 0


# ============================================================================
# VALIDATION
# ============================================================================
class TestBookingValidation:

    @pytest.mark.parametrize("request_kwargs, message", [
        ({"flight_id": 0}, "flight_id"),
        ({"cabin_class": "premium"}, "cabin_class"),
        ({"passengers": []}, "passenger"),
        ({"total_amount": Decimal("-1")}, "total_amount"),
        ({"passengers": [passenger(first_name="  ")]}, "first_name"),
        ({"passengers": [passenger(), passenger(phone="")]}, "passenger 2: phone"),
        ({"passengers": [passenger(date_of_birth="1815-13-10")]}, "date_of_birth"),
        ({"passengers": [passenger(first_name="A" * 101)]}, "first_name must be at most 100 characters"),
        ({"passengers": [passenger(), passenger(last_name="L" * 101)]}, "passenger 2: last_name must be at most 100"),
        ({"passengers": [passenger(email="a" * 250 + "@x.com")]}, "email must be at most 255"),
        ({"passengers": [passenger(phone="5" * 51)]}, "phone must be at most 50"),
        ({"passengers": [passenger(passport_number="P" * 51)]}, "passport_number must be at most 50"),
    ])
    def test_rejected_before_write(self, request_kwargs, message):
        """Test caller input errors are raised by validate()"""
        data = {"flight_id": 1}
        data.update(request_kwargs)
        with pytest.raises(BookingValidationError, match=message):
            BookingService.validate(booking_request(**data))

    def test_normalises_input(self):
        """Test cabin defaults to economy and text is trimmed"""
        cabin, passengers = BookingService.validate(booking_request(
            1,
            cabin_class=" ",
            passengers=[passenger(first_name=" Ada ", date_of_birth="1815-12-10", passport_number="")],
        ))

        assert cabin == CabinClass.ECONOMY
        assert passengers[0]["first_name"] == "Ada"
        assert passengers[0]["date_of_birth"].isoformat() == "1815-12-10"
        assert passengers[0]["passport_number"] is None

    def test_values_at_column_width_accepted(self):
        """Test values exactly as long as their columns pass"""
        _, passengers = BookingService.validate(booking_request(
            1,
            passengers=[passenger(first_name="A" * 100, phone="5" * 50, passport_number="P" * 50)],
        ))

        assert len(passengers[0]["first_name"]) == 100
        assert len(passengers[0]["passport_number"]) == 50

    @pytest.mark.asyncio
    async def test_unknown_flight_writes_nothing(self, database, builder, make_service, identity):
        """Test a missing flight aborts the transaction"""
        async with database.session() as db:
            with pytest.raises(FlightNotFoundError):
                await make_service(db).create_booking(identity, booking_request(999))

        await assert_no_booking_rows(builder)


# ============================================================================
# CREATE BOOKING
# ============================================================================
class TestCreateBooking:

    @pytest.mark.asyncio
    async def test_creates_header_segment_and_passengers(self, database, builder, make_service, identity, flight):
        """Test a booking commits all three parts and builds a receipt"""
        request = booking_request(
            flight.id,
            cabin_class="Business",
            passengers=[passenger(), passenger(first_name="Charles", last_name="Babbage")],
        )
        async with database.session() as db:
            response = await make_service(db).create_booking(identity, request)

        assert ReferenceGenerator.is_valid(response.booking_reference)
        receipt = response.receipt
        assert receipt.flight_number == "AB100"
        assert (receipt.departure_airport_code, receipt.arrival_airport_code) == ("JFK", "LAX")
        assert receipt.cabin_class == CabinClass.BUSINESS
        assert receipt.passenger_count == 2
        assert receipt.passenger_names == ["Ada Lovelace", "Charles Babbage"]
        assert receipt.total_amount == Decimal("350.00")

        async with database.session() as db:
            booking = await make_service(db).get_booking_by_reference(identity, response.booking_reference)

        assert booking.status == BookingStatus.PENDING
        assert booking.user_id == identity.user_id
        assert len(booking.passengers) == 2
        assert len(booking.segments) == 1

    @pytest.mark.asyncio
    async def test_segment_uses_flight_price(self, database, make_service, identity, flight):
        """Test segment price comes from the flight; total_amount is stored as sent"""
        async with database.session() as db:
            response = await make_service(db).create_booking(
                identity, booking_request(flight.id, total_amount=Decimal("1.00"))
            )
        async with database.session() as db:
            booking = await make_service(db).get_booking_by_reference(identity, response.booking_reference)

        assert booking.total_amount == Decimal("1.00")
        assert booking.segments[0].price == Decimal("199.00")

    @pytest.mark.asyncio
    async def test_passenger_failure_rolls_back_everything(
        self, database, builder, make_service, identity, flight, monkeypatch
    ):
        """Test a failure after partial inserts leaves no booking rows"""
        async def insert_then_fail(self, booking_id, passengers):
            self.db.add(BookingPassenger(booking_id=booking_id, **passengers[0]))
            await self.db.flush()
            raise RuntimeError("connection reset")

        monkeypatch.setattr(BookingService, "_insert_passengers", insert_then_fail)

        async with database.session() as db:
            with pytest.raises(RuntimeError):
                await make_service(db).create_booking(
                    identity, booking_request(flight.id, passengers=[passenger(), passenger()])
                )

        await assert_no_booking_rows(builder)

    @pytest.mark.asyncio
    async def test_booking_does_not_decrement_availability(self, database, make_service, identity, builder):
        """
        Test the known capacity gap: 3 economy seats, a booking is accepted
        and the cabin still shows 3 of 3 available
        """
        sfo = await builder.airport("SFO")
        sea = await builder.airport("SEA")
        aircraft = await builder.aircraft([("1A", None), ("1B", None), ("1C", None)])
        flight = await builder.flight(aircraft.id, sfo.id, sea.id, DEPARTS, ARRIVES)

        async with database.session() as db:
            response = await make_service(db).create_booking(identity, booking_request(flight.id))

        async with database.session() as db:
            economy = await CabinInventoryAggregator(db).get(flight.id, CabinClass.ECONOMY)

        assert len(response.booking_reference) == 6
        assert (economy.total_seats, economy.available_seats) == (3, 3)

    @pytest.mark.asyncio
    async def test_references_differ(self, database, make_service, identity, flight):
        """Test repeated bookings get distinct references"""
        references = set()
        for _ in range(5):
            async with database.session() as db:
                response = await make_service(db).create_booking(identity, booking_request(flight.id))
            references.add(response.booking_reference)

        assert len(references) == 5


# ============================================================================
# REFERENCE RACES
# ============================================================================
class BlindGenerator(ReferenceGenerator):
    """Never sees existing references, like a concurrent transaction"""

    async def is_taken(self, db, reference):
        return False


class TestReferenceRace:

    @pytest.mark.asyncio
    async def test_constraint_violation_redraws(self, database, builder, make_service, identity, flight):
        """Test a reference claimed concurrently is retried under a savepoint"""
        first = BlindGenerator(choice=lambda alphabet: "A")
        async with database.session() as db:
            await make_service(db, references=first).create_booking(identity, booking_request(flight.id))

        second = BlindGenerator(choice=scripted_choice("AAAAAA", "BBBBBB"))
        async with database.session() as db:
            response = await make_service(db, references=second).create_booking(
                identity, booking_request(flight.id)
            )

        assert response.booking_reference == "BBBBBB"
        assert await builder.count(Booking) == 2
        assert await builder.count(BookingPassenger) == 2

    @pytest.mark.asyncio
    async def test_insert_retries_exhausted(self, database, builder, make_service, identity, flight):
        """Test repeated constraint violations surface as exhaustion"""
        generator = BlindGenerator(choice=lambda alphabet: "A")
        async with database.session() as db:
            await make_service(db, references=generator).create_booking(identity, booking_request(flight.id))

        async with database.session() as db:
            with pytest.raises(ReferenceExhaustedError):
                await make_service(db, references=generator).create_booking(
                    identity, booking_request(flight.id)
                )

        assert await builder.count(Booking) == 1
        assert await builder.count(BookingFlight) == 1


# ============================================================================
# NOTIFICATION
# ============================================================================
class TestReceiptNotification:

    @pytest.mark.asyncio
    async def test_receipt_sent_to_caller(self, database, make_service, identity, flight, notifier):
        """Test the receipt goes to the caller's email"""
        async with database.session() as db:
            response = await make_service(db).create_booking(identity, booking_request(flight.id))

        assert response.email_sent is True
        assert notifier.sent[0]["to"] == identity.email
        assert response.booking_reference in notifier.sent[0]["subject"]
        assert "Route: JFK -> LAX" in notifier.sent[0]["body"]

    @pytest.mark.asyncio
    async def test_failure_is_swallowed(self, database, builder, make_service, identity, flight):
        """Test a failing notifier leaves the booking committed"""
        failing = FailingNotifier()
        async with database.session() as db:
            response = await make_service(db, receipt_notifier=failing).create_booking(
                identity, booking_request(flight.id)
            )

        assert failing.calls == 1
        assert response.email_sent is False
        assert await builder.count(Booking) == 1

    @pytest.mark.asyncio
    async def test_no_email_skips_notification(self, database, make_service, flight, notifier):
        """Test callers without an email get no receipt"""
        async with database.session() as db:
            response = await make_service(db).create_booking(
                CallerIdentity(user_id=3), booking_request(flight.id)
            )

        assert response.email_sent is False
        assert notifier.sent == []


# ============================================================================
# GET BOOKING
# ============================================================================
class TestGetBooking:

    @pytest.mark.asyncio
    async def test_other_callers_cannot_see_booking(self, database, make_service, identity, flight):
        """Test bookings are private to their owner"""
        async with database.session() as db:
            response = await make_service(db).create_booking(identity, booking_request(flight.id))

        async with database.session() as db:
            with pytest.raises(BookingNotFoundError):
                await make_service(db).get_booking_by_reference(
                    CallerIdentity(user_id=8), response.booking_reference
                )
