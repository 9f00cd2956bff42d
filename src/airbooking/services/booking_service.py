"""
Booking transaction engine

Header, flight segment and passengers are written in one transaction.
The receipt is sent after commit and its failure only clears email_sent.

Known gap: a booking neither checks cabin capacity nor marks any
FlightSeat occupied, so a cabin can be sold past its seat count.
"""
import logging
import time
from datetime import date, datetime, timezone
from decimal import Decimal
from typing import Any, Dict, List, Optional

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import aliased, selectinload

from airbooking.core.metrics import (
    booking_creation_duration_seconds,
    bookings_created_total,
    pnr_collisions_total,
    receipt_notifications_total,
)
from airbooking.core.security import CallerIdentity
from airbooking.models import Airport, Booking, BookingFlight, BookingPassenger, BookingStatus, Flight
from airbooking.models.seat import CabinClass
from airbooking.schemas.booking import (
    BookingCreate,
    BookingCreateResponse,
    Receipt,
    ReceiptPassenger,
)
from airbooking.services.errors import BookingNotFoundError, FlightNotFoundError, ValidationError
from airbooking.services.notifier import ReceiptNotifier
from airbooking.services.pnr import ReferenceExhaustedError, ReferenceGenerator

logger = logging.getLogger(__name__)

DEFAULT_INSERT_RETRIES = 3
REQUIRED_PASSENGER_FIELDS = ('first_name', 'last_name', 'email', 'phone')

# Passenger column widths, checked before any write
PASSENGER_FIELD_LIMITS = {
    field: BookingPassenger.__table__.c[field].type.length
    for field in REQUIRED_PASSENGER_FIELDS + ('passport_number',)
}


class BookingValidationError(ValidationError):
    """Raised for caller input errors; nothing has been written"""
    pass


def _clean(value: Optional[str]) -> Optional[str]:
    if value is None:
        return None
    value = value.strip()
    return value or None


def _check_length(index: int, field: str, value: str) -> str:
    limit = PASSENGER_FIELD_LIMITS[field]
    if len(value) > limit:
        raise BookingValidationError(f"passenger {index}: {field} must be at most {limit} characters")
    return value


class BookingService:
    """Creates bookings and reads them back for their owner"""

    def __init__(
        self,
        db: AsyncSession,
        references: ReferenceGenerator,
        notifier: ReceiptNotifier,
        insert_retries: int = DEFAULT_INSERT_RETRIES,
    ):
        self.db = db
        self.references = references
        self.notifier = notifier
        self.insert_retries = insert_retries

    @staticmethod
    def validate(data: BookingCreate) -> tuple:
        """
        Check and normalise a booking request without touching the database.

        Returns:
            (cabin_class, passenger rows as dicts)

        Raises:
            BookingValidationError
        """
        if not data.flight_id or data.flight_id <= 0:
            raise BookingValidationError("flight_id is required")

        try:
            cabin_class = CabinClass.parse(data.cabin_class)
        except ValueError:
            raise BookingValidationError("cabin_class must be economy, business, or first")

        if not data.passengers:
            raise BookingValidationError("at least one passenger is required")

        passengers: List[Dict[str, Any]] = []
        for index, passenger in enumerate(data.passengers, start=1):
            row: Dict[str, Any] = {}
            for field in REQUIRED_PASSENGER_FIELDS:
                value = _clean(getattr(passenger, field))
                if value is None:
                    raise BookingValidationError(f"passenger {index}: {field} is required")
                row[field] = _check_length(index, field, value)

            dob = _clean(passenger.date_of_birth)
            try:
                row['date_of_birth'] = date.fromisoformat(dob) if dob else None
            except ValueError:
                raise BookingValidationError(f"passenger {index}: date_of_birth must be YYYY-MM-DD")

            passport = _clean(passenger.passport_number)
            row['passport_number'] = _check_length(index, 'passport_number', passport) if passport else None
            passengers.append(row)

        if data.total_amount < 0:
            raise BookingValidationError("total_amount must be non-negative")

        return cabin_class, passengers

    async def _flight_info(self, flight_id: int):
        departure = aliased(Airport)
        arrival = aliased(Airport)
        result = await self.db.execute(
            select(
                Flight.id,
                Flight.flight_number,
                Flight.base_price,
                Flight.departure_time,
                Flight.arrival_time,
                departure.code.label("departure_airport_code"),
                arrival.code.label("arrival_airport_code"),
            )
            .join(departure, departure.id == Flight.departure_airport_id)
            .join(arrival, arrival.id == Flight.arrival_airport_id)
            .where(Flight.id == flight_id)
        )
        info = result.first()
        if info is None:
            raise FlightNotFoundError(f"Flight {flight_id} not found")
        return info

    async def _insert_header(self, user_id: int, total_amount: Decimal) -> Booking:
        """
        Insert the booking header under a fresh reference.

        The existence check runs first; a concurrent insert of the same
        reference still trips the unique constraint, which rolls back the
        savepoint and draws again.
        """
        for attempt in range(1, self.insert_retries + 1):
            reference = await self.references.generate(self.db)
            booking = Booking(
                user_id=user_id,
                booking_reference=reference,
                status=BookingStatus.PENDING,
                total_amount=total_amount,
            )
            try:
                async with self.db.begin_nested():
                    self.db.add(booking)
                    await self.db.flush()
            except IntegrityError:
                pnr_collisions_total.inc()
                logger.warning(f"Booking reference {reference} taken concurrently, attempt {attempt}")
                continue
            return booking

        raise ReferenceExhaustedError(
            f"Failed to insert a booking with a unique reference after {self.insert_retries} attempts"
        )

    async def _insert_passengers(self, booking_id: int, passengers: List[Dict[str, Any]]) -> None:
        for row in passengers:
            self.db.add(BookingPassenger(booking_id=booking_id, **row))
            await self.db.flush()

    async def create_booking(self, identity: CallerIdentity, data: BookingCreate) -> BookingCreateResponse:
        """
        Create a pending booking for the caller.

        Raises:
            BookingValidationError: bad input, before any write
            FlightNotFoundError: flight does not exist
            ReferenceExhaustedError: no unique reference could be drawn
        """
        cabin_class, passengers = self.validate(data)
        start_time = time.time()

        async with self.db.begin():
            flight = await self._flight_info(data.flight_id)
            booking = await self._insert_header(identity.user_id, data.total_amount)

            # Segment price is the flight's current base price, independent of total_amount
            self.db.add(BookingFlight(
                booking_id=booking.id,
                flight_id=flight.id,
                cabin_class=cabin_class,
                price=flight.base_price,
            ))
            await self.db.flush()

            await self._insert_passengers(booking.id, passengers)

        duration = time.time() - start_time
        booking_creation_duration_seconds.observe(duration)
        bookings_created_total.labels(cabin_class=cabin_class.value).inc()
        logger.info(
            f"Booking {booking.booking_reference} committed for {len(passengers)} passengers",
            extra={
                'booking_id': booking.id,
                'booking_reference': booking.booking_reference,
                'flight_id': flight.id,
                'user_id': identity.user_id,
                'duration_ms': round(duration * 1000, 2),
            }
        )

        receipt = Receipt(
            booking_id=booking.id,
            booking_reference=booking.booking_reference,
            flight_number=flight.flight_number,
            departure_airport_code=flight.departure_airport_code,
            arrival_airport_code=flight.arrival_airport_code,
            departure_time=flight.departure_time,
            arrival_time=flight.arrival_time,
            cabin_class=cabin_class,
            total_amount=data.total_amount,
            passenger_count=len(passengers),
            passengers=[
                ReceiptPassenger(first_name=p['first_name'], last_name=p['last_name'], email=p['email'])
                for p in passengers
            ],
            issued_at=datetime.now(timezone.utc),
        )

        email_sent = await self._notify(identity, receipt)

        return BookingCreateResponse(
            booking_id=booking.id,
            booking_reference=booking.booking_reference,
            receipt=receipt,
            email_sent=email_sent,
        )

    async def _notify(self, identity: CallerIdentity, receipt: Receipt) -> bool:
        if not identity.email:
            receipt_notifications_total.labels(result="skipped").inc()
            return False

        try:
            await self.notifier.send_receipt(identity.email, receipt)
        except Exception as e:
            # The booking is already committed
            receipt_notifications_total.labels(result="failed").inc()
            logger.warning(
                f"Receipt notification failed: {e}",
                extra={'booking_reference': receipt.booking_reference, 'user_id': identity.user_id},
                exc_info=True
            )
            return False

        receipt_notifications_total.labels(result="sent").inc()
        return True

    async def get_booking_by_reference(self, identity: CallerIdentity, reference: str) -> Booking:
        """
        Load a booking with its segment and passengers.

        Bookings of other callers are reported as not found.
        """
        result = await self.db.execute(
            select(Booking)
            .options(selectinload(Booking.segments), selectinload(Booking.passengers))
            .where(Booking.booking_reference == reference.strip().upper())
        )
        booking = result.scalar_one_or_none()
        if booking is None or booking.user_id != identity.user_id:
            raise BookingNotFoundError(f"Booking {reference} not found")
        return booking
