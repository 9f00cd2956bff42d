"""
Seat catalog service

A new seat is propagated to every existing flight of its aircraft in the
same transaction as the seat insert.
"""
import logging
from typing import List, Tuple

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from airbooking.core.metrics import record_seeded
from airbooking.models import Aircraft, Seat
from airbooking.models.seat import CabinClass
from airbooking.schemas.catalog import SeatCreate
from airbooking.services.errors import AircraftNotFoundError, DuplicateSeatError, SeatValidationError
from airbooking.services.inventory_service import InventorySeeder

logger = logging.getLogger(__name__)


class SeatService:
    def __init__(self, db: AsyncSession):
        self.db = db
        self.seeder = InventorySeeder(db)

    async def create_seat(self, data: SeatCreate) -> Tuple[Seat, int]:
        """
        Create a seat and its occupancy rows on existing flights.

        Returns:
            (seat, number of occupancy rows propagated)

        Raises:
            SeatValidationError: blank seat number or unknown class
            AircraftNotFoundError: aircraft does not exist
            DuplicateSeatError: seat number already used on that aircraft
        """
        seat_number = data.seat_number.strip().upper()
        if not seat_number:
            raise SeatValidationError("seat_number is required")
        try:
            cabin_class = CabinClass.parse(data.cabin_class)
        except ValueError:
            raise SeatValidationError("class must be one of economy, business, first")

        try:
            async with self.db.begin():
                aircraft = await self.db.get(Aircraft, data.aircraft_id)
                if aircraft is None:
                    raise AircraftNotFoundError(f"Aircraft {data.aircraft_id} not found")

                seat = Seat(
                    aircraft_id=data.aircraft_id,
                    seat_number=seat_number,
                    cabin_class=cabin_class,
                )
                self.db.add(seat)
                await self.db.flush()

                propagated = await self.seeder.propagate_seat(seat.id, seat.aircraft_id)
        except IntegrityError:
            raise DuplicateSeatError(
                f"Seat {seat_number} already exists on aircraft {data.aircraft_id}"
            )

        record_seeded("seat", propagated)
        logger.info(
            f"Created seat {seat.seat_number} ({seat.cabin_class.value})",
            extra={'seat_id': seat.id, 'aircraft_id': seat.aircraft_id}
        )
        return seat, propagated

    async def list_seats(self, aircraft_id: int) -> List[Seat]:
        result = await self.db.execute(
            select(Seat).where(Seat.aircraft_id == aircraft_id).order_by(Seat.id)
        )
        return list(result.scalars().all())
