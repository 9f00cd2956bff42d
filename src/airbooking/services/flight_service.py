"""
Flight registry with atomic seat-map seeding

A flight never exists without its occupancy rows: the flight insert and
the seeding share one transaction.
"""
import logging
from typing import List, Optional, Tuple

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from airbooking.core.metrics import record_seeded
from airbooking.models import Aircraft, Airport, Flight, FlightStatus
from airbooking.schemas.flight import FlightCreate
from airbooking.services.errors import (
    AircraftNotFoundError,
    AirportNotFoundError,
    FlightNotFoundError,
    FlightValidationError,
)
from airbooking.services.inventory_service import InventorySeeder

logger = logging.getLogger(__name__)


def parse_status(value: Optional[str]) -> FlightStatus:
    normalized = (value or "").strip().lower()
    if not normalized:
        return FlightStatus.SCHEDULED
    try:
        return FlightStatus(normalized)
    except ValueError:
        raise FlightValidationError("status must be one of scheduled, delayed, cancelled")


class FlightService:
    def __init__(self, db: AsyncSession):
        self.db = db
        self.seeder = InventorySeeder(db)

    @staticmethod
    def validate(data: FlightCreate) -> FlightStatus:
        if not data.flight_number.strip():
            raise FlightValidationError("flight_number is required")
        if data.departure_airport_id == data.arrival_airport_id:
            raise FlightValidationError("departure and arrival airports must differ")
        if data.arrival_time <= data.departure_time:
            raise FlightValidationError("arrival_time must be after departure_time")
        return parse_status(data.status)

    async def create_flight(self, data: FlightCreate) -> Tuple[Flight, int]:
        """
        Create a flight and seed one unoccupied row per aircraft seat.

        Any failure rolls back the flight as well.

        Returns:
            (flight, number of occupancy rows seeded)
        """
        flight_status = self.validate(data)

        async with self.db.begin():
            if await self.db.get(Aircraft, data.aircraft_id) is None:
                raise AircraftNotFoundError(f"Aircraft {data.aircraft_id} not found")

            airport_ids = {data.departure_airport_id, data.arrival_airport_id}
            found = set(
                (await self.db.execute(select(Airport.id).where(Airport.id.in_(airport_ids)))).scalars()
            )
            missing = airport_ids - found
            if missing:
                raise AirportNotFoundError(f"Airports {sorted(missing)} not found")

            flight = Flight(
                flight_number=data.flight_number.strip().upper(),
                departure_airport_id=data.departure_airport_id,
                arrival_airport_id=data.arrival_airport_id,
                departure_time=data.departure_time,
                arrival_time=data.arrival_time,
                aircraft_id=data.aircraft_id,
                base_price=data.base_price,
                status=flight_status,
            )
            self.db.add(flight)
            await self.db.flush()

            seeded = await self.seeder.seed_flight(flight.id, flight.aircraft_id)

        record_seeded("flight", seeded)
        logger.info(
            f"Created flight {flight.flight_number} with {seeded} seats",
            extra={'flight_id': flight.id, 'aircraft_id': flight.aircraft_id}
        )
        return flight, seeded

    async def get_flight(self, flight_id: int) -> Flight:
        flight = await self.db.get(Flight, flight_id)
        if flight is None:
            raise FlightNotFoundError(f"Flight {flight_id} not found")
        return flight

    async def list_flights(self, departure_airport_id: Optional[int] = None) -> List[Flight]:
        query = select(Flight).order_by(Flight.id)
        if departure_airport_id is not None:
            query = query.where(Flight.departure_airport_id == departure_airport_id)
        result = await self.db.execute(query)
        return list(result.scalars().all())
