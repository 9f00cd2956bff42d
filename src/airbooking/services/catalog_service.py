"""
Reference data: airports and aircraft
"""
import logging
from typing import List

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from airbooking.models import Aircraft, Airport
from airbooking.schemas.catalog import AircraftCreate, AirportCreate
from airbooking.services.errors import DuplicateAirportError

logger = logging.getLogger(__name__)


class CatalogService:
    """Airport and aircraft maintenance; no invariant beyond uniqueness"""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def create_airport(self, data: AirportCreate) -> Airport:
        airport = Airport(
            code=data.code,
            name=data.name.strip(),
            city=data.city.strip(),
            country=data.country.strip(),
        )
        try:
            async with self.db.begin():
                self.db.add(airport)
        except IntegrityError:
            raise DuplicateAirportError(f"Airport code {data.code} already exists")

        logger.info(f"Created airport {airport.code}")
        return airport

    async def list_airports(self) -> List[Airport]:
        result = await self.db.execute(select(Airport).order_by(Airport.id))
        return list(result.scalars().all())

    async def create_aircraft(self, data: AircraftCreate) -> Aircraft:
        aircraft = Aircraft(model=data.model.strip(), total_seats=data.total_seats)
        async with self.db.begin():
            self.db.add(aircraft)

        logger.info(f"Created aircraft {aircraft.model}", extra={'aircraft_id': aircraft.id})
        return aircraft

    async def list_aircraft(self) -> List[Aircraft]:
        result = await self.db.execute(select(Aircraft).order_by(Aircraft.id))
        return list(result.scalars().all())
