"""
Flight search over the live cabin aggregate
"""
import logging
from datetime import date, datetime, timedelta
from typing import List, Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import aliased

from airbooking.models import Airport, Flight, FlightStatus
from airbooking.models.seat import CabinClass
from airbooking.schemas.flight import FlightSearchQuery, FlightSearchResponse, SearchFlightRow
from airbooking.services.cabin_inventory import cabin_inventory_query
from airbooking.services.errors import ValidationError

logger = logging.getLogger(__name__)

ONE_WAY = "one-way"
ROUND_TRIP = "round-trip"


class SearchValidationError(ValidationError):
    pass


def _parse_date(value: Optional[str], field: str) -> date:
    if value is None or not str(value).strip():
        raise SearchValidationError(f"{field} is required")
    try:
        return date.fromisoformat(str(value).strip())
    except ValueError:
        raise SearchValidationError(f"{field} must be YYYY-MM-DD")


class FlightSearchService:
    def __init__(self, db: AsyncSession):
        self.db = db

    async def search(self, query: FlightSearchQuery) -> FlightSearchResponse:
        """
        Scheduled flights on the route and date with seats left in the cabin.

        All input is validated before the first query runs.
        """
        trip_type = (query.type or ONE_WAY).strip().lower()
        if trip_type not in (ONE_WAY, ROUND_TRIP):
            raise SearchValidationError("type must be one-way or round-trip")
        if not query.from_airport_id or not query.to_airport_id:
            raise SearchValidationError("from_airport_id and to_airport_id are required")

        try:
            cabin_class = CabinClass.parse(query.cabin_class)
        except ValueError:
            raise SearchValidationError("cabin_class must be one of economy, business, first")

        departure_date = _parse_date(query.departure_date, "departure_date")
        return_date = None
        if trip_type == ROUND_TRIP:
            return_date = _parse_date(query.return_date, "return_date")

        outbound = await self.find_flights(
            query.from_airport_id, query.to_airport_id, departure_date, cabin_class
        )
        response = FlightSearchResponse(outbound=outbound)

        if return_date is not None:
            response.return_flights = await self.find_flights(
                query.to_airport_id, query.from_airport_id, return_date, cabin_class
            )

        logger.info(
            f"Search {trip_type} {query.from_airport_id}->{query.to_airport_id} "
            f"{departure_date} {cabin_class.value}: {len(outbound)} outbound"
        )
        return response

    async def find_flights(
        self,
        from_airport_id: int,
        to_airport_id: int,
        on_date: date,
        cabin_class: CabinClass,
    ) -> List[SearchFlightRow]:
        departure = aliased(Airport)
        arrival = aliased(Airport)
        inventory = cabin_inventory_query().subquery()

        day_start = datetime.combine(on_date, datetime.min.time())
        day_end = day_start + timedelta(days=1)

        stmt = (
            select(
                Flight.id,
                Flight.flight_number,
                departure.code.label("departure_airport_code"),
                arrival.code.label("arrival_airport_code"),
                Flight.departure_time,
                Flight.arrival_time,
                Flight.base_price,
                inventory.c.available_seats,
                inventory.c.cabin_class,
            )
            .join(departure, departure.id == Flight.departure_airport_id)
            .join(arrival, arrival.id == Flight.arrival_airport_id)
            .join(inventory, inventory.c.flight_id == Flight.id)
            .where(
                Flight.departure_airport_id == from_airport_id,
                Flight.arrival_airport_id == to_airport_id,
                Flight.departure_time >= day_start,
                Flight.departure_time < day_end,
                Flight.status == FlightStatus.SCHEDULED,
                inventory.c.cabin_class == cabin_class,
                inventory.c.available_seats > 0,
            )
            .order_by(Flight.departure_time, Flight.id)
        )

        result = await self.db.execute(stmt)
        return [
            SearchFlightRow(
                id=row.id,
                flight_number=row.flight_number,
                departure_airport_code=row.departure_airport_code,
                arrival_airport_code=row.arrival_airport_code,
                departure_time=row.departure_time,
                arrival_time=row.arrival_time,
                base_price=row.base_price,
                available_seats=int(row.available_seats),
                cabin_class=row.cabin_class,
            )
            for row in result
        ]
