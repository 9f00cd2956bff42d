"""
Cabin inventory: per (flight, cabin class) totals aggregated live from
occupancy rows. Nothing here is stored, so it cannot drift.
"""
from typing import List, Optional

from sqlalchemy import case, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from airbooking.models import Flight, FlightSeat, Seat
from airbooking.models.seat import CabinClass
from airbooking.schemas.flight import CabinInventory
from airbooking.services.errors import FlightNotFoundError


def cabin_inventory_query():
    """
    SELECT flight_id, class, total_seats, available_seats
    grouped by flight and class. Usable directly or as a subquery.
    """
    return (
        select(
            FlightSeat.flight_id.label("flight_id"),
            Seat.cabin_class.label("cabin_class"),
            func.count(FlightSeat.id).label("total_seats"),
            func.coalesce(
                func.sum(case((FlightSeat.is_occupied.is_(False), 1), else_=0)),
                0,
            ).label("available_seats"),
        )
        .join(Seat, Seat.id == FlightSeat.seat_id)
        .group_by(FlightSeat.flight_id, Seat.cabin_class)
    )


class CabinInventoryAggregator:
    """Read-only view over FlightSeat joined with Seat.class"""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def for_flight(self, flight_id: int) -> List[CabinInventory]:
        """
        All cabins of a flight, ordered economy, business, first.

        Raises:
            FlightNotFoundError: unknown flight id
        """
        exists = await self.db.scalar(select(Flight.id).where(Flight.id == flight_id))
        if exists is None:
            raise FlightNotFoundError(f"Flight {flight_id} not found")

        result = await self.db.execute(
            cabin_inventory_query().where(FlightSeat.flight_id == flight_id)
        )
        rows = [
            CabinInventory(
                flight_id=row.flight_id,
                cabin_class=row.cabin_class,
                total_seats=row.total_seats,
                available_seats=int(row.available_seats),
            )
            for row in result
        ]
        order = list(CabinClass)
        rows.sort(key=lambda inv: order.index(inv.cabin_class))
        return rows

    async def get(self, flight_id: int, cabin_class: CabinClass) -> Optional[CabinInventory]:
        """One cabin, or None when the flight has no seats in that class"""
        result = await self.db.execute(
            cabin_inventory_query().where(
                FlightSeat.flight_id == flight_id,
                Seat.cabin_class == cabin_class,
            )
        )
        row = result.first()
        if row is None:
            return None
        return CabinInventory(
            flight_id=row.flight_id,
            cabin_class=row.cabin_class,
            total_seats=row.total_seats,
            available_seats=int(row.available_seats),
        )
