"""
Cabin inventory aggregate tests
"""
from datetime import datetime

import pytest
from sqlalchemy import func, select, update

from airbooking.models import FlightSeat, Seat
from airbooking.models.seat import CabinClass
from airbooking.services import CabinInventoryAggregator, FlightNotFoundError

DEPARTS = datetime(2030, 5, 1, 8, 0)
ARRIVES = datetime(2030, 5, 1, 14, 0)


class TestCabinInventory:

    @pytest.mark.asyncio
    async def test_counts_per_cabin(self, database, builder, route):
        """Test totals and availability are grouped by seat class"""
        jfk, lax, aircraft = route
        flight = await builder.flight(aircraft.id, jfk.id, lax.id, DEPARTS, ARRIVES)

        async with database.session() as db:
            cabins = await CabinInventoryAggregator(db).for_flight(flight.id)

        summary = {(c.cabin_class, c.total_seats, c.available_seats) for c in cabins}
        assert summary == {
            (CabinClass.ECONOMY, 3, 3),
            (CabinClass.BUSINESS, 2, 2),
        }
        assert [c.cabin_class for c in cabins] == [CabinClass.ECONOMY, CabinClass.BUSINESS]

    @pytest.mark.asyncio
    async def test_tracks_occupancy_live(self, database, builder, route):
        """Test the aggregate always matches a recount of occupancy rows"""
        jfk, lax, aircraft = route
        flight = await builder.flight(aircraft.id, jfk.id, lax.id, DEPARTS, ARRIVES)

        async with database.session() as db:
            async with db.begin():
                economy_seat = await db.scalar(
                    select(Seat.id).where(Seat.aircraft_id == aircraft.id, Seat.cabin_class == CabinClass.ECONOMY).limit(1)
                )
                await db.execute(
                    update(FlightSeat)
                    .where(FlightSeat.flight_id == flight.id, FlightSeat.seat_id == economy_seat)
                    .values(is_occupied=True)
                )

        async with database.session() as db:
            economy = await CabinInventoryAggregator(db).get(flight.id, CabinClass.ECONOMY)
            recount = await db.scalar(
                select(func.count())
                .select_from(FlightSeat)
                .join(Seat, Seat.id == FlightSeat.seat_id)
                .where(
                    FlightSeat.flight_id == flight.id,
                    Seat.cabin_class == CabinClass.ECONOMY,
                    FlightSeat.is_occupied.is_(False),
                )
            )

        assert economy.total_seats == 3
        assert economy.available_seats == recount == 2

    @pytest.mark.asyncio
    async def test_missing_cabin_is_none(self, database, builder, route):
        """Test a class with no seats on the aircraft has no inventory"""
        jfk, lax, aircraft = route
        flight = await builder.flight(aircraft.id, jfk.id, lax.id, DEPARTS, ARRIVES)

        async with database.session() as db:
            assert await CabinInventoryAggregator(db).get(flight.id, CabinClass.FIRST) is None

    @pytest.mark.asyncio
    async def test_unknown_flight(self, database):
        """Test asking for an unknown flight"""
        async with database.session() as db:
            with pytest.raises(FlightNotFoundError):
                await CabinInventoryAggregator(db).for_flight(404)
