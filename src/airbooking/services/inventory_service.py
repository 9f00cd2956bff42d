"""
Inventory seeding: one occupancy row per (flight, seat of the flight's aircraft).

Inserts are conflict tolerant so every operation here can be repeated.
Callers own the transaction except for the best-effort reconcile and
backfill passes, which commit flight by flight.
"""
import logging
from dataclasses import dataclass
from typing import List

from sqlalchemy import and_, delete, false, literal, select
from sqlalchemy.dialects import postgresql, sqlite
from sqlalchemy.ext.asyncio import AsyncSession

from airbooking.core.metrics import reconcile_failures_total, record_seeded
from airbooking.models import Flight, FlightSeat, Seat

logger = logging.getLogger(__name__)

_DIALECT_INSERTS = {
    "postgresql": postgresql.insert,
    "sqlite": sqlite.insert,
}


@dataclass
class ReconcileResult:
    flights_processed: int = 0
    flight_seats_created: int = 0


class InventorySeeder:
    """Writes FlightSeat rows for flights and seats"""

    def __init__(self, db: AsyncSession):
        self.db = db

    def _insert_ignore(self):
        dialect = self.db.get_bind().dialect.name
        try:
            insert = _DIALECT_INSERTS[dialect]
        except KeyError:
            raise NotImplementedError(f"No conflict-tolerant insert for dialect {dialect}")
        return insert(FlightSeat.__table__)

    async def seed_flight(self, flight_id: int, aircraft_id: int) -> int:
        """
        Insert an unoccupied row for every seat of the aircraft that the
        flight does not have yet.

        Returns:
            Number of rows inserted
        """
        seats = (
            select(literal(flight_id), Seat.id, false())
            .where(Seat.aircraft_id == aircraft_id)
        )
        stmt = (
            self._insert_ignore()
            .from_select(["flight_id", "seat_id", "is_occupied"], seats)
            .on_conflict_do_nothing(index_elements=["flight_id", "seat_id"])
        )
        result = await self.db.execute(stmt)
        created = max(result.rowcount or 0, 0)

        logger.info(
            f"Seeded {created} occupancy rows",
            extra={'flight_id': flight_id, 'aircraft_id': aircraft_id}
        )
        return created

    async def propagate_seat(self, seat_id: int, aircraft_id: int) -> int:
        """
        Give a newly added seat an unoccupied row on every flight already
        scheduled on its aircraft.
        """
        flights = (
            select(Flight.id, literal(seat_id), false())
            .where(Flight.aircraft_id == aircraft_id)
        )
        stmt = (
            self._insert_ignore()
            .from_select(["flight_id", "seat_id", "is_occupied"], flights)
            .on_conflict_do_nothing(index_elements=["flight_id", "seat_id"])
        )
        result = await self.db.execute(stmt)
        created = max(result.rowcount or 0, 0)

        logger.info(
            f"Propagated seat to {created} flights",
            extra={'seat_id': seat_id, 'aircraft_id': aircraft_id}
        )
        return created

    async def prune_foreign_seats(self, flight_id: int, aircraft_id: int) -> int:
        """
        Delete unoccupied, unbooked rows whose seat belongs to another aircraft.

        Left over when a flight's aircraft is changed out of band.
        Occupied or booked rows are kept.
        """
        foreign_seats = select(Seat.id).where(Seat.aircraft_id != aircraft_id)
        stmt = (
            delete(FlightSeat)
            .where(
                and_(
                    FlightSeat.flight_id == flight_id,
                    FlightSeat.is_occupied.is_(False),
                    FlightSeat.booking_id.is_(None),
                    FlightSeat.seat_id.in_(foreign_seats),
                )
            )
            .execution_options(synchronize_session=False)
        )
        result = await self.db.execute(stmt)
        return max(result.rowcount or 0, 0)

    async def _flights(self) -> List[tuple]:
        async with self.db.begin():
            result = await self.db.execute(
                select(Flight.id, Flight.aircraft_id).order_by(Flight.id)
            )
            return list(result.all())

    async def reconcile_all(self) -> ReconcileResult:
        """
        Fill in missing occupancy rows for every flight.

        Each flight runs in its own transaction; a failing flight is logged
        and skipped and does not count as processed.
        """
        outcome = ReconcileResult()

        for flight_id, aircraft_id in await self._flights():
            try:
                async with self.db.begin():
                    created = await self.seed_flight(flight_id, aircraft_id)
            except Exception:
                reconcile_failures_total.inc()
                logger.warning(
                    "Reconcile failed for flight, skipping",
                    extra={'flight_id': flight_id},
                    exc_info=True
                )
                continue

            record_seeded("reconcile", created)
            outcome.flights_processed += 1
            outcome.flight_seats_created += created

        logger.info(
            f"Reconciled {outcome.flights_processed} flights, "
            f"created {outcome.flight_seats_created} occupancy rows"
        )
        return outcome

    async def backfill(self) -> int:
        """
        Repair the rows the cabin aggregate is computed from.

        Adds missing rows and prunes stale ones per flight. Safe to repeat.

        Returns:
            Number of flights processed
        """
        processed = 0

        for flight_id, aircraft_id in await self._flights():
            try:
                async with self.db.begin():
                    created = await self.seed_flight(flight_id, aircraft_id)
                    pruned = await self.prune_foreign_seats(flight_id, aircraft_id)
            except Exception:
                reconcile_failures_total.inc()
                logger.warning(
                    "Backfill failed for flight, skipping",
                    extra={'flight_id': flight_id},
                    exc_info=True
                )
                continue

            record_seeded("reconcile", created)
            if pruned:
                logger.info(f"Pruned {pruned} stale occupancy rows", extra={'flight_id': flight_id})
            processed += 1

        logger.info(f"Backfilled {processed} flights")
        return processed
