"""
Shared fixtures: a fresh SQLite database per test, the ASGI app and
builders for reference data.
"""
import os

# Before airbooking imports read settings
os.environ.setdefault("RATE_LIMIT_ENABLED", "false")
os.environ.setdefault("LOG_LEVEL", "WARNING")

from datetime import datetime  # noqa: E402
from decimal import Decimal  # noqa: E402
from typing import List, Optional, Tuple  # noqa: E402

import pytest  # noqa: E402
import pytest_asyncio  # noqa: E402
from httpx import ASGITransport, AsyncClient  # noqa: E402
from sqlalchemy import func, select  # noqa: E402

from airbooking.core.config import Settings  # noqa: E402
from airbooking.core.database import Database  # noqa: E402
from airbooking.core.security import CallerIdentity, create_access_token  # noqa: E402
from airbooking.main import create_app  # noqa: E402
from airbooking.schemas import AircraftCreate, AirportCreate, FlightCreate, SeatCreate  # noqa: E402
from airbooking.services import (  # noqa: E402
    CatalogService,
    ConsoleReceiptNotifier,
    FlightService,
    SeatService,
)


@pytest.fixture
def settings(tmp_path):
    return Settings(
        _env_file=None,
        DATABASE_URL=f"sqlite+aiosqlite:///{tmp_path / 'airbooking.db'}",
        SECRET_KEY="test-secret",
        NOTIFIER_BACKEND="console",
        RATE_LIMIT_ENABLED=False,
        REDIS_URL="redis://localhost:1/0",
        LOG_LEVEL="WARNING",
    )


@pytest_asyncio.fixture
async def database(settings):
    """Fresh file-backed SQLite database with all tables"""
    db = Database.from_settings(settings)
    await db.create_all()
    yield db
    await db.dispose()


@pytest.fixture
def notifier():
    return ConsoleReceiptNotifier()


@pytest.fixture
def identity():
    return CallerIdentity(user_id=7, email="traveler@example.com")


@pytest.fixture
def auth_headers(settings, identity):
    token = create_access_token(settings, identity.user_id, identity.email)
    return {"Authorization": f"Bearer {token}"}


@pytest_asyncio.fixture
async def client(settings, database, notifier):
    app = create_app(settings=settings, database=database, notifier=notifier)
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac


class Builder:
    """Creates reference data through the services, one session per call"""

    def __init__(self, database: Database):
        self.database = database

    async def airport(self, code: str):
        async with self.database.session() as db:
            return await CatalogService(db).create_airport(
                AirportCreate(code=code, name=f"{code} International", city=code.title(), country="Testland")
            )

    async def aircraft(self, seats: List[Tuple[str, Optional[str]]], model: str = "A320"):
        async with self.database.session() as db:
            aircraft = await CatalogService(db).create_aircraft(
                AircraftCreate(model=model, total_seats=len(seats))
            )
        for seat_number, cabin in seats:
            await self.seat(aircraft.id, seat_number, cabin)
        return aircraft

    async def seat(self, aircraft_id: int, seat_number: str, cabin: Optional[str] = None):
        async with self.database.session() as db:
            return await SeatService(db).create_seat(
                SeatCreate(aircraft_id=aircraft_id, seat_number=seat_number, cabin_class=cabin)
            )

    async def flight(
        self,
        aircraft_id: int,
        departure_airport_id: int,
        arrival_airport_id: int,
        departure_time: datetime,
        arrival_time: datetime,
        flight_number: str = "AB100",
        base_price: Decimal = Decimal("199.00"),
        status: Optional[str] = None,
    ):
        async with self.database.session() as db:
            flight, _ = await FlightService(db).create_flight(FlightCreate(
                flight_number=flight_number,
                departure_airport_id=departure_airport_id,
                arrival_airport_id=arrival_airport_id,
                departure_time=departure_time,
                arrival_time=arrival_time,
                aircraft_id=aircraft_id,
                base_price=base_price,
                status=status,
            ))
        return flight

    async def count(self, model, *criteria) -> int:
        async with self.database.session() as db:
            stmt = select(func.count()).select_from(model)
            if criteria:
                stmt = stmt.where(*criteria)
            return await db.scalar(stmt)


@pytest.fixture
def builder(database):
    return Builder(database)


@pytest_asyncio.fixture
async def route(builder):
    """JFK and LAX airports plus an aircraft with 3 economy and 2 business seats"""
    jfk = await builder.airport("JFK")
    lax = await builder.airport("LAX")
    aircraft = await builder.aircraft([
        ("1A", "business"),
        ("1B", "business"),
        ("10A", "economy"),
        ("10B", "economy"),
        ("10C", None),
    ])
    return jfk, lax, aircraft
