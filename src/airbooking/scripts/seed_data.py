"""
Seed script to populate database with sample data for testing

Goes through the same services as the API, so flights are seeded with
their occupancy rows.

Usage:
    python -m airbooking.scripts.seed_data
"""
import asyncio
from datetime import datetime, timedelta
from decimal import Decimal

from sqlalchemy import select

from airbooking.core.config import get_settings
from airbooking.core.database import Database
from airbooking.models import Aircraft, Airport
from airbooking.schemas import AircraftCreate, AirportCreate, FlightCreate, SeatCreate
from airbooking.services import CatalogService, FlightService, SeatService

AIRPORTS = [
    {"code": "JFK", "name": "John F. Kennedy International Airport", "city": "New York", "country": "USA"},
    {"code": "LAX", "name": "Los Angeles International Airport", "city": "Los Angeles", "country": "USA"},
    {"code": "LHR", "name": "Heathrow Airport", "city": "London", "country": "United Kingdom"},
    {"code": "SIN", "name": "Singapore Changi Airport", "city": "Singapore", "country": "Singapore"},
]

# (first row, last row, seat letters, class)
SEAT_MAP = [
    (1, 2, "AD", "first"),
    (3, 6, "ACDF", "business"),
    (7, 20, "ABCDEF", "economy"),
]


def seat_layout():
    for first_row, last_row, letters, cabin in SEAT_MAP:
        for row in range(first_row, last_row + 1):
            for letter in letters:
                yield f"{row}{letter}", cabin


async def create_sample_airports(database: Database):
    """Create sample airports, skipping codes that exist"""
    airports = {}
    for airport_data in AIRPORTS:
        async with database.session() as db:
            existing = await db.scalar(select(Airport).where(Airport.code == airport_data["code"]))
        if existing:
            print(f"Airport {existing.code} already exists, skipping...")
            airports[existing.code] = existing
            continue

        async with database.session() as db:
            airport = await CatalogService(db).create_airport(AirportCreate(**airport_data))
        airports[airport.code] = airport
        print(f"Created airport: {airport.code}")
    return airports


async def create_sample_aircraft(database: Database):
    """Create one aircraft with a three-class seat map"""
    model = "Airbus A321neo"
    async with database.session() as db:
        existing = await db.scalar(select(Aircraft).where(Aircraft.model == model))
    if existing:
        print(f"Aircraft {model} already exists, skipping...")
        return existing

    layout = list(seat_layout())
    async with database.session() as db:
        aircraft = await CatalogService(db).create_aircraft(
            AircraftCreate(model=model, total_seats=len(layout))
        )

    for seat_number, cabin in layout:
        async with database.session() as db:
            await SeatService(db).create_seat(
                SeatCreate(aircraft_id=aircraft.id, seat_number=seat_number, cabin_class=cabin)
            )
    print(f"Created aircraft: {aircraft.model} with {len(layout)} seats")
    return aircraft


async def create_sample_flights(database: Database, airports, aircraft):
    """Create a week of JFK/LAX and LHR/SIN departures"""
    base = datetime.utcnow().replace(hour=8, minute=0, second=0, microsecond=0) + timedelta(days=1)
    routes = [
        ("JFK", "LAX", timedelta(hours=6), Decimal("249.00")),
        ("LAX", "JFK", timedelta(hours=5, minutes=30), Decimal("259.00")),
        ("LHR", "SIN", timedelta(hours=13), Decimal("689.00")),
        ("SIN", "LHR", timedelta(hours=14), Decimal("699.00")),
    ]

    flights = []
    for day in range(7):
        for number, (origin, destination, duration, price) in enumerate(routes, start=1):
            departure = base + timedelta(days=day, hours=number * 2)
            async with database.session() as db:
                flight, seeded = await FlightService(db).create_flight(FlightCreate(
                    flight_number=f"AB{100 + number}",
                    departure_airport_id=airports[origin].id,
                    arrival_airport_id=airports[destination].id,
                    departure_time=departure,
                    arrival_time=departure + duration,
                    aircraft_id=aircraft.id,
                    base_price=price,
                ))
            flights.append(flight)
            print(f"Created flight: {flight.flight_number} {origin}->{destination} "
                  f"{departure:%Y-%m-%d %H:%M} with {seeded} seats")
    return flights


async def seed_database():
    """Main seeding function"""
    print("Starting database seeding...")
    database = Database.from_settings(get_settings())

    try:
        await database.create_all()

        print("\n=== Creating Airports ===")
        airports = await create_sample_airports(database)

        print("\n=== Creating Aircraft and Seats ===")
        aircraft = await create_sample_aircraft(database)

        print("\n=== Creating Flights ===")
        flights = await create_sample_flights(database, airports, aircraft)

        print("\n=== Seeding Complete! ===")
        print(f"Created {len(airports)} airports")
        print(f"Created {len(flights)} flights")
    except Exception as e:
        print(f"Error during seeding: {e}")
        raise
    finally:
        await database.dispose()


if __name__ == "__main__":
    asyncio.run(seed_database())
