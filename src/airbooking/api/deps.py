"""
Per-request service assembly from application state
"""
from fastapi import Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from airbooking.core.database import get_db
from airbooking.services import (
    BookingService,
    CabinInventoryAggregator,
    CatalogService,
    FlightSearchService,
    FlightService,
    IdempotencyService,
    InventorySeeder,
    ReferenceGenerator,
    SeatService,
)


def get_catalog_service(db: AsyncSession = Depends(get_db)) -> CatalogService:
    return CatalogService(db)


def get_seat_service(db: AsyncSession = Depends(get_db)) -> SeatService:
    return SeatService(db)


def get_flight_service(db: AsyncSession = Depends(get_db)) -> FlightService:
    return FlightService(db)


def get_inventory_seeder(db: AsyncSession = Depends(get_db)) -> InventorySeeder:
    return InventorySeeder(db)


def get_cabin_aggregator(db: AsyncSession = Depends(get_db)) -> CabinInventoryAggregator:
    return CabinInventoryAggregator(db)


def get_search_service(db: AsyncSession = Depends(get_db)) -> FlightSearchService:
    return FlightSearchService(db)


def get_booking_service(request: Request, db: AsyncSession = Depends(get_db)) -> BookingService:
    settings = request.app.state.settings
    return BookingService(
        db=db,
        references=ReferenceGenerator(max_attempts=settings.PNR_MAX_ATTEMPTS),
        notifier=request.app.state.notifier,
        insert_retries=settings.PNR_INSERT_RETRIES,
    )


def get_idempotency_service(request: Request) -> IdempotencyService:
    return IdempotencyService(
        request.app.state.redis,
        ttl=request.app.state.settings.IDEMPOTENCY_TTL_SECONDS,
    )
