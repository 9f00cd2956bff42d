"""
Services package exports
"""
from airbooking.services.errors import (
    ServiceError,
    ValidationError,
    NotFoundError,
    ConflictError,
    ResourceExhaustedError,
    FlightNotFoundError,
    AircraftNotFoundError,
    AirportNotFoundError,
    BookingNotFoundError,
    FlightValidationError,
    SeatValidationError,
    DuplicateSeatError,
    DuplicateAirportError,
)
from airbooking.services.inventory_service import InventorySeeder, ReconcileResult
from airbooking.services.cabin_inventory import CabinInventoryAggregator, cabin_inventory_query
from airbooking.services.pnr import ReferenceGenerator, ReferenceExhaustedError, PNR_ALPHABET, PNR_LENGTH
from airbooking.services.catalog_service import CatalogService
from airbooking.services.seat_service import SeatService
from airbooking.services.flight_service import FlightService
from airbooking.services.search_service import FlightSearchService, SearchValidationError
from airbooking.services.notifier import (
    ReceiptNotifier,
    SmtpReceiptNotifier,
    ConsoleReceiptNotifier,
    NotificationError,
    build_notifier,
)
from airbooking.services.booking_service import BookingService, BookingValidationError
from airbooking.services.idempotency import IdempotencyService

__all__ = [
    "ServiceError",
    "ValidationError",
    "NotFoundError",
    "ConflictError",
    "ResourceExhaustedError",
    "FlightNotFoundError",
    "AircraftNotFoundError",
    "AirportNotFoundError",
    "BookingNotFoundError",
    "FlightValidationError",
    "SeatValidationError",
    "DuplicateSeatError",
    "DuplicateAirportError",
    "InventorySeeder",
    "ReconcileResult",
    "CabinInventoryAggregator",
    "cabin_inventory_query",
    "ReferenceGenerator",
    "ReferenceExhaustedError",
    "PNR_ALPHABET",
    "PNR_LENGTH",
    "CatalogService",
    "SeatService",
    "FlightService",
    "FlightSearchService",
    "SearchValidationError",
    "ReceiptNotifier",
    "SmtpReceiptNotifier",
    "ConsoleReceiptNotifier",
    "NotificationError",
    "build_notifier",
    "BookingService",
    "BookingValidationError",
    "IdempotencyService",
]
