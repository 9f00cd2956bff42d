"""
Pydantic schemas for API request/response validation
"""
from airbooking.schemas.catalog import (
    AirportCreate,
    AirportResponse,
    AircraftCreate,
    AircraftResponse,
    SeatCreate,
    SeatResponse,
    SeatCreateResponse,
    FlightSeatReconcileResponse,
)
from airbooking.schemas.flight import (
    FlightCreate,
    FlightResponse,
    CabinInventory,
    CabinInventoryResponse,
    BackfillResponse,
    SearchFlightRow,
    FlightSearchQuery,
    FlightSearchResponse,
)
from airbooking.schemas.booking import (
    PassengerInput,
    BookingCreate,
    ReceiptPassenger,
    Receipt,
    BookingCreateResponse,
    BookingResponse,
)

__all__ = [
    # Reference data
    "AirportCreate",
    "AirportResponse",
    "AircraftCreate",
    "AircraftResponse",
    "SeatCreate",
    "SeatResponse",
    "SeatCreateResponse",
    "FlightSeatReconcileResponse",
    # Flights
    "FlightCreate",
    "FlightResponse",
    "CabinInventory",
    "CabinInventoryResponse",
    "BackfillResponse",
    "SearchFlightRow",
    "FlightSearchQuery",
    "FlightSearchResponse",
    # Bookings
    "PassengerInput",
    "BookingCreate",
    "ReceiptPassenger",
    "Receipt",
    "BookingCreateResponse",
    "BookingResponse",
]
