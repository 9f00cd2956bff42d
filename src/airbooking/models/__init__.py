"""
SQLAlchemy models for the seat inventory and booking service

Import all models here so relationships resolve and metadata is complete.
"""
from airbooking.core.database import Base

from airbooking.models.airport import Airport
from airbooking.models.aircraft import Aircraft
from airbooking.models.seat import Seat, CabinClass
from airbooking.models.flight import Flight, FlightStatus
from airbooking.models.flight_seat import FlightSeat
from airbooking.models.booking import Booking, BookingStatus, BookingFlight, BookingPassenger

__all__ = [
    "Base",
    "Airport",
    "Aircraft",
    "Seat",
    "CabinClass",
    "Flight",
    "FlightStatus",
    "FlightSeat",
    "Booking",
    "BookingStatus",
    "BookingFlight",
    "BookingPassenger",
]
