"""Pydantic schemas for Booking resources"""
from datetime import date, datetime
from decimal import Decimal
from typing import List, Optional
from pydantic import BaseModel, ConfigDict, Field

from airbooking.models.booking import BookingStatus
from airbooking.models.seat import CabinClass


class PassengerInput(BaseModel):
    # Presence and length are checked by the booking engine so every rule reports the same way
    first_name: str = ""
    last_name: str = ""
    email: str = ""
    phone: str = ""
    date_of_birth: Optional[str] = Field(None, description="ISO date, YYYY-MM-DD")
    passport_number: Optional[str] = None


class BookingCreate(BaseModel):
    flight_id: int = 0
    cabin_class: Optional[str] = None
    total_amount: Decimal = Field(..., max_digits=10, decimal_places=2)
    passengers: List[PassengerInput] = Field(default_factory=list)


class ReceiptPassenger(BaseModel):
    first_name: str
    last_name: str
    email: str


class Receipt(BaseModel):
    booking_id: int
    booking_reference: str
    flight_number: str
    departure_airport_code: str
    arrival_airport_code: str
    departure_time: datetime
    arrival_time: datetime
    cabin_class: CabinClass
    total_amount: Decimal
    passenger_count: int
    passengers: List[ReceiptPassenger]
    issued_at: datetime

    @property
    def passenger_names(self) -> List[str]:
        names = [f"{p.first_name} {p.last_name}".strip() for p in self.passengers]
        return [name for name in names if name]


class BookingCreateResponse(BaseModel):
    booking_id: int
    booking_reference: str
    receipt: Receipt
    email_sent: bool


class BookingPassengerResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    first_name: str
    last_name: str
    email: str
    phone: str
    date_of_birth: Optional[date] = None
    passport_number: Optional[str] = None


class BookingSegmentResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    flight_id: int
    cabin_class: CabinClass
    price: Decimal


class BookingResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    user_id: int
    booking_reference: str
    status: BookingStatus
    total_amount: Decimal
    created_at: datetime
    segments: List[BookingSegmentResponse]
    passengers: List[BookingPassengerResponse]
