"""
Pydantic schemas for reference data: airports, aircraft and seats
"""
from datetime import datetime
from typing import Optional
from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator

from airbooking.models.seat import CabinClass


class AirportCreate(BaseModel):
    code: str = Field(..., min_length=2, max_length=10, description="IATA/ICAO code")
    name: str = Field(..., min_length=1, max_length=150)
    city: str = Field(..., min_length=1, max_length=100)
    country: str = Field(..., min_length=1, max_length=100)

    @field_validator('code')
    @classmethod
    def normalize_code(cls, v: str) -> str:
        return v.strip().upper()


class AirportResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    code: str
    name: str
    city: str
    country: str
    created_at: datetime


class AircraftCreate(BaseModel):
    model: str = Field(..., min_length=1, max_length=100)
    total_seats: int = Field(..., ge=0, description="Informational seat count")


class AircraftResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    model: str
    total_seats: int
    created_at: datetime
    updated_at: datetime


class SeatCreate(BaseModel):
    aircraft_id: int
    seat_number: str = Field(..., min_length=1, max_length=5, description="Seat number, e.g. 12A")
    cabin_class: Optional[str] = Field(
        None,
        alias="class",
        description="economy, business or first (default economy)",
    )

    model_config = ConfigDict(populate_by_name=True)


class SeatResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True, populate_by_name=True)

    id: int
    aircraft_id: int
    seat_number: str
    cabin_class: CabinClass = Field(
        ...,
        validation_alias=AliasChoices("class", "cabin_class"),
        serialization_alias="class",
    )
    created_at: datetime
    updated_at: datetime


class SeatCreateResponse(BaseModel):
    seat: SeatResponse
    flight_seats_created: int = Field(..., description="Occupancy rows propagated to existing flights")


class FlightSeatReconcileResponse(BaseModel):
    flights_processed: int
    flight_seats_created: int
