"""
Pydantic schemas for flights, cabin inventory and search
"""
from datetime import datetime, timezone
from decimal import Decimal
from typing import List, Optional
from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator

from airbooking.models.flight import FlightStatus
from airbooking.models.seat import CabinClass


def _to_naive_utc(value: datetime) -> datetime:
    if value.tzinfo is not None:
        return value.astimezone(timezone.utc).replace(tzinfo=None)
    return value


class FlightCreate(BaseModel):
    flight_number: str = Field(..., min_length=1, max_length=20)
    departure_airport_id: int
    arrival_airport_id: int
    departure_time: datetime
    arrival_time: datetime
    aircraft_id: int
    base_price: Decimal = Field(..., ge=0, max_digits=10, decimal_places=2)
    status: Optional[str] = Field(None, description="scheduled (default), delayed or cancelled")

    @field_validator('departure_time', 'arrival_time')
    @classmethod
    def normalize_times(cls, v: datetime) -> datetime:
        return _to_naive_utc(v)


class FlightResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    flight_number: str
    departure_airport_id: int
    arrival_airport_id: int
    departure_time: datetime
    arrival_time: datetime
    aircraft_id: int
    base_price: Decimal
    status: FlightStatus
    created_at: datetime
    updated_at: datetime


class CabinInventory(BaseModel):
    """Per-flight, per-class capacity snapshot computed from occupancy rows"""
    flight_id: int
    cabin_class: CabinClass
    total_seats: int
    available_seats: int


class CabinInventoryResponse(BaseModel):
    flight_id: int
    cabins: List[CabinInventory]


class BackfillResponse(BaseModel):
    flights_processed: int


class SearchFlightRow(BaseModel):
    id: int
    flight_number: str
    departure_airport_code: str
    arrival_airport_code: str
    departure_time: datetime
    arrival_time: datetime
    base_price: Decimal
    available_seats: int
    cabin_class: CabinClass


class FlightSearchQuery(BaseModel):
    """Search input; semantic checks happen in FlightSearchService"""
    type: str = "one-way"
    from_airport_id: Optional[int] = None
    to_airport_id: Optional[int] = None
    departure_date: Optional[str] = None  # YYYY-MM-DD
    return_date: Optional[str] = None
    cabin_class: Optional[str] = None


class FlightSearchResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    outbound: List[SearchFlightRow] = Field(default_factory=list)
    return_flights: Optional[List[SearchFlightRow]] = Field(
        None,
        validation_alias=AliasChoices("return", "return_flights"),
        serialization_alias="return",
    )
