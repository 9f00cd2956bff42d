"""Seat catalog endpoints"""
from typing import List
from fastapi import APIRouter, Depends, HTTPException, Query

from airbooking.api.deps import get_inventory_seeder, get_seat_service
from airbooking.schemas import FlightSeatReconcileResponse, SeatCreate, SeatCreateResponse, SeatResponse
from airbooking.services import InventorySeeder, SeatService, ServiceError

router = APIRouter()


@router.post("/seats", response_model=SeatCreateResponse, status_code=201)
async def create_seat(
    seat_data: SeatCreate,
    service: SeatService = Depends(get_seat_service),
):
    """
    Add a seat to an aircraft

    The seat gets an unoccupied row on every flight already scheduled
    on that aircraft.
    """
    try:
        seat, propagated = await service.create_seat(seat_data)
    except ServiceError as e:
        raise HTTPException(status_code=e.status_code, detail=str(e))

    return SeatCreateResponse(
        seat=SeatResponse.model_validate(seat),
        flight_seats_created=propagated,
    )


@router.get("/seats", response_model=List[SeatResponse])
async def list_seats(
    aircraft_id: int = Query(..., ge=1, description="Aircraft ID"),
    service: SeatService = Depends(get_seat_service),
):
    seats = await service.list_seats(aircraft_id)
    return [SeatResponse.model_validate(seat) for seat in seats]


@router.post("/flight-seats", response_model=FlightSeatReconcileResponse)
async def create_flight_seats(seeder: InventorySeeder = Depends(get_inventory_seeder)):
    """
    Bulk reconcile: fill in missing occupancy rows for every flight.

    Idempotent; a second run creates nothing.
    """
    result = await seeder.reconcile_all()
    return FlightSeatReconcileResponse(
        flights_processed=result.flights_processed,
        flight_seats_created=result.flight_seats_created,
    )
