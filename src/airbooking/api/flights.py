"""
Flights API endpoints

Search is declared before /flights/{flight_id} so the literal path wins.
"""
from typing import List, Optional
from fastapi import APIRouter, Depends, HTTPException, Query

from airbooking.api.deps import (
    get_cabin_aggregator,
    get_flight_service,
    get_inventory_seeder,
    get_search_service,
)
from airbooking.middleware.rate_limiter import search_limit
from airbooking.schemas import (
    BackfillResponse,
    CabinInventoryResponse,
    FlightCreate,
    FlightResponse,
    FlightSearchQuery,
    FlightSearchResponse,
)
from airbooking.services import (
    CabinInventoryAggregator,
    FlightSearchService,
    FlightService,
    InventorySeeder,
    ServiceError,
)

router = APIRouter()


@router.post("/flights", response_model=FlightResponse, status_code=201)
async def create_flight(
    flight_data: FlightCreate,
    service: FlightService = Depends(get_flight_service),
):
    """
    Create a flight and seed its seat map

    Every seat of the aircraft gets an unoccupied row for this flight in
    the same transaction; if seeding fails no flight is created.
    """
    try:
        flight, _ = await service.create_flight(flight_data)
        return FlightResponse.model_validate(flight)
    except ServiceError as e:
        raise HTTPException(status_code=e.status_code, detail=str(e))


@router.get("/flights", response_model=List[FlightResponse])
async def list_flights(
    departure_airport_id: Optional[int] = Query(None, description="Filter by departure airport"),
    service: FlightService = Depends(get_flight_service),
):
    flights = await service.list_flights(departure_airport_id)
    return [FlightResponse.model_validate(flight) for flight in flights]


@router.get("/flights/search", response_model=FlightSearchResponse, response_model_exclude_none=True)
async def search_flights(
    type: str = Query("one-way", description="one-way or round-trip"),
    from_airport_id: Optional[int] = Query(None),
    to_airport_id: Optional[int] = Query(None),
    departure_date: Optional[str] = Query(None, description="YYYY-MM-DD"),
    return_date: Optional[str] = Query(None, description="YYYY-MM-DD, required for round-trip"),
    cabin_class: Optional[str] = Query(None, description="economy (default), business or first"),
    _limited: None = Depends(search_limit),
    service: FlightSearchService = Depends(get_search_service),
):
    """
    Scheduled flights on a route and date with seats left in the cabin,
    earliest departure first
    """
    query = FlightSearchQuery(
        type=type,
        from_airport_id=from_airport_id,
        to_airport_id=to_airport_id,
        departure_date=departure_date,
        return_date=return_date,
        cabin_class=cabin_class,
    )
    try:
        return await service.search(query)
    except ServiceError as e:
        raise HTTPException(status_code=e.status_code, detail=str(e))


@router.post("/flights/backfill-cabin-inventory", response_model=BackfillResponse)
async def backfill_cabin_inventory(seeder: InventorySeeder = Depends(get_inventory_seeder)):
    """Repair the occupancy rows cabin inventory is computed from"""
    processed = await seeder.backfill()
    return BackfillResponse(flights_processed=processed)


@router.get("/flights/{flight_id}", response_model=FlightResponse)
async def get_flight(
    flight_id: int,
    service: FlightService = Depends(get_flight_service),
):
    try:
        flight = await service.get_flight(flight_id)
        return FlightResponse.model_validate(flight)
    except ServiceError as e:
        raise HTTPException(status_code=e.status_code, detail=str(e))


@router.get("/flights/{flight_id}/cabins", response_model=CabinInventoryResponse)
async def get_cabin_inventory(
    flight_id: int,
    aggregator: CabinInventoryAggregator = Depends(get_cabin_aggregator),
):
    """Per-class total and available seats, computed live"""
    try:
        cabins = await aggregator.for_flight(flight_id)
    except ServiceError as e:
        raise HTTPException(status_code=e.status_code, detail=str(e))
    return CabinInventoryResponse(flight_id=flight_id, cabins=cabins)
