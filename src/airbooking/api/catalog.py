"""Airport and aircraft reference data endpoints"""
from typing import List
from fastapi import APIRouter, Depends, HTTPException

from airbooking.api.deps import get_catalog_service
from airbooking.schemas import AircraftCreate, AircraftResponse, AirportCreate, AirportResponse
from airbooking.services import CatalogService, ConflictError

router = APIRouter()


@router.post("/airports", response_model=AirportResponse, status_code=201)
async def create_airport(
    airport_data: AirportCreate,
    service: CatalogService = Depends(get_catalog_service),
):
    """Create an airport; the code must be unique"""
    try:
        airport = await service.create_airport(airport_data)
        return AirportResponse.model_validate(airport)
    except ConflictError as e:
        raise HTTPException(status_code=409, detail=str(e))


@router.get("/airports", response_model=List[AirportResponse])
async def list_airports(service: CatalogService = Depends(get_catalog_service)):
    airports = await service.list_airports()
    return [AirportResponse.model_validate(airport) for airport in airports]


@router.post("/aircraft", response_model=AircraftResponse, status_code=201)
async def create_aircraft(
    aircraft_data: AircraftCreate,
    service: CatalogService = Depends(get_catalog_service),
):
    aircraft = await service.create_aircraft(aircraft_data)
    return AircraftResponse.model_validate(aircraft)


@router.get("/aircraft", response_model=List[AircraftResponse])
async def list_aircraft(service: CatalogService = Depends(get_catalog_service)):
    aircraft = await service.list_aircraft()
    return [AircraftResponse.model_validate(item) for item in aircraft]
