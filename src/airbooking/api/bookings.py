"""Bookings API endpoints"""
from typing import Optional
from fastapi import APIRouter, Depends, Header, HTTPException

from airbooking.api.deps import get_booking_service, get_idempotency_service
from airbooking.core.security import CallerIdentity, get_current_identity
from airbooking.middleware.rate_limiter import booking_limit
from airbooking.schemas import BookingCreate, BookingCreateResponse, BookingResponse
from airbooking.services import BookingService, IdempotencyService, ServiceError

router = APIRouter()


@router.post("/bookings", response_model=BookingCreateResponse, status_code=201)
async def create_booking(
    booking_data: BookingCreate,
    identity: CallerIdentity = Depends(get_current_identity),
    _limited: None = Depends(booking_limit),
    idempotency_key: Optional[str] = Header(None, alias="X-Idempotency-Key"),
    service: BookingService = Depends(get_booking_service),
    idempotency: IdempotencyService = Depends(get_idempotency_service),
):
    """
    Create a pending booking with its passenger manifest

    Headers:
    - Authorization: Bearer token from the identity provider
    - X-Idempotency-Key: Optional key for safe retries

    The segment is priced at the flight's current base price; total_amount
    is stored as sent. Seat availability is not checked or decremented.
    """
    key = None
    if idempotency_key and idempotency_key.strip():
        key = idempotency.make_key(identity.user_id, "create_booking", idempotency_key)

        existing_result = await idempotency.check_operation(key)
        if existing_result:
            return BookingCreateResponse(**existing_result)

        if not await idempotency.lock_operation(key):
            raise HTTPException(
                status_code=409,
                detail="Booking operation already in progress. Please wait."
            )

    try:
        response = await service.create_booking(identity, booking_data)
        if key:
            await idempotency.store_result(key, response.model_dump(mode="json"))
        return response
    except ServiceError as e:
        raise HTTPException(status_code=e.status_code, detail=str(e))
    finally:
        if key:
            await idempotency.release_lock(key)


@router.get("/bookings/{booking_reference}", response_model=BookingResponse)
async def get_booking(
    booking_reference: str,
    identity: CallerIdentity = Depends(get_current_identity),
    service: BookingService = Depends(get_booking_service),
):
    """Booking header, segment and passengers; visible to its owner only"""
    try:
        booking = await service.get_booking_by_reference(identity, booking_reference)
        return BookingResponse.model_validate(booking)
    except ServiceError as e:
        raise HTTPException(status_code=e.status_code, detail=str(e))
