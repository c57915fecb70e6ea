"""HTTP controller layer for booking admission and lifecycle."""

from __future__ import annotations

from fastapi import APIRouter, Depends, status
from fastapi.concurrency import run_in_threadpool

from hotel_backend.controllers.dependencies import get_booking_service, get_current_user
from hotel_backend.controllers.errors import internal_error, to_http_exception
from hotel_backend.controllers.schemas import (
    BookingCreateRequest,
    BookingResponse,
    BookingUpdateRequest,
    Envelope,
    ListEnvelope,
)
from hotel_backend.domain.errors import BookingApiError
from hotel_backend.domain.models import User
from hotel_backend.services.booking_service import BookingService
from hotel_backend.utils.logger import get_logger


logger = get_logger(__name__)

router = APIRouter(prefix="/api/v1", tags=["bookings"])


def _listing(bookings) -> ListEnvelope[BookingResponse]:
    return ListEnvelope[BookingResponse](
        count=len(bookings),
        data=[BookingResponse.from_domain(booking) for booking in bookings],
    )


@router.get("/bookings", response_model=ListEnvelope[BookingResponse])
async def get_bookings(
    user: User = Depends(get_current_user),
    service: BookingService = Depends(get_booking_service),
) -> ListEnvelope[BookingResponse]:
    try:
        return _listing(await run_in_threadpool(service.list_bookings, user))
    except BookingApiError as exc:
        raise to_http_exception(exc) from exc


@router.get("/hotels/{hotel_id}/bookings", response_model=ListEnvelope[BookingResponse])
async def get_hotel_bookings(
    hotel_id: int,
    user: User = Depends(get_current_user),
    service: BookingService = Depends(get_booking_service),
) -> ListEnvelope[BookingResponse]:
    try:
        return _listing(await run_in_threadpool(service.list_bookings, user, hotel_id=hotel_id))
    except BookingApiError as exc:
        raise to_http_exception(exc) from exc


@router.get("/bookings/{booking_id}", response_model=Envelope[BookingResponse])
async def get_booking(
    booking_id: int,
    user: User = Depends(get_current_user),
    service: BookingService = Depends(get_booking_service),
) -> Envelope[BookingResponse]:
    try:
        booking = await run_in_threadpool(service.get_booking, user, booking_id)
    except BookingApiError as exc:
        raise to_http_exception(exc) from exc
    return Envelope[BookingResponse](data=BookingResponse.from_domain(booking))


@router.post(
    "/hotels/{hotel_id}/bookings",
    response_model=Envelope[BookingResponse],
    status_code=status.HTTP_200_OK,
)
async def add_booking(
    hotel_id: int,
    payload: BookingCreateRequest,
    user: User = Depends(get_current_user),
    service: BookingService = Depends(get_booking_service),
) -> Envelope[BookingResponse]:
    """Admit a booking for ``payload.user`` at the given hotel."""
    try:
        booking = await run_in_threadpool(
            service.admit_booking,
            acting_user=user,
            target_user_id=payload.user,
            hotel_id=hotel_id,
            room_type_id=payload.room_type,
            checkin_date=payload.checkin_date,
            checkout_date=payload.checkout_date,
        )
    except BookingApiError as exc:
        raise to_http_exception(exc) from exc
    except Exception as exc:  # pragma: no cover - defensive fallback
        logger.exception("Unexpected booking admission failure")
        raise internal_error("create booking") from exc
    return Envelope[BookingResponse](data=BookingResponse.from_domain(booking))


@router.put("/bookings/{booking_id}", response_model=Envelope[BookingResponse])
async def update_booking(
    booking_id: int,
    payload: BookingUpdateRequest,
    user: User = Depends(get_current_user),
    service: BookingService = Depends(get_booking_service),
) -> Envelope[BookingResponse]:
    try:
        booking = await run_in_threadpool(
            service.update_booking,
            user,
            booking_id,
            checkin_date=payload.checkin_date,
            checkout_date=payload.checkout_date,
        )
    except BookingApiError as exc:
        raise to_http_exception(exc) from exc
    return Envelope[BookingResponse](data=BookingResponse.from_domain(booking))


@router.delete("/bookings/{booking_id}", response_model=Envelope[dict])
async def delete_booking(
    booking_id: int,
    user: User = Depends(get_current_user),
    service: BookingService = Depends(get_booking_service),
) -> Envelope[dict]:
    try:
        await run_in_threadpool(service.delete_booking, user, booking_id)
    except BookingApiError as exc:
        raise to_http_exception(exc) from exc
    return Envelope[dict](data={})
