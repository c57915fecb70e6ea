"""HTTP controller layer for managers acting on the hotels granted to them.

Every route first requires the ``manager`` role and then a grant on the
hotel the target resource belongs to; admins use the regular routes.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, status
from fastapi.concurrency import run_in_threadpool

from hotel_backend.controllers.dependencies import (
    get_booking_service,
    get_current_user,
    get_hotel_service,
)
from hotel_backend.controllers.errors import to_http_exception
from hotel_backend.controllers.schemas import (
    BookingResponse,
    BookingUpdateRequest,
    Envelope,
    HotelResponse,
    HotelUpdateRequest,
    ListEnvelope,
    RoomTypeCreateRequest,
    RoomTypeResponse,
    RoomTypeUpdateRequest,
    changes_of,
)
from hotel_backend.domain.authorization import ensure_manages, ensure_role
from hotel_backend.domain.errors import BookingApiError
from hotel_backend.domain.models import Role, User
from hotel_backend.services.booking_service import BookingService
from hotel_backend.services.hotel_service import HotelService


router = APIRouter(prefix="/api/v1/manager", tags=["manager"])


@router.get("/hotels", response_model=ListEnvelope[HotelResponse])
async def get_managed_hotels(
    user: User = Depends(get_current_user),
    service: HotelService = Depends(get_hotel_service),
) -> ListEnvelope[HotelResponse]:
    try:
        hotels = await run_in_threadpool(service.list_managed_hotels, user)
    except BookingApiError as exc:
        raise to_http_exception(exc) from exc
    return ListEnvelope[HotelResponse](
        count=len(hotels),
        data=[HotelResponse.from_domain(hotel) for hotel in hotels],
    )


@router.get("/hotels/{hotel_id}/bookings", response_model=ListEnvelope[BookingResponse])
async def get_managed_hotel_bookings(
    hotel_id: int,
    user: User = Depends(get_current_user),
    service: BookingService = Depends(get_booking_service),
) -> ListEnvelope[BookingResponse]:
    try:
        bookings = await run_in_threadpool(service.list_hotel_bookings_for_manager, user, hotel_id)
    except BookingApiError as exc:
        raise to_http_exception(exc) from exc
    return ListEnvelope[BookingResponse](
        count=len(bookings),
        data=[BookingResponse.from_domain(booking) for booking in bookings],
    )


@router.get("/hotels/{hotel_id}/roomtypes", response_model=ListEnvelope[RoomTypeResponse])
async def get_managed_room_types(
    hotel_id: int,
    user: User = Depends(get_current_user),
    service: HotelService = Depends(get_hotel_service),
) -> ListEnvelope[RoomTypeResponse]:
    try:
        room_types = await run_in_threadpool(service.list_managed_room_types, user, hotel_id)
    except BookingApiError as exc:
        raise to_http_exception(exc) from exc
    return ListEnvelope[RoomTypeResponse](
        count=len(room_types),
        data=[RoomTypeResponse.from_domain(room_type) for room_type in room_types],
    )


@router.post(
    "/hotels/{hotel_id}/roomtypes",
    response_model=Envelope[RoomTypeResponse],
    status_code=status.HTTP_201_CREATED,
)
async def create_managed_room_type(
    hotel_id: int,
    payload: RoomTypeCreateRequest,
    user: User = Depends(get_current_user),
    service: HotelService = Depends(get_hotel_service),
) -> Envelope[RoomTypeResponse]:
    """Create a room type in a managed hotel; any body ``hotelId`` is ignored."""
    try:
        ensure_manages(user, hotel_id)
        room_type = await run_in_threadpool(
            service.create_room_type,
            user,
            hotel_id,
            payload.model_dump(exclude={"hotel_id"}),
        )
    except BookingApiError as exc:
        raise to_http_exception(exc) from exc
    return Envelope[RoomTypeResponse](data=RoomTypeResponse.from_domain(room_type))


@router.put("/hotels/{hotel_id}", response_model=Envelope[HotelResponse])
async def update_managed_hotel(
    hotel_id: int,
    payload: HotelUpdateRequest,
    user: User = Depends(get_current_user),
    service: HotelService = Depends(get_hotel_service),
) -> Envelope[HotelResponse]:
    try:
        ensure_manages(user, hotel_id)
        hotel = await run_in_threadpool(service.update_hotel, user, hotel_id, changes_of(payload))
    except BookingApiError as exc:
        raise to_http_exception(exc) from exc
    return Envelope[HotelResponse](data=HotelResponse.from_domain(hotel))


@router.put("/roomtypes/{room_type_id}", response_model=Envelope[RoomTypeResponse])
async def update_managed_room_type(
    room_type_id: int,
    payload: RoomTypeUpdateRequest,
    user: User = Depends(get_current_user),
    service: HotelService = Depends(get_hotel_service),
) -> Envelope[RoomTypeResponse]:
    try:
        ensure_role(user, Role.MANAGER)
        current = await run_in_threadpool(service.get_room_type, room_type_id)
        ensure_manages(user, current.hotel_id, kind="room type")
        room_type = await run_in_threadpool(
            service.update_room_type,
            user,
            room_type_id,
            changes_of(payload),
        )
    except BookingApiError as exc:
        raise to_http_exception(exc) from exc
    return Envelope[RoomTypeResponse](data=RoomTypeResponse.from_domain(room_type))


@router.delete("/roomtypes/{room_type_id}", response_model=Envelope[dict])
async def delete_managed_room_type(
    room_type_id: int,
    user: User = Depends(get_current_user),
    service: HotelService = Depends(get_hotel_service),
) -> Envelope[dict]:
    try:
        ensure_role(user, Role.MANAGER)
        current = await run_in_threadpool(service.get_room_type, room_type_id)
        ensure_manages(user, current.hotel_id, kind="room type")
        await run_in_threadpool(service.delete_room_type, user, room_type_id)
    except BookingApiError as exc:
        raise to_http_exception(exc) from exc
    return Envelope[dict](data={})


@router.put("/bookings/{booking_id}", response_model=Envelope[BookingResponse])
async def update_managed_booking(
    booking_id: int,
    payload: BookingUpdateRequest,
    user: User = Depends(get_current_user),
    service: BookingService = Depends(get_booking_service),
) -> Envelope[BookingResponse]:
    try:
        ensure_role(user, Role.MANAGER)
        booking = await run_in_threadpool(service.find_booking, booking_id)
        ensure_manages(user, booking.hotel_id, kind="booking")
        updated = await run_in_threadpool(
            service.update_booking,
            user,
            booking_id,
            checkin_date=payload.checkin_date,
            checkout_date=payload.checkout_date,
        )
    except BookingApiError as exc:
        raise to_http_exception(exc) from exc
    return Envelope[BookingResponse](data=BookingResponse.from_domain(updated))


@router.delete("/bookings/{booking_id}", response_model=Envelope[dict])
async def delete_managed_booking(
    booking_id: int,
    user: User = Depends(get_current_user),
    service: BookingService = Depends(get_booking_service),
) -> Envelope[dict]:
    try:
        ensure_role(user, Role.MANAGER)
        booking = await run_in_threadpool(service.find_booking, booking_id)
        ensure_manages(user, booking.hotel_id, kind="booking")
        await run_in_threadpool(service.delete_booking, user, booking_id)
    except BookingApiError as exc:
        raise to_http_exception(exc) from exc
    return Envelope[dict](data={})
