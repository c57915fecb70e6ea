"""HTTP controller layer for the hotel and room-type catalogue."""

from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends, Query, Request, status
from fastapi.concurrency import run_in_threadpool

from hotel_backend.controllers.dependencies import get_current_user, get_hotel_service
from hotel_backend.controllers.errors import internal_error, to_http_exception
from hotel_backend.controllers.schemas import (
    Envelope,
    HotelCreateRequest,
    HotelResponse,
    HotelUpdateRequest,
    ListEnvelope,
    PagedEnvelope,
    RoomTypeCreateRequest,
    RoomTypeResponse,
    RoomTypeUpdateRequest,
    changes_of,
)
from hotel_backend.domain.errors import BookingApiError, InvalidInputError
from hotel_backend.domain.models import User
from hotel_backend.services.hotel_service import HotelService
from hotel_backend.utils.logger import get_logger


logger = get_logger(__name__)

router = APIRouter(prefix="/api/v1", tags=["hotels"])

_PAGING_PARAMS = {"sort", "page", "limit"}


@router.get("/hotels", response_model=PagedEnvelope[HotelResponse])
async def get_hotels(
    request: Request,
    service: HotelService = Depends(get_hotel_service),
) -> PagedEnvelope[HotelResponse]:
    """List hotels; remaining query parameters are allow-listed filters."""
    params = request.query_params
    filters = {key: value for key, value in params.items() if key not in _PAGING_PARAMS}
    try:
        page = await run_in_threadpool(
            service.list_hotels,
            filters=filters,
            sort=params.get("sort"),
            page=params.get("page"),
            limit=params.get("limit"),
        )
    except BookingApiError as exc:
        raise to_http_exception(exc) from exc
    except Exception as exc:  # pragma: no cover - defensive fallback
        logger.exception("Unexpected hotel listing failure")
        raise internal_error("list hotels") from exc
    return PagedEnvelope[HotelResponse](
        count=len(page.items),
        pagination=page.pagination,
        data=[HotelResponse.from_domain(hotel) for hotel in page.items],
    )


@router.get("/hotels/{hotel_id}", response_model=Envelope[HotelResponse])
async def get_hotel(
    hotel_id: int,
    service: HotelService = Depends(get_hotel_service),
) -> Envelope[HotelResponse]:
    try:
        hotel = await run_in_threadpool(service.get_hotel, hotel_id)
    except BookingApiError as exc:
        raise to_http_exception(exc) from exc
    return Envelope[HotelResponse](data=HotelResponse.from_domain(hotel))


@router.post("/hotels", response_model=Envelope[HotelResponse], status_code=status.HTTP_201_CREATED)
async def create_hotel(
    payload: HotelCreateRequest,
    user: User = Depends(get_current_user),
    service: HotelService = Depends(get_hotel_service),
) -> Envelope[HotelResponse]:
    try:
        hotel = await run_in_threadpool(service.create_hotel, user, payload.model_dump())
    except BookingApiError as exc:
        raise to_http_exception(exc) from exc
    return Envelope[HotelResponse](data=HotelResponse.from_domain(hotel))


@router.put("/hotels/{hotel_id}", response_model=Envelope[HotelResponse])
async def update_hotel(
    hotel_id: int,
    payload: HotelUpdateRequest,
    user: User = Depends(get_current_user),
    service: HotelService = Depends(get_hotel_service),
) -> Envelope[HotelResponse]:
    try:
        hotel = await run_in_threadpool(service.update_hotel, user, hotel_id, changes_of(payload))
    except BookingApiError as exc:
        raise to_http_exception(exc) from exc
    return Envelope[HotelResponse](data=HotelResponse.from_domain(hotel))


@router.delete("/hotels/{hotel_id}", response_model=Envelope[dict])
async def delete_hotel(
    hotel_id: int,
    user: User = Depends(get_current_user),
    service: HotelService = Depends(get_hotel_service),
) -> Envelope[dict]:
    try:
        await run_in_threadpool(service.delete_hotel, user, hotel_id)
    except BookingApiError as exc:
        raise to_http_exception(exc) from exc
    return Envelope[dict](data={})


# --- Room types ---


@router.get("/roomtypes", response_model=ListEnvelope[RoomTypeResponse], tags=["roomtypes"])
async def get_room_types(
    hotel_id: Optional[int] = Query(default=None, alias="hotelId", gt=0),
    service: HotelService = Depends(get_hotel_service),
) -> ListEnvelope[RoomTypeResponse]:
    try:
        room_types = await run_in_threadpool(service.list_room_types, hotel_id=hotel_id)
    except BookingApiError as exc:
        raise to_http_exception(exc) from exc
    return ListEnvelope[RoomTypeResponse](
        count=len(room_types),
        data=[RoomTypeResponse.from_domain(room_type) for room_type in room_types],
    )


@router.get("/roomtypes/{room_type_id}", response_model=Envelope[RoomTypeResponse], tags=["roomtypes"])
async def get_room_type(
    room_type_id: int,
    service: HotelService = Depends(get_hotel_service),
) -> Envelope[RoomTypeResponse]:
    try:
        room_type = await run_in_threadpool(service.get_room_type, room_type_id)
    except BookingApiError as exc:
        raise to_http_exception(exc) from exc
    return Envelope[RoomTypeResponse](data=RoomTypeResponse.from_domain(room_type))


@router.post(
    "/roomtypes",
    response_model=Envelope[RoomTypeResponse],
    status_code=status.HTTP_201_CREATED,
    tags=["roomtypes"],
)
async def create_room_type(
    payload: RoomTypeCreateRequest,
    user: User = Depends(get_current_user),
    service: HotelService = Depends(get_hotel_service),
) -> Envelope[RoomTypeResponse]:
    try:
        if payload.hotel_id is None:
            raise InvalidInputError("hotelId is required")
        room_type = await run_in_threadpool(
            service.create_room_type,
            user,
            payload.hotel_id,
            payload.model_dump(exclude={"hotel_id"}),
        )
    except BookingApiError as exc:
        raise to_http_exception(exc) from exc
    return Envelope[RoomTypeResponse](data=RoomTypeResponse.from_domain(room_type))


@router.put("/roomtypes/{room_type_id}", response_model=Envelope[RoomTypeResponse], tags=["roomtypes"])
async def update_room_type(
    room_type_id: int,
    payload: RoomTypeUpdateRequest,
    user: User = Depends(get_current_user),
    service: HotelService = Depends(get_hotel_service),
) -> Envelope[RoomTypeResponse]:
    try:
        room_type = await run_in_threadpool(
            service.update_room_type,
            user,
            room_type_id,
            changes_of(payload),
        )
    except BookingApiError as exc:
        raise to_http_exception(exc) from exc
    return Envelope[RoomTypeResponse](data=RoomTypeResponse.from_domain(room_type))


@router.delete("/roomtypes/{room_type_id}", response_model=Envelope[dict], tags=["roomtypes"])
async def delete_room_type(
    room_type_id: int,
    user: User = Depends(get_current_user),
    service: HotelService = Depends(get_hotel_service),
) -> Envelope[dict]:
    try:
        await run_in_threadpool(service.delete_room_type, user, room_type_id)
    except BookingApiError as exc:
        raise to_http_exception(exc) from exc
    return Envelope[dict](data={})
