"""HTTP controller layer for room and hotel availability search."""

from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends, Query, status
from fastapi.concurrency import run_in_threadpool

from hotel_backend.controllers.dependencies import get_availability_service
from hotel_backend.controllers.errors import internal_error, to_http_exception
from hotel_backend.controllers.schemas import (
    AvailabilityResultResponse,
    Envelope,
    HotelAvailabilityData,
    HotelAvailabilityResponse,
    RoomTypeAvailabilityData,
)
from hotel_backend.domain.errors import BookingApiError
from hotel_backend.services.availability_service import AvailabilityService
from hotel_backend.utils.logger import get_logger


logger = get_logger(__name__)

router = APIRouter(prefix="/api/v1/availability", tags=["availability"])


@router.get(
    "/room-types",
    response_model=Envelope[RoomTypeAvailabilityData],
    status_code=status.HTTP_200_OK,
)
async def get_available_room_types(
    hotel_id: Optional[str] = Query(default=None, alias="hotelId"),
    check_in_date: Optional[str] = Query(default=None, alias="checkInDate"),
    check_out_date: Optional[str] = Query(default=None, alias="checkOutDate"),
    service: AvailabilityService = Depends(get_availability_service),
) -> Envelope[RoomTypeAvailabilityData]:
    """List the activated room types of a hotel with their availability."""
    try:
        parsed_hotel_id, stay, results = await run_in_threadpool(
            service.available_room_types,
            hotel_id=hotel_id,
            check_in_date=check_in_date,
            check_out_date=check_out_date,
        )
    except BookingApiError as exc:
        raise to_http_exception(exc) from exc
    except Exception as exc:  # pragma: no cover - defensive fallback
        logger.exception("Unexpected room-type availability failure")
        raise internal_error("check room-type availability") from exc

    return Envelope[RoomTypeAvailabilityData](
        data=RoomTypeAvailabilityData(
            hotel_id=parsed_hotel_id,
            check_in_date=stay.checkin,
            check_out_date=stay.checkout,
            available_room_types=[AvailabilityResultResponse.from_domain(result) for result in results],
        )
    )


@router.get(
    "/hotels",
    response_model=Envelope[HotelAvailabilityData],
    status_code=status.HTTP_200_OK,
)
async def get_available_hotels(
    check_in_date: Optional[str] = Query(default=None, alias="checkInDate"),
    check_out_date: Optional[str] = Query(default=None, alias="checkOutDate"),
    service: AvailabilityService = Depends(get_availability_service),
) -> Envelope[HotelAvailabilityData]:
    """List hotels that still have at least one bookable room for the stay."""
    try:
        stay, hotels = await run_in_threadpool(
            service.available_hotels,
            check_in_date=check_in_date,
            check_out_date=check_out_date,
        )
    except BookingApiError as exc:
        raise to_http_exception(exc) from exc
    except Exception as exc:  # pragma: no cover - defensive fallback
        logger.exception("Unexpected hotel availability failure")
        raise internal_error("check hotel availability") from exc

    return Envelope[HotelAvailabilityData](
        data=HotelAvailabilityData(
            check_in_date=stay.checkin,
            check_out_date=stay.checkout,
            available_hotels=[HotelAvailabilityResponse.from_domain(hotel) for hotel in hotels],
        )
    )
