"""Room-type and hotel availability over finite room inventory."""

from __future__ import annotations

from concurrent.futures import FIRST_EXCEPTION, ThreadPoolExecutor, wait
from typing import Callable, Optional, Sequence, TypeVar

from hotel_backend.domain.constraints import parse_identifier, parse_stay_window, require_params
from hotel_backend.domain.errors import NotFoundError
from hotel_backend.domain.models import (
    AvailabilityResult,
    AvailabilityStatus,
    Hotel,
    HotelAvailability,
    RoomType,
    RoomTypeDetails,
    StayInterval,
)
from hotel_backend.domain.occupancy import peak_occupancy, resolve_occupancy
from hotel_backend.repository.data_repository import DataRepository
from hotel_backend.utils.config import Settings, get_settings
from hotel_backend.utils.logger import get_logger, log_duration


logger = get_logger(__name__)

_T = TypeVar("_T")
_R = TypeVar("_R")


def _details(room_type: RoomType) -> RoomTypeDetails:
    return RoomTypeDetails(
        name=room_type.name,
        capacity=room_type.capacity,
        bed_type=room_type.bed_type,
        base_price=room_type.base_price,
        currency=room_type.currency,
    )


def summarize_availability(
    room_type: RoomType,
    stay: StayInterval,
    overlapping_stays: Sequence[StayInterval],
) -> AvailabilityResult:
    """Fold a room type's overlapping stays into an availability verdict.

    A deactivated room type is reported as under maintenance without looking
    at its bookings. Otherwise the booked count is the peak nightly occupancy
    across the stay, never the sum of bookings.
    """
    if not room_type.is_available:
        return AvailabilityResult(
            room_type_id=room_type.room_type_id,
            total_rooms=room_type.total_rooms,
            booked_rooms=0,
            available_rooms=0,
            is_activated=False,
            status=AvailabilityStatus.UNDER_MAINTENANCE,
            room_type_details=_details(room_type),
        )

    daily_bookings = resolve_occupancy(overlapping_stays, stay.checkin, stay.checkout)
    booked_rooms = peak_occupancy(daily_bookings, stay.checkin, stay.checkout)
    remaining = room_type.total_rooms - booked_rooms
    if remaining < 0:
        logger.warning(
            "Room type overbooked | room_type_id=%s | total_rooms=%s | booked_rooms=%s",
            room_type.room_type_id,
            room_type.total_rooms,
            booked_rooms,
        )
    available_rooms = max(remaining, 0)
    return AvailabilityResult(
        room_type_id=room_type.room_type_id,
        total_rooms=room_type.total_rooms,
        booked_rooms=booked_rooms,
        available_rooms=available_rooms,
        is_activated=True,
        status=(
            AvailabilityStatus.FULLY_BOOKED
            if available_rooms <= 0
            else AvailabilityStatus.AVAILABLE
        ),
        room_type_details=_details(room_type),
        daily_bookings=daily_bookings,
    )


class AvailabilityService:
    """Evaluates room types concurrently and aggregates them per hotel."""

    def __init__(
        self,
        repository: Optional[DataRepository] = None,
        settings: Optional[Settings] = None,
    ) -> None:
        self._settings = settings or get_settings()
        self._repository = repository or DataRepository(self._settings)
        self._executor = ThreadPoolExecutor(
            max_workers=self._settings.availability_max_workers,
            thread_name_prefix="availability",
        )

    def close(self) -> None:
        self._executor.shutdown(wait=True, cancel_futures=True)

    def _fan_out(self, func: Callable[[_T], _R], items: Sequence[_T]) -> list[_R]:
        """Run ``func`` over ``items`` concurrently and join in input order.

        Fails fast: the first failing evaluation cancels work not yet started
        and its exception propagates to the caller.
        """
        if not items:
            return []
        futures = [self._executor.submit(func, item) for item in items]
        _, pending = wait(futures, return_when=FIRST_EXCEPTION)
        for future in pending:
            future.cancel()
        for future in futures:
            if future.done() and not future.cancelled() and future.exception() is not None:
                logger.warning(
                    "Availability evaluation failed; aborting query | error=%s",
                    future.exception(),
                )
                raise future.exception()
        return [future.result() for future in futures]

    def evaluate_room_type(
        self,
        room_type: RoomType,
        stay: StayInterval,
    ) -> AvailabilityResult:
        if not room_type.is_available:
            return summarize_availability(room_type, stay, ())
        overlapping = self._repository.list_stays_for_room_type(
            room_type.room_type_id,
            stay.checkin,
            stay.checkout,
        )
        return summarize_availability(room_type, stay, overlapping)

    def check_availability(self, room_type_id: int, stay: StayInterval) -> AvailabilityResult:
        room_type = self._repository.get_room_type(room_type_id)
        if room_type is None:
            raise NotFoundError(f"No room type with the id of {room_type_id}")
        return self.evaluate_room_type(room_type, stay)

    @staticmethod
    def _summarize_hotel(hotel: Hotel, results: Sequence[AvailabilityResult]) -> HotelAvailability:
        return HotelAvailability(
            hotel_id=hotel.hotel_id,
            has_available_rooms=any(result.is_available for result in results),
            room_type_results=list(results),
            hotel_name=hotel.name,
            hotel_address=hotel.address,
        )

    def check_hotel_availability(self, hotel_id: int, stay: StayInterval) -> HotelAvailability:
        hotel = self._repository.get_hotel(hotel_id)
        if hotel is None:
            raise NotFoundError(f"No hotel with the id of {hotel_id}")
        room_types = self._repository.list_room_types(hotel_id=hotel_id)
        with log_duration(logger, "hotel availability", hotel_id=hotel_id, room_types=len(room_types)):
            results = self._fan_out(lambda room_type: self.evaluate_room_type(room_type, stay), room_types)
        return self._summarize_hotel(hotel, results)

    def search_available_hotels(
        self,
        stay: StayInterval,
        hotels: Optional[Sequence[Hotel]] = None,
    ) -> list[HotelAvailability]:
        """Return hotels with at least one bookable room, in input order.

        Every room type of every hotel is evaluated in a single flat fan-out so
        that no pool task ever waits on another pool task.
        """
        candidates = list(hotels) if hotels is not None else self._repository.list_all_hotels()
        room_types_by_hotel: dict[int, list[RoomType]] = {hotel.hotel_id: [] for hotel in candidates}
        for room_type in self._repository.list_room_types():
            if room_type.hotel_id in room_types_by_hotel:
                room_types_by_hotel[room_type.hotel_id].append(room_type)

        flat = [room_type for hotel in candidates for room_type in room_types_by_hotel[hotel.hotel_id]]
        with log_duration(logger, "hotel search", hotels=len(candidates), room_types=len(flat)):
            flat_results = self._fan_out(lambda room_type: self.evaluate_room_type(room_type, stay), flat)
        result_by_room_type = {result.room_type_id: result for result in flat_results}

        summaries = []
        for hotel in candidates:
            room_types = room_types_by_hotel[hotel.hotel_id]
            summary = self._summarize_hotel(
                hotel,
                [result_by_room_type[room_type.room_type_id] for room_type in room_types],
            )
            if summary.has_available_rooms:
                summaries.append(summary)
        logger.info(
            "Hotel search completed | checkin=%s | checkout=%s | candidates=%s | available=%s",
            stay.checkin,
            stay.checkout,
            len(candidates),
            len(summaries),
        )
        return summaries

    def available_room_types(
        self,
        *,
        hotel_id: Optional[str],
        check_in_date: Optional[str],
        check_out_date: Optional[str],
    ) -> tuple[int, StayInterval, list[AvailabilityResult]]:
        """Validate raw query values and return activated room types of a hotel.

        A hotel without room types yields an empty list, not a not-found error.
        """
        require_params(hotelId=hotel_id, checkInDate=check_in_date, checkOutDate=check_out_date)
        stay = parse_stay_window(check_in_date, check_out_date)
        parsed_hotel_id = parse_identifier(hotel_id, "hotelId")
        availability = self.check_hotel_availability(parsed_hotel_id, stay)
        activated = [result for result in availability.room_type_results if result.is_activated]
        return parsed_hotel_id, stay, activated

    def available_hotels(
        self,
        *,
        check_in_date: Optional[str],
        check_out_date: Optional[str],
    ) -> tuple[StayInterval, list[HotelAvailability]]:
        """An empty catalogue or a fully booked one yields an empty list."""
        require_params(checkInDate=check_in_date, checkOutDate=check_out_date)
        stay = parse_stay_window(check_in_date, check_out_date)
        return stay, self.search_available_hotels(stay)
