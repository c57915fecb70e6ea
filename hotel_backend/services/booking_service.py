"""Booking admission, listing, and lifecycle rules."""

from __future__ import annotations

from datetime import date
from typing import Optional

from hotel_backend.domain.authorization import (
    Action,
    Resource,
    ResourceKind,
    ensure_can_act,
    ensure_manages,
)
from hotel_backend.domain.constraints import validate_stay
from hotel_backend.domain.errors import ConflictError, NotFoundError, QuotaExceededError
from hotel_backend.domain.models import (
    AvailabilityResult,
    Booking,
    RoomType,
    StayInterval,
    User,
)
from hotel_backend.repository.data_repository import DataRepository, RescheduleGuard
from hotel_backend.services.availability_service import summarize_availability
from hotel_backend.utils.config import Settings, get_settings
from hotel_backend.utils.logger import get_logger


logger = get_logger(__name__)


def _booking_resource(booking: Booking) -> Resource:
    return Resource(kind=ResourceKind.BOOKING, owner_id=booking.user_id, hotel_id=booking.hotel_id)


def _reject_unavailable(room_type: RoomType, stay: StayInterval, result: AvailabilityResult) -> None:
    if not result.is_activated:
        raise ConflictError(f"Room type {room_type.name} is under maintenance")
    if result.available_rooms <= 0:
        raise ConflictError(
            f"No {room_type.name} rooms are available between "
            f"{stay.checkin.isoformat()} and {stay.checkout.isoformat()}"
        )


class BookingService:
    """Admits bookings against ownership, quota, and room inventory."""

    def __init__(
        self,
        repository: Optional[DataRepository] = None,
        settings: Optional[Settings] = None,
    ) -> None:
        self._settings = settings or get_settings()
        self._repository = repository or DataRepository(self._settings)

    def find_booking(self, booking_id: int) -> Booking:
        booking = self._repository.get_booking(booking_id)
        if booking is None:
            raise NotFoundError(f"No booking with the id of {booking_id}")
        return booking

    def _get_room_type_in_hotel(self, room_type_id: int, hotel_id: int) -> RoomType:
        room_type = self._repository.get_room_type(room_type_id)
        if room_type is None or room_type.hotel_id != hotel_id:
            raise NotFoundError(f"No room type with the id of {room_type_id} in hotel {hotel_id}")
        return room_type

    def admit_booking(
        self,
        *,
        acting_user: User,
        target_user_id: int,
        hotel_id: int,
        room_type_id: int,
        checkin_date: date,
        checkout_date: date,
    ) -> Booking:
        """Create a booking once ownership, quota, and inventory allow it.

        The quota count and the inventory check run inside the same store
        transaction as the insert.
        """
        if self._repository.get_hotel(hotel_id) is None:
            raise NotFoundError(f"No hotel with the id of {hotel_id}")

        ensure_can_act(
            acting_user,
            Resource(kind=ResourceKind.BOOKING, owner_id=target_user_id, hotel_id=hotel_id),
            Action.CREATE,
            message="You are not authorized to make this booking",
        )
        stay = validate_stay(checkin_date, checkout_date)
        room_type = self._get_room_type_in_hotel(room_type_id, hotel_id)
        if target_user_id != acting_user.user_id and self._repository.get_user(target_user_id) is None:
            raise NotFoundError(f"No user with the id of {target_user_id}")

        quota = self._settings.booking_quota_per_user
        enforce_quota = not acting_user.is_admin
        enforce_availability = self._settings.booking_enforce_availability

        def guard(existing_bookings: int, overlapping: list[StayInterval]) -> None:
            if enforce_quota and existing_bookings >= quota:
                raise QuotaExceededError(
                    f"The user with ID {target_user_id} has already made {quota} Bookings"
                )
            if enforce_availability:
                _reject_unavailable(room_type, stay, summarize_availability(room_type, stay, overlapping))

        booking = self._repository.create_booking(
            user_id=target_user_id,
            hotel_id=hotel_id,
            room_type_id=room_type_id,
            stay=stay,
            guard=guard,
        )
        logger.info(
            "Booking admitted | booking_id=%s | user_id=%s | hotel_id=%s | room_type_id=%s | stay=%s..%s",
            booking.booking_id,
            booking.user_id,
            booking.hotel_id,
            booking.room_type_id,
            stay.checkin,
            stay.checkout,
        )
        return booking

    def list_bookings(self, acting_user: User, hotel_id: Optional[int] = None) -> list[Booking]:
        """Admins see every booking; everyone else sees their own."""
        if acting_user.is_admin:
            return self._repository.list_bookings(hotel_id=hotel_id)
        return self._repository.list_bookings(user_id=acting_user.user_id, hotel_id=hotel_id)

    def list_hotel_bookings_for_manager(self, acting_user: User, hotel_id: int) -> list[Booking]:
        ensure_manages(acting_user, hotel_id)
        return self._repository.list_bookings(hotel_id=hotel_id)

    def get_booking(self, acting_user: User, booking_id: int) -> Booking:
        booking = self.find_booking(booking_id)
        ensure_can_act(acting_user, _booking_resource(booking), Action.READ)
        return booking

    def update_booking(
        self,
        acting_user: User,
        booking_id: int,
        *,
        checkin_date: Optional[date] = None,
        checkout_date: Optional[date] = None,
    ) -> Booking:
        """Change booking dates; quota is not re-checked, inventory is.

        The inventory check reads the other stays under the same write lock
        as the update.
        """
        booking = self.find_booking(booking_id)
        ensure_can_act(
            acting_user,
            _booking_resource(booking),
            Action.UPDATE,
            message="You are not authorized to update this booking",
        )
        stay = validate_stay(
            checkin_date or booking.checkin_date,
            checkout_date or booking.checkout_date,
        )
        guard: Optional[RescheduleGuard] = None
        if self._settings.booking_enforce_availability:
            room_type = self._repository.get_room_type(booking.room_type_id)
            if room_type is None:
                raise NotFoundError(f"No room type with the id of {booking.room_type_id}")

            def reject_if_full(overlapping: list[StayInterval]) -> None:
                _reject_unavailable(room_type, stay, summarize_availability(room_type, stay, overlapping))

            guard = reject_if_full

        updated = self._repository.update_booking_dates(booking_id, stay, guard=guard)
        if updated is None:
            raise NotFoundError(f"No booking with the id of {booking_id}")
        logger.info(
            "Booking updated | booking_id=%s | acting_user_id=%s | stay=%s..%s",
            booking_id,
            acting_user.user_id,
            stay.checkin,
            stay.checkout,
        )
        return updated

    def delete_booking(self, acting_user: User, booking_id: int) -> None:
        booking = self.find_booking(booking_id)
        ensure_can_act(
            acting_user,
            _booking_resource(booking),
            Action.DELETE,
            message="You are not authorized to delete this booking",
        )
        self._repository.delete_booking(booking_id)
        logger.info(
            "Booking deleted | booking_id=%s | acting_user_id=%s",
            booking_id,
            acting_user.user_id,
        )
