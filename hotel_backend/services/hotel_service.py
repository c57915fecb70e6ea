"""Hotel and room-type catalogue management."""

from __future__ import annotations

from typing import Any, Mapping, Optional

from hotel_backend.domain.authorization import (
    Action,
    Resource,
    ResourceKind,
    ensure_can_act,
    ensure_manages,
    ensure_role,
)
from hotel_backend.domain.constraints import validate_postalcode, validate_room_inventory
from hotel_backend.domain.errors import InvalidInputError, NotFoundError
from hotel_backend.domain.models import Hotel, Page, Role, RoomType, User
from hotel_backend.domain.queries import HOTEL_LISTING, build_list_query
from hotel_backend.repository.data_repository import DataRepository
from hotel_backend.utils.config import Settings, get_settings
from hotel_backend.utils.logger import get_logger


logger = get_logger(__name__)

_REQUIRED_HOTEL_FIELDS = ("name", "address", "district", "province", "postalcode")


class HotelService:
    """CRUD over hotels and their room types, gated by ``can_act``."""

    def __init__(
        self,
        repository: Optional[DataRepository] = None,
        settings: Optional[Settings] = None,
    ) -> None:
        self._settings = settings or get_settings()
        self._repository = repository or DataRepository(self._settings)

    # --- Hotels ---

    def list_hotels(
        self,
        *,
        filters: Mapping[str, str],
        sort: Optional[str] = None,
        page: Optional[str] = None,
        limit: Optional[str] = None,
    ) -> Page:
        query = build_list_query(
            HOTEL_LISTING,
            filters=filters,
            sort=sort,
            page=page,
            limit=limit,
            default_limit=self._settings.pagination_default_limit,
            max_limit=self._settings.pagination_max_limit,
        )
        return self._repository.list_hotels(query)

    def get_hotel(self, hotel_id: int) -> Hotel:
        hotel = self._repository.get_hotel(hotel_id)
        if hotel is None:
            raise NotFoundError(f"No hotel with the id of {hotel_id}")
        return hotel

    def create_hotel(self, acting_user: User, fields: Mapping[str, Any]) -> Hotel:
        ensure_can_act(acting_user, Resource(kind=ResourceKind.HOTEL), Action.CREATE)
        missing = [name for name in _REQUIRED_HOTEL_FIELDS if not fields.get(name)]
        if missing:
            raise InvalidInputError(f"Missing required field(s): {', '.join(missing)}")
        validate_postalcode(str(fields["postalcode"]))
        hotel = self._repository.create_hotel(fields)
        logger.info("Hotel created | hotel_id=%s | name=%s", hotel.hotel_id, hotel.name)
        return hotel

    def update_hotel(self, acting_user: User, hotel_id: int, changes: Mapping[str, Any]) -> Hotel:
        self.get_hotel(hotel_id)
        ensure_can_act(
            acting_user,
            Resource(kind=ResourceKind.HOTEL, hotel_id=hotel_id),
            Action.UPDATE,
            message="Access denied. You do not have permission to manage this hotel.",
        )
        if changes.get("postalcode") is not None:
            validate_postalcode(str(changes["postalcode"]))
        updated = self._repository.update_hotel(hotel_id, changes)
        if updated is None:
            raise NotFoundError(f"No hotel with the id of {hotel_id}")
        return updated

    def delete_hotel(self, acting_user: User, hotel_id: int) -> None:
        self.get_hotel(hotel_id)
        ensure_can_act(acting_user, Resource(kind=ResourceKind.HOTEL, hotel_id=hotel_id), Action.DELETE)
        self._repository.delete_hotel(hotel_id)
        logger.info("Hotel deleted with cascading room types and bookings | hotel_id=%s", hotel_id)

    def list_managed_hotels(self, acting_user: User) -> list[Hotel]:
        ensure_role(acting_user, Role.MANAGER)
        return self._repository.list_hotels_by_ids(sorted(acting_user.managed_hotel_ids))

    # --- Room types ---

    def list_room_types(self, hotel_id: Optional[int] = None) -> list[RoomType]:
        if hotel_id is not None:
            self.get_hotel(hotel_id)
        return self._repository.list_room_types(hotel_id=hotel_id)

    def list_managed_room_types(self, acting_user: User, hotel_id: int) -> list[RoomType]:
        ensure_manages(acting_user, hotel_id)
        return self._repository.list_room_types(hotel_id=hotel_id)

    def get_room_type(self, room_type_id: int) -> RoomType:
        room_type = self._repository.get_room_type(room_type_id)
        if room_type is None:
            raise NotFoundError("RoomType not found")
        return room_type

    def create_room_type(self, acting_user: User, hotel_id: int, fields: Mapping[str, Any]) -> RoomType:
        self.get_hotel(hotel_id)
        ensure_can_act(
            acting_user,
            Resource(kind=ResourceKind.ROOM_TYPE, hotel_id=hotel_id),
            Action.CREATE,
            message="Access denied. You do not have permission to manage this hotel.",
        )
        validate_room_inventory(
            capacity=int(fields["capacity"]),
            total_rooms=int(fields["total_rooms"]),
            base_price=fields.get("base_price"),
        )
        room_type = self._repository.create_room_type(hotel_id, fields)
        logger.info(
            "Room type created | room_type_id=%s | hotel_id=%s | total_rooms=%s",
            room_type.room_type_id,
            hotel_id,
            room_type.total_rooms,
        )
        return room_type

    def update_room_type(self, acting_user: User, room_type_id: int, changes: Mapping[str, Any]) -> RoomType:
        current = self.get_room_type(room_type_id)
        ensure_can_act(
            acting_user,
            Resource(kind=ResourceKind.ROOM_TYPE, hotel_id=current.hotel_id),
            Action.UPDATE,
            message="Access denied. You do not have permission to manage this room type.",
        )
        validate_room_inventory(
            capacity=int(changes.get("capacity", current.capacity)),
            total_rooms=int(changes.get("total_rooms", current.total_rooms)),
            base_price=changes.get("base_price", current.base_price),
        )
        updated = self._repository.update_room_type(room_type_id, changes)
        if updated is None:
            raise NotFoundError("RoomType not found")
        if updated.is_available != current.is_available:
            logger.info(
                "Room type activation changed | room_type_id=%s | is_available=%s",
                room_type_id,
                updated.is_available,
            )
        return updated

    def delete_room_type(self, acting_user: User, room_type_id: int) -> None:
        current = self.get_room_type(room_type_id)
        ensure_can_act(
            acting_user,
            Resource(kind=ResourceKind.ROOM_TYPE, hotel_id=current.hotel_id),
            Action.DELETE,
            message="Access denied. You do not have permission to manage this room type.",
        )
        self._repository.delete_room_type(room_type_id)
        logger.info("Room type deleted with cascading bookings | room_type_id=%s", room_type_id)
