"""Request/response DTOs shared by the HTTP controllers.

Field names are snake_case in Python and camelCase on the wire.
"""

from __future__ import annotations

from datetime import date
from typing import Any, Generic, Optional, TypeVar

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

from hotel_backend.domain.models import (
    AvailabilityResult,
    BedType,
    Booking,
    Facility,
    Hotel,
    HotelAvailability,
    Role,
    RoomType,
    User,
)


DataT = TypeVar("DataT")


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class Envelope(CamelModel, Generic[DataT]):
    success: bool = True
    data: DataT


class ListEnvelope(CamelModel, Generic[DataT]):
    success: bool = True
    count: int = Field(ge=0)
    data: list[DataT]


class PageLink(CamelModel):
    page: int = Field(gt=0)
    limit: int = Field(gt=0)


class PagedEnvelope(ListEnvelope[DataT], Generic[DataT]):
    pagination: dict[str, PageLink]


# --- Availability ---


class RoomTypeDetailsResponse(CamelModel):
    name: str
    capacity: int = Field(ge=1)
    bed_type: BedType
    base_price: Optional[float] = Field(default=None, ge=0.0)
    currency: str


class AvailabilityResultResponse(CamelModel):
    room_type_id: int = Field(gt=0)
    total_rooms: int = Field(ge=0)
    booked_rooms: int = Field(ge=0)
    available_rooms: int = Field(ge=0)
    is_activated: bool
    is_available: bool
    status: str
    room_type_details: RoomTypeDetailsResponse
    daily_bookings: dict[str, int]

    @classmethod
    def from_domain(cls, result: AvailabilityResult) -> "AvailabilityResultResponse":
        details = result.room_type_details
        return cls(
            room_type_id=result.room_type_id,
            total_rooms=result.total_rooms,
            booked_rooms=result.booked_rooms,
            available_rooms=result.available_rooms,
            is_activated=result.is_activated,
            is_available=result.is_available,
            status=result.status.value,
            room_type_details=RoomTypeDetailsResponse(
                name=details.name,
                capacity=details.capacity,
                bed_type=details.bed_type,
                base_price=details.base_price,
                currency=details.currency,
            ),
            daily_bookings=dict(result.daily_bookings),
        )


class RoomTypeAvailabilityData(CamelModel):
    hotel_id: int
    check_in_date: date
    check_out_date: date
    available_room_types: list[AvailabilityResultResponse]


class HotelAvailabilityResponse(CamelModel):
    hotel_id: int
    hotel_name: Optional[str]
    hotel_address: Optional[str]
    has_available_rooms: bool
    available_room_types: list[AvailabilityResultResponse]

    @classmethod
    def from_domain(cls, availability: HotelAvailability) -> "HotelAvailabilityResponse":
        return cls(
            hotel_id=availability.hotel_id,
            hotel_name=availability.hotel_name,
            hotel_address=availability.hotel_address,
            has_available_rooms=availability.has_available_rooms,
            available_room_types=[
                AvailabilityResultResponse.from_domain(result)
                for result in availability.room_type_results
                if result.is_available
            ],
        )


class HotelAvailabilityData(CamelModel):
    check_in_date: date
    check_out_date: date
    available_hotels: list[HotelAvailabilityResponse]


# --- Bookings ---


class BookingCreateRequest(CamelModel):
    checkin_date: date
    checkout_date: date
    user: int = Field(gt=0)
    room_type: int = Field(gt=0)


class BookingUpdateRequest(CamelModel):
    checkin_date: Optional[date] = None
    checkout_date: Optional[date] = None


class BookingResponse(CamelModel):
    id: int
    user: int
    hotel: int
    room_type: int
    checkin_date: date
    checkout_date: date
    created_at: Optional[str] = None

    @classmethod
    def from_domain(cls, booking: Booking) -> "BookingResponse":
        return cls(
            id=booking.booking_id,
            user=booking.user_id,
            hotel=booking.hotel_id,
            room_type=booking.room_type_id,
            checkin_date=booking.checkin_date,
            checkout_date=booking.checkout_date,
            created_at=booking.created_at,
        )


# --- Hotels and room types ---


class HotelCreateRequest(CamelModel):
    name: str = Field(min_length=1, max_length=50)
    address: str = Field(min_length=1)
    district: str = Field(min_length=1)
    province: str = Field(min_length=1)
    postalcode: str = Field(pattern=r"^\d{5}$")
    tel: Optional[str] = None
    picture: Optional[str] = None
    description: Optional[str] = None


class HotelUpdateRequest(CamelModel):
    name: Optional[str] = Field(default=None, min_length=1, max_length=50)
    address: Optional[str] = Field(default=None, min_length=1)
    district: Optional[str] = Field(default=None, min_length=1)
    province: Optional[str] = Field(default=None, min_length=1)
    postalcode: Optional[str] = Field(default=None, pattern=r"^\d{5}$")
    tel: Optional[str] = None
    picture: Optional[str] = None
    description: Optional[str] = None


class HotelResponse(CamelModel):
    id: int
    name: str
    address: str
    district: str
    province: str
    postalcode: str
    tel: Optional[str] = None
    picture: Optional[str] = None
    description: Optional[str] = None
    created_at: Optional[str] = None

    @classmethod
    def from_domain(cls, hotel: Hotel) -> "HotelResponse":
        return cls(
            id=hotel.hotel_id,
            name=hotel.name,
            address=hotel.address,
            district=hotel.district,
            province=hotel.province,
            postalcode=hotel.postalcode,
            tel=hotel.tel,
            picture=hotel.picture,
            description=hotel.description,
            created_at=hotel.created_at,
        )


class RoomTypeCreateRequest(CamelModel):
    hotel_id: Optional[int] = Field(default=None, gt=0)
    name: str = Field(min_length=1, max_length=100)
    description: Optional[str] = Field(default=None, max_length=500)
    capacity: int = Field(ge=1)
    bed_type: BedType
    size: Optional[str] = Field(default=None, max_length=50)
    amenities: list[str] = Field(default_factory=list)
    facilities: list[Facility] = Field(default_factory=list)
    base_price: Optional[float] = Field(default=None, ge=0.0)
    currency: str = Field(default="THB", max_length=10)
    total_rooms: int = Field(ge=0)
    is_available: bool = True

    @field_validator("amenities")
    @classmethod
    def validate_amenities(cls, value: list[str]) -> list[str]:
        cleaned = [item.strip() for item in value]
        for item in cleaned:
            if not item or len(item) > 100:
                raise ValueError("amenities entries must be 1-100 characters")
        return cleaned


class RoomTypeUpdateRequest(CamelModel):
    name: Optional[str] = Field(default=None, min_length=1, max_length=100)
    description: Optional[str] = Field(default=None, max_length=500)
    capacity: Optional[int] = Field(default=None, ge=1)
    bed_type: Optional[BedType] = None
    size: Optional[str] = Field(default=None, max_length=50)
    amenities: Optional[list[str]] = None
    facilities: Optional[list[Facility]] = None
    base_price: Optional[float] = Field(default=None, ge=0.0)
    currency: Optional[str] = Field(default=None, max_length=10)
    total_rooms: Optional[int] = Field(default=None, ge=0)
    is_available: Optional[bool] = None


class RoomTypeResponse(CamelModel):
    id: int
    hotel_id: int
    name: str
    description: Optional[str] = None
    capacity: int
    bed_type: BedType
    size: Optional[str] = None
    amenities: list[str]
    facilities: list[Facility]
    base_price: Optional[float] = None
    currency: str
    total_rooms: int
    is_available: bool
    created_at: Optional[str] = None
    updated_at: Optional[str] = None

    @classmethod
    def from_domain(cls, room_type: RoomType) -> "RoomTypeResponse":
        return cls(
            id=room_type.room_type_id,
            hotel_id=room_type.hotel_id,
            name=room_type.name,
            description=room_type.description,
            capacity=room_type.capacity,
            bed_type=room_type.bed_type,
            size=room_type.size,
            amenities=list(room_type.amenities),
            facilities=list(room_type.facilities),
            base_price=room_type.base_price,
            currency=room_type.currency,
            total_rooms=room_type.total_rooms,
            is_available=room_type.is_available,
            created_at=room_type.created_at,
            updated_at=room_type.updated_at,
        )


# --- Accounts ---


class RegisterRequest(CamelModel):
    name: str = Field(min_length=1)
    email: str = Field(pattern=r"^[^@\s]+@[^@\s]+\.[^@\s]+$")
    tel: str = Field(pattern=r"^\d{9,10}$")
    password: str = Field(min_length=6)


class LoginRequest(CamelModel):
    email: str = Field(min_length=1)
    password: str = Field(min_length=1)


class UserResponse(CamelModel):
    id: int
    name: str
    email: str
    tel: str
    role: Role
    managed_hotels: list[int]
    created_at: Optional[str] = None

    @classmethod
    def from_domain(cls, user: User) -> "UserResponse":
        return cls(
            id=user.user_id,
            name=user.name,
            email=user.email,
            tel=user.tel,
            role=user.role,
            managed_hotels=sorted(user.managed_hotel_ids),
            created_at=user.created_at,
        )


class TokenResponse(CamelModel):
    success: bool = True
    id: int
    name: str
    email: str
    token: str
    token_type: str = "bearer"


class UserUpdateRequest(CamelModel):
    name: Optional[str] = Field(default=None, min_length=1)
    email: Optional[str] = Field(default=None, pattern=r"^[^@\s]+@[^@\s]+\.[^@\s]+$")
    tel: Optional[str] = Field(default=None, pattern=r"^\d{9,10}$")
    role: Optional[Role] = None
    managed_hotels: Optional[list[int]] = None

    @field_validator("managed_hotels")
    @classmethod
    def validate_managed_hotels(cls, value: Optional[list[int]]) -> Optional[list[int]]:
        if value is None:
            return None
        for hotel_id in value:
            if hotel_id <= 0:
                raise ValueError("managedHotels values must be positive integers")
        return value


def changes_of(payload: BaseModel, *, exclude: tuple[str, ...] = ()) -> dict[str, Any]:
    """Return the non-null fields the client actually sent."""
    return {
        key: value
        for key, value in payload.model_dump(exclude_unset=True).items()
        if key not in exclude and value is not None
    }
