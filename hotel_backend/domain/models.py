"""Domain models for hotels, room inventory, bookings, and availability."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date
from enum import Enum


class Role(str, Enum):
    USER = "user"
    MANAGER = "manager"
    ADMIN = "admin"


class BedType(str, Enum):
    SINGLE = "Single"
    DOUBLE = "Double"
    QUEEN = "Queen"
    KING = "King"
    TWIN = "Twin"
    BUNK_BEDS = "Bunk Beds"
    SOFA_BED = "Sofa Bed"


class Facility(str, Enum):
    FREE_WIFI = "Free Wi-Fi"
    SWIMMING_POOL = "Swimming pool"
    FREE_PARKING = "Free parking"
    FRONT_DESK_24H = "Front desk [24-hour]"
    RESTAURANT = "Restaurant"
    BAR = "Bar"
    MASSAGE = "Massage"
    AIRPORT_TRANSFER = "Airport transfer"
    AIR_CONDITIONING = "Air conditioning"
    HEATING = "Heating"
    PRIVATE_BATHROOM = "Private bathroom"
    TELEVISION = "Television"
    MINI_BAR = "Mini-bar"
    COFFEE_TEA_MAKER = "Coffee/tea maker"
    SAFE = "Safe"
    BALCONY_TERRACE = "Balcony/terrace"
    NON_SMOKING_ROOMS = "Non-smoking rooms available"
    SOUNDPROOFING = "Soundproofing"


class AvailabilityStatus(str, Enum):
    AVAILABLE = "available"
    FULLY_BOOKED = "fully_booked"
    UNDER_MAINTENANCE = "under_maintenance"


@dataclass(frozen=True)
class User:
    user_id: int
    name: str
    email: str
    tel: str
    role: Role
    managed_hotel_ids: frozenset[int] = frozenset()
    created_at: str | None = None

    @property
    def is_admin(self) -> bool:
        return self.role is Role.ADMIN

    def manages(self, hotel_id: int) -> bool:
        return self.role is Role.MANAGER and hotel_id in self.managed_hotel_ids


@dataclass(frozen=True)
class Hotel:
    hotel_id: int
    name: str
    address: str
    district: str
    province: str
    postalcode: str
    tel: str | None = None
    picture: str | None = None
    description: str | None = None
    created_at: str | None = None


@dataclass(frozen=True)
class RoomType:
    room_type_id: int
    hotel_id: int
    name: str
    capacity: int
    bed_type: BedType
    total_rooms: int
    is_available: bool = True
    description: str | None = None
    size: str | None = None
    amenities: tuple[str, ...] = ()
    facilities: tuple[Facility, ...] = ()
    base_price: float | None = None
    currency: str = "THB"
    created_at: str | None = None
    updated_at: str | None = None


@dataclass(frozen=True)
class Booking:
    booking_id: int
    user_id: int
    hotel_id: int
    room_type_id: int
    checkin_date: date
    checkout_date: date
    created_at: str | None = None


@dataclass(frozen=True)
class StayInterval:
    """Half-open stay ``[checkin, checkout)``; the checkout day is free."""

    checkin: date
    checkout: date


@dataclass(frozen=True)
class RoomTypeDetails:
    name: str
    capacity: int
    bed_type: BedType
    base_price: float | None
    currency: str


@dataclass(frozen=True)
class AvailabilityResult:
    room_type_id: int
    total_rooms: int
    booked_rooms: int
    available_rooms: int
    is_activated: bool
    status: AvailabilityStatus
    room_type_details: RoomTypeDetails
    daily_bookings: dict[str, int] = field(default_factory=dict)

    @property
    def is_available(self) -> bool:
        return self.is_activated and self.available_rooms > 0


@dataclass(frozen=True)
class HotelAvailability:
    hotel_id: int
    has_available_rooms: bool
    room_type_results: list[AvailabilityResult]
    hotel_name: str | None = None
    hotel_address: str | None = None


@dataclass(frozen=True)
class Page:
    """One page of a listing plus neighbouring-page pointers."""

    items: list
    total: int
    page: int
    limit: int

    @property
    def pagination(self) -> dict[str, dict[str, int]]:
        links: dict[str, dict[str, int]] = {}
        start_index = (self.page - 1) * self.limit
        if self.page * self.limit < self.total:
            links["next"] = {"page": self.page + 1, "limit": self.limit}
        if start_index > 0:
            links["prev"] = {"page": self.page - 1, "limit": self.limit}
        return links
