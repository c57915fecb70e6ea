"""Domain-level validation rules for stays, hotels, and room inventory."""

from __future__ import annotations

import re
from datetime import date, datetime
from typing import Optional

from hotel_backend.domain.errors import InvalidInputError
from hotel_backend.domain.models import StayInterval


DATE_FORMAT = "%Y-%m-%d"
INVALID_DATE_MESSAGE = "Invalid date format. Please use YYYY-MM-DD format"
DATE_ORDER_MESSAGE = "Check-in date must be before check-out date"

_POSTALCODE_PATTERN = re.compile(r"\d{5}")


def require_params(**params: Optional[str]) -> None:
    """Reject when any named parameter is missing or blank, naming all of them."""
    missing = [name for name, value in params.items() if value is None or not str(value).strip()]
    if missing:
        raise InvalidInputError(f"Missing required parameter(s): {', '.join(missing)}")


def parse_iso_date(value: str) -> date:
    try:
        return datetime.strptime(value.strip(), DATE_FORMAT).date()
    except (AttributeError, ValueError) as exc:
        raise InvalidInputError(INVALID_DATE_MESSAGE) from exc


def validate_stay(checkin: date, checkout: date) -> StayInterval:
    if checkin >= checkout:
        raise InvalidInputError(DATE_ORDER_MESSAGE)
    return StayInterval(checkin=checkin, checkout=checkout)


def parse_stay_window(check_in_date: str, check_out_date: str) -> StayInterval:
    return validate_stay(parse_iso_date(check_in_date), parse_iso_date(check_out_date))


def parse_identifier(value: str | int, name: str) -> int:
    try:
        identifier = int(value)
    except (TypeError, ValueError) as exc:
        raise InvalidInputError(f"{name} must be a positive integer") from exc
    if identifier <= 0:
        raise InvalidInputError(f"{name} must be a positive integer")
    return identifier


def validate_room_inventory(
    *,
    capacity: int,
    total_rooms: int,
    base_price: float | None,
) -> None:
    if capacity < 1:
        raise InvalidInputError("capacity must be at least 1")
    if total_rooms < 0:
        raise InvalidInputError("totalRooms must be >= 0")
    if base_price is not None and base_price < 0:
        raise InvalidInputError("basePrice must be >= 0")


def validate_postalcode(postalcode: str) -> None:
    if _POSTALCODE_PATTERN.fullmatch(postalcode) is None:
        raise InvalidInputError("postalcode must be exactly 5 digits")
