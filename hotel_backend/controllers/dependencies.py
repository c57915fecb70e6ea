"""Shared FastAPI dependency providers for controller layer."""

from __future__ import annotations

from fastapi import Depends, HTTPException, Request, status
from fastapi.concurrency import run_in_threadpool
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from hotel_backend.controllers.errors import to_http_exception
from hotel_backend.domain.errors import BookingApiError
from hotel_backend.domain.models import User
from hotel_backend.services.account_service import AccountService
from hotel_backend.services.auth_service import AuthService
from hotel_backend.services.availability_service import AvailabilityService
from hotel_backend.services.booking_service import BookingService
from hotel_backend.services.hotel_service import HotelService


bearer_scheme = HTTPBearer(auto_error=False)


def _service(request: Request, attribute: str, label: str):
    service = getattr(request.app.state, attribute, None)
    if service is None:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail=f"{label} service is not initialized",
        )
    return service


def get_auth_service(request: Request) -> AuthService:
    return _service(request, "auth_service", "Auth")


def get_availability_service(request: Request) -> AvailabilityService:
    return _service(request, "availability_service", "Availability")


def get_booking_service(request: Request) -> BookingService:
    return _service(request, "booking_service", "Booking")


def get_hotel_service(request: Request) -> HotelService:
    return _service(request, "hotel_service", "Hotel")


def get_account_service(request: Request) -> AccountService:
    return _service(request, "account_service", "Account")


def get_bearer_token(
    credentials: HTTPAuthorizationCredentials | None = Depends(bearer_scheme),
) -> str:
    if credentials is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Authorization header with Bearer token is required",
            headers={"WWW-Authenticate": "Bearer"},
        )
    return credentials.credentials


async def get_current_user(
    token: str = Depends(get_bearer_token),
    auth_service: AuthService = Depends(get_auth_service),
) -> User:
    try:
        return await run_in_threadpool(auth_service.authenticate, token)
    except BookingApiError as exc:
        raise to_http_exception(exc) from exc
