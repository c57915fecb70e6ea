"""HTTP controller layer for registration and bearer-token sessions."""

from __future__ import annotations

from fastapi import APIRouter, Depends, status
from fastapi.concurrency import run_in_threadpool

from hotel_backend.controllers.dependencies import get_auth_service, get_bearer_token, get_current_user
from hotel_backend.controllers.errors import to_http_exception
from hotel_backend.controllers.schemas import (
    Envelope,
    LoginRequest,
    RegisterRequest,
    TokenResponse,
    UserResponse,
)
from hotel_backend.domain.errors import BookingApiError
from hotel_backend.domain.models import User
from hotel_backend.services.auth_service import AuthService


router = APIRouter(prefix="/api/v1/auth", tags=["auth"])


def _token_response(user: User, token: str) -> TokenResponse:
    return TokenResponse(id=user.user_id, name=user.name, email=user.email, token=token)


@router.post("/register", response_model=TokenResponse, status_code=status.HTTP_200_OK)
async def register(
    payload: RegisterRequest,
    service: AuthService = Depends(get_auth_service),
) -> TokenResponse:
    try:
        user, token = await run_in_threadpool(
            service.register,
            name=payload.name,
            email=payload.email,
            tel=payload.tel,
            password=payload.password,
        )
    except BookingApiError as exc:
        raise to_http_exception(exc) from exc
    return _token_response(user, token)


@router.post("/login", response_model=TokenResponse)
async def login(
    payload: LoginRequest,
    service: AuthService = Depends(get_auth_service),
) -> TokenResponse:
    try:
        user, token = await run_in_threadpool(service.login, payload.email, payload.password)
    except BookingApiError as exc:
        raise to_http_exception(exc) from exc
    return _token_response(user, token)


@router.get("/me", response_model=Envelope[UserResponse])
async def get_me(
    user: User = Depends(get_current_user),
    service: AuthService = Depends(get_auth_service),
) -> Envelope[UserResponse]:
    try:
        current = await run_in_threadpool(service.get_me, user)
    except BookingApiError as exc:
        raise to_http_exception(exc) from exc
    return Envelope[UserResponse](data=UserResponse.from_domain(current))


@router.get("/logout", response_model=Envelope[dict])
async def logout(
    token: str = Depends(get_bearer_token),
    user: User = Depends(get_current_user),
    service: AuthService = Depends(get_auth_service),
) -> Envelope[dict]:
    """Revoke the presented token; other sessions of the user stay valid."""
    await run_in_threadpool(service.logout, token)
    return Envelope[dict](data={})
