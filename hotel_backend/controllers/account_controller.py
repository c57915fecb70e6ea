"""HTTP controller layer for user account administration."""

from __future__ import annotations

from fastapi import APIRouter, Depends, Request
from fastapi.concurrency import run_in_threadpool

from hotel_backend.controllers.dependencies import get_account_service, get_current_user
from hotel_backend.controllers.errors import to_http_exception
from hotel_backend.controllers.schemas import (
    Envelope,
    PagedEnvelope,
    UserResponse,
    UserUpdateRequest,
    changes_of,
)
from hotel_backend.domain.errors import BookingApiError
from hotel_backend.domain.models import User
from hotel_backend.services.account_service import AccountService


router = APIRouter(prefix="/api/v1/users", tags=["users"])

_PAGING_PARAMS = {"sort", "page", "limit"}


@router.get("", response_model=PagedEnvelope[UserResponse])
async def get_users(
    request: Request,
    user: User = Depends(get_current_user),
    service: AccountService = Depends(get_account_service),
) -> PagedEnvelope[UserResponse]:
    params = request.query_params
    filters = {key: value for key, value in params.items() if key not in _PAGING_PARAMS}
    try:
        page = await run_in_threadpool(
            service.list_users,
            user,
            filters=filters,
            sort=params.get("sort"),
            page=params.get("page"),
            limit=params.get("limit"),
        )
    except BookingApiError as exc:
        raise to_http_exception(exc) from exc
    return PagedEnvelope[UserResponse](
        count=len(page.items),
        pagination=page.pagination,
        data=[UserResponse.from_domain(item) for item in page.items],
    )


@router.get("/{user_id}", response_model=Envelope[UserResponse])
async def get_user(
    user_id: int,
    user: User = Depends(get_current_user),
    service: AccountService = Depends(get_account_service),
) -> Envelope[UserResponse]:
    try:
        target = await run_in_threadpool(service.get_user, user, user_id)
    except BookingApiError as exc:
        raise to_http_exception(exc) from exc
    return Envelope[UserResponse](data=UserResponse.from_domain(target))


@router.put("/{user_id}", response_model=Envelope[UserResponse])
async def update_user(
    user_id: int,
    payload: UserUpdateRequest,
    user: User = Depends(get_current_user),
    service: AccountService = Depends(get_account_service),
) -> Envelope[UserResponse]:
    try:
        updated = await run_in_threadpool(
            service.update_user,
            user,
            user_id,
            changes_of(payload, exclude=("managed_hotels",)),
            managed_hotel_ids=payload.managed_hotels,
        )
    except BookingApiError as exc:
        raise to_http_exception(exc) from exc
    return Envelope[UserResponse](data=UserResponse.from_domain(updated))


@router.delete("/{user_id}", response_model=Envelope[dict])
async def delete_user(
    user_id: int,
    user: User = Depends(get_current_user),
    service: AccountService = Depends(get_account_service),
) -> Envelope[dict]:
    try:
        await run_in_threadpool(service.delete_user, user, user_id)
    except BookingApiError as exc:
        raise to_http_exception(exc) from exc
    return Envelope[dict](data={})
