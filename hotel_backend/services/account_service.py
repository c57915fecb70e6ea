"""User account administration and manager hotel grants."""

from __future__ import annotations

from typing import Any, Mapping, Optional, Sequence

from hotel_backend.domain.authorization import (
    Action,
    Resource,
    ResourceKind,
    ensure_can_act,
    ensure_role,
)
from hotel_backend.domain.errors import ForbiddenError, InvalidInputError, NotFoundError
from hotel_backend.domain.models import Page, Role, User
from hotel_backend.domain.queries import USER_LISTING, build_list_query
from hotel_backend.repository.data_repository import DataRepository
from hotel_backend.services.auth_service import AuthService
from hotel_backend.utils.config import Settings, get_settings
from hotel_backend.utils.logger import get_logger


logger = get_logger(__name__)


class AccountService:
    def __init__(
        self,
        repository: Optional[DataRepository] = None,
        auth_service: Optional[AuthService] = None,
        settings: Optional[Settings] = None,
    ) -> None:
        self._settings = settings or get_settings()
        self._repository = repository or DataRepository(self._settings)
        self._auth_service = auth_service or AuthService(repository=self._repository, settings=self._settings)

    def _get_user(self, user_id: int) -> User:
        user = self._repository.get_user(user_id)
        if user is None:
            raise NotFoundError("User not found")
        return user

    def list_users(
        self,
        acting_user: User,
        *,
        filters: Mapping[str, str],
        sort: Optional[str] = None,
        page: Optional[str] = None,
        limit: Optional[str] = None,
    ) -> Page:
        ensure_role(acting_user, Role.ADMIN)
        query = build_list_query(
            USER_LISTING,
            filters=filters,
            sort=sort,
            page=page,
            limit=limit,
            default_limit=self._settings.pagination_default_limit,
            max_limit=self._settings.pagination_max_limit,
        )
        return self._repository.list_users(query)

    def get_user(self, acting_user: User, user_id: int) -> User:
        user = self._get_user(user_id)
        ensure_can_act(acting_user, Resource(kind=ResourceKind.USER, owner_id=user_id), Action.READ)
        return user

    def update_user(
        self,
        acting_user: User,
        user_id: int,
        changes: Mapping[str, Any],
        managed_hotel_ids: Optional[Sequence[int]] = None,
    ) -> User:
        """Update profile fields; role and hotel grants are admin-only."""
        current = self._get_user(user_id)
        ensure_can_act(acting_user, Resource(kind=ResourceKind.USER, owner_id=user_id), Action.UPDATE)
        privileged = "role" in changes or managed_hotel_ids is not None
        if privileged and not acting_user.is_admin:
            raise ForbiddenError("Only admins can change roles or managed hotels")

        target_role = Role(changes.get("role", current.role))
        if managed_hotel_ids is not None:
            if managed_hotel_ids and target_role is not Role.MANAGER:
                raise InvalidInputError("Only managers can be granted managed hotels")
            known = {hotel.hotel_id for hotel in self._repository.list_hotels_by_ids(list(managed_hotel_ids))}
            unknown = sorted(set(managed_hotel_ids) - known)
            if unknown:
                raise NotFoundError(f"No hotel with the id of {unknown[0]}")
        elif target_role is not Role.MANAGER and current.managed_hotel_ids:
            managed_hotel_ids = []

        updated = self._repository.update_user(user_id, changes, managed_hotel_ids=managed_hotel_ids)
        if updated is None:
            raise NotFoundError("User not found")
        if updated.role is not current.role:
            logger.info(
                "User role changed | user_id=%s | from=%s | to=%s",
                user_id,
                current.role.value,
                updated.role.value,
            )
        return updated

    def delete_user(self, acting_user: User, user_id: int) -> None:
        self._get_user(user_id)
        ensure_can_act(acting_user, Resource(kind=ResourceKind.USER, owner_id=user_id), Action.DELETE)
        self._repository.delete_user(user_id)
        self._auth_service.revoke_user_sessions(user_id)
        logger.info("User deleted with cascading bookings | user_id=%s", user_id)
