"""Capability checks deciding whether a user may act on a resource.

Every route asks ``can_act`` once with a ``Resource`` describing what it
touches, instead of branching on roles itself.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Optional

from hotel_backend.domain.errors import ForbiddenError
from hotel_backend.domain.models import Role, User


class ResourceKind(str, Enum):
    BOOKING = "booking"
    HOTEL = "hotel"
    ROOM_TYPE = "room_type"
    USER = "user"


class Action(str, Enum):
    READ = "read"
    CREATE = "create"
    UPDATE = "update"
    DELETE = "delete"


@dataclass(frozen=True)
class Resource:
    kind: ResourceKind
    owner_id: Optional[int] = None
    hotel_id: Optional[int] = None


def can_act(user: User, resource: Resource, action: Action) -> bool:
    if user.is_admin:
        return True

    manages_hotel = resource.hotel_id is not None and user.manages(resource.hotel_id)

    if resource.kind is ResourceKind.BOOKING:
        if resource.owner_id == user.user_id:
            return True
        return manages_hotel and action is not Action.CREATE

    if resource.kind is ResourceKind.HOTEL:
        if action is Action.READ:
            return True
        return manages_hotel and action is Action.UPDATE

    if resource.kind is ResourceKind.ROOM_TYPE:
        if action is Action.READ:
            return True
        return manages_hotel

    if resource.kind is ResourceKind.USER:
        return resource.owner_id == user.user_id and action in (Action.READ, Action.UPDATE)

    return False


def ensure_can_act(
    user: User,
    resource: Resource,
    action: Action,
    message: Optional[str] = None,
) -> None:
    if not can_act(user, resource, action):
        raise ForbiddenError(
            message or f"You are not authorized to {action.value} this {resource.kind.value.replace('_', ' ')}"
        )


def ensure_role(user: User, *roles: Role) -> None:
    if user.role not in roles:
        allowed = " or ".join(f"{role.value}s" for role in roles)
        raise ForbiddenError(f"Access denied. Only {allowed} can perform this action.")


def ensure_manages(user: User, hotel_id: int, kind: str = "hotel") -> None:
    """Manager-only routes: the user must be a manager granted this hotel."""
    ensure_role(user, Role.MANAGER)
    if not user.manages(hotel_id):
        raise ForbiddenError(f"Access denied. You do not have permission to manage this {kind}.")
