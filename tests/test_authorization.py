from __future__ import annotations

import pytest

from hotel_backend.domain.authorization import (
    Action,
    Resource,
    ResourceKind,
    can_act,
    ensure_can_act,
    ensure_manages,
    ensure_role,
)
from hotel_backend.domain.errors import ForbiddenError
from hotel_backend.domain.models import Role, User


ADMIN = User(user_id=1, name="Admin", email="admin@example.com", tel="0800000000", role=Role.ADMIN)
GUEST = User(user_id=2, name="Guest", email="guest@example.com", tel="0800000001", role=Role.USER)
OTHER = User(user_id=3, name="Other", email="other@example.com", tel="0800000002", role=Role.USER)
MANAGER = User(
    user_id=4,
    name="Manager",
    email="manager@example.com",
    tel="0800000003",
    role=Role.MANAGER,
    managed_hotel_ids=frozenset({10}),
)


def booking(owner_id: int, hotel_id: int = 10) -> Resource:
    return Resource(kind=ResourceKind.BOOKING, owner_id=owner_id, hotel_id=hotel_id)


@pytest.mark.parametrize("action", list(Action))
def test_admin_can_do_everything(action: Action) -> None:
    for kind in ResourceKind:
        assert can_act(ADMIN, Resource(kind=kind, owner_id=99, hotel_id=99), action)


def test_user_may_book_only_for_themself() -> None:
    assert can_act(GUEST, booking(GUEST.user_id), Action.CREATE)
    assert not can_act(GUEST, booking(OTHER.user_id), Action.CREATE)


def test_owner_can_read_update_and_delete_own_booking() -> None:
    for action in (Action.READ, Action.UPDATE, Action.DELETE):
        assert can_act(GUEST, booking(GUEST.user_id), action)
        assert not can_act(OTHER, booking(GUEST.user_id), action)


def test_manager_acts_on_bookings_of_managed_hotels_only() -> None:
    assert can_act(MANAGER, booking(GUEST.user_id, hotel_id=10), Action.UPDATE)
    assert can_act(MANAGER, booking(GUEST.user_id, hotel_id=10), Action.DELETE)
    assert not can_act(MANAGER, booking(GUEST.user_id, hotel_id=11), Action.DELETE)


def test_manager_cannot_book_on_behalf_of_guests() -> None:
    assert not can_act(MANAGER, booking(GUEST.user_id, hotel_id=10), Action.CREATE)


def test_manager_grant_is_ignored_for_non_manager_role() -> None:
    demoted = User(
        user_id=5,
        name="Former",
        email="former@example.com",
        tel="0800000004",
        role=Role.USER,
        managed_hotel_ids=frozenset({10}),
    )
    assert not can_act(demoted, booking(GUEST.user_id, hotel_id=10), Action.DELETE)


def test_catalogue_is_public_to_read_and_manager_limited_to_updates() -> None:
    hotel = Resource(kind=ResourceKind.HOTEL, hotel_id=10)
    assert can_act(GUEST, hotel, Action.READ)
    assert not can_act(GUEST, hotel, Action.UPDATE)
    assert can_act(MANAGER, hotel, Action.UPDATE)
    assert not can_act(MANAGER, hotel, Action.DELETE)
    assert not can_act(MANAGER, Resource(kind=ResourceKind.HOTEL), Action.CREATE)

    room_type = Resource(kind=ResourceKind.ROOM_TYPE, hotel_id=10)
    assert can_act(MANAGER, room_type, Action.CREATE)
    assert can_act(MANAGER, room_type, Action.DELETE)
    assert not can_act(GUEST, room_type, Action.CREATE)


def test_user_may_view_and_edit_only_own_profile() -> None:
    own = Resource(kind=ResourceKind.USER, owner_id=GUEST.user_id)
    assert can_act(GUEST, own, Action.READ)
    assert can_act(GUEST, own, Action.UPDATE)
    assert not can_act(GUEST, own, Action.DELETE)
    assert not can_act(GUEST, Resource(kind=ResourceKind.USER, owner_id=OTHER.user_id), Action.READ)


def test_ensure_can_act_uses_custom_message() -> None:
    with pytest.raises(ForbiddenError, match="You are not authorized to make this booking"):
        ensure_can_act(
            GUEST,
            booking(OTHER.user_id),
            Action.CREATE,
            message="You are not authorized to make this booking",
        )


def test_ensure_role_and_ensure_manages_messages() -> None:
    with pytest.raises(ForbiddenError, match="Only managers can perform this action"):
        ensure_role(GUEST, Role.MANAGER)
    with pytest.raises(ForbiddenError, match="Only managers can perform this action"):
        ensure_manages(ADMIN, 10)
    with pytest.raises(ForbiddenError, match="permission to manage this room type"):
        ensure_manages(MANAGER, 11, kind="room type")
    ensure_manages(MANAGER, 10)
