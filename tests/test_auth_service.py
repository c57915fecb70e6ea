from __future__ import annotations

from dataclasses import replace

import pytest

from hotel_backend.domain.errors import InvalidInputError
from hotel_backend.domain.models import Role
from hotel_backend.repository.data_repository import DataRepository
from hotel_backend.services.auth_service import (
    AuthService,
    InvalidCredentialsError,
    InvalidTokenError,
    hash_password,
    verify_password,
)
from hotel_backend.utils.config import get_settings


def _build_test_settings(tmp_path, filename: str, **overrides):
    values = {
        "database_path": tmp_path / filename,
        "auth_token_ttl_seconds": 60.0,
        "admin_email": None,
        "admin_password": None,
    }
    values.update(overrides)
    return replace(get_settings(), **values)


class _Clock:
    def __init__(self) -> None:
        self.now = 1000.0

    def __call__(self) -> float:
        return self.now


def _build_service(tmp_path, filename: str, **overrides):
    settings = _build_test_settings(tmp_path, filename, **overrides)
    repository = DataRepository(settings)
    repository.initialize_database()
    clock = _Clock()
    return AuthService(repository=repository, settings=settings, clock=clock), repository, clock


def test_password_hash_is_bcrypt_and_verifies() -> None:
    stored = hash_password("password123")
    assert stored.startswith("$2")
    assert stored != hash_password("password123")
    assert verify_password("password123", stored)
    assert not verify_password("password124", stored)


def test_unrecognised_stored_hash_never_verifies() -> None:
    assert not verify_password("password123", "pbkdf2_sha256$1000$abcd$ef01")


def test_register_stores_bcrypt_hash_and_login_round_trip(tmp_path) -> None:
    service, repository, _ = _build_service(tmp_path, "register.db")
    user, token = service.register(name="Guest", email="guest@example.com", tel="0812345678", password="password123")

    _, stored_hash = repository.get_credentials("guest@example.com")
    assert stored_hash.startswith("$2")
    assert "password123" not in stored_hash
    assert service.authenticate(token).user_id == user.user_id

    logged_in, second_token = service.login("guest@example.com", "password123")
    assert logged_in.user_id == user.user_id
    assert second_token != token
    with pytest.raises(InvalidCredentialsError):
        service.login("guest@example.com", "wrong-password")


@pytest.mark.parametrize(
    "password, message",
    [("short", "at least 6 characters"), ("x" * 73, "at most 72 bytes")],
)
def test_register_rejects_unusable_passwords(tmp_path, password: str, message: str) -> None:
    service, _, _ = _build_service(tmp_path, "passwords.db")
    with pytest.raises(InvalidInputError, match=message):
        service.register(name="Guest", email="guest@example.com", tel="0812345678", password=password)


def test_token_expires_after_ttl(tmp_path) -> None:
    service, _, clock = _build_service(tmp_path, "expiry.db", auth_token_ttl_seconds=60.0)
    user, token = service.register(name="Guest", email="guest@example.com", tel="0812345678", password="password123")

    clock.now += 59
    assert service.authenticate(token).user_id == user.user_id

    clock.now += 1
    with pytest.raises(InvalidTokenError):
        service.authenticate(token)
    assert service.active_session_count == 0


def test_issuing_a_token_prunes_expired_sessions(tmp_path) -> None:
    service, _, clock = _build_service(tmp_path, "prune.db", auth_token_ttl_seconds=60.0)
    service.register(name="Guest", email="guest@example.com", tel="0812345678", password="password123")
    service.login("guest@example.com", "password123")
    assert service.active_session_count == 2

    clock.now += 120
    _, fresh = service.login("guest@example.com", "password123")
    assert service.active_session_count == 1
    assert service.authenticate(fresh).email == "guest@example.com"


def test_revoke_user_sessions_only_drops_that_user(tmp_path) -> None:
    service, _, _ = _build_service(tmp_path, "revoke.db")
    guest, guest_token = service.register(name="Guest", email="guest@example.com", tel="0812345678", password="password123")
    other, other_token = service.register(name="Other", email="other@example.com", tel="0812345678", password="password123")

    service.revoke_user_sessions(guest.user_id)
    with pytest.raises(InvalidTokenError):
        service.authenticate(guest_token)
    assert service.authenticate(other_token).user_id == other.user_id


def test_bootstrap_admin_is_created_once_and_can_log_in(tmp_path) -> None:
    service, repository, _ = _build_service(
        tmp_path,
        "bootstrap.db",
        admin_email="admin@example.com",
        admin_password="admin-secret",
    )
    admin = service.ensure_bootstrap_admin()
    assert admin is not None and admin.role is Role.ADMIN
    assert service.ensure_bootstrap_admin() is None
    assert repository.count_users_with_role(Role.ADMIN) == 1

    logged_in, _ = service.login("admin@example.com", "admin-secret")
    assert logged_in.user_id == admin.user_id
