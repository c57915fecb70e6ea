"""Account registration, password login, and bearer session tokens."""

from __future__ import annotations

import secrets
import time
from threading import RLock
from typing import Callable, Optional

import bcrypt

from hotel_backend.domain.errors import AuthenticationError, InvalidInputError, NotFoundError
from hotel_backend.domain.models import Role, User
from hotel_backend.repository.data_repository import DataRepository
from hotel_backend.utils.config import Settings, get_settings
from hotel_backend.utils.logger import get_logger


logger = get_logger(__name__)

_MIN_PASSWORD_LENGTH = 6
# bcrypt only reads the first 72 bytes of a password.
_MAX_PASSWORD_BYTES = 72


class InvalidCredentialsError(AuthenticationError):
    """Raised when an email/password pair does not match."""


class InvalidTokenError(AuthenticationError):
    """Raised when a bearer token is unknown, expired, or revoked."""


def hash_password(password: str) -> str:
    salt = bcrypt.gensalt()
    return bcrypt.hashpw(password.encode("utf-8"), salt).decode("utf-8")


def verify_password(password: str, stored_hash: str) -> bool:
    encoded = password.encode("utf-8")
    if len(encoded) > _MAX_PASSWORD_BYTES:
        return False
    try:
        return bcrypt.checkpw(encoded, stored_hash.encode("utf-8"))
    except ValueError:
        logger.warning("Stored password hash is not a bcrypt hash")
        return False


def _validate_password(password: str) -> None:
    if len(password) < _MIN_PASSWORD_LENGTH:
        raise InvalidInputError(f"password must be at least {_MIN_PASSWORD_LENGTH} characters")
    if len(password.encode("utf-8")) > _MAX_PASSWORD_BYTES:
        raise InvalidInputError(f"password must be at most {_MAX_PASSWORD_BYTES} bytes")


class AuthService:
    """Issues expiring opaque session tokens and resolves them back to users."""

    def __init__(
        self,
        repository: Optional[DataRepository] = None,
        settings: Optional[Settings] = None,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self._settings = settings or get_settings()
        self._repository = repository or DataRepository(self._settings)
        self._clock = clock
        # token -> (user_id, expires_at)
        self._sessions: dict[str, tuple[int, float]] = {}
        self._lock = RLock()

    def _prune_expired(self, now: float) -> None:
        expired = [token for token, (_, expires_at) in self._sessions.items() if expires_at <= now]
        for token in expired:
            del self._sessions[token]
        if expired:
            logger.info("Expired sessions pruned | count=%s", len(expired))

    def _issue_token(self, user: User) -> str:
        token = secrets.token_urlsafe(self._settings.auth_token_bytes)
        now = self._clock()
        with self._lock:
            self._prune_expired(now)
            self._sessions[token] = (user.user_id, now + self._settings.auth_token_ttl_seconds)
        return token

    @property
    def active_session_count(self) -> int:
        with self._lock:
            return len(self._sessions)

    def register(self, *, name: str, email: str, tel: str, password: str) -> tuple[User, str]:
        """Create a regular user account and log it in.

        Elevated roles are granted by an admin afterwards, never at sign-up.
        """
        _validate_password(password)
        user = self._repository.create_user(
            name=name,
            email=email,
            tel=tel,
            role=Role.USER,
            password_hash=hash_password(password),
        )
        logger.info("User registered | user_id=%s", user.user_id)
        return user, self._issue_token(user)

    def login(self, email: str, password: str) -> tuple[User, str]:
        credentials = self._repository.get_credentials(email)
        if credentials is None:
            raise InvalidCredentialsError("Invalid credentials")
        user, stored_hash = credentials
        if not verify_password(password, stored_hash):
            raise InvalidCredentialsError("Invalid credentials")
        return user, self._issue_token(user)

    def authenticate(self, bearer_token: str) -> User:
        with self._lock:
            session = self._sessions.get(bearer_token)
            if session is not None and session[1] <= self._clock():
                del self._sessions[bearer_token]
                session = None
        if session is None:
            raise InvalidTokenError("Not authorized to access this route")
        user = self._repository.get_user(session[0])
        if user is None:
            self.logout(bearer_token)
            raise InvalidTokenError("Not authorized to access this route")
        return user

    def logout(self, bearer_token: str) -> None:
        with self._lock:
            self._sessions.pop(bearer_token, None)

    def revoke_user_sessions(self, user_id: int) -> None:
        with self._lock:
            for token in [token for token, (owner, _) in self._sessions.items() if owner == user_id]:
                del self._sessions[token]

    def ensure_bootstrap_admin(self) -> Optional[User]:
        """Create the configured admin account if no admin exists yet."""
        if not self._settings.admin_email or not self._settings.admin_password:
            return None
        if self._repository.count_users_with_role(Role.ADMIN) > 0:
            return None
        _validate_password(self._settings.admin_password)
        admin = self._repository.create_user(
            name=self._settings.admin_name,
            email=self._settings.admin_email,
            tel="0000000000",
            role=Role.ADMIN,
            password_hash=hash_password(self._settings.admin_password),
        )
        logger.info("Bootstrap admin created | user_id=%s", admin.user_id)
        return admin

    def get_me(self, user: User) -> User:
        current = self._repository.get_user(user.user_id)
        if current is None:
            raise NotFoundError("User not found")
        return current
