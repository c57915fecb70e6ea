"""Error taxonomy shared by the service and controller layers."""

from __future__ import annotations


class BookingApiError(Exception):
    """Base failure; ``status_code`` is the HTTP status it maps to."""

    status_code = 500


class InvalidInputError(BookingApiError):
    """Raised for missing or malformed parameters and bad date ordering."""

    status_code = 400


class AuthenticationError(BookingApiError):
    """Raised when credentials or bearer tokens are missing or invalid."""

    status_code = 401


class ForbiddenError(BookingApiError):
    """Raised when the acting user lacks authority over a resource."""

    status_code = 403


class NotFoundError(BookingApiError):
    """Raised when a hotel, room type, booking, or user does not exist."""

    status_code = 404


class QuotaExceededError(BookingApiError):
    """Raised when a non-admin user already holds the maximum bookings."""

    status_code = 400


class ConflictError(BookingApiError):
    """Raised when a unique value is already taken or a stay has no room left."""

    status_code = 409


class StoreError(BookingApiError):
    """Raised when the persistence layer fails."""

    status_code = 500

    def __init__(self, message: str, *, retryable: bool = False) -> None:
        super().__init__(message)
        self.retryable = retryable


class StoreTimeoutError(StoreError):
    """Raised when a store call exceeds its timeout.

    Reads are retryable and surface as 503; the admission write is not, so a
    client never resubmits a booking that may already have been written.
    """

    def __init__(self, message: str, *, retryable: bool = True) -> None:
        super().__init__(message, retryable=retryable)
        self.status_code = 503 if retryable else 500
