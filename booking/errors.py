"""
Error kinds of the booking core and the result envelope they surface in.

Components raise the exception matching their failure; the public
operations in booking.service and booking.catalog catch them at the
boundary and hand back a Result instead.
"""
import logging
from dataclasses import dataclass
from enum import Enum
from functools import wraps
from typing import Any, Optional

logger = logging.getLogger(__name__)


class ErrorKind(str, Enum):
    INVALID_ARGUMENT = "invalid_argument"
    PAST_SCHEDULE = "past_schedule"
    NOT_FOUND = "not_found"
    CONFLICT = "conflict"
    LIMIT_EXCEEDED = "limit_exceeded"
    PERSISTENCE = "persistence"

    @property
    def status_code(self) -> int:
        return _STATUS_CODES[self]


_STATUS_CODES = {
    ErrorKind.INVALID_ARGUMENT: 400,
    ErrorKind.PAST_SCHEDULE: 400,
    ErrorKind.NOT_FOUND: 404,
    ErrorKind.CONFLICT: 409,
    ErrorKind.LIMIT_EXCEEDED: 429,
    ErrorKind.PERSISTENCE: 500,
}


class BookingError(Exception):
    """Base exception for all booking core errors."""
    kind = ErrorKind.PERSISTENCE

    def __init__(self, message: str, details: Optional[dict] = None):
        super().__init__(message)
        self.message = message
        self.details = details

    @property
    def status_code(self) -> int:
        return self.kind.status_code

    def to_dict(self) -> dict:
        out = {"message": self.message, "statusCode": self.status_code}
        if self.details:
            out["details"] = self.details
        return out


class InvalidArgument(BookingError):
    """Malformed or missing input."""
    kind = ErrorKind.INVALID_ARGUMENT


class PastSchedule(BookingError):
    """Requested schedule is not strictly in the future."""
    kind = ErrorKind.PAST_SCHEDULE


class NotFound(BookingError):
    """A referenced branch, capster, service set or booking does not exist."""
    kind = ErrorKind.NOT_FOUND

    def __init__(self, resource: str, message: Optional[str] = None, details: Optional[dict] = None):
        super().__init__(message or f"{resource.capitalize()} not found", details)
        self.resource = resource


class Conflict(BookingError):
    """The capster already has a booking at the requested slot."""
    kind = ErrorKind.CONFLICT


class LimitExceeded(BookingError):
    """The user already holds the maximum number of active bookings."""
    kind = ErrorKind.LIMIT_EXCEEDED


class PersistenceError(BookingError):
    """Storage failure or an empty write result."""
    kind = ErrorKind.PERSISTENCE


@dataclass
class Result:
    success: bool
    data: Any = None
    error: Optional[BookingError] = None

    @classmethod
    def ok(cls, data=None) -> "Result":
        return cls(success=True, data=data)

    @classmethod
    def fail(cls, error: BookingError) -> "Result":
        return cls(success=False, error=error)

    @property
    def status_code(self) -> int:
        return 200 if self.success else self.error.status_code

    def to_dict(self) -> dict:
        if self.success:
            return {"success": True, "data": self.data}
        return {"success": False, "error": self.error.to_dict()}


def returns_result(fn):
    """Run a core operation and fold any failure into a Result."""
    @wraps(fn)
    def wrapper(*args, **kwargs):
        try:
            return Result.ok(fn(*args, **kwargs))
        except BookingError as exc:
            logger.warning("%s failed [%s]: %s", fn.__name__, exc.kind.value, exc.message)
            return Result.fail(exc)
        except Exception:
            logger.exception("%s failed unexpectedly", fn.__name__)
            return Result.fail(PersistenceError("Unexpected error occurred"))
    return wrapper
