"""Error contract shared by resolvers, the GraphQL surface and REST routes.

Every failure raised by Inkwell business logic is an :class:`InkwellError`
carrying an explicit kind, a message, an HTTP-like status and an optional list
of field-level messages.
"""

from enum import Enum
from typing import Any, Dict, List, Optional

from pydantic import BaseModel


class ErrorKind(str, Enum):
    """Failure categories."""

    INVALID_INPUT = "InvalidInput"
    UNAUTHORIZED = "Unauthorized"
    FORBIDDEN = "Forbidden"
    NOT_FOUND = "NotFound"
    CONFLICT = "Conflict"
    INTERNAL = "Internal"


DEFAULT_STATUS = {
    ErrorKind.INVALID_INPUT: 422,
    ErrorKind.UNAUTHORIZED: 401,
    ErrorKind.FORBIDDEN: 403,
    ErrorKind.NOT_FOUND: 404,
    ErrorKind.CONFLICT: 409,
    ErrorKind.INTERNAL: 500,
}


class FieldError(BaseModel):
    """A single validation message tied to an input field."""

    field: str
    message: str


class InkwellError(Exception):
    """Base error with kind, message, status and optional structured data."""

    kind: ErrorKind = ErrorKind.INTERNAL

    def __init__(
        self,
        message: str = "An error occurred.",
        *,
        status: Optional[int] = None,
        data: Optional[List[FieldError]] = None,
    ):
        super().__init__(message)
        self.message = message
        self.status = status if status is not None else DEFAULT_STATUS[self.kind]
        self.data = data

    def to_dict(self) -> Dict[str, Any]:
        """Render as the uniform ``{message, status, data}`` response shape."""
        return {
            "message": self.message,
            "status": self.status,
            "data": [item.model_dump() for item in self.data] if self.data is not None else None,
        }

    def __repr__(self) -> str:
        return f"{type(self).__name__}(message={self.message!r}, status={self.status})"


class InvalidInputError(InkwellError):
    kind = ErrorKind.INVALID_INPUT

    def __init__(self, data: List[FieldError], message: str = "Invalid input values", **kwargs):
        super().__init__(message, data=data, **kwargs)


class UnauthorizedError(InkwellError):
    kind = ErrorKind.UNAUTHORIZED


class ForbiddenError(InkwellError):
    kind = ErrorKind.FORBIDDEN


class NotFoundError(InkwellError):
    kind = ErrorKind.NOT_FOUND


class ConflictError(InkwellError):
    kind = ErrorKind.CONFLICT


class InternalError(InkwellError):
    kind = ErrorKind.INTERNAL


__all__ = [
    "ConflictError",
    "ErrorKind",
    "FieldError",
    "ForbiddenError",
    "InkwellError",
    "InternalError",
    "InvalidInputError",
    "NotFoundError",
    "UnauthorizedError",
]
