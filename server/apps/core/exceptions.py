"""Error taxonomy shared by every app.

Each error kind carries the HTTP status it is rendered with. Business
logic raises these; ``server.apps.core.decorators.api_view`` turns them
into failure envelopes.
"""

from http import HTTPStatus
from typing import ClassVar


class ServiceError(Exception):
    """Base class for errors that are reported to API clients."""

    status_code: ClassVar[int] = HTTPStatus.INTERNAL_SERVER_ERROR
    default_message: ClassVar[str] = 'Internal server error'

    def __init__(self, message: str | None = None) -> None:
        """Initialize ServiceError.

        Args:
            message: Human-readable message, defaults to the kind's message.
        """
        self.message = message or self.default_message
        super().__init__(self.message)


class InvalidInputError(ServiceError):
    """Malformed input, such as an empty name."""

    status_code = HTTPStatus.BAD_REQUEST
    default_message = 'Invalid input'


class UploadFailedError(InvalidInputError):
    """Bytes could not be written to the blob store."""

    default_message = 'Upload failed'


class UnauthorizedError(ServiceError):
    """Missing or invalid token, or bad credentials."""

    status_code = HTTPStatus.UNAUTHORIZED
    default_message = 'Authentication required'


class ForbiddenError(ServiceError):
    """Valid token but the resource belongs to another user."""

    status_code = HTTPStatus.FORBIDDEN
    default_message = 'Access denied'


class NotFoundError(ServiceError):
    """Resource absent, or share token unknown or revoked."""

    status_code = HTTPStatus.NOT_FOUND
    default_message = 'Not found'


class ConflictError(ServiceError):
    """Duplicate username, email or sibling name."""

    status_code = HTTPStatus.CONFLICT
    default_message = 'Conflict'
