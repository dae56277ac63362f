"""Exceptions for files app."""

from http import HTTPStatus

from server.apps.core.exceptions import ServiceError


class QuotaExceededError(ServiceError):
    """Raised when upload would exceed user's storage quota."""

    status_code = HTTPStatus.REQUEST_ENTITY_TOO_LARGE

    def __init__(
        self,
        quota_bytes: int,
        used_bytes: int,
        required_bytes: int,
    ) -> None:
        """Initialize QuotaExceededError.

        Args:
            quota_bytes: Total quota limit in bytes.
            used_bytes: Currently used (and reserved) bytes.
            required_bytes: Bytes needed for the operation.
        """
        self.quota_bytes = quota_bytes
        self.used_bytes = used_bytes
        self.required_bytes = required_bytes

        available = max(0, quota_bytes - used_bytes)
        super().__init__(
            f'Quota exceeded: need {required_bytes} bytes, '
            f'only {available} bytes available '
            f'(quota: {quota_bytes}, used: {used_bytes})',
        )
