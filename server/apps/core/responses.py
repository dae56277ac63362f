"""Uniform response envelope.

Every JSON response has the shape
``{"success": bool, "message": str, "data": ..., "timestamp": str}``.
"""

from http import HTTPStatus
from typing import Any

from django.http import JsonResponse
from django.utils import timezone


def _envelope(success: bool, message: str, data: Any) -> dict[str, Any]:
    return {
        'success': success,
        'message': message,
        'data': data,
        'timestamp': timezone.now().isoformat(),
    }


def success_response(
    message: str,
    data: Any = None,
    status: int = HTTPStatus.OK,
) -> JsonResponse:
    """Build a successful envelope.

    Args:
        message: Human-readable summary of the outcome.
        data: JSON-serializable payload.
        status: HTTP status code.

    Returns:
        JsonResponse with ``success=True``.
    """
    return JsonResponse(
        _envelope(success=True, message=message, data=data),
        status=status,
    )


def error_response(
    message: str,
    status: int,
    data: Any = None,
) -> JsonResponse:
    """Build a failure envelope.

    Args:
        message: Human-readable error description.
        status: HTTP status mirroring the error kind.
        data: Optional details (e.g. field errors).

    Returns:
        JsonResponse with ``success=False``.
    """
    return JsonResponse(
        _envelope(success=False, message=message, data=data),
        status=status,
    )
