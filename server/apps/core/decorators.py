"""View decorators for the JSON API."""

import functools
import json
import logging
from collections.abc import Callable, Iterable
from http import HTTPStatus
from typing import Any

from django.core.exceptions import ValidationError
from django.http import HttpRequest, HttpResponse
from django.views.decorators.csrf import csrf_exempt

from server.apps.core.exceptions import InvalidInputError, ServiceError
from server.apps.core.responses import error_response

logger = logging.getLogger(__name__)

_View = Callable[..., HttpResponse]


def api_view(methods: Iterable[str]) -> Callable[[_View], _View]:
    """Turn a function into a JSON API endpoint.

    Rejects other HTTP methods with 405 and renders every
    ``ServiceError`` (and Django's ``ValidationError``) as a failure
    envelope with the matching status. Unexpected exceptions are logged
    and rendered as a generic 500 envelope.

    Args:
        methods: Allowed HTTP methods (upper case).

    Returns:
        Decorator for the view function.
    """
    allowed = frozenset(methods)

    def decorator(view: _View) -> _View:
        @csrf_exempt
        @functools.wraps(view)
        def wrapper(
            request: HttpRequest,
            *args: Any,
            **kwargs: Any,
        ) -> HttpResponse:
            if request.method not in allowed:
                response = error_response(
                    f'Method {request.method} not allowed',
                    status=HTTPStatus.METHOD_NOT_ALLOWED,
                )
                response['Allow'] = ', '.join(sorted(allowed))
                return response

            try:
                return view(request, *args, **kwargs)
            except ServiceError as error:
                logger.debug(
                    '%s %s failed: %s',
                    request.method,
                    request.path,
                    error.message,
                )
                response = error_response(error.message, error.status_code)
                if error.status_code == HTTPStatus.UNAUTHORIZED:
                    response['WWW-Authenticate'] = 'Bearer'
                return response
            except ValidationError as error:
                return error_response(
                    '; '.join(error.messages),
                    status=HTTPStatus.BAD_REQUEST,
                )
            except Exception:
                logger.exception(
                    'Unhandled error in %s %s',
                    request.method,
                    request.path,
                )
                return error_response(
                    'An unexpected error occurred',
                    status=HTTPStatus.INTERNAL_SERVER_ERROR,
                )

        return wrapper

    return decorator


def parse_json_body(request: HttpRequest) -> dict[str, Any]:
    """Decode a JSON object request body.

    Args:
        request: Incoming request.

    Returns:
        Decoded body.

    Raises:
        InvalidInputError: If the body is not a JSON object.
    """
    try:
        body = json.loads(request.body or b'{}')
    except (UnicodeDecodeError, json.JSONDecodeError) as error:
        raise InvalidInputError('Request body must be valid JSON') from error

    if not isinstance(body, dict):
        raise InvalidInputError('Request body must be a JSON object')
    return body


def optional_int(raw: str | int | None, field: str) -> int | None:
    """Parse an optional integer query/form parameter.

    Args:
        raw: Raw parameter value (``None`` or empty means absent).
        field: Parameter name for the error message.

    Returns:
        Parsed integer or None.

    Raises:
        InvalidInputError: If the value is not an integer.
    """
    if raw is None or (isinstance(raw, str) and raw in {'', 'null'}):
        return None
    try:
        return int(raw)
    except (TypeError, ValueError) as error:
        raise InvalidInputError(f'{field} must be an integer') from error


def optional_text(raw: Any, field: str) -> str | None:
    """Accept a string parameter, or nothing.

    JSON bodies can carry numbers, lists or objects where a string is
    expected; those are rejected here instead of deeper in the logic.

    Args:
        raw: Raw parameter value.
        field: Parameter name for the error message.

    Returns:
        The string, or None when absent.

    Raises:
        InvalidInputError: If the value is present but not a string.
    """
    if raw is None or isinstance(raw, str):
        return raw
    raise InvalidInputError(f'{field} must be a string')


def request_param(request: HttpRequest, name: str) -> Any:
    """Read a parameter from the query string, form data or JSON body.

    Args:
        request: Incoming request.
        name: Parameter name.

    Returns:
        The first value found, or None.
    """
    if name in request.GET:
        return request.GET[name]
    if request.method == 'POST' and name in request.POST:
        return request.POST[name]
    if request.content_type == 'application/json':
        return parse_json_body(request).get(name)
    return None
