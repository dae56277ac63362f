"""Bearer token authentication for API views."""

import functools
from collections.abc import Callable
from typing import Any, Final

from django.http import HttpRequest, HttpResponse

from server.apps.accounts.logic.tokens import resolve_token
from server.apps.core.exceptions import UnauthorizedError

_BEARER_SCHEME: Final = 'bearer'

_View = Callable[..., HttpResponse]


def bearer_token(request: HttpRequest) -> str | None:
    """Extract the token from an ``Authorization: Bearer`` header.

    Args:
        request: Incoming request.

    Returns:
        The token, or None if the header is absent.

    Raises:
        UnauthorizedError: If the header uses another scheme or is empty.
    """
    header = request.headers.get('Authorization')
    if header is None:
        return None
    scheme, _, token = header.strip().partition(' ')
    token = token.strip()
    if scheme.lower() != _BEARER_SCHEME or not token:
        raise UnauthorizedError('Invalid authorization header')
    return token


def authenticate_request(request: HttpRequest) -> Any:
    """Resolve the request's bearer token and attach the user.

    Args:
        request: Incoming request.

    Returns:
        The authenticated user, also stored on ``request.user``.

    Raises:
        UnauthorizedError: If the token is missing or invalid.
    """
    user = resolve_token(bearer_token(request))
    request.user = user
    return user


def token_required(view: _View) -> _View:
    """Require a valid bearer token; use beneath ``api_view``.

    Args:
        view: View function to protect.

    Returns:
        Wrapped view.
    """
    @functools.wraps(view)
    def wrapper(
        request: HttpRequest,
        *args: Any,
        **kwargs: Any,
    ) -> HttpResponse:
        authenticate_request(request)
        return view(request, *args, **kwargs)

    return wrapper
