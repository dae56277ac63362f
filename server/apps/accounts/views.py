"""HTTP endpoints for registration, login and the current account."""

from http import HTTPStatus
from typing import Any

from django.http import HttpRequest, JsonResponse

from server.apps.accounts.decorators import token_required
from server.apps.accounts.logic import auth_operations
from server.apps.core.decorators import (
    api_view,
    optional_text,
    parse_json_body,
)
from server.apps.core.responses import success_response
from server.apps.files.logic.file_operations import get_storage_stats
from server.apps.files.serializers import serialize_stats


def _auth_payload(result: auth_operations.AuthResult) -> dict[str, Any]:
    return {
        'token': result.token,
        'tokenType': 'Bearer',
        'username': result.user.username,
        'email': result.user.email,
    }


def _text_fields(body: dict[str, Any], *names: str) -> list[str | None]:
    return [optional_text(body.get(name), name) for name in names]


@api_view(['POST'])
def register(request: HttpRequest) -> JsonResponse:
    """Create an account from ``{username, email, password}``."""
    body = parse_json_body(request)
    result = auth_operations.register(
        *_text_fields(body, 'username', 'email', 'password'),
    )
    return success_response(
        'User registered successfully',
        _auth_payload(result),
        status=HTTPStatus.CREATED,
    )


@api_view(['POST'])
def login(request: HttpRequest) -> JsonResponse:
    """Sign in with ``{usernameOrEmail, password}``.

    ``username`` is accepted in place of ``usernameOrEmail`` for older
    web clients.
    """
    body = parse_json_body(request)
    identifier = body.get('usernameOrEmail') or body.get('username')
    result = auth_operations.login(
        optional_text(identifier, 'usernameOrEmail'),
        optional_text(body.get('password'), 'password'),
    )
    return success_response('Login successful', _auth_payload(result))


@api_view(['GET'])
@token_required
def me(request: HttpRequest) -> JsonResponse:
    """Describe the signed-in account and its storage figures."""
    user = request.user
    return success_response(
        'Current user',
        {
            'id': user.pk,
            'username': user.username,
            'email': user.email,
            'storage': serialize_stats(get_storage_stats(user)),
        },
    )
