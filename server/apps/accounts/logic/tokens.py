"""Stateless bearer tokens.

A token is a timestamped, signed payload holding the user id and a
fingerprint of the user's session auth hash. The hash changes with the
password, so changing the password revokes every outstanding token.
"""

import logging
from typing import Any, Final

from django.conf import settings
from django.contrib.auth import get_user_model
from django.core import signing
from django.utils.crypto import constant_time_compare, salted_hmac

from server.apps.core.exceptions import UnauthorizedError

# User type for Django's dynamic user model
_User = Any

_SALT: Final = 'cloudsync.auth'
_FINGERPRINT_LENGTH: Final = 32

logger = logging.getLogger(__name__)


def issue_token(user: _User) -> str:
    """Sign a bearer token for the user.

    Args:
        user: Authenticated user.

    Returns:
        URL-safe token string.
    """
    return signing.dumps(
        {'uid': user.pk, 'fp': _fingerprint(user)},
        salt=_SALT,
        compress=True,
    )


def resolve_token(token: str | None) -> _User:
    """Resolve a bearer token to an active user.

    Args:
        token: Token taken from the Authorization header.

    Returns:
        The user the token was issued to.

    Raises:
        UnauthorizedError: If the token is missing, malformed, badly
            signed, expired, or issued before a password change.
    """
    if not token:
        raise UnauthorizedError('Authentication required')

    try:
        payload = signing.loads(
            token,
            salt=_SALT,
            max_age=settings.CLOUDSYNC_TOKEN_MAX_AGE,
        )
    except signing.SignatureExpired as error:
        raise UnauthorizedError('Token has expired') from error
    except signing.BadSignature as error:
        raise UnauthorizedError('Invalid token') from error

    if not isinstance(payload, dict):
        raise UnauthorizedError('Invalid token')
    if not isinstance(payload.get('uid'), int):
        raise UnauthorizedError('Invalid token')

    user = get_user_model().objects.filter(
        pk=payload['uid'],
        is_active=True,
    ).first()
    if user is None:
        raise UnauthorizedError('Invalid token')

    fingerprint = str(payload.get('fp', ''))
    if not constant_time_compare(fingerprint, _fingerprint(user)):
        logger.info('Rejected stale token for user %s', user.username)
        raise UnauthorizedError('Invalid token')
    return user


def _fingerprint(user: _User) -> str:
    digest = salted_hmac(_SALT, user.get_session_auth_hash()).hexdigest()
    return digest[:_FINGERPRINT_LENGTH]
