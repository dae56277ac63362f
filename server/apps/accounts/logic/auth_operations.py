"""Business logic for registration and login."""

import logging
from dataclasses import dataclass
from typing import Any, Final

from django.contrib.auth import (
    authenticate,
    get_user_model,
    password_validation,
)
from django.contrib.auth.validators import UnicodeUsernameValidator
from django.core.exceptions import ValidationError
from django.core.validators import validate_email
from django.db import IntegrityError, transaction

from server.apps.accounts.logic.tokens import issue_token
from server.apps.core.exceptions import (
    ConflictError,
    InvalidInputError,
    UnauthorizedError,
)
from server.apps.files.logic.quota_operations import get_or_create_quota

# User type for Django's dynamic user model
_User = Any

_USERNAME_MAX_LENGTH: Final = 150
_INVALID_CREDENTIALS: Final = 'Invalid username or password'

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class AuthResult:
    """Token issued to an authenticated user."""

    token: str
    user: _User


def register(
    username: str | None,
    email: str | None,
    password: str | None,
) -> AuthResult:
    """Create an account with an empty ledger and sign the user in.

    Args:
        username: Desired username.
        email: Email address, unique regardless of case.
        password: Plain password, checked against the password validators.

    Returns:
        AuthResult for the new user.

    Raises:
        InvalidInputError: If a field is missing or malformed, or the
            password is too weak.
        ConflictError: If the username or email is taken.
    """
    username = (username or '').strip()
    email = (email or '').strip()
    _validate_username(username)
    _validate_email(email)
    if not password:
        raise InvalidInputError('Password is required')

    user_model = get_user_model()
    candidate = user_model(username=username, email=email)
    try:
        password_validation.validate_password(password, user=candidate)
    except ValidationError as error:
        raise InvalidInputError(' '.join(error.messages)) from error

    try:
        with transaction.atomic():
            _ensure_available(username, email)
            candidate.set_password(password)
            candidate.save()
            get_or_create_quota(candidate)
    except IntegrityError as error:
        # A concurrent registration won the race past the checks above
        logger.warning('Registration race lost: username=%s', username)
        _ensure_available(username, email)
        raise ConflictError('Account already exists') from error

    logger.info('User registered: username=%s', username)
    return AuthResult(token=issue_token(candidate), user=candidate)


def login(username_or_email: str | None, password: str | None) -> AuthResult:
    """Verify credentials and issue a token.

    Every failure (unknown account, wrong password, inactive user) is
    reported with the same message.

    Args:
        username_or_email: Username, or the email of the account.
        password: Plain password.

    Returns:
        AuthResult for the user.

    Raises:
        UnauthorizedError: If the credentials do not match.
    """
    identifier = (username_or_email or '').strip()
    if not identifier or not password:
        raise UnauthorizedError(_INVALID_CREDENTIALS)

    user = authenticate(
        username=_lookup_username(identifier),
        password=password,
    )
    if user is None:
        logger.warning('Failed login attempt: identifier=%s', identifier)
        raise UnauthorizedError(_INVALID_CREDENTIALS)

    logger.debug('User logged in: username=%s', user.username)
    return AuthResult(token=issue_token(user), user=user)


def _lookup_username(identifier: str) -> str:
    if '@' not in identifier:
        return identifier
    match = get_user_model().objects.filter(
        email__iexact=identifier,
    ).values_list('username', flat=True).first()
    # Unknown emails still go through authenticate() to keep timing even
    return match or identifier


def _validate_username(username: str) -> None:
    if not username:
        raise InvalidInputError('Username is required')
    if len(username) > _USERNAME_MAX_LENGTH:
        raise InvalidInputError(
            f'Username cannot be longer than '
            f'{_USERNAME_MAX_LENGTH} characters',
        )
    try:
        UnicodeUsernameValidator()(username)
    except ValidationError as error:
        raise InvalidInputError(' '.join(error.messages)) from error


def _validate_email(email: str) -> None:
    if not email:
        raise InvalidInputError('Email is required')
    try:
        validate_email(email)
    except ValidationError as error:
        raise InvalidInputError('Invalid email address') from error


def _ensure_available(username: str, email: str) -> None:
    """Reject a username or email (any case) that is already registered.

    Emails are also unique at the database level, ignoring case, so two
    registrations racing past this check cannot both be stored.

    Raises:
        ConflictError: If either value is taken.
    """
    users = get_user_model().objects
    if users.filter(username=username).exists():
        raise ConflictError('Username already exists')
    if users.filter(email__iexact=email).exists():
        raise ConflictError('Email already exists')
