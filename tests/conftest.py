"""Fixtures shared by every test package."""

import pytest
from django.contrib.auth import get_user_model
from django.test import Client

from server.apps.accounts.logic.tokens import issue_token

User = get_user_model()


@pytest.fixture(autouse=True)
def _fast_password_hasher(settings):
    """Use a cheap hasher so user fixtures do not dominate test time."""
    settings.PASSWORD_HASHERS = [
        'django.contrib.auth.hashers.MD5PasswordHasher',
    ]


@pytest.fixture
def user(db):
    """Create test user.

    Returns:
        User instance for testing.
    """
    return User.objects.create_user(
        username='testuser',
        password='testpass123',
        email='test@example.com',
    )


@pytest.fixture
def other_user(db):
    """Create second test user for isolation tests.

    Returns:
        Second user instance.
    """
    return User.objects.create_user(
        username='otheruser',
        password='testpass123',
        email='other@example.com',
    )


@pytest.fixture
def auth_client(user):
    """Django test client sending the user's bearer token.

    Returns:
        Client with an Authorization header preset.
    """
    return Client(HTTP_AUTHORIZATION=f'Bearer {issue_token(user)}')


@pytest.fixture
def other_client(other_user):
    """Django test client authenticated as the second user.

    Returns:
        Client with an Authorization header preset.
    """
    return Client(HTTP_AUTHORIZATION=f'Bearer {issue_token(other_user)}')
