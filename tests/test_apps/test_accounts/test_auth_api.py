"""Tests for the account endpoints."""

import pytest
from django.test import Client

_JSON = 'application/json'


@pytest.fixture
def client():
    """Anonymous Django test client.

    Returns:
        Client without credentials.
    """
    return Client()


@pytest.mark.django_db
def test_register(client):
    """Test registration answers 201 with a usable token."""
    response = client.post(
        '/api/auth/register',
        {
            'username': 'alice',
            'email': 'alice@example.com',
            'password': 'correct-horse-battery',
        },
        content_type=_JSON,
    )
    body = response.json()

    assert response.status_code == 201
    assert body['success'] is True
    assert body['data']['tokenType'] == 'Bearer'
    assert body['data']['username'] == 'alice'

    me = client.get(
        '/api/auth/me',
        HTTP_AUTHORIZATION=f'Bearer {body["data"]["token"]}',
    )
    assert me.status_code == 200
    assert me.json()['data']['email'] == 'alice@example.com'


@pytest.mark.django_db
def test_register_duplicate(client, user):
    """Test registering a taken username answers 409."""
    response = client.post(
        '/api/auth/register',
        {
            'username': 'testuser',
            'email': 'new@example.com',
            'password': 'correct-horse-battery',
        },
        content_type=_JSON,
    )

    assert response.status_code == 409
    assert response.json()['message'] == 'Username already exists'


@pytest.mark.django_db
def test_register_malformed_body(client):
    """Test a non-JSON body answers 400."""
    response = client.post(
        '/api/auth/register',
        'not json',
        content_type=_JSON,
    )

    assert response.status_code == 400
    assert response.json()['success'] is False


@pytest.mark.django_db
@pytest.mark.parametrize('payload', [
    {'username': ['a'], 'email': 'a@example.com', 'password': 'x' * 12},
    {'username': 'alice', 'email': 7, 'password': 'correct-horse-battery'},
    {'username': 'alice', 'email': 'a@example.com', 'password': 123456789},
])
def test_register_non_string_field(client, django_user_model, payload):
    """Test fields of the wrong JSON type answer 400, not 500."""
    response = client.post('/api/auth/register', payload, content_type=_JSON)

    assert response.status_code == 400
    assert response.json()['message'].endswith('must be a string')
    assert not django_user_model.objects.filter(username='alice').exists()


@pytest.mark.django_db
@pytest.mark.parametrize('payload', [
    {'usernameOrEmail': 123, 'password': 'testpass123'},
    {'username': {'name': 'testuser'}, 'password': 'testpass123'},
    {'usernameOrEmail': 'testuser', 'password': ['testpass123']},
])
def test_login_non_string_field(client, user, payload):
    """Test identifiers and passwords must be JSON strings."""
    response = client.post('/api/auth/login', payload, content_type=_JSON)

    assert response.status_code == 400
    assert response.json()['success'] is False

@pytest.mark.django_db
@pytest.mark.parametrize('field', ['usernameOrEmail', 'username'])
def test_login(client, user, field):
    """Test signing in with either identifier field."""
    response = client.post(
        '/api/auth/login',
        {field: 'testuser', 'password': 'testpass123'},
        content_type=_JSON,
    )

    assert response.status_code == 200
    assert response.json()['data']['token']


@pytest.mark.django_db
def test_login_wrong_password(client, user):
    """Test bad credentials answer 401 with the uniform message."""
    response = client.post(
        '/api/auth/login',
        {'usernameOrEmail': 'test@example.com', 'password': 'nope'},
        content_type=_JSON,
    )

    assert response.status_code == 401
    assert response.json()['message'] == 'Invalid username or password'


@pytest.mark.django_db
def test_me_reports_storage(auth_client):
    """Test the account endpoint includes storage figures."""
    response = auth_client.get('/api/auth/me')
    data = response.json()['data']

    assert data['username'] == 'testuser'
    assert data['storage']['usedStorage'] == 0
    assert data['storage']['totalFiles'] == 0


@pytest.mark.django_db
@pytest.mark.parametrize('header', [
    None,
    'Bearer not-a-token',
    'Basic dGVzdDp0ZXN0',
    'Bearer',
])
def test_me_requires_valid_token(client, header):
    """Test missing or invalid credentials answer 401 with a challenge."""
    extra = {} if header is None else {'HTTP_AUTHORIZATION': header}
    response = client.get('/api/auth/me', **extra)

    assert response.status_code == 401
    assert response['WWW-Authenticate'] == 'Bearer'
    assert response.json()['success'] is False


@pytest.mark.django_db
def test_login_rejects_get(client):
    """Test the login endpoint only accepts POST."""
    response = client.get('/api/auth/login')

    assert response.status_code == 405
