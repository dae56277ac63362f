"""Tests for sharing endpoints and anonymous share links."""

import pytest
from django.test import Client


@pytest.fixture
def file_id(auth_client, mock_s3, make_upload):
    """Upload a PDF through the API.

    Returns:
        Id of the uploaded file.
    """
    upload = make_upload('a.pdf', b'%PDF-1.4 shared', 'application/pdf')
    response = auth_client.post('/api/files/upload', {'file': upload})
    return response.json()['data']['id']


@pytest.fixture
def share_token(auth_client, file_id):
    """Share the uploaded file.

    Returns:
        The minted share token.
    """
    response = auth_client.post(f'/api/files/{file_id}/share')
    return response.json()['data']['shareToken']


@pytest.mark.django_db
def test_share_and_download_anonymously(auth_client, file_id):
    """Test a shared file can be fetched without credentials."""
    shared = auth_client.post(f'/api/files/{file_id}/share')
    token = shared.json()['data']['shareToken']

    response = Client().get(f'/api/share/{token}')

    assert shared.json()['data']['isPublic'] is True
    assert response.status_code == 200
    assert b''.join(response.streaming_content) == b'%PDF-1.4 shared'
    assert response['Content-Type'] == 'application/pdf'
    assert 'a.pdf' in response['Content-Disposition']

    detail = auth_client.get(f'/api/files/{file_id}')
    assert detail.json()['data']['downloadCount'] == 1


@pytest.mark.django_db
def test_share_twice_keeps_token(auth_client, file_id, share_token):
    """Test sharing an already shared file returns the same token."""
    response = auth_client.post(f'/api/files/{file_id}/share')

    assert response.json()['data']['shareToken'] == share_token


@pytest.mark.django_db
def test_unshare_revokes_link(auth_client, file_id, share_token):
    """Test a revoked token answers 404."""
    response = auth_client.delete(f'/api/files/{file_id}/share')

    assert response.status_code == 200
    assert response.json()['data']['isPublic'] is False
    assert response.json()['data']['shareToken'] is None
    assert Client().get(f'/api/share/{share_token}').status_code == 404


@pytest.mark.django_db
def test_shared_info(share_token):
    """Test the info endpoint describes the file without owner fields."""
    response = Client().get(f'/api/share/{share_token}/info')
    data = response.json()['data']

    assert response.status_code == 200
    assert data['name'] == 'a.pdf'
    assert data['contentType'] == 'application/pdf'
    assert data['size'] == len(b'%PDF-1.4 shared')
    assert 'shareToken' not in data
    assert 'folderId' not in data


@pytest.mark.django_db
def test_unknown_token(client):
    """Test an unknown token answers 404."""
    response = client.get('/api/share/not-a-real-token/info')

    assert response.status_code == 404
    assert response.json()['message'] == 'Shared file not found'


@pytest.mark.django_db
def test_share_foreign_file(other_client, file_id):
    """Test sharing another user's file is forbidden."""
    response = other_client.post(f'/api/files/{file_id}/share')

    assert response.status_code == 403


@pytest.mark.django_db
def test_download_with_query_token(file_id, share_token):
    """Test the file download route accepts a share token."""
    response = Client().get(
        f'/api/files/{file_id}/download',
        {'token': share_token},
    )

    assert response.status_code == 200
    assert b''.join(response.streaming_content) == b'%PDF-1.4 shared'


@pytest.mark.django_db
def test_query_token_for_other_file(
    auth_client,
    file_id,
    share_token,
    make_upload,
):
    """Test a share token only unlocks the file it was minted for."""
    other = auth_client.post(
        '/api/files/upload',
        {'file': make_upload('b.txt')},
    ).json()['data']['id']

    response = Client().get(
        f'/api/files/{other}/download',
        {'token': share_token},
    )

    assert response.status_code == 404


@pytest.mark.django_db
def test_download_without_credentials(client, file_id):
    """Test the file download route needs a bearer or share token."""
    response = client.get(f'/api/files/{file_id}/download')

    assert response.status_code == 401
