"""Tests for share link business logic."""

from unittest import mock

import pytest

from server.apps.core.exceptions import (
    ForbiddenError,
    NotFoundError,
    ServiceError,
)
from server.apps.files.logic import share_operations
from server.apps.files.logic.file_operations import delete_file, upload_file
from server.apps.files.logic.share_operations import (
    open_shared_file,
    resolve_token,
    share_file,
    shared_file_info,
    unshare_file,
)
from server.apps.files.models import File


@pytest.fixture
def stored_file(user, mock_s3, make_upload):
    """Upload a small private file for the test user.

    Returns:
        File instance.
    """
    uploaded = make_upload('a.pdf', b'%PDF-1.4', 'application/pdf')
    return upload_file(user, uploaded)


@pytest.mark.django_db
def test_share_file_mints_token(user, stored_file):
    """Test sharing makes the file public under a URL-safe token."""
    shared = share_file(user, stored_file.id)

    assert shared.is_public is True
    assert len(shared.share_token) >= 40
    assert all(
        char.isalnum() or char in '-_' for char in shared.share_token
    )


@pytest.mark.django_db
def test_share_file_is_idempotent(user, stored_file):
    """Test sharing twice returns the same token."""
    first = share_file(user, stored_file.id).share_token
    second = share_file(user, stored_file.id).share_token

    assert first == second


@pytest.mark.django_db
def test_share_foreign_file(user, other_user, mock_s3, make_upload):
    """Test sharing another user's file is forbidden."""
    foreign = upload_file(other_user, make_upload())

    with pytest.raises(ForbiddenError):
        share_file(user, foreign.id)


@pytest.mark.django_db
def test_token_collision_is_retried(
    user,
    stored_file,
    other_user,
    make_upload,
):
    """Test a colliding token is replaced without surfacing an error."""
    taken = upload_file(other_user, make_upload())
    share_file(other_user, taken.id)
    taken.refresh_from_db()

    tokens = iter([taken.share_token, 'fresh-token'])
    with mock.patch.object(
        share_operations,
        'generate_share_token',
        side_effect=lambda: next(tokens),
    ):
        shared = share_file(user, stored_file.id)

    assert shared.share_token == 'fresh-token'


@pytest.mark.django_db
def test_token_generation_gives_up(user, stored_file, other_user, make_upload):
    """Test endless collisions end in an error instead of a loop."""
    taken = upload_file(other_user, make_upload())
    share_file(other_user, taken.id)
    taken.refresh_from_db()

    with mock.patch.object(
        share_operations,
        'generate_share_token',
        return_value=taken.share_token,
    ):
        with pytest.raises(ServiceError, match='unique share token'):
            share_file(user, stored_file.id)


@pytest.mark.django_db
def test_unshare_revokes_token(user, stored_file):
    """Test unsharing clears the token and the old link stops resolving."""
    token = share_file(user, stored_file.id).share_token

    unshared = unshare_file(user, stored_file.id)

    assert unshared.is_public is False
    assert unshared.share_token is None
    with pytest.raises(NotFoundError):
        resolve_token(token)


@pytest.mark.django_db
def test_unshare_private_file_is_noop(user, stored_file):
    """Test unsharing a private file succeeds without changes."""
    unshared = unshare_file(user, stored_file.id)

    assert unshared.is_public is False


@pytest.mark.django_db
def test_reshare_mints_new_token(user, stored_file):
    """Test sharing after unsharing does not revive the old link."""
    old_token = share_file(user, stored_file.id).share_token
    unshare_file(user, stored_file.id)

    new_token = share_file(user, stored_file.id).share_token

    assert new_token != old_token
    with pytest.raises(NotFoundError):
        resolve_token(old_token)


@pytest.mark.django_db
def test_open_shared_file_counts_download(user, stored_file):
    """Test anonymous downloads stream the bytes and bump the counter."""
    token = share_file(user, stored_file.id).share_token

    file_instance, stream = open_shared_file(token)

    assert stream.read() == b'%PDF-1.4'
    assert file_instance.download_count == 1


@pytest.mark.django_db
def test_open_shared_file_checks_file_id(user, stored_file):
    """Test a token only opens the file it was minted for."""
    token = share_file(user, stored_file.id).share_token

    with pytest.raises(NotFoundError):
        open_shared_file(token, file_id=stored_file.id + 1)

    assert File.objects.get(id=stored_file.id).download_count == 0


@pytest.mark.django_db
@pytest.mark.parametrize('token', [None, '', 'no-such-token'])
def test_unknown_tokens_not_found(token):
    """Test unknown tokens are not found."""
    with pytest.raises(NotFoundError):
        resolve_token(token)


@pytest.mark.django_db
def test_deleting_file_invalidates_token(user, stored_file):
    """Test a deleted file's link stops resolving."""
    token = share_file(user, stored_file.id).share_token

    delete_file(user, stored_file.id)

    with pytest.raises(NotFoundError):
        shared_file_info(token)


@pytest.mark.django_db
def test_shared_file_info(user, stored_file):
    """Test info lookups do not count as downloads."""
    token = share_file(user, stored_file.id).share_token

    info = shared_file_info(token)

    assert info.original_name == 'a.pdf'
    assert info.download_count == 0
