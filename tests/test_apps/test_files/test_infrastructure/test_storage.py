"""Tests for the S3 storage backend."""

from unittest import mock

import pytest
from botocore.exceptions import EndpointConnectionError
from django.core.files.base import ContentFile
from django.core.files.storage import default_storage

from server.apps.core.exceptions import UploadFailedError
from server.apps.files.infrastructure.storage import FileStorage

_FLAKY = EndpointConnectionError(endpoint_url='http://s3.test')


def test_default_storage_is_file_storage():
    """Test settings wire user blobs to FileStorage."""
    assert isinstance(default_storage, FileStorage)


def test_save_with_retries_recovers_from_transient_error(mock_s3):
    """Test a failed first attempt is retried with rewound content."""
    storage = default_storage
    original_save = FileStorage.save
    calls = []

    def flaky_save(self, name, content, max_length=None):
        calls.append(name)
        if len(calls) == 1:
            content.read()
            raise _FLAKY
        return original_save(self, name, content, max_length)

    content = ContentFile(b'payload', name='x.txt')
    with mock.patch.object(FileStorage, 'save', flaky_save):
        saved_name = storage.save_with_retries('1/x.txt', content, attempts=3)

    assert len(calls) == 2
    assert storage.open(saved_name).read() == b'payload'


def test_save_with_retries_gives_up(mock_s3, bucket_keys):
    """Test persistent failures surface as UploadFailedError."""
    storage = default_storage
    content = ContentFile(b'payload', name='x.txt')

    with mock.patch.object(FileStorage, 'save', side_effect=_FLAKY) as save:
        with pytest.raises(UploadFailedError, match='after 3 attempts'):
            storage.save_with_retries('1/x.txt', content, attempts=3)

    assert save.call_count == 3
    assert bucket_keys() == []


def test_rollback_upload_removes_blob(mock_s3, bucket_keys):
    """Test rollback deletes a stored blob."""
    storage = default_storage
    saved_name = storage.save('1/y.txt', ContentFile(b'data'))

    storage.rollback_upload(saved_name)

    assert bucket_keys() == []


def test_rollback_upload_swallows_errors(mock_s3):
    """Test rollback failures are logged, not raised."""
    storage = default_storage

    with mock.patch.object(FileStorage, 'delete', side_effect=_FLAKY):
        storage.rollback_upload('1/missing.txt')


def test_discard_removes_blob(mock_s3, bucket_keys):
    """Test discarding deletes an existing blob."""
    storage = default_storage
    saved_name = storage.save('1/z.txt', ContentFile(b'data'))

    storage.discard(saved_name)

    assert bucket_keys() == []


def test_discard_missing_blob(mock_s3):
    """Test discarding a blob that is already gone is a no-op."""
    with mock.patch.object(FileStorage, 'delete') as delete:
        default_storage.discard('1/never-written.txt')

    delete.assert_not_called()
