"""Shared fixtures for files app tests."""

import boto3
import pytest
from django.core.files.uploadedfile import SimpleUploadedFile
from moto import mock_aws

from server.apps.files.models import UserQuota


@pytest.fixture
def mock_s3():
    """Mock S3 service with the cloudsync bucket.

    Yields:
        boto3 S3 resource with cloudsync bucket created.
    """
    with mock_aws():
        conn = boto3.resource('s3', region_name='us-east-1')
        conn.create_bucket(Bucket='cloudsync')
        yield conn


@pytest.fixture
def make_upload():
    """Factory for in-memory uploaded files.

    Returns:
        Callable building a SimpleUploadedFile.
    """
    def factory(
        name='test.txt',
        content=b'test file content',
        content_type='text/plain',
    ):
        return SimpleUploadedFile(name, content, content_type=content_type)

    return factory


@pytest.fixture
def small_quota(user):
    """Give the test user a 100 byte quota.

    Returns:
        UserQuota instance.
    """
    return UserQuota.objects.create(user=user, quota_bytes=100)


@pytest.fixture
def bucket_keys(mock_s3):
    """Lister of the keys currently in the mocked bucket.

    Returns:
        Callable returning the sorted bucket keys.
    """
    def keys():
        bucket = mock_s3.Bucket('cloudsync')
        return sorted(obj.key for obj in bucket.objects.all())

    return keys
