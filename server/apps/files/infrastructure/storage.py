"""S3 blob store for user files."""

import logging
from typing import Any, Final, final, override

from botocore.exceptions import BotoCoreError, ClientError
from storages.backends.s3 import S3Storage

from server.apps.core.exceptions import UploadFailedError

# Errors worth another attempt: network/endpoint trouble and S3 error replies
_TRANSIENT_ERRORS: Final = (BotoCoreError, ClientError, OSError)

logger = logging.getLogger(__name__)


@final
class FileStorage(S3Storage):
    """Bucket holding the bytes behind ``File`` records.

    Blob keys are produced by ``build_stored_name`` and are never shown
    to clients. On top of ``S3Storage`` this adds bounded write retries
    and cleanup helpers for blobs whose record never made it (or no
    longer exists) in the database.
    """

    @override
    def save(  # noqa: WPS211
        self,
        name: str,
        content: Any,
        max_length: int | None = None,
    ) -> str:
        """Write one blob.

        Args:
            name: Requested blob key.
            content: File-like object positioned at its start.
            max_length: Optional maximum length for the key.

        Returns:
            Key the blob was stored under.
        """
        saved_name = super().save(name, content, max_length)
        logger.debug('Blob stored: %s', saved_name)
        return saved_name

    def save_with_retries(
        self,
        name: str,
        content: Any,
        attempts: int,
    ) -> str:
        """Save file, retrying transient storage failures.

        The content is rewound before every attempt.

        Args:
            name: Storage path for the file.
            content: File content (seekable file-like object).
            attempts: Maximum number of attempts (at least one is made).

        Returns:
            Actual storage path used.

        Raises:
            UploadFailedError: If every attempt failed.
        """
        attempts = max(1, attempts)
        for attempt in range(1, attempts + 1):
            content.seek(0)
            try:
                return self.save(name, content)
            except _TRANSIENT_ERRORS:
                logger.warning(
                    'Storage write attempt %d/%d failed: %s',
                    attempt,
                    attempts,
                    name,
                )
        # Nothing may have landed, but a half-written object must not linger
        self.rollback_upload(name)
        logger.error('Giving up on blob %s after %d attempts', name, attempts)
        raise UploadFailedError(
            f'Could not store file after {attempts} attempts',
        )

    @override
    def delete(self, name: str) -> None:
        """Remove one blob.

        Args:
            name: Blob key.
        """
        super().delete(name)
        logger.debug('Blob removed: %s', name)

    def rollback_upload(self, name: str) -> None:
        """Remove a blob whose upload was abandoned.

        Called when the record could not be created after the bytes were
        written. A failure here leaves an unreferenced blob behind and is
        only logged; the caller is already propagating the original error.

        Args:
            name: Blob key.
        """
        logger.warning('Rolling back blob of failed upload: %s', name)
        self._remove_quietly(name)

    def discard(self, name: str) -> None:
        """Remove the blob of a deleted record, if it is still there.

        Args:
            name: Blob key.
        """
        try:
            present = self.exists(name)
        except _TRANSIENT_ERRORS:
            logger.exception('Could not check blob before removal: %s', name)
            return
        if not present:
            logger.warning('Blob already gone: %s', name)
            return
        self._remove_quietly(name)

    def _remove_quietly(self, name: str) -> None:
        try:
            self.delete(name)
        except _TRANSIENT_ERRORS:
            logger.exception('Orphaned blob left in storage: %s', name)
