"""Business logic for file operations."""

import logging
from dataclasses import dataclass
from typing import IO, TYPE_CHECKING, Any

from django.conf import settings
from django.core.files.storage import default_storage
from django.core.files.uploadedfile import UploadedFile
from django.db import transaction
from django.db.models import F, QuerySet

from server.apps.core.exceptions import (
    ForbiddenError,
    InvalidInputError,
    NotFoundError,
    ServiceError,
)
from server.apps.files.infrastructure.metadata import (
    build_stored_name,
    calculate_checksum,
    clean_name,
    detect_mime_type,
    validate_storage_path,
)
from server.apps.files.logic.folder_operations import (
    count_folders,
    get_owned_folder,
    resolve_folder,
)
from server.apps.files.logic.quota_operations import (
    commit_reservation,
    decrement_usage,
    get_or_create_quota,
    lock_quota,
    release_reservation,
    reserve_quota,
)
from server.apps.files.models import File, Folder

if TYPE_CHECKING:
    from server.apps.files.infrastructure.storage import FileStorage

# User type for Django's dynamic user model
_User = Any

_FILE_NAME_LABEL = 'File name'

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class UploadResult:
    """Outcome of one file in a batch upload."""

    name: str
    file: File | None = None
    error: str | None = None

    @property
    def success(self) -> bool:
        """Whether the file was stored."""
        return self.file is not None


@dataclass(frozen=True)
class StorageStats:
    """Ledger figures and tree-wide counts for one user."""

    used_bytes: int
    quota_bytes: int
    available_bytes: int
    used_percentage: float
    total_files: int
    total_folders: int


def _get_storage() -> 'FileStorage':
    """Get the configured default storage backend.

    Returns:
        FileStorage instance with proper S3 configuration.
    """
    return default_storage  # type: ignore[return-value]


def upload_file(
    user: _User,
    uploaded: UploadedFile,
    folder_id: int | None = None,
) -> File:
    """Store an uploaded file and register it.

    Space is reserved on the ledger before any byte is written, the blob
    is written without holding a lock, and the record is created in the
    same transaction that turns the reservation into usage. Any failure
    after the reservation releases it and removes the blob.

    Args:
        user: Owner of the file.
        uploaded: Uploaded file from the request.
        folder_id: Target folder, None for the root.

    Returns:
        Created File instance.

    Raises:
        InvalidInputError: If the name is invalid or the file is empty.
        NotFoundError: If the folder is not one of the caller's.
        QuotaExceededError: If the file does not fit into the quota.
        UploadFailedError: If the blob store kept failing.
    """
    original_name = clean_name(uploaded.name, _FILE_NAME_LABEL)
    size_bytes = uploaded.size or 0
    if size_bytes <= 0:
        raise InvalidInputError(f'Cannot store empty file {original_name}')

    folder = resolve_folder(user, folder_id)
    content_type = detect_mime_type(original_name, uploaded.content_type)
    stored_name = build_stored_name(user.id, original_name)
    validate_storage_path(user.id, stored_name)

    reserve_quota(user, size_bytes)

    storage = _get_storage()
    saved_name = None
    try:
        checksum = calculate_checksum(uploaded)
        saved_name = storage.save_with_retries(
            stored_name,
            uploaded,
            settings.CLOUDSYNC_UPLOAD_RETRIES,
        )
        with transaction.atomic():
            commit_reservation(user, size_bytes)
            _lock_target_folder(user, folder)
            file_instance = File.objects.create(
                user=user,
                folder=folder,
                original_name=original_name,
                stored_name=saved_name,
                content_type=content_type,
                size_bytes=size_bytes,
                checksum_sha256=checksum,
            )
    except Exception:
        logger.exception(
            'Upload failed, releasing %d reserved bytes: %s',
            size_bytes,
            original_name,
        )
        release_reservation(user, size_bytes)
        if saved_name is not None:
            storage.rollback_upload(saved_name)
        raise

    logger.info(
        'File uploaded: user=%s, file=%d, name=%s, size=%d',
        user.username,
        file_instance.id,
        original_name,
        size_bytes,
    )
    return file_instance


def upload_files(
    user: _User,
    uploads: list[UploadedFile],
    folder_id: int | None = None,
) -> list[UploadResult]:
    """Upload several files, one after another in arrival order.

    Each file succeeds or fails on its own; a file that does not fit is
    reported and the next one is still attempted.

    Args:
        user: Owner of the files.
        uploads: Uploaded files in arrival order.
        folder_id: Target folder, None for the root.

    Returns:
        One UploadResult per uploaded file, in the same order.

    Raises:
        InvalidInputError: If no files were sent.
        NotFoundError: If the folder is not one of the caller's.
    """
    if not uploads:
        raise InvalidInputError('No files provided')
    folder = resolve_folder(user, folder_id)
    target_id = folder.id if folder is not None else None

    results = []
    for uploaded in uploads:
        name = uploaded.name or ''
        try:
            file_instance = upload_file(user, uploaded, target_id)
        except ServiceError as error:
            results.append(UploadResult(name=name, error=error.message))
        except Exception:
            logger.exception('Unexpected error uploading %s', name)
            results.append(UploadResult(name=name, error='Upload failed'))
        else:
            results.append(UploadResult(name=name, file=file_instance))

    logger.info(
        'Batch upload by %s: %d of %d files stored',
        user.username,
        sum(1 for result in results if result.success),
        len(results),
    )
    return results


def get_owned_file(user: _User, file_id: int, *, lock: bool = False) -> File:
    """Fetch a file the caller owns.

    Args:
        user: Caller.
        file_id: File to fetch.
        lock: Take a row lock (inside ``transaction.atomic`` only).

    Returns:
        File instance.

    Raises:
        NotFoundError: If the file does not exist.
        ForbiddenError: If the file belongs to another user.
    """
    queryset = File.objects.select_related('folder')
    if lock:
        queryset = queryset.select_for_update(of=('self',))
    try:
        file_instance = queryset.get(id=file_id)
    except File.DoesNotExist as error:
        raise NotFoundError('File not found') from error

    if file_instance.user_id != user.id:
        logger.warning(
            'User %s tried to access file %d of another user',
            user.username,
            file_id,
        )
        raise ForbiddenError('You do not have access to this file')
    return file_instance


def get_file(user: _User, file_id: int) -> File:
    """Get file metadata.

    Args:
        user: Caller.
        file_id: File to read.

    Returns:
        File instance.
    """
    return get_owned_file(user, file_id)


def list_all_files(user: _User) -> QuerySet[File]:
    """List every file the caller owns, newest first."""
    return File.objects.filter(user=user).select_related('folder')


def list_root_files(user: _User) -> QuerySet[File]:
    """List the caller's files that sit outside any folder."""
    return File.objects.filter(user=user, folder__isnull=True)


def list_folder_files(user: _User, folder_id: int) -> QuerySet[File]:
    """List the files directly inside one of the caller's folders.

    Args:
        user: Caller.
        folder_id: Folder to list.

    Returns:
        QuerySet of files in the folder.
    """
    folder = get_owned_folder(user, folder_id)
    return File.objects.filter(user=user, folder=folder).select_related(
        'folder',
    )


def open_file(user: _User, file_id: int) -> tuple[File, IO[bytes]]:
    """Open a file's bytes for its owner and count the download.

    Args:
        user: Caller.
        file_id: File to download.

    Returns:
        Tuple of the File instance and a readable binary stream.
    """
    file_instance = get_owned_file(user, file_id)
    stream = open_blob(file_instance)
    record_download(file_instance)
    logger.debug(
        'File downloaded by owner: file=%d, count=%d',
        file_instance.id,
        file_instance.download_count,
    )
    return file_instance, stream


def open_blob(file_instance: File) -> IO[bytes]:
    """Open the blob behind a file record.

    Args:
        file_instance: File whose bytes are wanted.

    Returns:
        Readable binary stream.

    Raises:
        NotFoundError: If the blob is missing from storage.
    """
    storage = _get_storage()
    try:
        return storage.open(file_instance.stored_name, 'rb')
    except FileNotFoundError as error:
        logger.exception(
            'Blob missing for file %d: %s',
            file_instance.id,
            file_instance.stored_name,
        )
        raise NotFoundError('File content not found') from error


def record_download(file_instance: File) -> None:
    """Increment the download counter without a read-modify-write race.

    Args:
        file_instance: Downloaded file; its counter is refreshed in place.
    """
    File.objects.filter(id=file_instance.id).update(
        download_count=F('download_count') + 1,
    )
    file_instance.refresh_from_db(fields=['download_count'])


def rename_file(user: _User, file_id: int, new_name: str | None) -> File:
    """Change the name a file is shown under.

    The blob key and the content type are left untouched.

    Args:
        user: Caller.
        file_id: File to rename.
        new_name: New display name.

    Returns:
        Updated File instance.
    """
    original_name = clean_name(new_name, _FILE_NAME_LABEL)
    with transaction.atomic():
        file_instance = get_owned_file(user, file_id, lock=True)
        old_name = file_instance.original_name
        file_instance.original_name = original_name
        file_instance.save(update_fields=['original_name', 'updated_at'])

    logger.info(
        'File renamed: file=%d, %s -> %s',
        file_instance.id,
        old_name,
        original_name,
    )
    return file_instance


def move_file(user: _User, file_id: int, folder_id: int | None) -> File:
    """Move a file into another folder (or to the root).

    The ledger row is locked first, as a folder delete does, so a file
    cannot slip into a subtree that is being deleted.

    Args:
        user: Caller.
        file_id: File to move.
        folder_id: Target folder, None for the root.

    Returns:
        Updated File instance.

    Raises:
        NotFoundError: If the target folder is not one of the caller's.
    """
    with transaction.atomic():
        lock_quota(user)
        target = _lock_folder_reference(user, folder_id)
        file_instance = get_owned_file(user, file_id, lock=True)
        file_instance.folder = target
        file_instance.save(update_fields=['folder', 'updated_at'])

    logger.info(
        'File moved: file=%d, folder=%s',
        file_instance.id,
        folder_id,
    )
    return file_instance


def delete_file(user: _User, file_id: int) -> None:
    """Delete a file record and release its bytes from the ledger.

    The record delete and the ledger decrement commit together; the blob
    is removed by the post_delete signal once the transaction commits.

    Args:
        user: Caller.
        file_id: File to delete.
    """
    with transaction.atomic():
        lock_quota(user)
        file_instance = get_owned_file(user, file_id, lock=True)
        size_bytes = file_instance.size_bytes
        file_instance.delete()
        decrement_usage(user, size_bytes)

    logger.info(
        'File deleted: user=%s, file=%d, freed=%d',
        user.username,
        file_id,
        size_bytes,
    )


def search_files(user: _User, query: str | None) -> QuerySet[File]:
    """Find the caller's files whose name contains the query.

    Args:
        user: Caller.
        query: Case-insensitive substring.

    Returns:
        Matching files.

    Raises:
        InvalidInputError: If the query is blank.
    """
    term = (query or '').strip()
    if not term:
        raise InvalidInputError('Search query cannot be empty')
    logger.debug('Searching files of %s for %r', user.username, term)
    return File.objects.filter(
        user=user,
        original_name__icontains=term,
    ).select_related('folder')


def get_storage_stats(user: _User) -> StorageStats:
    """Summarise the caller's ledger and tree.

    Args:
        user: Caller.

    Returns:
        StorageStats with usage figures and whole-tree counts.
    """
    quota = get_or_create_quota(user)
    return StorageStats(
        used_bytes=quota.used_bytes,
        quota_bytes=quota.quota_bytes,
        available_bytes=quota.available_bytes(),
        used_percentage=quota.used_percentage(),
        total_files=File.objects.filter(user=user).count(),
        total_folders=count_folders(user),
    )


def _lock_target_folder(user: _User, folder: Folder | None) -> None:
    # The folder may have been deleted while the bytes were in flight
    if folder is None:
        return
    _lock_folder_reference(user, folder.id)


def _lock_folder_reference(
    user: _User,
    folder_id: int | None,
) -> Folder | None:
    if folder_id is None:
        return None
    try:
        return Folder.objects.select_for_update().get(id=folder_id, user=user)
    except Folder.DoesNotExist as error:
        raise NotFoundError('Folder not found') from error
