"""Metadata extraction and name validation utilities for files."""

import hashlib
import mimetypes
import uuid
from pathlib import Path, PurePosixPath
from typing import BinaryIO, Final

from server.apps.core.exceptions import InvalidInputError

_CHUNK_SIZE: Final = 8192  # 8KB chunks for checksum calculation
_NAME_MAX_LENGTH: Final = 255
_DEFAULT_MIME_TYPE: Final = 'application/octet-stream'


def detect_mime_type(filename: str, declared: str | None = None) -> str:
    """Detect MIME type for an uploaded file.

    The type declared by the client wins when it is specific; otherwise
    the type is guessed from the filename extension.

    Args:
        filename: Filename with extension.
        declared: Content type sent with the upload, if any.

    Returns:
        MIME type string (e.g., 'image/jpeg', 'application/pdf').
        Returns 'application/octet-stream' if type cannot be determined.
    """
    if declared and declared != _DEFAULT_MIME_TYPE:
        return declared
    mime_type, _ = mimetypes.guess_type(filename)
    if mime_type is None:
        return _DEFAULT_MIME_TYPE
    return mime_type


def calculate_checksum(file_obj: BinaryIO) -> str:
    """Calculate SHA256 checksum of file.

    Reads file in chunks to handle large files efficiently.
    Resets file pointer to beginning after calculation.

    Args:
        file_obj: File-like object to checksum.

    Returns:
        Hex-encoded SHA256 hash string.
    """
    sha256_hash = hashlib.sha256()

    # Reset file pointer to beginning
    file_obj.seek(0)

    # Read in chunks to handle large files
    for chunk in iter(lambda: file_obj.read(_CHUNK_SIZE), b''):
        sha256_hash.update(chunk)

    # Reset file pointer to beginning for subsequent operations
    file_obj.seek(0)

    return sha256_hash.hexdigest()


def get_file_extension(filename: str) -> str:
    """Get file extension from filename.

    Args:
        filename: Filename (e.g., 'document.pdf').

    Returns:
        Extension without dot, lowercase (e.g., 'pdf').
        Returns empty string if no extension.
    """
    extension = Path(filename).suffix
    return extension.lstrip('.').lower()


def build_stored_name(user_id: int, original_name: str) -> str:
    """Generate a unique blob key for a new upload.

    The key never contains the user's filename, only its extension.

    Args:
        user_id: Owner's user ID.
        original_name: Name the user uploaded the file under.

    Returns:
        Storage key such as '42/0f8e...c1.pdf'.
    """
    extension = get_file_extension(original_name)
    stem = uuid.uuid4().hex
    if extension:
        return f'{user_id}/{stem}.{extension}'
    return f'{user_id}/{stem}'


def validate_storage_path(user_id: int, storage_path: str) -> None:
    """Validate storage path follows user isolation rules.

    Ensures the storage path starts with the user's ID to maintain
    multi-user isolation. This is a critical security check.

    Args:
        user_id: Owner's user ID.
        storage_path: Proposed storage path.

    Raises:
        InvalidInputError: If path doesn't start with user_id or is invalid.
    """
    if not storage_path:
        raise InvalidInputError('Storage path cannot be empty')

    path_parts = PurePosixPath(storage_path).parts
    if len(path_parts) != 2 or '..' in path_parts:
        raise InvalidInputError('Storage path must be {user_id}/{name}')

    first_component = path_parts[0]

    # Check if first component matches user_id
    try:
        path_user_id = int(first_component)
    except ValueError as error:
        raise InvalidInputError(
            'Storage path must start with user ID',
        ) from error

    if path_user_id != user_id:
        raise InvalidInputError(
            f'Storage path user ID ({path_user_id}) does not match '
            f'owner ({user_id})',
        )


def clean_name(raw_name: str | None, kind: str = 'Name') -> str:
    """Validate and normalise a file or folder name.

    Args:
        raw_name: Name as sent by the client.
        kind: Label used in error messages ('File name', 'Folder name').

    Returns:
        Name with surrounding whitespace stripped.

    Raises:
        InvalidInputError: If the name is not a string, is empty or too
            long, or contains path components.
    """
    if raw_name is not None and not isinstance(raw_name, str):
        raise InvalidInputError(f'{kind} must be a string')
    name = (raw_name or '').strip()
    if not name:
        raise InvalidInputError(f'{kind} cannot be empty')
    if len(name) > _NAME_MAX_LENGTH:
        raise InvalidInputError(
            f'{kind} cannot be longer than {_NAME_MAX_LENGTH} characters',
        )
    if any(char in name for char in ('/', '\\', '\x00')):
        raise InvalidInputError(f'Invalid {kind.lower()}: {name!r}')
    if name == '.' or '..' in name:
        raise InvalidInputError(f'Invalid {kind.lower()}: {name!r}')
    return name
