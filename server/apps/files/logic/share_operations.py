"""Business logic for public share links.

A file is either private (no token) or public with exactly one opaque
token. Revoking clears the token at once, so an old link stops working
immediately.
"""

import logging
import secrets
from typing import IO, Any, Final

from django.db import IntegrityError, transaction

from server.apps.core.exceptions import NotFoundError, ServiceError
from server.apps.files.logic.file_operations import (
    get_owned_file,
    open_blob,
    record_download,
)
from server.apps.files.models import File

# User type for Django's dynamic user model
_User = Any

_TOKEN_BYTES: Final = 32
_MAX_TOKEN_ATTEMPTS: Final = 5
_SHARE_FIELDS: Final = ('is_public', 'share_token', 'updated_at')

logger = logging.getLogger(__name__)


def generate_share_token() -> str:
    """Mint a new unguessable URL-safe token."""
    return secrets.token_urlsafe(_TOKEN_BYTES)


def issue_token(file_instance: File) -> str:
    """Make a file public under a fresh token.

    Collisions with existing tokens are retried a bounded number of times
    and never surface to the caller.

    Args:
        file_instance: File to publish (should be row-locked by the caller).

    Returns:
        The new share token.

    Raises:
        ServiceError: If no unique token could be found.
    """
    for attempt in range(1, _MAX_TOKEN_ATTEMPTS + 1):
        token = generate_share_token()
        if File.objects.filter(share_token=token).exists():
            logger.warning('Share token collision on attempt %d', attempt)
            continue
        file_instance.share_token = token
        file_instance.is_public = True
        try:
            with transaction.atomic():
                file_instance.save(update_fields=list(_SHARE_FIELDS))
        except IntegrityError:
            logger.warning('Share token collision on attempt %d', attempt)
            continue
        return token

    raise ServiceError('Could not generate a unique share token')


def revoke_token(file_instance: File) -> None:
    """Make a file private and forget its token.

    Args:
        file_instance: File to unpublish.
    """
    file_instance.share_token = None
    file_instance.is_public = False
    file_instance.save(update_fields=list(_SHARE_FIELDS))


def resolve_token(token: str | None) -> File:
    """Find the public file behind a share token.

    Args:
        token: Token from the share link.

    Returns:
        File instance.

    Raises:
        NotFoundError: If the token is unknown or was revoked.
    """
    if not token:
        raise NotFoundError('Shared file not found')
    try:
        return File.objects.get(share_token=token, is_public=True)
    except File.DoesNotExist as error:
        logger.debug('Unknown or revoked share token requested')
        raise NotFoundError('Shared file not found') from error


def share_file(user: _User, file_id: int) -> File:
    """Publish a file; sharing an already public file keeps its token.

    Args:
        user: Caller.
        file_id: File to share.

    Returns:
        File instance with ``is_public`` set and a token.
    """
    with transaction.atomic():
        file_instance = get_owned_file(user, file_id, lock=True)
        if file_instance.is_public and file_instance.share_token:
            return file_instance
        issue_token(file_instance)

    logger.info(
        'File shared: user=%s, file=%d',
        user.username,
        file_instance.id,
    )
    return file_instance


def unshare_file(user: _User, file_id: int) -> File:
    """Withdraw a file's share link; a private file is left as is.

    Args:
        user: Caller.
        file_id: File to unshare.

    Returns:
        File instance, now private.
    """
    with transaction.atomic():
        file_instance = get_owned_file(user, file_id, lock=True)
        if not file_instance.is_public:
            return file_instance
        revoke_token(file_instance)

    logger.info(
        'File unshared: user=%s, file=%d',
        user.username,
        file_instance.id,
    )
    return file_instance


def open_shared_file(
    token: str | None,
    file_id: int | None = None,
) -> tuple[File, IO[bytes]]:
    """Open a shared file's bytes for an anonymous caller.

    Args:
        token: Token from the share link.
        file_id: File the link was used for, when the URL names one.

    Returns:
        Tuple of the File instance and a readable binary stream.

    Raises:
        NotFoundError: If the token is unknown, revoked, or belongs to
            a different file.
    """
    file_instance = resolve_token(token)
    if file_id is not None and file_instance.id != file_id:
        raise NotFoundError('Shared file not found')
    stream = open_blob(file_instance)
    record_download(file_instance)
    logger.info(
        'Shared file downloaded: file=%d, count=%d',
        file_instance.id,
        file_instance.download_count,
    )
    return file_instance, stream


def shared_file_info(token: str | None) -> File:
    """Describe a shared file without downloading it.

    Args:
        token: Token from the share link.

    Returns:
        File instance.
    """
    return resolve_token(token)
