"""Business logic for storage quota operations.

The ledger row (``UserQuota``) is the per-user serialisation point: every
operation that changes usage locks it with ``select_for_update`` first,
so concurrent uploads by one user can never jointly overshoot the quota.
"""

import logging
from typing import Any

from django.conf import settings
from django.db import transaction
from django.db.models import Sum  # noqa: WPS347

from server.apps.files.exceptions import QuotaExceededError
from server.apps.files.models import File, UserQuota

# User type for Django's dynamic user model
_User = Any

# Field name constants to avoid string literal over-use
_USED_BYTES_FIELD = 'used_bytes'  # noqa: WPS226
_RESERVED_BYTES_FIELD = 'reserved_bytes'  # noqa: WPS226

logger = logging.getLogger(__name__)


def get_or_create_quota(user: _User) -> UserQuota:
    """Get or create quota for user (on-demand creation).

    Args:
        user: User to get quota for.

    Returns:
        UserQuota instance for the user.
    """
    quota, created = UserQuota.objects.get_or_create(
        user=user,
        defaults={'quota_bytes': settings.CLOUDSYNC_DEFAULT_QUOTA_BYTES},
    )
    if created:
        logger.info(
            'Created quota for user %s: %d bytes',
            user.username,
            quota.quota_bytes,
        )
    return quota


def lock_quota(user: _User) -> UserQuota:
    """Lock and return the user's ledger row.

    Must be called inside ``transaction.atomic``; the lock is held until
    the surrounding transaction ends.

    Args:
        user: Owner of the ledger.

    Returns:
        Locked UserQuota instance.
    """
    get_or_create_quota(user)
    return UserQuota.objects.select_for_update().get(user=user)


def reserve_quota(user: _User, size_bytes: int) -> None:
    """Atomically check the quota and reserve space for an upload.

    Args:
        user: Uploading user.
        size_bytes: Declared size of the upload.

    Raises:
        QuotaExceededError: If the reservation would exceed the quota.
    """
    with transaction.atomic():
        quota = lock_quota(user)
        _ensure_space(user, quota, size_bytes)
        quota.reserved_bytes += size_bytes
        quota.save(update_fields=[_RESERVED_BYTES_FIELD])

    logger.debug(
        'Reserved %d bytes for user %s',
        size_bytes,
        user.username,
    )


def release_reservation(user: _User, size_bytes: int) -> None:
    """Give back space reserved by an upload that did not complete.

    Args:
        user: Uploading user.
        size_bytes: Size that was reserved.
    """
    with transaction.atomic():
        quota = lock_quota(user)
        quota.reserved_bytes = max(0, quota.reserved_bytes - size_bytes)
        quota.save(update_fields=[_RESERVED_BYTES_FIELD])

    logger.info(
        'Released reservation of %d bytes for user %s',
        size_bytes,
        user.username,
    )


def commit_reservation(user: _User, size_bytes: int) -> None:
    """Turn reserved space into used space.

    Called in the same transaction that creates the file record, so the
    record and its counted bytes appear together.

    Args:
        user: Uploading user.
        size_bytes: Size that was reserved and is now stored.
    """
    with transaction.atomic():
        quota = lock_quota(user)
        quota.reserved_bytes = max(0, quota.reserved_bytes - size_bytes)
        quota.used_bytes += size_bytes
        quota.save(update_fields=[_RESERVED_BYTES_FIELD, _USED_BYTES_FIELD])

    logger.debug(
        'Committed %d bytes for user %s',
        size_bytes,
        user.username,
    )


def decrement_usage(user: _User, size_bytes: int) -> None:
    """Atomically decrement user's storage usage.

    Prevents negative values by clamping to 0.

    Args:
        user: User to decrement usage for.
        size_bytes: Bytes to subtract from usage.
    """
    with transaction.atomic():
        # Get current quota to check if decrement would go negative
        try:
            quota = UserQuota.objects.select_for_update().get(user=user)
        except UserQuota.DoesNotExist:
            # No quota exists, nothing to decrement
            logger.debug(
                'No quota exists for user %s, skipping decrement',
                user.username,
            )
            return

        # Calculate new usage, clamping to 0
        new_usage = max(0, quota.used_bytes - size_bytes)
        quota.used_bytes = new_usage
        quota.save(update_fields=[_USED_BYTES_FIELD])

    logger.debug(
        'Decremented usage for user %s by %d bytes (new: %d)',
        user.username,
        size_bytes,
        new_usage,
    )


def recalculate_usage(user: _User) -> int:
    """Recalculate user's storage usage from actual files.

    This is useful for fixing inconsistencies after manual database
    edits. Reservations are left untouched.

    Args:
        user: User to recalculate usage for.

    Returns:
        New calculated usage in bytes.
    """
    with transaction.atomic():
        quota = lock_quota(user)
        total = sum_file_sizes(user)
        old_usage = quota.used_bytes
        quota.used_bytes = total
        quota.save(update_fields=[_USED_BYTES_FIELD])

    logger.info(
        'Recalculated usage for user %s: %d -> %d bytes',
        user.username,
        old_usage,
        total,
    )

    return total


def sum_file_sizes(user: _User) -> int:
    """Sum the sizes of every file the user owns.

    Args:
        user: Owner of the files.

    Returns:
        Total size in bytes.
    """
    return File.objects.filter(user=user).aggregate(
        total=Sum('size_bytes'),
    )['total'] or 0


def _ensure_space(user: _User, quota: UserQuota, size_bytes: int) -> None:
    if quota.has_space_for(size_bytes):
        return

    logger.warning(
        'Quota exceeded for user %s: need %d, have %d available',
        user.username,
        size_bytes,
        quota.available_bytes(),
    )
    raise QuotaExceededError(
        quota_bytes=quota.quota_bytes,
        used_bytes=quota.used_bytes + quota.reserved_bytes,
        required_bytes=size_bytes,
    )
