"""Database models for files app."""

from pathlib import Path
from typing import Final, final, override

from django.conf import settings
from django.db import models

# Constants for field max lengths
_NAME_MAX_LENGTH: Final = 255
_CONTENT_TYPE_MAX_LENGTH: Final = 255
_STORED_NAME_MAX_LENGTH: Final = 512
_CHECKSUM_MAX_LENGTH: Final = 64  # SHA256 hex length
_SHARE_TOKEN_MAX_LENGTH: Final = 64

# Name shown for the implicit root folder
ROOT_FOLDER_NAME: Final = 'Home'


@final
class Folder(models.Model):
    """Folder in a user's hierarchy.

    Folders form a forest per user: ``parent`` is either null (the
    folder sits at the root) or another folder owned by the same user.
    Sibling names are unique, including among root folders.
    """

    user = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name='folders',
        db_index=True,
    )

    name = models.CharField(
        max_length=_NAME_MAX_LENGTH,
    )

    parent = models.ForeignKey(
        'self',
        on_delete=models.CASCADE,
        related_name='subfolders',
        null=True,
        blank=True,
    )

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        """Model metadata."""

        verbose_name = 'Folder'  # type: ignore[mutable-override]
        verbose_name_plural = 'Folders'  # type: ignore[mutable-override]
        ordering = ['name']

        indexes = [
            models.Index(
                fields=['user', 'parent'],
                name='folders_user_parent_idx',
            ),
        ]

        constraints = [
            # NULL parents never collide in SQL, so the root level
            # needs its own constraint.
            models.UniqueConstraint(
                fields=['user', 'parent', 'name'],
                condition=models.Q(parent__isnull=False),
                name='folders_sibling_name_unique',
            ),
            models.UniqueConstraint(
                fields=['user', 'name'],
                condition=models.Q(parent__isnull=True),
                name='folders_root_name_unique',
            ),
        ]

    @override
    def __str__(self) -> str:
        """String representation."""
        return f'{self.user.username}:{self.name}'


@final
class File(models.Model):
    """File record backed by a blob in S3-compatible storage.

    The blob key (``stored_name``) follows ``{user_id}/{uuid}.{ext}`` and
    is internal: clients address files by id and see ``original_name``.
    ``share_token`` is set exactly when ``is_public`` is true.
    """

    user = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name='files',
        db_index=True,
    )

    folder = models.ForeignKey(
        Folder,
        on_delete=models.RESTRICT,
        related_name='files',
        null=True,
        blank=True,
    )

    original_name = models.CharField(
        max_length=_NAME_MAX_LENGTH,
        help_text='Name shown to the user',
    )

    stored_name = models.CharField(
        max_length=_STORED_NAME_MAX_LENGTH,
        unique=True,
        help_text='Blob key in storage: {user_id}/{uuid}.ext',
    )

    content_type = models.CharField(
        max_length=_CONTENT_TYPE_MAX_LENGTH,
        default='application/octet-stream',
    )

    size_bytes = models.BigIntegerField(
        help_text='File size in bytes',
    )

    checksum_sha256 = models.CharField(
        max_length=_CHECKSUM_MAX_LENGTH,
        blank=True,
        default='',
        help_text='SHA256 hash for integrity verification',
    )

    is_public = models.BooleanField(default=False)

    share_token = models.CharField(
        max_length=_SHARE_TOKEN_MAX_LENGTH,
        unique=True,
        null=True,
        blank=True,
        help_text='Grants anonymous read access while the file is public',
    )

    download_count = models.BigIntegerField(default=0)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        """Model metadata."""

        verbose_name = 'File'  # type: ignore[mutable-override]
        verbose_name_plural = 'Files'  # type: ignore[mutable-override]
        ordering = ['-created_at', '-id']

        indexes = [
            # Optimize folder listing queries
            models.Index(
                fields=['user', 'folder'],
                name='files_user_folder_idx',
            ),
            # Optimize recent files queries
            models.Index(
                fields=['user', '-created_at'],
                name='files_user_recent_idx',
            ),
        ]

        constraints = [
            models.CheckConstraint(
                condition=(
                    models.Q(is_public=True, share_token__isnull=False)
                    | models.Q(is_public=False, share_token__isnull=True)
                ),
                name='files_share_token_iff_public',
            ),
            models.CheckConstraint(
                condition=models.Q(size_bytes__gte=0),
                name='files_size_non_negative',
            ),
        ]

    @override
    def __str__(self) -> str:
        """String representation."""
        return f'{self.user.username}:{self.original_name}'

    def get_extension(self) -> str:
        """Extract file extension.

        Example: 'report.PDF' -> 'pdf'

        Returns:
            Extension without dot (lowercase).
        """
        extension = Path(self.original_name).suffix
        return extension.lstrip('.').lower()


# Default quota: 10 GB in bytes
_DEFAULT_QUOTA_BYTES: Final = 10 * 1024 * 1024 * 1024


@final
class UserQuota(models.Model):
    """Storage ledger for a user.

    ``used_bytes`` always equals the sum of the user's file sizes.
    ``reserved_bytes`` holds space claimed by uploads whose bytes are
    still being written; it counts against the quota but not as usage.
    """

    user = models.OneToOneField(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name='quota',
        primary_key=True,
    )

    quota_bytes = models.BigIntegerField(
        default=_DEFAULT_QUOTA_BYTES,
        help_text='Storage quota limit in bytes',
    )

    used_bytes = models.BigIntegerField(
        default=0,
        help_text='Bytes used by stored files',
    )

    reserved_bytes = models.BigIntegerField(
        default=0,
        help_text='Bytes reserved by uploads in progress',
    )

    class Meta:
        """Model metadata."""

        verbose_name = 'User Quota'  # type: ignore[mutable-override]
        verbose_name_plural = 'User Quotas'  # type: ignore[mutable-override]

        constraints = [
            models.CheckConstraint(
                condition=models.Q(quota_bytes__gte=0),
                name='quota_bytes_non_negative',
            ),
            models.CheckConstraint(
                condition=models.Q(used_bytes__gte=0),
                name='used_bytes_non_negative',
            ),
            models.CheckConstraint(
                condition=models.Q(reserved_bytes__gte=0),
                name='reserved_bytes_non_negative',
            ),
        ]

    @override
    def __str__(self) -> str:
        """String representation."""
        return f'{self.user.username}: {self.used_bytes}/{self.quota_bytes}'

    def has_space_for(self, size_bytes: int) -> bool:
        """Check if there's enough space for the given size.

        Reserved bytes count as taken.

        Args:
            size_bytes: Size to check in bytes.

        Returns:
            True if there's enough space, False otherwise.
        """
        committed = self.used_bytes + self.reserved_bytes
        return committed + size_bytes <= self.quota_bytes

    def available_bytes(self) -> int:
        """Get available storage space.

        Returns:
            Available bytes (never negative).
        """
        available = self.quota_bytes - self.used_bytes - self.reserved_bytes
        return max(0, available)

    def used_percentage(self) -> float:
        """Get the share of the quota taken by stored files.

        Returns:
            Percentage in the 0-100 range (0 for a zero quota).
        """
        if self.quota_bytes == 0:
            return 0.0
        return self.used_bytes / self.quota_bytes * 100
