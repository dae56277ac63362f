"""Django admin configuration for files app."""

from django.contrib import admin
from django.db.models import QuerySet
from django.http import HttpRequest
from django.utils.html import format_html

from server.apps.files.models import File, Folder, UserQuota

_KIB = 1024
_MIB = _KIB * 1024
_GIB = _MIB * 1024


def _format_bytes(size_bytes: int) -> str:
    """Format bytes in human-readable format.

    Args:
        size_bytes: Size in bytes.

    Returns:
        Formatted size string (e.g., '1.5 MB', '234 KB').
    """
    if size_bytes < _KIB:
        return f'{size_bytes} B'
    if size_bytes < _MIB:
        return f'{size_bytes / _KIB:.1f} KB'
    if size_bytes < _GIB:
        return f'{size_bytes / _MIB:.1f} MB'
    return f'{size_bytes / _GIB:.1f} GB'


@admin.register(Folder)
class FolderAdmin(admin.ModelAdmin[Folder]):
    """Admin interface for Folder model."""

    list_display = ['name', 'user', 'parent', 'created_at']
    list_filter = ['user']
    search_fields = ['name', 'user__username']
    readonly_fields = ['created_at', 'updated_at']
    raw_id_fields = ['parent']

    def get_queryset(self, request: HttpRequest) -> QuerySet[Folder]:
        """Optimize queryset with select_related.

        Args:
            request: HTTP request.

        Returns:
            Optimized QuerySet.
        """
        return super().get_queryset(request).select_related('user', 'parent')


@admin.register(File)
class FileAdmin(admin.ModelAdmin[File]):
    """Admin interface for File model."""

    list_display = [
        'original_name',
        'user',
        'folder',
        'size_display',
        'content_type',
        'is_public',
        'download_count',
        'created_at',
    ]

    list_filter = [
        'is_public',
        'content_type',
        'created_at',
    ]

    search_fields = [
        'original_name',
        'stored_name',
        'checksum_sha256',
    ]

    readonly_fields = [
        'stored_name',
        'size_bytes',
        'content_type',
        'checksum_sha256',
        'share_token',
        'download_count',
        'created_at',
        'updated_at',
    ]

    raw_id_fields = ['folder']

    fieldsets = (
        ('File Information', {
            'fields': ('original_name', 'user', 'folder', 'stored_name'),
        }),
        ('Metadata', {
            'fields': (
                'size_bytes',
                'content_type',
                'checksum_sha256',
            ),
        }),
        ('Sharing', {
            'fields': ('is_public', 'share_token', 'download_count'),
        }),
        ('Timestamps', {
            'fields': ('created_at', 'updated_at'),
        }),
    )

    def size_display(self, obj: File) -> str:
        """Display file size in human-readable format.

        Args:
            obj: File instance.

        Returns:
            Formatted size string.
        """
        return _format_bytes(obj.size_bytes)
    size_display.short_description = 'Size'  # type: ignore[attr-defined]

    def get_queryset(self, request: HttpRequest) -> QuerySet[File]:
        """Optimize queryset with select_related.

        Args:
            request: HTTP request.

        Returns:
            Optimized QuerySet.
        """
        return super().get_queryset(request).select_related('user', 'folder')


@admin.register(UserQuota)
class UserQuotaAdmin(admin.ModelAdmin[UserQuota]):
    """Admin interface for UserQuota model."""

    list_display = [
        'user',
        'quota_display',
        'used_display',
        'reserved_display',
        'percentage_display',
        'status_display',
    ]

    search_fields = [
        'user__username',
        'user__email',
    ]

    # Usage is owned by the ledger operations, only the limit is editable
    readonly_fields = [
        'user',
        'used_bytes',
        'reserved_bytes',
    ]

    fieldsets = (
        ('User', {
            'fields': ('user',),
        }),
        ('Quota Settings', {
            'fields': ('quota_bytes',),
        }),
        ('Current Usage', {
            'fields': ('used_bytes', 'reserved_bytes'),
        }),
    )

    def quota_display(self, obj: UserQuota) -> str:
        """Display quota in human-readable format."""
        return _format_bytes(obj.quota_bytes)
    quota_display.short_description = 'Quota'  # type: ignore[attr-defined]

    def used_display(self, obj: UserQuota) -> str:
        """Display used bytes in human-readable format."""
        return _format_bytes(obj.used_bytes)
    used_display.short_description = 'Used'  # type: ignore[attr-defined]

    def reserved_display(self, obj: UserQuota) -> str:
        """Display bytes held by uploads in progress."""
        return _format_bytes(obj.reserved_bytes)
    reserved_display.short_description = (  # type: ignore[attr-defined]
        'Reserved'
    )

    def percentage_display(self, obj: UserQuota) -> str:
        """Display percentage of quota used.

        Args:
            obj: UserQuota instance.

        Returns:
            Percentage string.
        """
        return f'{obj.used_percentage():.1f}%'
    percentage_display.short_description = '%'  # type: ignore[attr-defined]

    def status_display(self, obj: UserQuota) -> str:
        """Display status indicator based on usage.

        Args:
            obj: UserQuota instance.

        Returns:
            HTML formatted status indicator.
        """
        percentage = obj.used_percentage()
        if percentage >= 100:
            color = '#dc3545'
            status = 'Full'
        elif percentage >= 90:
            color = '#ffc107'
            status = 'Warning'
        else:
            color = '#28a745'
            status = 'OK'

        return format_html(
            '<span style="color: {color}; font-weight: bold;">'
            '{status}</span>',
            color=color,
            status=status,
        )
    status_display.short_description = 'Status'  # type: ignore[attr-defined]

    def get_queryset(self, request: HttpRequest) -> QuerySet[UserQuota]:
        """Optimize queryset with select_related.

        Args:
            request: HTTP request.

        Returns:
            Optimized QuerySet.
        """
        return super().get_queryset(request).select_related('user')
