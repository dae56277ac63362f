"""Conversion of storage objects into API payloads.

Payload keys are camelCase, the shape the web and mobile clients read.
Datetimes are left as objects; ``JsonResponse`` encodes them as ISO-8601.
"""

from collections.abc import Iterable
from typing import Any

from server.apps.files.logic.file_operations import StorageStats, UploadResult
from server.apps.files.logic.folder_operations import (
    Breadcrumb,
    FolderContents,
)
from server.apps.files.models import File, Folder

_Payload = dict[str, Any]


def serialize_file(file_instance: File) -> _Payload:
    """Describe a file.

    The blob key is never exposed; clients address files by id.

    Args:
        file_instance: File to describe.

    Returns:
        File payload.
    """
    folder = file_instance.folder
    return {
        'id': file_instance.id,
        'name': file_instance.original_name,
        'originalName': file_instance.original_name,
        'contentType': file_instance.content_type,
        'size': file_instance.size_bytes,
        'extension': file_instance.get_extension(),
        'folderId': folder.id if folder is not None else None,
        'folderName': folder.name if folder is not None else None,
        'isPublic': file_instance.is_public,
        'shareToken': file_instance.share_token,
        'downloadCount': file_instance.download_count,
        'createdAt': file_instance.created_at,
        'updatedAt': file_instance.updated_at,
    }


def serialize_files(files: Iterable[File]) -> list[_Payload]:
    """Describe several files."""
    return [serialize_file(file_instance) for file_instance in files]


def serialize_folder(folder: Folder, path: str | None = None) -> _Payload:
    """Describe a folder.

    Child counts come from the ``with_counts`` annotation when present.

    Args:
        folder: Folder to describe.
        path: Display path, if the caller already knows it.

    Returns:
        Folder payload.
    """
    parent = folder.parent
    file_count = getattr(folder, 'file_count', None)
    if file_count is None:
        file_count = folder.files.count()
    subfolder_count = getattr(folder, 'subfolder_count', None)
    if subfolder_count is None:
        subfolder_count = folder.subfolders.count()
    return {
        'id': folder.id,
        'name': folder.name,
        'path': path,
        'parentId': parent.id if parent is not None else None,
        'parentName': parent.name if parent is not None else None,
        'fileCount': file_count,
        'subfolderCount': subfolder_count,
        'createdAt': folder.created_at,
        'updatedAt': folder.updated_at,
    }


def serialize_folders(
    folders: Iterable[Folder],
    parent_path: str = '',
) -> list[_Payload]:
    """Describe sibling folders.

    Args:
        folders: Folders sharing one parent.
        parent_path: Display path of that parent ('' for the root).

    Returns:
        Folder payloads.
    """
    return [
        serialize_folder(folder, path=f'{parent_path}/{folder.name}')
        for folder in folders
    ]


def serialize_folder_contents(contents: FolderContents) -> _Payload:
    """Describe a folder together with its direct children."""
    payload = serialize_folder(contents.folder, path=contents.path)
    payload['fileCount'] = len(contents.files)
    payload['subfolderCount'] = len(contents.subfolders)
    payload['files'] = serialize_files(contents.files)
    payload['subfolders'] = serialize_folders(
        contents.subfolders,
        parent_path=contents.path,
    )
    return payload


def serialize_breadcrumbs(trail: Iterable[Breadcrumb]) -> list[_Payload]:
    """Describe a breadcrumb trail, root first."""
    return [{'id': crumb.id, 'name': crumb.name} for crumb in trail]


def serialize_stats(stats: StorageStats) -> _Payload:
    """Describe a user's storage figures."""
    return {
        'usedStorage': stats.used_bytes,
        'maxStorage': stats.quota_bytes,
        'availableStorage': stats.available_bytes,
        'usedPercentage': round(stats.used_percentage, 2),
        'totalFiles': stats.total_files,
        'totalFolders': stats.total_folders,
    }


def serialize_upload_results(
    results: Iterable[UploadResult],
) -> list[_Payload]:
    """Describe the per-file outcome of a batch upload."""
    return [
        {
            'name': result.name,
            'success': result.success,
            'message': 'Uploaded' if result.success else result.error,
            'file': (
                serialize_file(result.file)
                if result.file is not None
                else None
            ),
        }
        for result in results
    ]


def serialize_shared_file(file_instance: File) -> _Payload:
    """Describe a shared file to an anonymous caller.

    Owner-only fields (folder, token, flags) are left out.

    Args:
        file_instance: Shared file.

    Returns:
        Public file payload.
    """
    return {
        'name': file_instance.original_name,
        'contentType': file_instance.content_type,
        'size': file_instance.size_bytes,
        'downloadCount': file_instance.download_count,
        'createdAt': file_instance.created_at,
    }
