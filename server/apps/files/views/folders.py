"""HTTP endpoints for folders."""

from http import HTTPStatus

from django.http import HttpRequest, JsonResponse

from server.apps.accounts.decorators import token_required
from server.apps.core.decorators import (
    api_view,
    optional_int,
    optional_text,
    request_param,
)
from server.apps.core.responses import success_response
from server.apps.files.logic import folder_operations
from server.apps.files.serializers import (
    serialize_breadcrumbs,
    serialize_folder,
    serialize_folder_contents,
    serialize_folders,
)

_NAME_PARAM = 'name'
_PARENT_ID_PARAM = 'parentId'


@api_view(['GET', 'POST'])
@token_required
def folders(request: HttpRequest) -> JsonResponse:
    """List root folders (GET) or create one (POST ``?name=&parentId=``)."""
    if request.method == 'GET':
        root_folders = folder_operations.list_root_folders(request.user)
        return success_response(
            'Folders retrieved successfully',
            serialize_folders(root_folders),
        )

    parent_id = optional_int(
        request_param(request, _PARENT_ID_PARAM),
        _PARENT_ID_PARAM,
    )
    folder = folder_operations.create_folder(
        request.user,
        optional_text(request_param(request, _NAME_PARAM), _NAME_PARAM),
        parent_id,
    )
    return success_response(
        'Folder created successfully',
        serialize_folder(
            folder,
            path=folder_operations.get_folder_path(folder),
        ),
        status=HTTPStatus.CREATED,
    )


@api_view(['GET', 'DELETE'])
@token_required
def folder_detail(request: HttpRequest, folder_id: int) -> JsonResponse:
    """Read a folder with its children (GET) or delete its subtree (DELETE)."""
    if request.method == 'DELETE':
        deletion = folder_operations.delete_folder(request.user, folder_id)
        return success_response(
            'Folder deleted successfully',
            {
                'deletedFolders': deletion.folder_count,
                'deletedFiles': deletion.file_count,
                'freedStorage': deletion.freed_bytes,
            },
        )

    contents = folder_operations.get_folder(request.user, folder_id)
    return success_response(
        'Folder retrieved successfully',
        serialize_folder_contents(contents),
    )


@api_view(['GET'])
@token_required
def subfolders(request: HttpRequest, folder_id: int) -> JsonResponse:
    """List the direct subfolders of a folder."""
    parent = folder_operations.get_owned_folder(request.user, folder_id)
    children = folder_operations.list_subfolders(request.user, folder_id)
    return success_response(
        'Subfolders retrieved successfully',
        serialize_folders(
            children,
            parent_path=folder_operations.get_folder_path(parent),
        ),
    )


@api_view(['GET'])
@token_required
def breadcrumbs(request: HttpRequest, folder_id: int) -> JsonResponse:
    """Return the trail from the root to a folder."""
    trail = folder_operations.resolve_breadcrumbs(request.user, folder_id)
    return success_response(
        'Breadcrumbs retrieved successfully',
        serialize_breadcrumbs(trail),
    )


@api_view(['PUT'])
@token_required
def rename_folder(request: HttpRequest, folder_id: int) -> JsonResponse:
    """Rename a folder (``?name=``)."""
    folder = folder_operations.rename_folder(
        request.user,
        folder_id,
        optional_text(request_param(request, _NAME_PARAM), _NAME_PARAM),
    )
    return success_response(
        'Folder renamed successfully',
        serialize_folder(
            folder,
            path=folder_operations.get_folder_path(folder),
        ),
    )


@api_view(['PUT'])
@token_required
def move_folder(request: HttpRequest, folder_id: int) -> JsonResponse:
    """Re-parent a folder (``?parentId=``, absent for the root)."""
    parent_id = optional_int(
        request_param(request, _PARENT_ID_PARAM),
        _PARENT_ID_PARAM,
    )
    folder = folder_operations.move_folder(request.user, folder_id, parent_id)
    return success_response(
        'Folder moved successfully',
        serialize_folder(
            folder,
            path=folder_operations.get_folder_path(folder),
        ),
    )
