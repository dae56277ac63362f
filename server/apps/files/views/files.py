"""HTTP endpoints for files."""

from http import HTTPStatus

from django.http import HttpRequest, HttpResponse, JsonResponse

from server.apps.accounts.decorators import (
    authenticate_request,
    token_required,
)
from server.apps.core.decorators import (
    api_view,
    optional_int,
    optional_text,
    request_param,
)
from server.apps.core.exceptions import InvalidInputError
from server.apps.core.responses import success_response
from server.apps.files.logic import file_operations, share_operations
from server.apps.files.serializers import (
    serialize_file,
    serialize_files,
    serialize_stats,
    serialize_upload_results,
)
from server.apps.files.views.downloads import file_response

_FOLDER_ID_PARAM = 'folderId'
_NAME_PARAM = 'name'


@api_view(['GET'])
@token_required
def list_files(request: HttpRequest) -> JsonResponse:
    """List every file of the caller."""
    files = file_operations.list_all_files(request.user)
    return success_response(
        'Files retrieved successfully',
        serialize_files(files),
    )


@api_view(['GET'])
@token_required
def list_root_files(request: HttpRequest) -> JsonResponse:
    """List the caller's files outside any folder."""
    files = file_operations.list_root_files(request.user)
    return success_response(
        'Root files retrieved successfully',
        serialize_files(files),
    )


@api_view(['GET'])
@token_required
def list_folder_files(request: HttpRequest, folder_id: int) -> JsonResponse:
    """List the files directly inside a folder."""
    files = file_operations.list_folder_files(request.user, folder_id)
    return success_response(
        'Files retrieved successfully',
        serialize_files(files),
    )


@api_view(['GET', 'DELETE'])
@token_required
def file_detail(request: HttpRequest, file_id: int) -> JsonResponse:
    """Read (GET) or delete (DELETE) a file."""
    if request.method == 'DELETE':
        file_operations.delete_file(request.user, file_id)
        return success_response('File deleted successfully')

    file_instance = file_operations.get_file(request.user, file_id)
    return success_response(
        'File retrieved successfully',
        serialize_file(file_instance),
    )


@api_view(['GET'])
def download_file(request: HttpRequest, file_id: int) -> HttpResponse:
    """Download a file as its owner, or anonymously with ``?token=``.

    A bearer token takes precedence over a share token.
    """
    share_token = request.GET.get('token')
    if share_token and 'Authorization' not in request.headers:
        file_instance, stream = share_operations.open_shared_file(
            share_token,
            file_id=file_id,
        )
    else:
        user = authenticate_request(request)
        file_instance, stream = file_operations.open_file(user, file_id)
    return file_response(file_instance, stream)


@api_view(['POST'])
@token_required
def upload_file(request: HttpRequest) -> JsonResponse:
    """Upload one file (multipart field ``file``, optional ``folderId``)."""
    uploaded = request.FILES.get('file')
    if uploaded is None:
        raise InvalidInputError('No file provided')
    folder_id = optional_int(
        request_param(request, _FOLDER_ID_PARAM),
        _FOLDER_ID_PARAM,
    )
    file_instance = file_operations.upload_file(
        request.user,
        uploaded,
        folder_id,
    )
    return success_response(
        'File uploaded successfully',
        serialize_file(file_instance),
        status=HTTPStatus.CREATED,
    )


@api_view(['POST'])
@token_required
def upload_files(request: HttpRequest) -> JsonResponse:
    """Upload several files (multipart field ``files``).

    Each file is reported on its own; the request succeeds even when
    some files were rejected.
    """
    uploads = request.FILES.getlist('files')
    folder_id = optional_int(
        request_param(request, _FOLDER_ID_PARAM),
        _FOLDER_ID_PARAM,
    )
    results = file_operations.upload_files(request.user, uploads, folder_id)
    stored = sum(1 for result in results if result.success)
    return success_response(
        f'Uploaded {stored} of {len(results)} files',
        serialize_upload_results(results),
    )


@api_view(['PUT'])
@token_required
def rename_file(request: HttpRequest, file_id: int) -> JsonResponse:
    """Rename a file (``?name=``)."""
    file_instance = file_operations.rename_file(
        request.user,
        file_id,
        optional_text(request_param(request, _NAME_PARAM), _NAME_PARAM),
    )
    return success_response(
        'File renamed successfully',
        serialize_file(file_instance),
    )


@api_view(['PUT'])
@token_required
def move_file(request: HttpRequest, file_id: int) -> JsonResponse:
    """Move a file (``?folderId=``, absent for the root)."""
    folder_id = optional_int(
        request_param(request, _FOLDER_ID_PARAM),
        _FOLDER_ID_PARAM,
    )
    file_instance = file_operations.move_file(request.user, file_id, folder_id)
    return success_response(
        'File moved successfully',
        serialize_file(file_instance),
    )


@api_view(['POST', 'DELETE'])
@token_required
def share_file(request: HttpRequest, file_id: int) -> JsonResponse:
    """Share (POST) or unshare (DELETE) a file."""
    if request.method == 'DELETE':
        file_instance = share_operations.unshare_file(request.user, file_id)
        message = 'File unshared successfully'
    else:
        file_instance = share_operations.share_file(request.user, file_id)
        message = 'File shared successfully'
    return success_response(message, serialize_file(file_instance))


@api_view(['GET'])
@token_required
def search_files(request: HttpRequest) -> JsonResponse:
    """Search the caller's files by name (``?q=``)."""
    files = file_operations.search_files(request.user, request.GET.get('q'))
    return success_response('Search completed', serialize_files(files))


@api_view(['GET'])
@token_required
def storage_stats(request: HttpRequest) -> JsonResponse:
    """Report quota usage and tree-wide counts."""
    stats = file_operations.get_storage_stats(request.user)
    return success_response(
        'Stats retrieved successfully',
        serialize_stats(stats),
    )
