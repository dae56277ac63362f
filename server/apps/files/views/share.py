"""Anonymous endpoints for share links."""

from django.http import HttpRequest, HttpResponse, JsonResponse

from server.apps.core.decorators import api_view
from server.apps.core.responses import success_response
from server.apps.files.logic import share_operations
from server.apps.files.serializers import serialize_shared_file
from server.apps.files.views.downloads import file_response


@api_view(['GET'])
def download_shared(request: HttpRequest, share_token: str) -> HttpResponse:
    """Download a shared file; no authentication needed."""
    file_instance, stream = share_operations.open_shared_file(share_token)
    return file_response(file_instance, stream)


@api_view(['GET'])
def shared_info(request: HttpRequest, share_token: str) -> JsonResponse:
    """Describe a shared file without downloading it."""
    file_instance = share_operations.shared_file_info(share_token)
    return success_response(
        'Shared file info retrieved successfully',
        serialize_shared_file(file_instance),
    )
