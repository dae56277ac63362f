"""Streaming responses for file content."""

from typing import IO

from django.http import FileResponse

from server.apps.files.models import File


def file_response(file_instance: File, stream: IO[bytes]) -> FileResponse:
    """Stream a file as an attachment under its original name.

    Args:
        file_instance: File being downloaded.
        stream: Open binary stream of its blob.

    Returns:
        FileResponse with Content-Type and Content-Disposition set.
    """
    return FileResponse(
        stream,
        as_attachment=True,
        filename=file_instance.original_name,
        content_type=file_instance.content_type,
    )
