"""File URL configuration (``/api/files...``)."""

from django.urls import path

from server.apps.files.views import files as views

app_name = 'files'

urlpatterns = [
    # Listing and upload
    path('files', views.list_files, name='list'),
    path('files/root', views.list_root_files, name='root'),
    path(
        'files/folder/<int:folder_id>',
        views.list_folder_files,
        name='folder',
    ),
    path('files/upload', views.upload_file, name='upload'),
    path('files/upload/multiple', views.upload_files, name='upload-multiple'),

    # Search and quota
    path('files/search', views.search_files, name='search'),
    path('files/stats', views.storage_stats, name='stats'),

    # Individual file operations
    path('files/<int:file_id>', views.file_detail, name='detail'),
    path('files/<int:file_id>/download', views.download_file, name='download'),
    path('files/<int:file_id>/rename', views.rename_file, name='rename'),
    path('files/<int:file_id>/move', views.move_file, name='move'),
    path('files/<int:file_id>/share', views.share_file, name='share'),
]
