"""Folder URL configuration (``/api/folders...``)."""

from django.urls import path

from server.apps.files.views import folders as views

app_name = 'folders'

urlpatterns = [
    path('folders', views.folders, name='list'),
    path('folders/<int:folder_id>', views.folder_detail, name='detail'),
    path(
        'folders/<int:folder_id>/subfolders',
        views.subfolders,
        name='subfolders',
    ),
    path(
        'folders/<int:folder_id>/breadcrumbs',
        views.breadcrumbs,
        name='breadcrumbs',
    ),
    path('folders/<int:folder_id>/rename', views.rename_folder, name='rename'),
    path('folders/<int:folder_id>/move', views.move_folder, name='move'),
]
