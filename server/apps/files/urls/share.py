"""Anonymous share link URL configuration (``/api/share/...``)."""

from django.urls import path

from server.apps.files.views import share as views

app_name = 'share'

urlpatterns = [
    path('<str:share_token>', views.download_shared, name='download'),
    path('<str:share_token>/info', views.shared_info, name='info'),
]
