"""Main URL mapping configuration file.

Every API route lives under ``/api/``; each app owns its own url modules.
"""

from django.contrib import admin
from django.urls import include, path

admin.autodiscover()

urlpatterns = [
    path(
        'api/auth/',
        include('server.apps.accounts.urls', namespace='accounts'),
    ),
    path(
        'api/',
        include('server.apps.files.urls.files', namespace='files'),
    ),
    path(
        'api/',
        include('server.apps.files.urls.folders', namespace='folders'),
    ),
    path(
        'api/share/',
        include('server.apps.files.urls.share', namespace='share'),
    ),
    path('admin/', admin.site.urls),
]
