"""Database configuration.

SQLite is the zero-setup default for development and tests. Production
deployments point ``DJANGO_DATABASE_ENGINE`` at PostgreSQL, where
``select_for_update`` row locks serialise ledger updates.
"""

from server.settings.components import BASE_DIR, config

_ENGINE = config(
    'DJANGO_DATABASE_ENGINE',
    default='django.db.backends.sqlite3',
)

if _ENGINE == 'django.db.backends.postgresql':
    DATABASES = {
        'default': {
            'ENGINE': _ENGINE,
            'NAME': config('POSTGRES_DB', default='cloudsync'),
            'USER': config('POSTGRES_USER', default='cloudsync'),
            'PASSWORD': config('POSTGRES_PASSWORD', default=''),
            'HOST': config('DJANGO_DATABASE_HOST', default='localhost'),
            'PORT': config('DJANGO_DATABASE_PORT', cast=int, default=5432),
            'CONN_MAX_AGE': config('CONN_MAX_AGE', cast=int, default=60),
            'ATOMIC_REQUESTS': False,
        },
    }
else:
    DATABASES = {
        'default': {
            'ENGINE': _ENGINE,
            'NAME': config(
                'DJANGO_DATABASE_NAME',
                default=str(BASE_DIR.joinpath('db.sqlite3')),
            ),
        },
    }
