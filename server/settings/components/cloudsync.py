"""Storage-service settings: quotas, bearer tokens and upload retries."""

from server.settings.components import config

# Quota given to every new account: 10 GB in bytes
CLOUDSYNC_DEFAULT_QUOTA_BYTES = config(
    'CLOUDSYNC_DEFAULT_QUOTA_BYTES',
    cast=int,
    default=10 * 1024 * 1024 * 1024,
)

# Lifetime of a bearer token in seconds (24 hours)
CLOUDSYNC_TOKEN_MAX_AGE = config(
    'CLOUDSYNC_TOKEN_MAX_AGE',
    cast=int,
    default=86400,
)

# Attempts made to write a blob before the upload is reported as failed
CLOUDSYNC_UPLOAD_RETRIES = config(
    'CLOUDSYNC_UPLOAD_RETRIES',
    cast=int,
    default=3,
)
