"""Business logic layer for files app.

This package contains all business logic of the storage service:
- Quota ledger (reserve, commit, release, recalculate)
- Folder hierarchy (create, move, rename, recursive delete)
- File upload, download, rename, move, delete and search
- Share links

All business logic should be implemented here, separate from
models (data layer), views (HTTP layer) and infrastructure
(external systems).
"""
