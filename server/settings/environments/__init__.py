"""Per-environment overrides, selected by ``DJANGO_ENV``."""
