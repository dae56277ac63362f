"""Business logic for registration, login and bearer tokens."""
