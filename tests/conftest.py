"""Test environment: in-memory SQLite and a fixed signing key, set before app modules load."""

import os

os.environ.setdefault("APP_ENV", "dev")
os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("JWT_SECRET", "test-signing-key-0123456789abcdef0123456789")
os.environ.setdefault("SEED_CATALOG_ON_STARTUP", "false")
