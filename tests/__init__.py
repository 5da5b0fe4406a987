"""Test package. Pins the environment before any app module reads settings."""

import os

os.environ["APP_ENV"] = "test"
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["JWT_SECRET"] = "test-signing-secret"
os.environ["API_V1_PREFIX"] = "/api/v1"
os.environ.setdefault("LOG_LEVEL", "WARNING")
