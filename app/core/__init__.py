"""Core app configuration, database, security and access control."""

from app.core.config import get_settings, settings
from app.core.database import get_db, store_call

__all__ = ["get_settings", "settings", "get_db", "store_call"]
