"""Shared FastAPI dependencies: services bound to the request's DB session."""

from typing import Annotated

from fastapi import Depends
from sqlalchemy.orm import Session

from app.core.config import get_settings
from app.core.database import get_db
from app.services.blob_store import BlobStore, build_blob_store
from app.services.profile_workflow import ProfileWorkflow


def get_workflow(db: Annotated[Session, Depends(get_db)]) -> ProfileWorkflow:
    """
    FastAPI dependency that provides the profile workflow for this request.

    Usage in route functions:
        workflow: Annotated[ProfileWorkflow, Depends(get_workflow)]
    """
    return ProfileWorkflow(db)


def get_blob_store() -> BlobStore:
    """FastAPI dependency for the configured picture store (overridden in tests)."""
    return build_blob_store(get_settings())
