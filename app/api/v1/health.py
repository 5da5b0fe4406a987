"""Health check endpoint with database connectivity and signing-secret status."""

from typing import Annotated

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from app.core.config import get_settings
from app.core.database import check_db_connected, get_db
from app.schemas.health import HealthResponse

router = APIRouter()


@router.get("/", response_model=HealthResponse)
def get_health(db: Annotated[Session, Depends(get_db)]) -> HealthResponse:
    """
    Return service health, database connectivity and whether JWT_SECRET is configured.
    Used by load balancers and monitoring; 'fallback' means tokens are signed with
    the insecure development secret.
    """
    settings = get_settings()
    db_status = "connected" if check_db_connected(db) else "disconnected"
    return HealthResponse(
        status="ok",
        environment=settings.APP_ENV,
        database=db_status,
        signing_secret="configured" if settings.JWT_SECRET is not None else "fallback",
    )
