"""Health check and utility routes"""

from fastapi import APIRouter, Depends
from sqlalchemy import text
from sqlalchemy.orm import Session
import logging

from api.dependencies import get_db, get_tenant_context
from api.responses import HealthResponse
from app.config import settings
from services.context import TenantContext

router = APIRouter(tags=["Health"])
logger = logging.getLogger("dancymeals.api.health")


@router.get("/health-check", response_model=HealthResponse)
def health_check(context: TenantContext = Depends(get_tenant_context)):
    """Basic health check endpoint; also reports which tenant the host resolved to"""
    return HealthResponse(
        status="ok",
        service=settings.app_name,
        version=settings.app_version,
        tenant=context.tenant.slug if context.tenant else None,
    )


@router.get("/health-check/db")
def database_health(db: Session = Depends(get_db)):
    """Run a trivial query against the configured database."""
    db.execute(text("SELECT 1"))
    return {"status": "ok", "database": db.get_bind().dialect.name}
