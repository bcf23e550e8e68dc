"""Platform admin: tenant creation and activation (main domain only)"""

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session
import logging

from api.dependencies import get_db, require_admin
from api.responses import PaginatedResponse, paginated_response
from domain.models import AppUser
from domain.schemas.tenant_schemas import TenantCreate, TenantResponse
from repositories.tenant_repository import TenantRepository
from services.tenant_service import TenantService

router = APIRouter(prefix="/admin/tenants", tags=["Admin"])
logger = logging.getLogger("dancymeals.api.admin")


@router.post("", response_model=TenantResponse, status_code=status.HTTP_201_CREATED)
def create_tenant(
    payload: TenantCreate,
    db: Session = Depends(get_db),
    admin: AppUser = Depends(require_admin),
):
    """
    Create a tenant.

    Raises:
        400: subdomain or custom domain fails validation or is reserved
        409: subdomain or custom domain already taken
    """
    tenant = TenantService.create_tenant(db, payload)
    logger.info(f"Tenant {tenant.slug} created by {admin.user_id}")
    return tenant


@router.get("", response_model=PaginatedResponse[TenantResponse])
def list_tenants(
    page: int = Query(1, ge=1),
    page_size: int = Query(20, ge=1, le=100),
    db: Session = Depends(get_db),
    admin: AppUser = Depends(require_admin),
):
    tenants = TenantService.list_tenants(db, skip=(page - 1) * page_size, limit=page_size)
    total = TenantRepository(db).count()
    return paginated_response(
        [TenantResponse.model_validate(t) for t in tenants], total, page, page_size
    )


@router.post("/{tenant_id}/toggle-status")
def toggle_status(
    tenant_id: int,
    db: Session = Depends(get_db),
    admin: AppUser = Depends(require_admin),
):
    tenant = TenantService.toggle_status(db, tenant_id)
    label = "activated" if tenant.is_active else "deactivated"
    return {
        "success": True,
        "message": f'Tenant "{tenant.name}" has been {label}.',
        "tenant": TenantResponse.model_validate(tenant),
    }
