"""
API dependencies for dependency injection
"""

from typing import Generator

from fastapi import Depends, Request
from sqlalchemy.orm import Session

from app.exceptions import ForbiddenError, NotFoundError, UnauthorizedError
from domain.models import AppUser, Tenant, get_db_session
from services.context import StorefrontContext, TenantContext
from services.tenant_service import TenantService
from services.user_service import UserService


def get_db() -> Generator[Session, None, None]:
    """
    Database session dependency for FastAPI routes.

    Usage:
        @router.get("/example")
        def example(db: Session = Depends(get_db)):
            # Use db session here
            pass
    """
    yield from get_db_session()


def resolve_tenant_context(request: Request, db: Session = Depends(get_db)) -> TenantContext:
    """
    App-wide dependency: classify the Host header and load the tenant.

    TenantNotFoundError (404) and TenantUnavailableError (503) propagate to
    the registered exception handlers.
    """
    context = TenantService.resolve(db, request.headers.get("host", ""))
    request.state.tenant_context = context
    return context


def get_tenant_context(request: Request) -> TenantContext:
    context = getattr(request.state, "tenant_context", None)
    if context is None:
        raise NotFoundError("Not found")
    return context


def get_current_tenant(context: TenantContext = Depends(get_tenant_context)) -> Tenant:
    """Storefront routes only exist on a tenant domain"""
    if context.tenant is None:
        raise NotFoundError("Not found")
    return context.tenant


def require_platform_domain(context: TenantContext = Depends(get_tenant_context)) -> None:
    """Admin routes only exist on the main domain"""
    if context.tenant is not None:
        raise NotFoundError("Not found")


def get_storefront_context(
    request: Request,
    tenant: Tenant = Depends(get_current_tenant),
    db: Session = Depends(get_db),
) -> StorefrontContext:
    """A deleted or deactivated account counts as signed out"""
    user = UserService.get_current_user(db, request.session)
    user_id = user.user_id if user is not None else None
    return StorefrontContext(session=request.session, tenant=tenant, user_id=user_id)


def get_current_user(request: Request, db: Session = Depends(get_db)) -> AppUser:
    user = UserService.get_current_user(db, request.session)
    if user is None:
        raise UnauthorizedError("Authentication required")
    return user


def require_admin(
    _: None = Depends(require_platform_domain),
    user: AppUser = Depends(get_current_user),
) -> AppUser:
    if not user.is_admin:
        raise ForbiddenError("Administrator access required")
    return user
