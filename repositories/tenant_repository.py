"""
Tenant Repository - Data access layer for tenant lookup and administration
"""

from typing import Optional
from sqlalchemy.orm import Session
from sqlalchemy.exc import IntegrityError

from repositories.base import BaseRepository
from domain.models import Tenant
from app.exceptions import ConflictError


class TenantRepository(BaseRepository[Tenant]):
    """Repository for tenant data access"""

    def __init__(self, db: Session):
        super().__init__(db, Tenant)

    def get_by_slug(self, slug: str) -> Optional[Tenant]:
        """Get tenant by subdomain slug (active or not)"""
        return self.db.query(Tenant).filter(Tenant.slug == slug.lower()).first()

    def get_by_custom_domain(self, domain: str) -> Optional[Tenant]:
        """Get tenant by custom domain (active or not)"""
        return (
            self.db.query(Tenant).filter(Tenant.custom_domain == domain.lower()).first()
        )

    def slug_taken(self, slug: str, exclude_id: Optional[int] = None) -> bool:
        query = self.db.query(Tenant.id).filter(Tenant.slug == slug)
        if exclude_id is not None:
            query = query.filter(Tenant.id != exclude_id)
        return query.first() is not None

    def custom_domain_taken(self, domain: str, exclude_id: Optional[int] = None) -> bool:
        query = self.db.query(Tenant.id).filter(Tenant.custom_domain == domain)
        if exclude_id is not None:
            query = query.filter(Tenant.id != exclude_id)
        return query.first() is not None

    def create_tenant(self, **fields) -> Tenant:
        """Create a new tenant"""
        tenant = Tenant(**fields)
        try:
            self.db.add(tenant)
            self.db.commit()
            self.db.refresh(tenant)
            return tenant
        except IntegrityError:
            self.db.rollback()
            raise ConflictError(
                "A tenant with this subdomain or domain already exists",
                code="TENANT_EXISTS",
            )

    def set_active(self, tenant: Tenant, is_active: bool) -> Tenant:
        tenant.is_active = is_active
        return self.update(tenant)
