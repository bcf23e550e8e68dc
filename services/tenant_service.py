import logging
import re
from typing import Iterable, List, Optional

from sqlalchemy.orm import Session

from app.config import settings
from app.exceptions import (
    ConflictError,
    NotFoundError,
    ServiceValidationError,
    TenantNotFoundError,
    TenantUnavailableError,
)
from domain.enums import HostKind
from domain.models import Tenant
from domain.schemas.tenant_schemas import TenantCreate
from repositories.tenant_repository import TenantRepository
from services.context import TenantContext
from services.hostname import HostClassification, classify_host

logger = logging.getLogger("dancymeals.tenants")

SUBDOMAIN_PATTERN = re.compile(r"^[a-z0-9](?:[a-z0-9-]*[a-z0-9])?$")
CUSTOM_DOMAIN_PATTERN = re.compile(r"^[a-z0-9](?:[a-z0-9.-]*[a-z0-9])?\.[a-z]{2,}$")


class TenantService:
    @staticmethod
    def resolve(
        db: Session,
        raw_host: str,
        main_domain: Optional[str] = None,
        reserved: Optional[Iterable[str]] = None,
    ) -> TenantContext:
        """
        Turn a request host into a tenant context.

        IP literals and the main domain resolve to the platform (no tenant).
        A reserved subdomain such as ``www`` is treated as the main domain.

        Raises:
            TenantNotFoundError: no tenant owns the subdomain or custom domain
            TenantUnavailableError: the tenant exists but is deactivated
        """
        main_domain = main_domain or settings.main_domain
        reserved_set = set(reserved if reserved is not None else settings.reserved_subdomains)

        classification = classify_host(raw_host, main_domain)

        if classification.kind == HostKind.SUBDOMAIN and classification.slug in reserved_set:
            classification = HostClassification(
                kind=HostKind.MAIN_DOMAIN, host=classification.host
            )

        if classification.is_platform:
            return TenantContext(classification=classification)

        repo = TenantRepository(db)
        if classification.kind == HostKind.SUBDOMAIN:
            tenant = repo.get_by_slug(classification.slug)
        else:
            tenant = repo.get_by_custom_domain(classification.host)

        if tenant is None:
            logger.info(
                f"tenant_not_found host={classification.host} kind={classification.kind.value}"
            )
            raise TenantNotFoundError(details={"host": classification.host})

        if not tenant.is_active:
            logger.info(f"tenant_unavailable tenant_id={tenant.id} slug={tenant.slug}")
            raise TenantUnavailableError(details={"host": classification.host})

        return TenantContext(classification=classification, tenant=tenant)

    @staticmethod
    def validate_subdomain(
        db: Session, subdomain: str, exclude_id: Optional[int] = None
    ) -> str:
        """Normalise and validate a subdomain; returns the slug to store"""
        slug = (subdomain or "").strip().lower()

        if len(slug) < 3 or len(slug) > 63:
            raise ServiceValidationError(
                "The subdomain must be between 3 and 63 characters.",
                details={"subdomain": slug},
            )
        if not SUBDOMAIN_PATTERN.match(slug) or "--" in slug:
            raise ServiceValidationError(
                "The subdomain may only contain lowercase letters, digits and single hyphens.",
                details={"subdomain": slug},
            )
        if slug in settings.reserved_subdomains:
            raise ServiceValidationError(
                "This subdomain is reserved and cannot be used.",
                details={"subdomain": slug},
            )
        if TenantRepository(db).slug_taken(slug, exclude_id=exclude_id):
            raise ConflictError(
                "This subdomain is already taken.",
                details={"subdomain": slug},
                code="SUBDOMAIN_TAKEN",
            )
        return slug

    @staticmethod
    def validate_custom_domain(
        db: Session, custom_domain: Optional[str], exclude_id: Optional[int] = None
    ) -> Optional[str]:
        """Normalise and validate an optional custom domain; blank means none"""
        domain = (custom_domain or "").strip().lower()
        if not domain:
            return None

        if not CUSTOM_DOMAIN_PATTERN.match(domain):
            raise ServiceValidationError(
                "The custom domain must be a valid domain name.",
                details={"custom_domain": domain},
            )
        main = settings.main_domain
        if domain == main:
            raise ServiceValidationError(
                "This domain conflicts with the platform domain.",
                details={"custom_domain": domain},
            )
        if domain.endswith(f".{main}"):
            raise ServiceValidationError(
                "Use the subdomain field for subdomains of the platform domain.",
                details={"custom_domain": domain},
            )
        if TenantRepository(db).custom_domain_taken(domain, exclude_id=exclude_id):
            raise ConflictError(
                "This domain is already in use.",
                details={"custom_domain": domain},
                code="DOMAIN_TAKEN",
            )
        return domain

    @staticmethod
    def create_tenant(db: Session, payload: TenantCreate) -> Tenant:
        slug = TenantService.validate_subdomain(db, payload.subdomain)
        custom_domain = TenantService.validate_custom_domain(db, payload.custom_domain)

        tenant = TenantRepository(db).create_tenant(
            slug=slug,
            custom_domain=custom_domain,
            name=payload.name.strip(),
            description=payload.description,
            minimum_order_amount=payload.minimum_order_amount,
            whatsapp=payload.whatsapp,
            phone=payload.phone,
            is_active=payload.is_active,
        )
        logger.info(f"tenant_created tenant_id={tenant.id} slug={tenant.slug}")
        return tenant

    @staticmethod
    def list_tenants(db: Session, skip: int = 0, limit: int = 100) -> List[Tenant]:
        return TenantRepository(db).get_all(skip=skip, limit=limit)

    @staticmethod
    def toggle_status(db: Session, tenant_id: int) -> Tenant:
        """Flip is_active; tenants are never hard-deleted"""
        repo = TenantRepository(db)
        tenant = repo.get_by_id(tenant_id)
        if tenant is None:
            raise NotFoundError(f"Tenant {tenant_id} not found")

        tenant = repo.set_active(tenant, not tenant.is_active)
        status = "activated" if tenant.is_active else "deactivated"
        logger.info(f"tenant_{status} tenant_id={tenant.id} slug={tenant.slug}")
        return tenant
