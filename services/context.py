"""
Per-request context handed explicitly to the cart and checkout services.
"""

from dataclasses import dataclass
from typing import Any, MutableMapping, Optional
from uuid import UUID

from domain.models import Tenant
from services.hostname import HostClassification


@dataclass
class TenantContext:
    """Outcome of resolving the request host; tenant is None on the platform domain"""

    classification: HostClassification
    tenant: Optional[Tenant] = None

    @property
    def is_platform(self) -> bool:
        return self.tenant is None


@dataclass
class StorefrontContext:
    """Session storage, current tenant and signed-in user for one request"""

    session: MutableMapping[str, Any]
    tenant: Tenant
    user_id: Optional[UUID] = None

    @property
    def tenant_id(self) -> int:
        return self.tenant.id

    @property
    def is_authenticated(self) -> bool:
        return self.user_id is not None
