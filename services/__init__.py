"""Services package - Business logic layer"""

from services.hostname import HostClassification, classify_host
from services.context import TenantContext, StorefrontContext
from services.tenant_service import TenantService
from services.cart_service import CartService
from services.checkout_service import CheckoutService
from services.user_service import UserService

__all__ = [
    "HostClassification",
    "classify_host",
    "TenantContext",
    "StorefrontContext",
    "TenantService",
    "CartService",
    "CheckoutService",
    "UserService",
]
