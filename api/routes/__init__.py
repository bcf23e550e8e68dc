"""API routes package"""

from . import health, auth, admin_tenants, storefront, cart, checkout

__all__ = ["health", "auth", "admin_tenants", "storefront", "cart", "checkout"]
