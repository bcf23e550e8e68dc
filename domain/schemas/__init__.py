"""
Domain schemas package - Pydantic models for validation.
"""

from domain.schemas.cart_schemas import (
    CartAddRequest,
    CartUpdateQuantityRequest,
    CartRemoveRequest,
    CartItem,
    CartMealGroup,
    CartSummary,
    CartResponse,
)
from domain.schemas.checkout_schemas import (
    CheckoutOptions,
    DeliveryMethodStep,
    DeliveryMethodRequest,
    DeliveryLocationRequest,
    DeliveryLocation,
    TownOption,
    QuarterOption,
    DeliveryFeeDisplay,
    CookContact,
    DeliveryLocationStep,
    PickupLocationOption,
    PickupLocationStep,
    PickupLocationRequest,
    PhoneStep,
    PhoneRequest,
    PriceChange,
    OrderSummary,
    CheckoutStepResponse,
)
from domain.schemas.catalog_schemas import MealResponse, MealComponentResponse
from domain.schemas.tenant_schemas import TenantCreate, TenantResponse, StorefrontInfo
from domain.schemas.auth_schemas import RegisterRequest, LoginRequest, UserResponse

__all__ = [
    # Cart
    "CartAddRequest",
    "CartUpdateQuantityRequest",
    "CartRemoveRequest",
    "CartItem",
    "CartMealGroup",
    "CartSummary",
    "CartResponse",
    # Checkout
    "CheckoutOptions",
    "DeliveryMethodStep",
    "DeliveryMethodRequest",
    "DeliveryLocationRequest",
    "DeliveryLocation",
    "TownOption",
    "QuarterOption",
    "DeliveryFeeDisplay",
    "CookContact",
    "DeliveryLocationStep",
    "PickupLocationOption",
    "PickupLocationStep",
    "PickupLocationRequest",
    "PhoneStep",
    "PhoneRequest",
    "PriceChange",
    "OrderSummary",
    "CheckoutStepResponse",
    # Catalogue
    "MealResponse",
    "MealComponentResponse",
    # Tenants
    "TenantCreate",
    "TenantResponse",
    "StorefrontInfo",
    # Accounts
    "RegisterRequest",
    "LoginRequest",
    "UserResponse",
]
