"""
App package - settings and the error taxonomy shared by every layer.
"""

from app.config import settings
from app.exceptions import (
    DancyMealsError,
    ServiceValidationError,
    NotFoundError,
    ConflictError,
    UnauthorizedError,
    ForbiddenError,
    TenantNotFoundError,
    TenantUnavailableError,
    CheckoutRedirect,
)

__all__ = [
    "settings",
    "DancyMealsError",
    "ServiceValidationError",
    "NotFoundError",
    "ConflictError",
    "UnauthorizedError",
    "ForbiddenError",
    "TenantNotFoundError",
    "TenantUnavailableError",
    "CheckoutRedirect",
]
