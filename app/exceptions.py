from typing import Any, Mapping, Optional


class DancyMealsError(Exception):
    """Base class for errors raised by services and surfaced by the API.

    Attributes:
        message: human-readable message
        details: optional mapping with extra context (field errors, validation info)
        code: machine-readable error code
        http_status: suggested HTTP status code for handlers
    """

    http_status = 500
    default_message = "Internal error"
    default_code = "INTERNAL_ERROR"

    def __init__(
        self,
        message: Optional[str] = None,
        details: Optional[Mapping[str, Any]] = None,
        code: Optional[str] = None,
    ):
        message = message or self.default_message
        super().__init__(message)
        self.message = message
        self.details = details
        self.code = code or self.default_code

    def to_dict(self) -> dict:
        payload: dict[str, Any] = {"code": self.code, "message": self.message}
        if self.details:
            payload["details"] = dict(self.details)
        return payload

    def __str__(self) -> str:
        return self.message


class ServiceValidationError(DancyMealsError):
    """Raised when input data is invalid or a precondition for a service call is not met."""

    http_status = 400
    default_message = "Invalid input"
    default_code = "VALIDATION_ERROR"


class NotFoundError(DancyMealsError):
    """Raised when a requested resource was not found."""

    http_status = 404
    default_message = "Not found"
    default_code = "NOT_FOUND"


class ConflictError(DancyMealsError):
    """Raised when a resource conflict occurs (e.g., duplicate slug)."""

    http_status = 409
    default_message = "Conflict"
    default_code = "CONFLICT"


class UnauthorizedError(DancyMealsError):
    """Raised when authentication fails."""

    http_status = 401
    default_message = "Unauthorized"
    default_code = "UNAUTHORIZED"


class ForbiddenError(DancyMealsError):
    """Raised when an authenticated user lacks the required role."""

    http_status = 403
    default_message = "Forbidden"
    default_code = "FORBIDDEN"


# ---------------------------------------------------------------------------
# Tenant resolution
# ---------------------------------------------------------------------------


class TenantNotFoundError(NotFoundError):
    """No tenant owns the requested subdomain or custom domain."""

    default_message = "Tenant not found"
    default_code = "TENANT_NOT_FOUND"


class TenantUnavailableError(DancyMealsError):
    """The tenant exists but has been deactivated."""

    http_status = 503
    default_message = "This store is temporarily unavailable."
    default_code = "TENANT_UNAVAILABLE"


# ---------------------------------------------------------------------------
# Cart and checkout
# ---------------------------------------------------------------------------


class ComponentUnavailableError(DancyMealsError):
    """The meal or component cannot be put in the cart.

    Routes turn this into ``{"success": false, "error": message}`` with a 200.
    """

    http_status = 200
    default_message = "This item is no longer available."
    default_code = "COMPONENT_UNAVAILABLE"


class MethodUnavailableError(DancyMealsError):
    """The requested checkout method is not offered by the tenant."""

    http_status = 200
    default_message = "Invalid delivery method selected."
    default_code = "METHOD_UNAVAILABLE"


class MinimumOrderNotMetError(DancyMealsError):
    http_status = 200
    default_message = "Minimum order not met."
    default_code = "MINIMUM_ORDER_NOT_MET"


class CheckoutRedirect(DancyMealsError):
    """A checkout precondition failed and the client must go elsewhere."""

    http_status = 303
    default_code = "CHECKOUT_REDIRECT"
    redirect_to = "/"

    def __init__(self, message: Optional[str] = None, redirect_to: Optional[str] = None, **kwargs):
        super().__init__(message, **kwargs)
        if redirect_to:
            self.redirect_to = redirect_to

    def to_dict(self) -> dict:
        payload = super().to_dict()
        payload["redirect"] = self.redirect_to
        return payload


class CheckoutStepRequiredError(CheckoutRedirect):
    """An earlier checkout step (method, location, phone) has not been completed."""

    default_message = "Please select a delivery method first."
    default_code = "CHECKOUT_STEP_REQUIRED"
    redirect_to = "/checkout/delivery-method"


class EmptyCartError(CheckoutRedirect):
    default_message = "Your cart is empty."
    default_code = "EMPTY_CART"
    redirect_to = "/cart"


class UnauthenticatedError(CheckoutRedirect):
    default_message = "Please login to proceed with your order."
    default_code = "UNAUTHENTICATED"
    redirect_to = "/login"
