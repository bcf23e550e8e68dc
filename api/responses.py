"""
Response envelopes shared by the routers, and the OpenAPI ``responses``
mappings that document tenant and checkout failures.
"""

from typing import Generic, TypeVar, Optional, Any, List
from pydantic import BaseModel, Field
from datetime import datetime

T = TypeVar("T")


class PaginatedResponse(BaseModel, Generic[T]):
    """One page of a listing"""

    items: List[T]
    total: int = Field(..., ge=0, description="Rows across all pages")
    page: int = Field(..., ge=1)
    page_size: int = Field(..., ge=1)
    has_next: bool
    has_prev: bool

    model_config = {"from_attributes": True}


class ErrorDetail(BaseModel):
    code: str = Field(..., description="Machine readable code, e.g. TENANT_NOT_FOUND")
    message: Any = Field(..., description="Human readable message")
    details: Optional[Any] = Field(
        None, description="Extra context such as validation locations or order totals"
    )


class ErrorResponse(BaseModel):
    success: bool = False
    error: ErrorDetail
    timestamp: datetime = Field(default_factory=datetime.utcnow)


class RedirectResponseBody(ErrorResponse):
    """Body of a 303 sent when a checkout precondition fails"""

    redirect: str = Field(..., description="Path the client should follow")


class HealthResponse(BaseModel):
    status: str
    service: str
    version: Optional[str] = None
    tenant: Optional[str] = Field(None, description="Slug of the storefront on this host")
    timestamp: datetime = Field(default_factory=datetime.utcnow)


TENANT_ERROR_RESPONSES = {
    404: {"model": ErrorResponse, "description": "Host does not belong to a storefront"},
    503: {"model": ErrorResponse, "description": "Storefront is deactivated"},
}

CHECKOUT_REDIRECT_RESPONSES = {
    **TENANT_ERROR_RESPONSES,
    303: {
        "model": RedirectResponseBody,
        "description": "Empty cart, not signed in or an earlier step is missing",
    },
}


def paginated_response(items: List[Any], total: int, page: int, page_size: int) -> dict:
    """Build the PaginatedResponse payload for a 1-based page"""
    last_page = max(1, -(-total // page_size))
    return {
        "items": items,
        "total": total,
        "page": page,
        "page_size": page_size,
        "has_next": page < last_page,
        "has_prev": page > 1,
    }
