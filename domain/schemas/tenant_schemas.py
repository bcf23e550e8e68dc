from pydantic import BaseModel, Field
from typing import Optional
from datetime import datetime


class TenantCreate(BaseModel):
    """Schema for creating a tenant from the admin panel"""

    name: str = Field(..., min_length=1, max_length=255)
    subdomain: str = Field(..., description="Becomes the tenant slug")
    custom_domain: Optional[str] = Field(None, max_length=255)
    description: Optional[str] = Field(None, max_length=5000)
    minimum_order_amount: int = Field(default=0, ge=0)
    whatsapp: Optional[str] = None
    phone: Optional[str] = None
    is_active: bool = True


class TenantResponse(BaseModel):
    id: int
    slug: str
    custom_domain: Optional[str] = None
    name: str
    description: Optional[str] = None
    is_active: bool
    minimum_order_amount: int
    whatsapp: Optional[str] = None
    phone: Optional[str] = None
    created_at: Optional[datetime] = None

    model_config = {"from_attributes": True}


class StorefrontInfo(BaseModel):
    """Public view of the current tenant"""

    slug: str
    name: str
    description: Optional[str] = None
    minimum_order_amount: int

    model_config = {"from_attributes": True}
