from pydantic import BaseModel, Field
from typing import Optional, List


class CartAddRequest(BaseModel):
    """Schema for adding a meal component to the cart"""

    meal_id: int = Field(..., gt=0)
    component_id: int = Field(..., gt=0)
    quantity: int = Field(default=1, ge=1, description="Units to add")


class CartUpdateQuantityRequest(BaseModel):
    """Schema for changing a cart line; zero or less removes the line"""

    component_id: int = Field(..., gt=0)
    quantity: int


class CartRemoveRequest(BaseModel):
    component_id: int = Field(..., gt=0)


class CartItem(BaseModel):
    """One cart line: a component with its quantity and price at add time"""

    component_id: int
    meal_id: int
    meal_name: Optional[str] = None
    name: Optional[str] = None
    unit: Optional[str] = None
    unit_price: int
    quantity: int
    line_total: int
    available: bool = True
    warning: Optional[str] = None


class CartMealGroup(BaseModel):
    """Cart lines of a single meal with their subtotal"""

    meal_id: int
    meal_name: Optional[str] = None
    items: List[CartItem]
    subtotal: int


class CartSummary(BaseModel):
    """
    Cart totals recomputed on every read.

    count is the number of lines, quantity the number of units.
    """

    count: int = 0
    quantity: int = 0
    total: int = 0
    formatted_total: str = "0 XAF"
    items: List[CartItem] = Field(default_factory=list)
    meals: List[CartMealGroup] = Field(default_factory=list)
    warnings: List[str] = Field(default_factory=list)

    @property
    def is_empty(self) -> bool:
        return self.count == 0


class CartResponse(BaseModel):
    """Envelope returned by every cart operation"""

    success: bool
    error: Optional[str] = None
    message: Optional[str] = None
    cart: CartSummary
