from pydantic import BaseModel
from typing import Optional, List


class MealComponentResponse(BaseModel):
    id: int
    name: str
    price: int
    formatted_price: str
    unit_label: str
    is_available: bool
    max_selectable: int
    in_cart: int = 0


class MealResponse(BaseModel):
    id: int
    name: str
    description: Optional[str] = None
    is_available: bool
    components: List[MealComponentResponse]
