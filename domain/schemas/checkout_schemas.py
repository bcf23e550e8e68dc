from pydantic import BaseModel, Field
from typing import Optional, List

from domain.enums import CheckoutMethod
from domain.schemas.cart_schemas import CartMealGroup


class CheckoutOptions(BaseModel):
    """What the tenant currently offers"""

    has_delivery: bool
    has_pickup: bool
    delivery_area_count: int = 0
    pickup_location_count: int = 0


class DeliveryMethodStep(BaseModel):
    """State of the delivery-method step after reconciliation"""

    has_delivery: bool
    has_pickup: bool
    current_method: Optional[CheckoutMethod] = None
    cart_count: int = 0
    cart_total: int = 0


class DeliveryMethodRequest(BaseModel):
    delivery_method: str = Field(..., description="'delivery' or 'pickup'")


class DeliveryLocationRequest(BaseModel):
    """All three fields are required"""

    town_id: int = Field(..., gt=0)
    quarter_id: int = Field(..., gt=0)
    neighbourhood: str = Field(..., min_length=1, max_length=500)


class DeliveryLocation(BaseModel):
    town_id: int
    quarter_id: int
    neighbourhood: str


class TownOption(BaseModel):
    id: int
    name: str

    model_config = {"from_attributes": True}


class QuarterOption(BaseModel):
    """A quarter of a town; available is false when the tenant does not deliver there"""

    id: int
    name: str
    delivery_fee: int
    available: bool


class DeliveryFeeDisplay(BaseModel):
    fee: int
    quarter_name: Optional[str] = None
    is_free: bool
    display_text: str


class CookContact(BaseModel):
    whatsapp: Optional[str] = None
    phone: Optional[str] = None
    brand_name: str
    has_contact: bool


class DeliveryLocationStep(BaseModel):
    towns: List[TownOption]
    current_location: Optional[DeliveryLocation] = None
    selected_town_id: Optional[int] = None
    quarters: List[QuarterOption] = Field(default_factory=list)
    has_pickup: bool = False
    contact: CookContact


class PickupLocationOption(BaseModel):
    id: int
    name: str
    address: Optional[str] = None
    instructions: Optional[str] = None
    town_name: Optional[str] = None
    quarter_name: Optional[str] = None


class PickupLocationStep(BaseModel):
    locations: List[PickupLocationOption]
    current_pickup_location_id: Optional[int] = None


class PickupLocationRequest(BaseModel):
    pickup_location_id: int = Field(..., gt=0)


class PhoneStep(BaseModel):
    phone: str = ""
    back_url: str


class PhoneRequest(BaseModel):
    phone: str = Field(..., min_length=1, description="Cameroon phone number")


class PriceChange(BaseModel):
    component_id: int
    name: str
    old_price: int
    new_price: int


class OrderSummary(BaseModel):
    """Review step: grouped items and the money breakdown"""

    meals: List[CartMealGroup]
    subtotal: int
    delivery_method: Optional[CheckoutMethod] = None
    delivery_fee: int
    delivery_display: DeliveryFeeDisplay
    promo_discount: int = 0
    promo_code: Optional[str] = None
    grand_total: int
    formatted_grand_total: str
    item_count: int
    price_changes: List[PriceChange] = Field(default_factory=list)
    phone: Optional[str] = None
    back_url: str = "/checkout/phone"


class CheckoutStepResponse(BaseModel):
    """Envelope for POST steps: either a redirect target or an error message"""

    success: bool
    error: Optional[str] = None
    message: Optional[str] = None
    redirect: Optional[str] = None
    current_method: Optional[CheckoutMethod] = None
