"""Session cart routes (tenant domains only)"""

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session
import logging

from api.dependencies import get_db, get_storefront_context
from api.responses import CHECKOUT_REDIRECT_RESPONSES, TENANT_ERROR_RESPONSES
from app.exceptions import ComponentUnavailableError, MinimumOrderNotMetError
from domain.schemas.cart_schemas import (
    CartAddRequest,
    CartRemoveRequest,
    CartResponse,
    CartUpdateQuantityRequest,
)
from domain.schemas.checkout_schemas import CheckoutStepResponse
from services.cart_service import CartService
from services.checkout_service import CheckoutService
from services.context import StorefrontContext

router = APIRouter(prefix="/cart", tags=["Cart"], responses=TENANT_ERROR_RESPONSES)
logger = logging.getLogger("dancymeals.api.cart")


@router.get("", response_model=CartResponse)
def view_cart(
    db: Session = Depends(get_db),
    ctx: StorefrontContext = Depends(get_storefront_context),
):
    """Cart with each line re-checked for availability"""
    return CartResponse(success=True, cart=CartService.get_with_availability(db, ctx))


@router.post("/add", response_model=CartResponse)
def add_to_cart(
    payload: CartAddRequest,
    db: Session = Depends(get_db),
    ctx: StorefrontContext = Depends(get_storefront_context),
):
    """
    Add a component. Unavailable items come back as success=false with the
    reason in ``error`` and the unchanged cart.
    """
    try:
        cart = CartService.add(
            db, ctx, payload.meal_id, payload.component_id, payload.quantity
        )
    except ComponentUnavailableError as e:
        return CartResponse(success=False, error=e.message, cart=CartService.get(db, ctx))
    return CartResponse(success=True, message="Added to cart.", cart=cart)


@router.post("/update-quantity", response_model=CartResponse)
def update_quantity(
    payload: CartUpdateQuantityRequest,
    db: Session = Depends(get_db),
    ctx: StorefrontContext = Depends(get_storefront_context),
):
    try:
        cart = CartService.update_quantity(db, ctx, payload.component_id, payload.quantity)
    except ComponentUnavailableError as e:
        return CartResponse(success=False, error=e.message, cart=CartService.get(db, ctx))
    return CartResponse(success=True, cart=cart)


@router.post("/remove", response_model=CartResponse)
def remove_from_cart(
    payload: CartRemoveRequest,
    db: Session = Depends(get_db),
    ctx: StorefrontContext = Depends(get_storefront_context),
):
    return CartResponse(success=True, cart=CartService.remove(db, ctx, payload.component_id))


@router.post("/clear", response_model=CartResponse)
def clear_cart(
    db: Session = Depends(get_db),
    ctx: StorefrontContext = Depends(get_storefront_context),
):
    return CartResponse(success=True, message="Cart cleared.", cart=CartService.clear(db, ctx))


@router.post(
    "/checkout",
    response_model=CheckoutStepResponse,
    responses=CHECKOUT_REDIRECT_RESPONSES,
)
def proceed_to_checkout(
    db: Session = Depends(get_db),
    ctx: StorefrontContext = Depends(get_storefront_context),
):
    """
    Leave the cart for checkout.

    Empty cart and missing login answer with a 303 to /cart or /login; a
    subtotal below the tenant minimum answers success=false.
    """
    try:
        next_url = CheckoutService.proceed(db, ctx)
    except MinimumOrderNotMetError as e:
        return CheckoutStepResponse(success=False, error=e.message)
    return CheckoutStepResponse(success=True, redirect=next_url)
