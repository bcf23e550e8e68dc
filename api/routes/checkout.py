"""
Checkout step routes (tenant domains only).

Every step first checks the cart is not empty and a user is signed in;
failures answer 303 with the target in ``Location``.
"""

from typing import List

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session
import logging

from api.dependencies import get_db, get_storefront_context
from api.responses import CHECKOUT_REDIRECT_RESPONSES
from app.exceptions import MethodUnavailableError
from domain.schemas.checkout_schemas import (
    CheckoutStepResponse,
    DeliveryLocationRequest,
    DeliveryLocationStep,
    DeliveryMethodRequest,
    DeliveryMethodStep,
    OrderSummary,
    PhoneRequest,
    PhoneStep,
    PickupLocationRequest,
    PickupLocationStep,
    QuarterOption,
)
from services.checkout_service import CheckoutService
from services.context import StorefrontContext

router = APIRouter(
    prefix="/checkout", tags=["Checkout"], responses=CHECKOUT_REDIRECT_RESPONSES
)
logger = logging.getLogger("dancymeals.api.checkout")


# ============================================================================
# Delivery method
# ============================================================================


@router.get("/delivery-method", response_model=DeliveryMethodStep)
def delivery_method(
    db: Session = Depends(get_db),
    ctx: StorefrontContext = Depends(get_storefront_context),
):
    """
    Show the available methods. A stored method the cook no longer offers is
    reset, and a lone available method is selected automatically.
    """
    cart = CheckoutService.require_ready(db, ctx)
    step = CheckoutService.reconcile_method(db, ctx)
    step.cart_count = cart.count
    step.cart_total = cart.total
    return step


@router.post("/delivery-method", response_model=CheckoutStepResponse)
def save_delivery_method(
    payload: DeliveryMethodRequest,
    db: Session = Depends(get_db),
    ctx: StorefrontContext = Depends(get_storefront_context),
):
    CheckoutService.require_ready(db, ctx)
    try:
        method = CheckoutService.select_method(db, ctx, payload.delivery_method)
    except MethodUnavailableError as e:
        return CheckoutStepResponse(
            success=False, error=e.message, current_method=CheckoutService.get_method(ctx)
        )
    return CheckoutStepResponse(
        success=True,
        current_method=method,
        redirect=CheckoutService.next_location_step(method),
    )


# ============================================================================
# Delivery location
# ============================================================================


@router.get("/delivery-location", response_model=DeliveryLocationStep)
def delivery_location(
    db: Session = Depends(get_db),
    ctx: StorefrontContext = Depends(get_storefront_context),
):
    CheckoutService.require_ready(db, ctx)
    return CheckoutService.delivery_location_step(db, ctx)


@router.get("/delivery-location/quarters", response_model=List[QuarterOption])
def delivery_quarters(
    town_id: int = Query(..., gt=0),
    db: Session = Depends(get_db),
    ctx: StorefrontContext = Depends(get_storefront_context),
):
    """Every active quarter of the town, flagged with whether the cook delivers there"""
    CheckoutService.require_ready(db, ctx)
    return CheckoutService.get_delivery_quarters(db, ctx.tenant_id, town_id)


@router.post("/delivery-location", response_model=CheckoutStepResponse)
def save_delivery_location(
    payload: DeliveryLocationRequest,
    db: Session = Depends(get_db),
    ctx: StorefrontContext = Depends(get_storefront_context),
):
    CheckoutService.require_ready(db, ctx)
    CheckoutService.set_delivery_location(db, ctx, payload)
    return CheckoutStepResponse(
        success=True, message="Delivery location saved.", redirect="/checkout/phone"
    )


@router.post("/switch-to-pickup", response_model=CheckoutStepResponse)
def switch_to_pickup(
    db: Session = Depends(get_db),
    ctx: StorefrontContext = Depends(get_storefront_context),
):
    CheckoutService.require_ready(db, ctx)
    try:
        method = CheckoutService.switch_to_pickup(db, ctx)
    except MethodUnavailableError as e:
        return CheckoutStepResponse(
            success=False, error=e.message, redirect="/checkout/delivery-method"
        )
    return CheckoutStepResponse(
        success=True, current_method=method, redirect="/checkout/pickup-location"
    )


# ============================================================================
# Pickup location
# ============================================================================


@router.get("/pickup-location", response_model=PickupLocationStep)
def pickup_location(
    db: Session = Depends(get_db),
    ctx: StorefrontContext = Depends(get_storefront_context),
):
    CheckoutService.require_ready(db, ctx)
    return CheckoutService.pickup_location_step(db, ctx)


@router.post("/pickup-location", response_model=CheckoutStepResponse)
def save_pickup_location(
    payload: PickupLocationRequest,
    db: Session = Depends(get_db),
    ctx: StorefrontContext = Depends(get_storefront_context),
):
    CheckoutService.require_ready(db, ctx)
    CheckoutService.set_pickup_location(db, ctx, payload.pickup_location_id)
    return CheckoutStepResponse(
        success=True, message="Pickup location saved.", redirect="/checkout/phone"
    )


# ============================================================================
# Phone and summary
# ============================================================================


@router.get("/phone", response_model=PhoneStep)
def phone(
    db: Session = Depends(get_db),
    ctx: StorefrontContext = Depends(get_storefront_context),
):
    CheckoutService.require_ready(db, ctx)
    return CheckoutService.phone_step(db, ctx)


@router.post("/phone", response_model=CheckoutStepResponse)
def save_phone(
    payload: PhoneRequest,
    db: Session = Depends(get_db),
    ctx: StorefrontContext = Depends(get_storefront_context),
):
    CheckoutService.require_ready(db, ctx)
    CheckoutService.set_phone(ctx, payload.phone)
    return CheckoutStepResponse(
        success=True, message="Phone number saved.", redirect="/checkout/summary"
    )


@router.get("/summary", response_model=OrderSummary)
def summary(
    db: Session = Depends(get_db),
    ctx: StorefrontContext = Depends(get_storefront_context),
):
    """Order review: grouped items, subtotal, delivery fee and grand total"""
    CheckoutService.require_ready(db, ctx)
    return CheckoutService.get_order_summary(db, ctx)
