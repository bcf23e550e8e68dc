"""
Checkout state kept in the session per tenant under ``dmc-checkout-{tenant_id}``.

Steps, in order: delivery method, delivery or pickup location, phone, summary.
Every step needs a non-empty cart and a signed-in user.
"""

import logging
import re
from typing import Any, Dict, List, Optional

from sqlalchemy.orm import Session

from app.exceptions import (
    CheckoutStepRequiredError,
    EmptyCartError,
    MethodUnavailableError,
    MinimumOrderNotMetError,
    ServiceValidationError,
    UnauthenticatedError,
)
from domain.enums import CheckoutMethod
from domain.mappers.catalog_mapper import PickupLocationMapper
from domain.models import MealComponent, Tenant
from domain.pricing import format_price
from domain.schemas.cart_schemas import CartSummary
from domain.schemas.checkout_schemas import (
    CheckoutOptions,
    CookContact,
    DeliveryFeeDisplay,
    DeliveryLocation,
    DeliveryLocationRequest,
    DeliveryLocationStep,
    DeliveryMethodStep,
    OrderSummary,
    PhoneStep,
    PickupLocationStep,
    PriceChange,
    QuarterOption,
    TownOption,
)
from repositories.delivery_repository import DeliveryRepository
from repositories.meal_repository import MealComponentRepository
from repositories.user_repository import UserRepository
from services.cart_service import CartService
from services.context import StorefrontContext

logger = logging.getLogger("dancymeals.checkout")

SESSION_KEY_PREFIX = "dmc-checkout-"

CAMEROON_PHONE_PATTERN = re.compile(r"^\+237[62]\d{8}$")

EMPTY_CHECKOUT: Dict[str, Any] = {
    "delivery_method": None,
    "delivery_location": None,
    "delivery_fee": None,
    "pickup_location_id": None,
    "phone": None,
}


def session_key(tenant_id: int) -> str:
    return f"{SESSION_KEY_PREFIX}{tenant_id}"


def normalize_phone(raw: str) -> str:
    """
    Normalise a Cameroon number to ``+237XXXXXXXXX``.

    Accepts spaces, dashes and parentheses, with or without the country code.

    Raises:
        ServiceValidationError: not a Cameroon mobile or landline number
    """
    digits = re.sub(r"[\s\-()]", "", raw or "")
    if digits.startswith("+237"):
        digits = digits[4:]
    elif digits.startswith("237") and len(digits) == 12:
        digits = digits[3:]

    phone = f"+237{digits}"
    if not CAMEROON_PHONE_PATTERN.match(phone):
        raise ServiceValidationError(
            "Please enter a valid Cameroon phone number (+237 followed by 9 digits).",
            details={"phone": raw},
            code="INVALID_PHONE",
        )
    return phone


class CheckoutService:
    # ------------------------------------------------------------------
    # session state
    # ------------------------------------------------------------------

    @staticmethod
    def get_checkout_data(ctx: StorefrontContext) -> Dict[str, Any]:
        data = dict(EMPTY_CHECKOUT)
        data.update(ctx.session.get(session_key(ctx.tenant_id)) or {})
        return data

    @staticmethod
    def _save(ctx: StorefrontContext, data: Dict[str, Any]) -> None:
        ctx.session[session_key(ctx.tenant_id)] = data

    @staticmethod
    def clear(ctx: StorefrontContext) -> None:
        ctx.session.pop(session_key(ctx.tenant_id), None)

    @staticmethod
    def get_method(ctx: StorefrontContext) -> Optional[CheckoutMethod]:
        value = CheckoutService.get_checkout_data(ctx)["delivery_method"]
        try:
            return CheckoutMethod(value) if value else None
        except ValueError:
            return None

    @staticmethod
    def _set_method(ctx: StorefrontContext, method: Optional[CheckoutMethod]) -> None:
        data = CheckoutService.get_checkout_data(ctx)
        data["delivery_method"] = method.value if method else None
        CheckoutService._save(ctx, data)

    # ------------------------------------------------------------------
    # method selector
    # ------------------------------------------------------------------

    @staticmethod
    def get_available_options(db: Session, tenant_id: int) -> CheckoutOptions:
        repo = DeliveryRepository(db)
        area_count = repo.count_delivery_areas(tenant_id)
        pickup_count = repo.count_pickup_locations(tenant_id)
        return CheckoutOptions(
            has_delivery=area_count > 0,
            has_pickup=pickup_count > 0,
            delivery_area_count=area_count,
            pickup_location_count=pickup_count,
        )

    @staticmethod
    def validate_method(options: CheckoutOptions, method: str) -> CheckoutMethod:
        try:
            chosen = CheckoutMethod(method)
        except ValueError:
            raise MethodUnavailableError("Invalid delivery method selected.")

        if chosen == CheckoutMethod.DELIVERY and not options.has_delivery:
            raise MethodUnavailableError("Delivery is not available for this cook.")
        if chosen == CheckoutMethod.PICKUP and not options.has_pickup:
            raise MethodUnavailableError("Pickup is not available for this cook.")
        return chosen

    @staticmethod
    def select_method(db: Session, ctx: StorefrontContext, method: str) -> CheckoutMethod:
        """
        Store the chosen method. An unknown or unavailable method raises
        MethodUnavailableError and leaves the stored state untouched.
        """
        options = CheckoutService.get_available_options(db, ctx.tenant_id)
        chosen = CheckoutService.validate_method(options, method)
        CheckoutService._set_method(ctx, chosen)
        logger.info(f"checkout_method tenant_id={ctx.tenant_id} method={chosen.value}")
        return chosen

    @staticmethod
    def reconcile_method(db: Session, ctx: StorefrontContext) -> DeliveryMethodStep:
        """
        Re-validate the stored method on entry to the method step.

        A method the tenant stopped offering is reset; with exactly one option
        available and nothing chosen, that option is selected.
        """
        options = CheckoutService.get_available_options(db, ctx.tenant_id)
        current = CheckoutService.get_method(ctx)

        if current == CheckoutMethod.DELIVERY and not options.has_delivery:
            current = None
            CheckoutService._set_method(ctx, None)
        elif current == CheckoutMethod.PICKUP and not options.has_pickup:
            current = None
            CheckoutService._set_method(ctx, None)

        if current is None and options.has_delivery != options.has_pickup:
            current = (
                CheckoutMethod.DELIVERY if options.has_delivery else CheckoutMethod.PICKUP
            )
            CheckoutService._set_method(ctx, current)

        return DeliveryMethodStep(
            has_delivery=options.has_delivery,
            has_pickup=options.has_pickup,
            current_method=current,
        )

    # ------------------------------------------------------------------
    # guards
    # ------------------------------------------------------------------

    @staticmethod
    def require_ready(db: Session, ctx: StorefrontContext) -> CartSummary:
        """Cart must be non-empty, then a user must be signed in"""
        cart = CartService.get(db, ctx)
        if cart.is_empty:
            raise EmptyCartError()
        if not ctx.is_authenticated:
            raise UnauthenticatedError()
        return cart

    @staticmethod
    def check_minimum_order(tenant: Tenant, subtotal: int) -> None:
        minimum = tenant.minimum_order_amount or 0
        if minimum > 0 and subtotal < minimum:
            remaining = minimum - subtotal
            raise MinimumOrderNotMetError(
                f"Minimum order is {minimum:,} XAF. "
                f"Add {remaining:,} XAF more to proceed.",
                details={"minimum": minimum, "remaining": remaining},
            )

    @staticmethod
    def proceed(db: Session, ctx: StorefrontContext) -> str:
        """
        Leave the cart for checkout. Returns the URL of the next step.

        Raises:
            EmptyCartError: nothing in the cart; no state is touched
            UnauthenticatedError: no signed-in user
            MinimumOrderNotMetError: food subtotal below the tenant minimum
        """
        cart = CheckoutService.require_ready(db, ctx)
        CheckoutService.check_minimum_order(ctx.tenant, cart.total)
        logger.info(
            f"checkout_proceed tenant_id={ctx.tenant_id} user_id={ctx.user_id} "
            f"total={cart.total}"
        )
        return "/checkout/delivery-method"

    @staticmethod
    def require_method(
        ctx: StorefrontContext, expected: Optional[CheckoutMethod] = None
    ) -> CheckoutMethod:
        method = CheckoutService.get_method(ctx)
        if method is None or (expected is not None and method != expected):
            raise CheckoutStepRequiredError()
        return method

    @staticmethod
    def next_location_step(method: CheckoutMethod) -> str:
        if method == CheckoutMethod.DELIVERY:
            return "/checkout/delivery-location"
        return "/checkout/pickup-location"

    # ------------------------------------------------------------------
    # delivery location and fee
    # ------------------------------------------------------------------

    @staticmethod
    def _effective_fees(db: Session, tenant_id: int, town_id: int) -> Dict[int, int]:
        """quarter_id -> fee for every quarter of the town the tenant delivers to"""
        repo = DeliveryRepository(db)
        group_fees = repo.get_group_fees(tenant_id)
        return {
            daq.quarter_id: group_fees.get(daq.quarter_id, daq.delivery_fee)
            for daq in repo.get_area_quarters_for_town(tenant_id, town_id)
        }

    @staticmethod
    def calculate_delivery_fee(db: Session, tenant_id: int, quarter_id: int) -> int:
        """Group fee when the quarter is grouped, else its own fee; 0 if not served"""
        repo = DeliveryRepository(db)
        area_quarter = repo.get_area_quarter(tenant_id, quarter_id)
        if area_quarter is None:
            return 0
        group_fee = repo.get_group_fee(tenant_id, quarter_id)
        return group_fee if group_fee is not None else area_quarter.delivery_fee

    @staticmethod
    def get_delivery_quarters(
        db: Session, tenant_id: int, town_id: int
    ) -> List[QuarterOption]:
        """All active quarters of a town, flagged with whether the tenant delivers there"""
        fees = CheckoutService._effective_fees(db, tenant_id, town_id)
        quarters = [
            QuarterOption(
                id=quarter.id,
                name=quarter.name,
                delivery_fee=fees.get(quarter.id, 0),
                available=quarter.id in fees,
            )
            for quarter in DeliveryRepository(db).get_active_quarters(town_id)
        ]
        return sorted(quarters, key=lambda q: q.name)

    @staticmethod
    def get_cook_contact(tenant: Tenant) -> CookContact:
        return CookContact(
            whatsapp=tenant.whatsapp or None,
            phone=tenant.phone or None,
            brand_name=tenant.name or tenant.slug,
            has_contact=bool(tenant.whatsapp or tenant.phone),
        )

    @staticmethod
    def get_delivery_location(ctx: StorefrontContext) -> Optional[DeliveryLocation]:
        stored = CheckoutService.get_checkout_data(ctx)["delivery_location"]
        return DeliveryLocation(**stored) if stored else None

    @staticmethod
    def delivery_location_step(db: Session, ctx: StorefrontContext) -> DeliveryLocationStep:
        CheckoutService.require_method(ctx, CheckoutMethod.DELIVERY)
        repo = DeliveryRepository(db)

        towns = [TownOption.model_validate(t) for t in repo.get_delivery_towns(ctx.tenant_id)]
        current = CheckoutService.get_delivery_location(ctx)

        selected_town = current.town_id if current else None
        if selected_town is None and len(towns) == 1:
            selected_town = towns[0].id

        quarters = (
            CheckoutService.get_delivery_quarters(db, ctx.tenant_id, selected_town)
            if selected_town
            else []
        )
        return DeliveryLocationStep(
            towns=towns,
            current_location=current,
            selected_town_id=selected_town,
            quarters=quarters,
            has_pickup=repo.count_pickup_locations(ctx.tenant_id) > 0,
            contact=CheckoutService.get_cook_contact(ctx.tenant),
        )

    @staticmethod
    def set_delivery_location(
        db: Session, ctx: StorefrontContext, location: DeliveryLocationRequest
    ) -> int:
        """
        Store the delivery location and its fee. Returns the fee.

        Raises:
            CheckoutStepRequiredError: delivery is not the chosen method
            ServiceValidationError: blank neighbourhood, quarter outside the
                delivery area or not in the chosen town
        """
        CheckoutService.require_method(ctx, CheckoutMethod.DELIVERY)

        neighbourhood = location.neighbourhood.strip()
        if not neighbourhood:
            raise ServiceValidationError(
                "The neighbourhood field is required.",
                details={"field": "neighbourhood"},
            )

        repo = DeliveryRepository(db)
        if repo.get_area_quarter(ctx.tenant_id, location.quarter_id) is None:
            raise ServiceValidationError(
                "The selected quarter is not in the delivery area.",
                details={"field": "quarter_id"},
                code="QUARTER_NOT_SERVED",
            )

        quarter = repo.get_quarter(location.quarter_id)
        if quarter is not None and quarter.town_id != location.town_id:
            raise ServiceValidationError(
                "The selected quarter does not belong to the selected town.",
                details={"field": "quarter_id"},
            )

        fee = CheckoutService.calculate_delivery_fee(db, ctx.tenant_id, location.quarter_id)
        data = CheckoutService.get_checkout_data(ctx)
        data["delivery_location"] = {
            "town_id": location.town_id,
            "quarter_id": location.quarter_id,
            "neighbourhood": neighbourhood,
        }
        data["delivery_fee"] = fee
        CheckoutService._save(ctx, data)
        logger.info(
            f"checkout_delivery_location tenant_id={ctx.tenant_id} "
            f"quarter_id={location.quarter_id} fee={fee}"
        )
        return fee

    @staticmethod
    def switch_to_pickup(db: Session, ctx: StorefrontContext) -> CheckoutMethod:
        """Used when the client's quarter is not served"""
        if DeliveryRepository(db).count_pickup_locations(ctx.tenant_id) == 0:
            raise MethodUnavailableError("Pickup is not available for this cook.")
        CheckoutService._set_method(ctx, CheckoutMethod.PICKUP)
        return CheckoutMethod.PICKUP

    @staticmethod
    def get_stored_delivery_fee(ctx: StorefrontContext) -> int:
        data = CheckoutService.get_checkout_data(ctx)
        if data["delivery_method"] == CheckoutMethod.PICKUP.value:
            return 0
        return data["delivery_fee"] or 0

    @staticmethod
    def get_delivery_fee_display(db: Session, ctx: StorefrontContext) -> DeliveryFeeDisplay:
        data = CheckoutService.get_checkout_data(ctx)
        if data["delivery_method"] == CheckoutMethod.PICKUP.value:
            return DeliveryFeeDisplay(
                fee=0, is_free=True, display_text="Pickup - No delivery fee"
            )

        fee = data["delivery_fee"] or 0
        location = data["delivery_location"] or {}
        quarter = (
            DeliveryRepository(db).get_quarter(location["quarter_id"])
            if location.get("quarter_id")
            else None
        )
        quarter_name = quarter.name if quarter else None

        if quarter_name:
            text = (
                f"Delivery to {quarter_name}: Free delivery"
                if fee == 0
                else f"Delivery to {quarter_name}: {format_price(fee)}"
            )
        else:
            text = "Free delivery" if fee == 0 else format_price(fee)

        return DeliveryFeeDisplay(
            fee=fee, quarter_name=quarter_name, is_free=fee == 0, display_text=text
        )

    # ------------------------------------------------------------------
    # pickup location
    # ------------------------------------------------------------------

    @staticmethod
    def pickup_location_step(db: Session, ctx: StorefrontContext) -> PickupLocationStep:
        CheckoutService.require_method(ctx, CheckoutMethod.PICKUP)
        locations = DeliveryRepository(db).get_pickup_locations(ctx.tenant_id)
        if not locations:
            raise CheckoutStepRequiredError("Pickup is not available for this cook.")

        data = CheckoutService.get_checkout_data(ctx)
        current = data["pickup_location_id"]
        ids = {location.id for location in locations}
        if current is not None and current not in ids:
            # The stored point was removed by the cook
            data["pickup_location_id"] = None
            CheckoutService._save(ctx, data)
            current = None
        if current is None and len(locations) == 1:
            current = locations[0].id

        return PickupLocationStep(
            locations=[PickupLocationMapper.to_option(loc) for loc in locations],
            current_pickup_location_id=current,
        )

    @staticmethod
    def set_pickup_location(
        db: Session, ctx: StorefrontContext, pickup_location_id: int
    ) -> None:
        CheckoutService.require_method(ctx, CheckoutMethod.PICKUP)
        location = DeliveryRepository(db).get_pickup_location(
            ctx.tenant_id, pickup_location_id
        )
        if location is None:
            raise ServiceValidationError(
                "The selected pickup location is no longer available.",
                details={"field": "pickup_location_id"},
            )
        data = CheckoutService.get_checkout_data(ctx)
        data["pickup_location_id"] = location.id
        CheckoutService._save(ctx, data)

    # ------------------------------------------------------------------
    # phone
    # ------------------------------------------------------------------

    @staticmethod
    def phone_step(db: Session, ctx: StorefrontContext) -> PhoneStep:
        method = CheckoutService.require_method(ctx)
        phone = CheckoutService.get_checkout_data(ctx)["phone"]
        if not phone and ctx.user_id is not None:
            user = UserRepository(db).get_by_id(ctx.user_id)
            phone = user.phone if user else None
        return PhoneStep(
            phone=phone or "",
            back_url=CheckoutService.next_location_step(method),
        )

    @staticmethod
    def set_phone(ctx: StorefrontContext, raw_phone: str) -> str:
        """Store the order phone; the user profile is left unchanged"""
        CheckoutService.require_method(ctx)
        phone = normalize_phone(raw_phone)
        data = CheckoutService.get_checkout_data(ctx)
        data["phone"] = phone
        CheckoutService._save(ctx, data)
        return phone

    # ------------------------------------------------------------------
    # summary
    # ------------------------------------------------------------------

    @staticmethod
    def detect_price_changes(db: Session, cart: CartSummary) -> List[PriceChange]:
        components: Dict[int, MealComponent] = MealComponentRepository(db).get_many(
            item.component_id for item in cart.items
        )
        changes = []
        for item in cart.items:
            component = components.get(item.component_id)
            if component is not None and component.price != item.unit_price:
                changes.append(
                    PriceChange(
                        component_id=item.component_id,
                        name=component.name,
                        old_price=item.unit_price,
                        new_price=component.price,
                    )
                )
        return changes

    @staticmethod
    def get_order_summary(db: Session, ctx: StorefrontContext) -> OrderSummary:
        """
        Review step. Requires a chosen method and a phone number.

        grand_total = max(0, subtotal + delivery_fee - min(discount, subtotal));
        the discount is always 0 until promo codes exist.
        """
        cart = CartService.get_with_availability(db, ctx)
        if cart.is_empty:
            raise EmptyCartError(
                "Your cart is empty. Add items before reviewing your order."
            )
        method = CheckoutService.require_method(ctx)
        data = CheckoutService.get_checkout_data(ctx)
        if not data["phone"]:
            raise CheckoutStepRequiredError(
                "Please provide your phone number first.", redirect_to="/checkout/phone"
            )

        subtotal = sum(item.unit_price * item.quantity for item in cart.items)
        delivery_fee = CheckoutService.get_stored_delivery_fee(ctx)
        promo_discount = 0
        discount = min(promo_discount, subtotal)
        grand_total = max(0, subtotal + delivery_fee - discount)

        return OrderSummary(
            meals=cart.meals,
            subtotal=subtotal,
            delivery_method=method,
            delivery_fee=delivery_fee,
            delivery_display=CheckoutService.get_delivery_fee_display(db, ctx),
            promo_discount=discount,
            promo_code=None,
            grand_total=grand_total,
            formatted_grand_total=format_price(grand_total),
            item_count=sum(item.quantity for item in cart.items),
            price_changes=CheckoutService.detect_price_changes(db, cart),
            phone=data["phone"],
        )
