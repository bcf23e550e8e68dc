"""
Session cart scoped per tenant.

The session holds, under ``dmc-cart-{tenant_id}``, a mapping of component id to
``{component_id, meal_id, quantity, unit_price}``. Names are looked up from the
catalogue on read so the signed session cookie stays small.
"""

import logging
from typing import Any, Dict, List, MutableMapping, Optional

from sqlalchemy.orm import Session

from app.exceptions import ComponentUnavailableError
from domain.enums import RequirementRuleType
from domain.models import MealComponent
from domain.pricing import (
    MAX_QUANTITY_PER_COMPONENT,
    format_price,
    max_selectable_quantity,
)
from domain.schemas.cart_schemas import CartItem, CartMealGroup, CartSummary
from repositories.meal_repository import MealRepository, MealComponentRepository
from services.context import StorefrontContext

logger = logging.getLogger("dancymeals.cart")

SESSION_KEY_PREFIX = "dmc-cart-"
MAX_CART_ITEMS = 50

__all__ = [
    "CartService",
    "MAX_CART_ITEMS",
    "MAX_QUANTITY_PER_COMPONENT",
    "format_price",
    "max_selectable_quantity",
]


def session_key(tenant_id: int) -> str:
    return f"{SESSION_KEY_PREFIX}{tenant_id}"


def _read_items(session: MutableMapping[str, Any], tenant_id: int) -> Dict[str, dict]:
    raw = session.get(session_key(tenant_id)) or {}
    # Copy so callers can mutate freely and commit through _write_items
    return {key: dict(value) for key, value in raw.items()}


def _write_items(
    session: MutableMapping[str, Any], tenant_id: int, items: Dict[str, dict]
) -> None:
    if items:
        session[session_key(tenant_id)] = items
    else:
        session.pop(session_key(tenant_id), None)


class CartService:
    @staticmethod
    def get(db: Session, ctx: StorefrontContext) -> CartSummary:
        """Current cart with totals recomputed from the stored lines"""
        items = _read_items(ctx.session, ctx.tenant_id)
        return CartService._summarize(db, items)

    @staticmethod
    def get_with_availability(db: Session, ctx: StorefrontContext) -> CartSummary:
        """
        Cart summary where each line is re-checked against the catalogue.

        Lines whose meal or component went away, sold out or lost stock since
        they were added are flagged and a warning is collected for each.
        """
        items = _read_items(ctx.session, ctx.tenant_id)
        summary = CartService._summarize(db, items)
        if summary.is_empty:
            return summary

        components = MealComponentRepository(db).get_many(
            item.component_id for item in summary.items
        )
        meals = MealRepository(db).get_many(item.meal_id for item in summary.items)

        warnings: List[str] = []
        for item in summary.items:
            component = components.get(item.component_id)
            meal = meals.get(item.meal_id)
            label = item.name or "An item"

            if meal is None or not meal.is_orderable or meal.tenant_id != ctx.tenant_id:
                item.available = False
                item.warning = "This meal is no longer available"
            elif component is None or not component.is_available or component.is_out_of_stock:
                item.available = False
                item.warning = "This item is no longer available"
            elif item.quantity > max_selectable_quantity(component):
                item.warning = (
                    f"Limited availability: only {max_selectable_quantity(component)} left"
                )

            if item.warning:
                warnings.append(f"{label}: {item.warning}")

        summary.warnings = warnings
        return summary

    @staticmethod
    def add(
        db: Session,
        ctx: StorefrontContext,
        meal_id: int,
        component_id: int,
        quantity: int = 1,
    ) -> CartSummary:
        """
        Add a component to the cart, or increment it if already present.

        The resulting quantity is clamped to [1, max_selectable_quantity].

        Raises:
            ComponentUnavailableError: meal not orderable, component missing,
                sold out, a requirement rule is violated or the cart is full
        """
        meal = MealRepository(db).get_orderable(ctx.tenant_id, meal_id)
        if meal is None:
            raise ComponentUnavailableError(
                "This meal is no longer available.", code="MEAL_UNAVAILABLE"
            )

        component_repo = MealComponentRepository(db)
        component = component_repo.get_for_meal(meal_id, component_id)
        if component is None:
            raise ComponentUnavailableError("This item is no longer available.")

        if not component.is_available or component.is_out_of_stock:
            raise ComponentUnavailableError("This item is sold out.", code="SOLD_OUT")

        items = _read_items(ctx.session, ctx.tenant_id)

        rule_error = CartService._check_requirement_rules(
            component_repo, component, items, meal_id
        )
        if rule_error:
            raise ComponentUnavailableError(rule_error, code="REQUIREMENT_RULE")

        key = str(component_id)
        if key not in items and len(items) >= MAX_CART_ITEMS:
            raise ComponentUnavailableError(
                f"Cart is full. Maximum {MAX_CART_ITEMS} items allowed.",
                code="CART_FULL",
            )

        current = items[key]["quantity"] if key in items else 0
        ceiling = max_selectable_quantity(component)
        new_quantity = max(1, min(current + quantity, ceiling))

        items[key] = {
            "component_id": component.id,
            "meal_id": meal_id,
            "quantity": new_quantity,
            "unit_price": component.price,
        }
        _write_items(ctx.session, ctx.tenant_id, items)

        logger.info(
            f"cart_add tenant_id={ctx.tenant_id} component_id={component_id} "
            f"quantity={new_quantity} requested={current + quantity}"
        )
        return CartService._summarize(db, items)

    @staticmethod
    def update_quantity(
        db: Session, ctx: StorefrontContext, component_id: int, quantity: int
    ) -> CartSummary:
        """
        Set the quantity of an existing line. Zero or less removes the line and
        anything above the ceiling is capped silently.

        Raises:
            ComponentUnavailableError: the line is not in the cart, or its
                component was deleted (the stale line is purged first)
        """
        if quantity <= 0:
            return CartService.remove(db, ctx, component_id)

        items = _read_items(ctx.session, ctx.tenant_id)
        key = str(component_id)
        if key not in items:
            raise ComponentUnavailableError(
                "Item not found in cart.", code="ITEM_NOT_IN_CART"
            )

        component = MealComponentRepository(db).get_by_id(component_id)
        if component is None:
            del items[key]
            _write_items(ctx.session, ctx.tenant_id, items)
            logger.info(
                f"cart_purge_stale tenant_id={ctx.tenant_id} component_id={component_id}"
            )
            raise ComponentUnavailableError("This item is no longer available.")

        new_quantity = max(1, min(quantity, max_selectable_quantity(component)))
        items[key]["quantity"] = new_quantity
        items[key]["unit_price"] = component.price
        _write_items(ctx.session, ctx.tenant_id, items)
        return CartService._summarize(db, items)

    @staticmethod
    def remove(db: Session, ctx: StorefrontContext, component_id: int) -> CartSummary:
        items = _read_items(ctx.session, ctx.tenant_id)
        if items.pop(str(component_id), None) is not None:
            logger.info(
                f"cart_remove tenant_id={ctx.tenant_id} component_id={component_id}"
            )
        _write_items(ctx.session, ctx.tenant_id, items)
        return CartService._summarize(db, items)

    @staticmethod
    def clear(db: Session, ctx: StorefrontContext) -> CartSummary:
        ctx.session.pop(session_key(ctx.tenant_id), None)
        return CartSummary()

    @staticmethod
    def components_for_meal(ctx: StorefrontContext, meal_id: int) -> Dict[int, int]:
        """component_id -> quantity for the cart lines of one meal"""
        items = _read_items(ctx.session, ctx.tenant_id)
        return {
            item["component_id"]: item["quantity"]
            for item in items.values()
            if item["meal_id"] == meal_id
        }

    @staticmethod
    def format_price(amount: int) -> str:
        return format_price(amount)

    # ------------------------------------------------------------------
    # internals
    # ------------------------------------------------------------------

    @staticmethod
    def _check_requirement_rules(
        repo: MealComponentRepository,
        component: MealComponent,
        items: Dict[str, dict],
        meal_id: int,
    ) -> Optional[str]:
        """Error message for the first violated rule, or None"""
        rules = repo.get_rules(component.id)
        if not rules:
            return None

        in_cart = {
            item["component_id"] for item in items.values() if item["meal_id"] == meal_id
        }

        for rule in rules:
            target_ids = {target.id for target in rule.targets}

            if rule.rule_type == RequirementRuleType.REQUIRES_ANY_OF:
                if not target_ids & in_cart:
                    names = ", ".join(t.name for t in rule.targets)
                    return f"{component.name} requires at least one of: {names}"

            elif rule.rule_type == RequirementRuleType.REQUIRES_ALL_OF:
                missing = [t.name for t in rule.targets if t.id not in in_cart]
                if missing:
                    return f"{component.name} requires: {', '.join(missing)}"

            elif rule.rule_type == RequirementRuleType.INCOMPATIBLE_WITH:
                conflicts = [t.name for t in rule.targets if t.id in in_cart]
                if conflicts:
                    return f"{component.name} is incompatible with: {', '.join(conflicts)}"

        return None

    @staticmethod
    def _summarize(db: Session, items: Dict[str, dict]) -> CartSummary:
        if not items:
            return CartSummary()

        components = MealComponentRepository(db).get_many(
            item["component_id"] for item in items.values()
        )
        meals = MealRepository(db).get_many(item["meal_id"] for item in items.values())

        lines: List[CartItem] = []
        groups: Dict[int, CartMealGroup] = {}
        for item in items.values():
            component = components.get(item["component_id"])
            meal = meals.get(item["meal_id"])
            line = CartItem(
                component_id=item["component_id"],
                meal_id=item["meal_id"],
                meal_name=meal.name if meal else None,
                name=component.name if component else None,
                unit=component.unit_label if component else None,
                unit_price=item["unit_price"],
                quantity=item["quantity"],
                line_total=item["unit_price"] * item["quantity"],
            )
            lines.append(line)

            group = groups.get(line.meal_id)
            if group is None:
                group = CartMealGroup(
                    meal_id=line.meal_id, meal_name=line.meal_name, items=[], subtotal=0
                )
                groups[line.meal_id] = group
            group.items.append(line)
            group.subtotal += line.line_total

        total = sum(line.line_total for line in lines)
        return CartSummary(
            count=len(lines),
            quantity=sum(line.quantity for line in lines),
            total=total,
            formatted_total=format_price(total),
            items=lines,
            meals=list(groups.values()),
        )
