"""
Catalogue domain mappers.
Handles transformation between ORM models and DTOs for meals and pickup points.
"""

from typing import Mapping

from domain.models import Meal, PickupLocation
from domain.pricing import format_price, max_selectable_quantity
from domain.schemas.catalog_schemas import MealResponse, MealComponentResponse
from domain.schemas.checkout_schemas import PickupLocationOption


class MealMapper:
    """Mapper for meal transformations."""

    @staticmethod
    def to_response(meal: Meal, in_cart: Mapping[int, int] = None) -> MealResponse:
        """
        Convert ORM Meal to MealResponse DTO.

        Args:
            meal: Meal ORM instance with components loaded
            in_cart: component_id -> quantity already in the cart for this meal

        Returns:
            MealResponse DTO with components priced and capped
        """
        in_cart = in_cart or {}
        components = [
            MealComponentResponse(
                id=component.id,
                name=component.name,
                price=component.price,
                formatted_price=format_price(component.price),
                unit_label=component.unit_label,
                is_available=bool(component.is_available)
                and not component.is_out_of_stock,
                max_selectable=max_selectable_quantity(component),
                in_cart=in_cart.get(component.id, 0),
            )
            for component in meal.components
        ]

        return MealResponse(
            id=meal.id,
            name=meal.name,
            description=meal.description,
            is_available=bool(meal.is_available),
            components=components,
        )


class PickupLocationMapper:
    @staticmethod
    def to_option(location: PickupLocation) -> PickupLocationOption:
        return PickupLocationOption(
            id=location.id,
            name=location.name,
            address=location.address,
            instructions=location.instructions,
            town_name=location.town.name if location.town else None,
            quarter_name=location.quarter.name if location.quarter else None,
        )
