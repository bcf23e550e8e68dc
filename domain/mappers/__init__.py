"""
Domain mappers package.
Handles transformation between ORM models and DTOs (Data Transfer Objects).
"""

from domain.mappers.catalog_mapper import MealMapper, PickupLocationMapper

__all__ = ["MealMapper", "PickupLocationMapper"]
