"""
Repositories package - Data access layer.
"""

from repositories.base import BaseRepository
from repositories.user_repository import UserRepository
from repositories.tenant_repository import TenantRepository
from repositories.meal_repository import MealRepository, MealComponentRepository
from repositories.delivery_repository import DeliveryRepository

__all__ = [
    "BaseRepository",
    "UserRepository",
    "TenantRepository",
    "MealRepository",
    "MealComponentRepository",
    "DeliveryRepository",
]
