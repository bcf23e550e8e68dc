"""
Domain models package - SQLAlchemy ORM models.
"""

from domain.models.database import (
    Base,
    engine,
    SessionLocal,
    init_database,
    get_db_session,
)
from domain.models.user import AppUser
from domain.models.tenant import Tenant
from domain.models.catalog import (
    Meal,
    MealComponent,
    ComponentRequirementRule,
    requirement_rule_target,
)
from domain.models.delivery import (
    Town,
    Quarter,
    DeliveryArea,
    DeliveryAreaQuarter,
    QuarterGroup,
    PickupLocation,
    quarter_group_member,
)

__all__ = [
    # Database
    "Base",
    "engine",
    "SessionLocal",
    "init_database",
    "get_db_session",
    # User models
    "AppUser",
    # Tenant models
    "Tenant",
    # Catalogue models
    "Meal",
    "MealComponent",
    "ComponentRequirementRule",
    "requirement_rule_target",
    # Delivery models
    "Town",
    "Quarter",
    "DeliveryArea",
    "DeliveryAreaQuarter",
    "QuarterGroup",
    "PickupLocation",
    "quarter_group_member",
]
