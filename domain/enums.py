"""
Domain enums for DancyMeals application.
Contains all enumeration types used across the domain models and services.
"""

import enum


class MealStatus(str, enum.Enum):
    """Publication status of a meal"""

    DRAFT = "draft"
    LIVE = "live"


class RequirementRuleType(str, enum.Enum):
    """How a component relates to other components of the same meal"""

    REQUIRES_ANY_OF = "requires_any_of"
    REQUIRES_ALL_OF = "requires_all_of"
    INCOMPATIBLE_WITH = "incompatible_with"


class CheckoutMethod(str, enum.Enum):
    """How the client receives the order"""

    DELIVERY = "delivery"
    PICKUP = "pickup"


class HostKind(str, enum.Enum):
    """Classification of a request host"""

    IP = "ip"
    MAIN_DOMAIN = "main_domain"
    SUBDOMAIN = "subdomain"
    CUSTOM_DOMAIN = "custom_domain"
