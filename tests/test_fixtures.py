"""
Shared test fixtures and utilities for the DancyMeals test suite.

Factories insert real rows through the test database session; client helpers
build TestClients whose Host header points at the main domain or at a tenant.
"""

import uuid
from typing import Optional

import pytest
from fastapi.testclient import TestClient

from domain.enums import MealStatus, RequirementRuleType
from domain.models import (
    AppUser,
    Base,
    SessionLocal,
    engine,
    ComponentRequirementRule,
    DeliveryArea,
    DeliveryAreaQuarter,
    Meal,
    MealComponent,
    PickupLocation,
    Quarter,
    QuarterGroup,
    Tenant,
    Town,
)
from main import app
from services.context import StorefrontContext
from services.user_service import hash_password

MAIN_DOMAIN = "dancymeals.test"
DEFAULT_PASSWORD = "secret123"


# Helper function to generate unique emails
def unique_email(prefix: str = "client") -> str:
    """Generate unique email address using UUID to avoid conflicts"""
    return f"{prefix}-{uuid.uuid4().hex[:8]}@example.com"


@pytest.fixture
def db_session():
    """Fresh schema per test on the shared in-memory engine the app also uses"""
    Base.metadata.create_all(bind=engine)
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(bind=engine)


# ============================================================================
# Clients
# ============================================================================


def platform_client() -> TestClient:
    """Client talking to the main platform domain"""
    return TestClient(app, base_url=f"http://{MAIN_DOMAIN}")


def tenant_client(slug: str) -> TestClient:
    """Client talking to a tenant subdomain"""
    return TestClient(app, base_url=f"http://{slug}.{MAIN_DOMAIN}")


def host_client(host: str) -> TestClient:
    return TestClient(app, base_url=f"http://{host}")


def login(client: TestClient, email: str, password: str = DEFAULT_PASSWORD):
    response = client.post("/auth/login", json={"email": email, "password": password})
    assert response.status_code == 200, response.text
    return response


# ============================================================================
# Factories
# ============================================================================


def make_tenant(db, slug: str = "chef-ama", **overrides) -> Tenant:
    fields = {
        "slug": slug,
        "name": overrides.pop("name", f"{slug.title()} Kitchen"),
        "is_active": True,
        "minimum_order_amount": 0,
    }
    fields.update(overrides)
    tenant = Tenant(**fields)
    db.add(tenant)
    db.commit()
    db.refresh(tenant)
    return tenant


def make_meal(db, tenant: Tenant, name: str = "Ndole Special", **overrides) -> Meal:
    fields = {
        "tenant_id": tenant.id,
        "name": name,
        "status": MealStatus.LIVE,
        "is_available": True,
    }
    fields.update(overrides)
    meal = Meal(**fields)
    db.add(meal)
    db.commit()
    db.refresh(meal)
    return meal


def make_component(
    db, meal: Meal, name: str = "Ndole plate", price: int = 1500, **overrides
) -> MealComponent:
    fields = {
        "meal_id": meal.id,
        "name": name,
        "price": price,
        "unit_label": "plate",
        "is_available": True,
        "max_quantity": None,
        "available_quantity": None,
    }
    fields.update(overrides)
    component = MealComponent(**fields)
    db.add(component)
    db.commit()
    db.refresh(component)
    return component


def make_rule(
    db, component: MealComponent, rule_type: RequirementRuleType, targets
) -> ComponentRequirementRule:
    rule = ComponentRequirementRule(component_id=component.id, rule_type=rule_type)
    rule.targets = list(targets)
    db.add(rule)
    db.commit()
    db.refresh(rule)
    return rule


def make_user(
    db,
    email: Optional[str] = None,
    password: str = DEFAULT_PASSWORD,
    is_admin: bool = False,
    phone: Optional[str] = None,
    full_name: str = "Ngono Marie",
) -> AppUser:
    user = AppUser(
        email=(email or unique_email()).lower(),
        password_hash=hash_password(password),
        full_name=full_name,
        phone=phone,
        is_admin=is_admin,
    )
    db.add(user)
    db.commit()
    db.refresh(user)
    return user


def make_town(db, name: str = "Douala") -> Town:
    town = Town(name=name, is_active=True)
    db.add(town)
    db.commit()
    db.refresh(town)
    return town


def make_quarter(db, town: Town, name: str = "Akwa", is_active: bool = True) -> Quarter:
    quarter = Quarter(town_id=town.id, name=name, is_active=is_active)
    db.add(quarter)
    db.commit()
    db.refresh(quarter)
    return quarter


def make_delivery_area(db, tenant: Tenant, town: Town, quarter_fees=None) -> DeliveryArea:
    """quarter_fees: iterable of (Quarter, fee)"""
    area = DeliveryArea(tenant_id=tenant.id, town_id=town.id)
    db.add(area)
    db.flush()
    for quarter, fee in quarter_fees or []:
        db.add(
            DeliveryAreaQuarter(
                delivery_area_id=area.id, quarter_id=quarter.id, delivery_fee=fee
            )
        )
    db.commit()
    db.refresh(area)
    return area


def make_quarter_group(db, tenant: Tenant, quarters, fee: int, name: str = "Centre") -> QuarterGroup:
    group = QuarterGroup(tenant_id=tenant.id, name=name, delivery_fee=fee)
    group.quarters = list(quarters)
    db.add(group)
    db.commit()
    db.refresh(group)
    return group


def make_pickup(db, tenant: Tenant, name: str = "Marche Central stall 12", **overrides) -> PickupLocation:
    location = PickupLocation(tenant_id=tenant.id, name=name, **overrides)
    db.add(location)
    db.commit()
    db.refresh(location)
    return location


def make_context(tenant: Tenant, session=None, user: Optional[AppUser] = None) -> StorefrontContext:
    """Service-level context backed by a plain dict instead of the cookie session"""
    return StorefrontContext(
        session={} if session is None else session,
        tenant=tenant,
        user_id=user.user_id if user else None,
    )
