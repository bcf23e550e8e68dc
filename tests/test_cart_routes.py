"""
HTTP tests for the storefront catalogue and the session cart.

Each TestClient keeps its own cookie jar, so one client is one shopper.
"""

import pytest
from sqlalchemy.orm import Session

from domain.enums import MealStatus
from test_fixtures import (
    db_session,
    login,
    make_component,
    make_meal,
    make_tenant,
    make_user,
    tenant_client,
)


@pytest.fixture
def shop(db_session: Session):
    tenant = make_tenant(db_session, slug="chef-ama", name="Chef Ama")
    meal = make_meal(db_session, tenant, name="Ndole Special", description="Sunday ndole")
    ndole = make_component(db_session, meal, name="Ndole plate", price=1500)
    plantain = make_component(db_session, meal, name="Fried plantain", price=500, max_quantity=3)
    make_meal(db_session, tenant, name="Draft stew", status=MealStatus.DRAFT)
    return tenant, meal, ndole, plantain


# =============================================================================
# STOREFRONT
# =============================================================================


def test_store_info(shop):
    response = tenant_client("chef-ama").get("/store")
    assert response.status_code == 200
    assert response.json()["name"] == "Chef Ama"


def test_list_meals_only_live(db_session: Session, shop):
    """
    Verifies:
    - Draft and paused meals are hidden
    - A paused meal is not reachable by id either
    - Components carry formatted prices and their selectable cap
    """
    tenant = shop[0]
    paused = make_meal(db_session, tenant, name="Paused eru", is_available=False)
    client = tenant_client("chef-ama")

    response = client.get("/meals")
    assert response.status_code == 200
    meals = response.json()
    assert [meal["name"] for meal in meals] == ["Ndole Special"]

    components = {c["name"]: c for c in meals[0]["components"]}
    assert components["Ndole plate"]["formatted_price"] == "1,500 XAF"
    assert components["Fried plantain"]["max_selectable"] == 3
    assert client.get(f"/meals/{paused.id}").status_code == 404


def test_get_meal_shows_quantity_in_cart(shop):
    _, meal, ndole, _ = shop
    client = tenant_client("chef-ama")
    client.post("/cart/add", json={"meal_id": meal.id, "component_id": ndole.id, "quantity": 2})

    response = client.get(f"/meals/{meal.id}")

    assert response.status_code == 200
    components = {c["id"]: c for c in response.json()["components"]}
    assert components[ndole.id]["in_cart"] == 2


def test_get_meal_of_other_tenant_is_404(db_session: Session, shop):
    _, meal, _, _ = shop
    make_tenant(db_session, slug="other-chef")

    response = tenant_client("other-chef").get(f"/meals/{meal.id}")

    assert response.status_code == 404


# =============================================================================
# CART
# =============================================================================


def test_empty_cart(shop):
    response = tenant_client("chef-ama").get("/cart")
    assert response.status_code == 200
    body = response.json()
    assert body["success"] is True
    assert body["cart"]["count"] == 0
    assert body["cart"]["formatted_total"] == "0 XAF"


def test_add_and_view_cart(shop):
    _, meal, ndole, plantain = shop
    client = tenant_client("chef-ama")

    client.post("/cart/add", json={"meal_id": meal.id, "component_id": ndole.id, "quantity": 2})
    response = client.post(
        "/cart/add", json={"meal_id": meal.id, "component_id": plantain.id}
    )

    assert response.status_code == 200
    body = response.json()
    assert body["success"] is True
    assert body["message"] == "Added to cart."
    assert body["cart"]["count"] == 2
    assert body["cart"]["total"] == 3500

    cart = client.get("/cart").json()["cart"]
    assert cart["quantity"] == 3
    assert cart["meals"][0]["meal_name"] == "Ndole Special"


def test_add_over_cap_is_clamped(shop):
    _, meal, _, plantain = shop
    client = tenant_client("chef-ama")

    client.post("/cart/add", json={"meal_id": meal.id, "component_id": plantain.id, "quantity": 2})
    response = client.post(
        "/cart/add", json={"meal_id": meal.id, "component_id": plantain.id, "quantity": 2}
    )

    assert response.json()["cart"]["items"][0]["quantity"] == 3


def test_add_unavailable_returns_success_false(db_session: Session, shop):
    """
    Verifies:
    - A sold out item answers 200 with success=false and the reason
    - The current cart is returned unchanged
    """
    _, meal, ndole, _ = shop
    ndole.is_available = False
    db_session.commit()

    response = tenant_client("chef-ama").post(
        "/cart/add", json={"meal_id": meal.id, "component_id": ndole.id}
    )

    assert response.status_code == 200
    body = response.json()
    assert body["success"] is False
    assert body["error"] == "This item is sold out."
    assert body["cart"]["count"] == 0


def test_add_rejects_zero_quantity(shop):
    _, meal, ndole, _ = shop
    response = tenant_client("chef-ama").post(
        "/cart/add", json={"meal_id": meal.id, "component_id": ndole.id, "quantity": 0}
    )
    assert response.status_code == 422
    assert response.json()["error"]["code"] == "VALIDATION_ERROR"


def test_update_quantity_to_zero_removes(shop):
    _, meal, ndole, plantain = shop
    client = tenant_client("chef-ama")
    client.post("/cart/add", json={"meal_id": meal.id, "component_id": ndole.id})
    client.post("/cart/add", json={"meal_id": meal.id, "component_id": plantain.id})

    response = client.post(
        "/cart/update-quantity", json={"component_id": ndole.id, "quantity": 0}
    )

    assert response.json()["success"] is True
    assert response.json()["cart"]["count"] == 1


def test_update_quantity_missing_line(shop):
    _, _, ndole, _ = shop
    response = tenant_client("chef-ama").post(
        "/cart/update-quantity", json={"component_id": ndole.id, "quantity": 2}
    )
    body = response.json()
    assert body["success"] is False
    assert body["error"] == "Item not found in cart."


def test_remove_and_clear(shop):
    _, meal, ndole, plantain = shop
    client = tenant_client("chef-ama")
    client.post("/cart/add", json={"meal_id": meal.id, "component_id": ndole.id})
    client.post("/cart/add", json={"meal_id": meal.id, "component_id": plantain.id})

    response = client.post("/cart/remove", json={"component_id": ndole.id})
    assert response.json()["cart"]["count"] == 1

    response = client.post("/cart/clear")
    assert response.json()["message"] == "Cart cleared."
    assert client.get("/cart").json()["cart"]["count"] == 0


def test_carts_are_separate_per_tenant_host(db_session: Session, shop):
    _, meal, ndole, _ = shop
    make_tenant(db_session, slug="other-chef")
    client = tenant_client("chef-ama")
    client.post("/cart/add", json={"meal_id": meal.id, "component_id": ndole.id})

    # Replay the same session cookie on another tenant's host
    cookie = client.cookies.get("dancymeals_session")
    response = tenant_client("other-chef").get(
        "/cart", headers={"Cookie": f"dancymeals_session={cookie}"}
    )
    assert response.json()["cart"]["count"] == 0
    assert client.get("/cart").json()["cart"]["count"] == 1


def test_cart_shows_availability_warnings(db_session: Session, shop):
    _, meal, ndole, _ = shop
    client = tenant_client("chef-ama")
    client.post("/cart/add", json={"meal_id": meal.id, "component_id": ndole.id, "quantity": 4})

    ndole.available_quantity = 1
    db_session.commit()

    cart = client.get("/cart").json()["cart"]
    assert cart["warnings"] == ["Ndole plate: Limited availability: only 1 left"]


# =============================================================================
# PROCEED TO CHECKOUT
# =============================================================================


def test_checkout_with_empty_cart_redirects_to_cart(shop):
    response = tenant_client("chef-ama").post("/cart/checkout", follow_redirects=False)
    assert response.status_code == 303
    assert response.headers["location"] == "/cart"
    assert response.json()["error"]["code"] == "EMPTY_CART"


def test_checkout_requires_login(shop):
    _, meal, ndole, _ = shop
    client = tenant_client("chef-ama")
    client.post("/cart/add", json={"meal_id": meal.id, "component_id": ndole.id})

    response = client.post("/cart/checkout", follow_redirects=False)

    assert response.status_code == 303
    assert response.headers["location"] == "/login"
    assert response.json()["redirect"] == "/login"


@pytest.mark.parametrize("revoke", ["delete", "deactivate"])
def test_checkout_rejects_revoked_account(db_session: Session, shop, revoke):
    _, meal, ndole, _ = shop
    user = make_user(db_session)
    client = tenant_client("chef-ama")
    login(client, user.email)
    client.post("/cart/add", json={"meal_id": meal.id, "component_id": ndole.id})

    if revoke == "delete":
        db_session.delete(user)
    else:
        user.is_active = False
    db_session.commit()

    assert client.get("/auth/me").status_code == 401
    response = client.post("/cart/checkout", follow_redirects=False)

    assert response.status_code == 303
    assert response.headers["location"] == "/login"
    assert client.get("/cart").json()["cart"]["count"] == 1


def test_checkout_below_minimum_order(db_session: Session, shop):
    tenant, meal, ndole, _ = shop
    tenant.minimum_order_amount = 5000
    db_session.commit()
    user = make_user(db_session)
    client = tenant_client("chef-ama")
    login(client, user.email)
    client.post("/cart/add", json={"meal_id": meal.id, "component_id": ndole.id, "quantity": 2})

    response = client.post("/cart/checkout")

    assert response.status_code == 200
    body = response.json()
    assert body["success"] is False
    assert body["error"] == "Minimum order is 5,000 XAF. Add 2,000 XAF more to proceed."


def test_checkout_proceeds(db_session: Session, shop):
    _, meal, ndole, _ = shop
    user = make_user(db_session)
    client = tenant_client("chef-ama")
    login(client, user.email)
    client.post("/cart/add", json={"meal_id": meal.id, "component_id": ndole.id})

    response = client.post("/cart/checkout")

    assert response.status_code == 200
    body = response.json()
    assert body["success"] is True
    assert body["redirect"] == "/checkout/delivery-method"
