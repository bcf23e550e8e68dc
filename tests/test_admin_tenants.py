"""
Platform admin: tenant creation, validation and activation toggling.

All admin routes live on the main domain and need an admin session.
"""

import pytest
from sqlalchemy.orm import Session

from app.exceptions import ConflictError, NotFoundError, ServiceValidationError
from domain.schemas.tenant_schemas import TenantCreate
from services.tenant_service import TenantService
from test_fixtures import (
    db_session,
    login,
    make_tenant,
    make_user,
    platform_client,
    tenant_client,
)


@pytest.fixture
def admin_client(db_session: Session):
    admin = make_user(db_session, is_admin=True)
    client = platform_client()
    login(client, admin.email)
    return client


# =============================================================================
# SUBDOMAIN VALIDATION
# =============================================================================


def test_validate_subdomain_normalises(db_session: Session):
    assert TenantService.validate_subdomain(db_session, "  Chef-Ama ") == "chef-ama"


@pytest.mark.parametrize(
    "subdomain,message",
    [
        ("ab", "The subdomain must be between 3 and 63 characters."),
        ("a" * 64, "The subdomain must be between 3 and 63 characters."),
        ("chef_ama", "The subdomain may only contain lowercase letters, digits and single hyphens."),
        ("-chef", "The subdomain may only contain lowercase letters, digits and single hyphens."),
        ("chef-", "The subdomain may only contain lowercase letters, digits and single hyphens."),
        ("chef--ama", "The subdomain may only contain lowercase letters, digits and single hyphens."),
        ("www", "This subdomain is reserved and cannot be used."),
        ("dashboard", "This subdomain is reserved and cannot be used."),
    ],
)
def test_validate_subdomain_rejects(db_session: Session, subdomain, message):
    with pytest.raises(ServiceValidationError) as exc_info:
        TenantService.validate_subdomain(db_session, subdomain)
    assert exc_info.value.message == message


def test_validate_subdomain_taken(db_session: Session):
    tenant = make_tenant(db_session, slug="chef-ama")

    with pytest.raises(ConflictError) as exc_info:
        TenantService.validate_subdomain(db_session, "chef-ama")
    assert exc_info.value.code == "SUBDOMAIN_TAKEN"

    # The tenant's own slug is fine when editing it
    assert TenantService.validate_subdomain(db_session, "chef-ama", exclude_id=tenant.id) == "chef-ama"


# =============================================================================
# CUSTOM DOMAIN VALIDATION
# =============================================================================


def test_validate_custom_domain_blank_is_none(db_session: Session):
    assert TenantService.validate_custom_domain(db_session, None) is None
    assert TenantService.validate_custom_domain(db_session, "   ") is None


def test_validate_custom_domain_normalises(db_session: Session):
    assert TenantService.validate_custom_domain(db_session, "MamaNgono.COM") == "mamangono.com"


@pytest.mark.parametrize(
    "domain,message",
    [
        ("not a domain", "The custom domain must be a valid domain name."),
        ("localhost", "The custom domain must be a valid domain name."),
        ("dancymeals.test", "This domain conflicts with the platform domain."),
        ("shop.dancymeals.test", "Use the subdomain field for subdomains of the platform domain."),
    ],
)
def test_validate_custom_domain_rejects(db_session: Session, domain, message):
    with pytest.raises(ServiceValidationError) as exc_info:
        TenantService.validate_custom_domain(db_session, domain)
    assert exc_info.value.message == message


def test_validate_custom_domain_taken(db_session: Session):
    make_tenant(db_session, slug="mama-ngono", custom_domain="mamangono.com")
    with pytest.raises(ConflictError) as exc_info:
        TenantService.validate_custom_domain(db_session, "mamangono.com")
    assert exc_info.value.code == "DOMAIN_TAKEN"


def test_create_tenant_service(db_session: Session):
    tenant = TenantService.create_tenant(
        db_session,
        TenantCreate(
            name="  Chef Ama  ",
            subdomain="Chef-Ama",
            custom_domain="ChefAma.cm",
            minimum_order_amount=2000,
        ),
    )
    assert tenant.slug == "chef-ama"
    assert tenant.custom_domain == "chefama.cm"
    assert tenant.name == "Chef Ama"
    assert tenant.is_active is True


def test_toggle_status_service(db_session: Session):
    tenant = make_tenant(db_session)
    assert TenantService.toggle_status(db_session, tenant.id).is_active is False
    assert TenantService.toggle_status(db_session, tenant.id).is_active is True

    with pytest.raises(NotFoundError):
        TenantService.toggle_status(db_session, 9999)


# =============================================================================
# HTTP
# =============================================================================


def test_admin_requires_login(db_session: Session):
    response = platform_client().get("/admin/tenants")
    assert response.status_code == 401


def test_admin_requires_admin_role(db_session: Session):
    user = make_user(db_session)
    client = platform_client()
    login(client, user.email)

    response = client.get("/admin/tenants")

    assert response.status_code == 403
    assert response.json()["error"]["code"] == "FORBIDDEN"


def test_create_tenant(admin_client):
    response = admin_client.post(
        "/admin/tenants",
        json={
            "name": "Chef Ama",
            "subdomain": "chef-ama",
            "minimum_order_amount": 3000,
            "whatsapp": "+237699000000",
        },
    )
    assert response.status_code == 201
    body = response.json()
    assert body["slug"] == "chef-ama"
    assert body["is_active"] is True
    assert body["custom_domain"] is None

    # The new storefront answers on its subdomain straight away
    store = tenant_client("chef-ama").get("/store")
    assert store.status_code == 200
    assert store.json()["minimum_order_amount"] == 3000


def test_create_tenant_reserved_subdomain(admin_client):
    response = admin_client.post("/admin/tenants", json={"name": "API", "subdomain": "api"})
    assert response.status_code == 400
    assert response.json()["error"]["message"] == "This subdomain is reserved and cannot be used."


def test_create_tenant_duplicate_subdomain(db_session: Session, admin_client):
    make_tenant(db_session, slug="chef-ama")
    response = admin_client.post("/admin/tenants", json={"name": "Copy", "subdomain": "chef-ama"})
    assert response.status_code == 409
    assert response.json()["error"]["code"] == "SUBDOMAIN_TAKEN"


def test_create_tenant_negative_minimum(admin_client):
    response = admin_client.post(
        "/admin/tenants",
        json={"name": "Chef Ama", "subdomain": "chef-ama", "minimum_order_amount": -1},
    )
    assert response.status_code == 422


def test_list_tenants_paginated(db_session: Session, admin_client):
    for slug in ("alpha-kitchen", "bravo-kitchen", "charlie-kitchen"):
        make_tenant(db_session, slug=slug)

    response = admin_client.get("/admin/tenants", params={"page": 1, "page_size": 2})

    assert response.status_code == 200
    body = response.json()
    assert body["total"] == 3
    assert len(body["items"]) == 2
    assert body["has_next"] is True
    assert body["has_prev"] is False

    second = admin_client.get("/admin/tenants", params={"page": 2, "page_size": 2}).json()
    assert len(second["items"]) == 1
    assert second["has_next"] is False


def test_toggle_status(db_session: Session, admin_client):
    """
    Verifies:
    - Toggling deactivates and the storefront answers 503
    - Toggling again reactivates it
    """
    tenant = make_tenant(db_session, slug="chef-ama", name="Chef Ama")

    response = admin_client.post(f"/admin/tenants/{tenant.id}/toggle-status")
    assert response.status_code == 200
    body = response.json()
    assert body["message"] == 'Tenant "Chef Ama" has been deactivated.'
    assert body["tenant"]["is_active"] is False
    assert tenant_client("chef-ama").get("/store").status_code == 503

    response = admin_client.post(f"/admin/tenants/{tenant.id}/toggle-status")
    assert response.json()["message"] == 'Tenant "Chef Ama" has been activated.'
    assert tenant_client("chef-ama").get("/store").status_code == 200


def test_toggle_unknown_tenant(admin_client):
    response = admin_client.post("/admin/tenants/9999/toggle-status")
    assert response.status_code == 404
