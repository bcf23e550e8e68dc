"""
Tests for registration, session login and password hashing.
"""

import pytest
from sqlalchemy.orm import Session

from app.exceptions import ConflictError, ServiceValidationError, UnauthorizedError
from domain.schemas.auth_schemas import RegisterRequest
from services.user_service import UserService, hash_password, verify_password
from test_fixtures import (
    DEFAULT_PASSWORD,
    db_session,
    make_tenant,
    make_user,
    platform_client,
    tenant_client,
    unique_email,
)


# =============================================================================
# PASSWORDS
# =============================================================================


def test_hash_and_verify_password():
    encoded = hash_password("ndole4ever")
    assert encoded.startswith("pbkdf2_sha256$")
    assert verify_password("ndole4ever", encoded)
    assert not verify_password("wrong-pass1", encoded)


def test_hash_uses_random_salt():
    assert hash_password("ndole4ever") != hash_password("ndole4ever")


def test_verify_rejects_malformed_hash():
    assert not verify_password("anything", "not-a-hash")
    assert not verify_password("anything", "md5$1$abc$def")


# =============================================================================
# SERVICE
# =============================================================================


def test_register_normalises_email_and_phone(db_session: Session):
    user = UserService.register(
        db_session,
        RegisterRequest(
            email="  Ngono.Marie@Example.COM ",
            password="secret123",
            full_name="Ngono Marie",
            phone="690 00 00 01",
        ),
    )
    assert user.email == "ngono.marie@example.com"
    assert user.phone == "+237690000001"
    assert user.is_admin is False


def test_register_duplicate_email(db_session: Session):
    email = unique_email()
    make_user(db_session, email=email)

    with pytest.raises(ConflictError):
        UserService.register(
            db_session, RegisterRequest(email=email.upper(), password="secret123")
        )


def test_register_rejects_weak_password(db_session: Session):
    with pytest.raises(ServiceValidationError):
        UserService.register(
            db_session, RegisterRequest(email=unique_email(), password="12345678")
        )


def test_authenticate(db_session: Session):
    user = make_user(db_session)

    assert UserService.authenticate(db_session, user.email.upper(), DEFAULT_PASSWORD).user_id == user.user_id

    with pytest.raises(UnauthorizedError) as exc_info:
        UserService.authenticate(db_session, user.email, "wrong-pass1")
    assert exc_info.value.message == "These credentials do not match our records."


def test_authenticate_inactive_user(db_session: Session):
    user = make_user(db_session)
    user.is_active = False
    db_session.commit()

    with pytest.raises(UnauthorizedError) as exc_info:
        UserService.authenticate(db_session, user.email, DEFAULT_PASSWORD)
    assert exc_info.value.message == "This account has been deactivated."


def test_session_user_id_drops_garbage():
    session = {"user_id": "not-a-uuid"}
    assert UserService.session_user_id(session) is None
    assert "user_id" not in session


# =============================================================================
# HTTP
# =============================================================================


def test_register_logs_in(db_session: Session):
    client = platform_client()
    response = client.post(
        "/auth/register",
        json={"email": unique_email(), "password": "secret123", "full_name": "Ebong"},
    )
    assert response.status_code == 201
    assert response.json()["full_name"] == "Ebong"

    me = client.get("/auth/me")
    assert me.status_code == 200
    assert me.json()["user_id"] == response.json()["user_id"]


def test_register_invalid_email(db_session: Session):
    response = platform_client().post(
        "/auth/register", json={"email": "not-an-email", "password": "secret123"}
    )
    assert response.status_code == 422


def test_register_duplicate_returns_409(db_session: Session):
    user = make_user(db_session)
    response = platform_client().post(
        "/auth/register", json={"email": user.email, "password": "secret123"}
    )
    assert response.status_code == 409
    assert response.json()["error"]["code"] == "EMAIL_TAKEN"


def test_login_logout_on_tenant_host(db_session: Session):
    """
    Verifies:
    - Login works on a tenant storefront host
    - Logout clears the session user
    """
    make_tenant(db_session, slug="chef-ama")
    user = make_user(db_session)
    client = tenant_client("chef-ama")

    response = client.post("/auth/login", json={"email": user.email, "password": DEFAULT_PASSWORD})
    assert response.status_code == 200
    assert client.get("/auth/me").json()["email"] == user.email

    assert client.post("/auth/logout").json() == {"success": True}
    assert client.get("/auth/me").status_code == 401


def test_login_bad_password(db_session: Session):
    user = make_user(db_session)
    response = platform_client().post(
        "/auth/login", json={"email": user.email, "password": "wrong-pass1"}
    )
    assert response.status_code == 401
    assert response.json()["error"]["code"] == "UNAUTHORIZED"


def test_me_requires_login(db_session: Session):
    response = platform_client().get("/auth/me")
    assert response.status_code == 401
