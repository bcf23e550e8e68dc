"""Accounts: password hashing, registration and session login"""

import base64
import binascii
import logging
import secrets
from typing import Optional
from uuid import UUID

from cryptography.exceptions import InvalidKey
from cryptography.hazmat.primitives import hashes
from cryptography.hazmat.primitives.kdf.pbkdf2 import PBKDF2HMAC
from sqlalchemy.orm import Session

from app.exceptions import ServiceValidationError, UnauthorizedError
from domain.models import AppUser
from domain.schemas.auth_schemas import RegisterRequest
from repositories.user_repository import UserRepository
from services.checkout_service import normalize_phone

logger = logging.getLogger("dancymeals.users")

PBKDF2_SCHEME = "pbkdf2_sha256"
PBKDF2_ITERATIONS = 260_000
PBKDF2_LENGTH = 32

# Session key holding the signed-in user's id
SESSION_USER_KEY = "user_id"


def _kdf(salt: bytes, iterations: int) -> PBKDF2HMAC:
    return PBKDF2HMAC(
        algorithm=hashes.SHA256(),
        length=PBKDF2_LENGTH,
        salt=salt,
        iterations=iterations,
    )


def hash_password(password: str, salt: Optional[bytes] = None) -> str:
    """Return ``pbkdf2_sha256$iterations$salt$hash`` (base64 parts)"""
    salt = salt or secrets.token_bytes(16)
    digest = _kdf(salt, PBKDF2_ITERATIONS).derive(password.encode("utf-8"))
    return "$".join(
        [
            PBKDF2_SCHEME,
            str(PBKDF2_ITERATIONS),
            base64.b64encode(salt).decode("ascii"),
            base64.b64encode(digest).decode("ascii"),
        ]
    )


def verify_password(password: str, encoded: str) -> bool:
    try:
        scheme, iterations, salt_b64, hash_b64 = encoded.split("$")
        salt = base64.b64decode(salt_b64)
        expected = base64.b64decode(hash_b64)
        rounds = int(iterations)
    except (ValueError, binascii.Error):
        return False
    if scheme != PBKDF2_SCHEME:
        return False
    try:
        _kdf(salt, rounds).verify(password.encode("utf-8"), expected)
    except InvalidKey:
        return False
    return True


class UserService:
    """Registration and session login"""

    @staticmethod
    def register(db: Session, payload: RegisterRequest) -> AppUser:
        UserService.require_password_strength(payload.password)
        repo = UserRepository(db)
        phone = normalize_phone(payload.phone) if payload.phone else None
        user = repo.create_user(
            email=payload.email,
            password_hash=hash_password(payload.password),
            full_name=payload.full_name,
            phone=phone,
        )
        logger.info(f"user_registered user_id={user.user_id}")
        return user

    @staticmethod
    def authenticate(db: Session, email: str, password: str) -> AppUser:
        user = UserRepository(db).get_by_email(email)
        if user is None or not verify_password(password, user.password_hash):
            logger.info("login_failed reason=bad_credentials")
            raise UnauthorizedError("These credentials do not match our records.")
        if not user.is_active:
            logger.info(f"login_failed user_id={user.user_id} reason=inactive")
            raise UnauthorizedError("This account has been deactivated.")
        logger.info(f"login_succeeded user_id={user.user_id}")
        return user

    @staticmethod
    def session_user_id(session) -> Optional[UUID]:
        raw = session.get(SESSION_USER_KEY)
        if not raw:
            return None
        try:
            return UUID(str(raw))
        except ValueError:
            # Unparseable id, drop it
            session.pop(SESSION_USER_KEY, None)
            return None

    @staticmethod
    def login(session, user: AppUser) -> None:
        session[SESSION_USER_KEY] = str(user.user_id)

    @staticmethod
    def logout(session) -> None:
        session.pop(SESSION_USER_KEY, None)

    @staticmethod
    def get_current_user(db: Session, session) -> Optional[AppUser]:
        user_id = UserService.session_user_id(session)
        if user_id is None:
            return None
        user = UserRepository(db).get_by_id(user_id)
        if user is None or not user.is_active:
            return None
        return user

    @staticmethod
    def require_password_strength(password: str) -> None:
        if password.isdigit() or password.isalpha():
            raise ServiceValidationError(
                "The password must contain letters and numbers.",
                details={"field": "password"},
            )
