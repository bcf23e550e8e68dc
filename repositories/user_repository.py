"""
User Repository - Data access layer for user-related operations
"""

from typing import Optional
from sqlalchemy.orm import Session
from sqlalchemy.exc import IntegrityError

from repositories.base import BaseRepository
from domain.models import AppUser
from app.exceptions import ConflictError


class UserRepository(BaseRepository[AppUser]):
    """Repository for user data access"""

    id_attr = "user_id"

    def __init__(self, db: Session):
        super().__init__(db, AppUser)

    def get_by_email(self, email: str) -> Optional[AppUser]:
        """Get user by email (case-insensitive)"""
        return (
            self.db.query(AppUser)
            .filter(AppUser.email == email.strip().lower())
            .first()
        )

    def create_user(
        self,
        email: str,
        password_hash: str,
        full_name: str = None,
        phone: str = None,
        is_admin: bool = False,
    ) -> AppUser:
        """Create a new user"""
        user = AppUser(
            email=email.strip().lower(),
            password_hash=password_hash,
            full_name=full_name,
            phone=phone,
            is_admin=is_admin,
        )
        try:
            self.db.add(user)
            self.db.commit()
            self.db.refresh(user)
            return user
        except IntegrityError:
            self.db.rollback()
            raise ConflictError(
                f"User with email {email} already exists", code="EMAIL_TAKEN"
            )
