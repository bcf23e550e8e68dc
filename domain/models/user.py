"""
User-related database models.
"""

from sqlalchemy import Column, Text, TIMESTAMP, Boolean, Uuid
from sqlalchemy.sql import func
import uuid

from domain.models.database import Base


class AppUser(Base):
    """User account model"""

    __tablename__ = "app_user"

    user_id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    # Stored lower-cased; uniqueness is case-insensitive through normalisation
    email = Column(Text, unique=True, nullable=False, index=True)
    full_name = Column(Text)
    phone = Column(Text)
    password_hash = Column(Text, nullable=False)
    is_admin = Column(Boolean, nullable=False, default=False)
    is_active = Column(Boolean, nullable=False, default=True)
    created_at = Column(TIMESTAMP(timezone=True), server_default=func.now())
    updated_at = Column(
        TIMESTAMP(timezone=True), server_default=func.now(), onupdate=func.now()
    )
