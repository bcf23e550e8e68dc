"""
Tenant (cook storefront) model.
"""

from sqlalchemy import Column, Integer, Text, Boolean, TIMESTAMP, CheckConstraint
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from domain.models.database import Base


class Tenant(Base):
    """A cook's storefront, reachable on a subdomain or a custom domain"""

    __tablename__ = "tenant"

    id = Column(Integer, primary_key=True, autoincrement=True)
    slug = Column(Text, unique=True, nullable=False, index=True)
    custom_domain = Column(Text, unique=True, nullable=True, index=True)
    name = Column(Text, nullable=False)
    description = Column(Text)
    is_active = Column(Boolean, nullable=False, default=True)
    minimum_order_amount = Column(Integer, nullable=False, default=0)
    whatsapp = Column(Text)
    phone = Column(Text)
    created_at = Column(TIMESTAMP(timezone=True), server_default=func.now())
    updated_at = Column(
        TIMESTAMP(timezone=True), server_default=func.now(), onupdate=func.now()
    )

    meals = relationship("Meal", back_populates="tenant")
    delivery_areas = relationship("DeliveryArea", back_populates="tenant")
    quarter_groups = relationship("QuarterGroup", back_populates="tenant")
    pickup_locations = relationship("PickupLocation", back_populates="tenant")

    __table_args__ = (
        CheckConstraint(
            "minimum_order_amount >= 0", name="ck_tenant_minimum_order_nonneg"
        ),
    )

    def __repr__(self) -> str:
        return f"<Tenant id={self.id} slug={self.slug!r}>"
