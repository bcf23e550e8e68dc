"""
Delivery geography: towns, quarters, the areas a tenant delivers to and pickup points.
"""

from sqlalchemy import (
    Column,
    Integer,
    Text,
    Boolean,
    ForeignKey,
    Table,
    UniqueConstraint,
    CheckConstraint,
)
from sqlalchemy.orm import relationship

from domain.models.database import Base


quarter_group_member = Table(
    "quarter_group_member",
    Base.metadata,
    Column(
        "quarter_group_id",
        Integer,
        ForeignKey("quarter_group.id", ondelete="CASCADE"),
        primary_key=True,
    ),
    Column(
        "quarter_id",
        Integer,
        ForeignKey("quarter.id", ondelete="CASCADE"),
        primary_key=True,
    ),
)


class Town(Base):
    __tablename__ = "town"

    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(Text, nullable=False)
    is_active = Column(Boolean, nullable=False, default=True)

    quarters = relationship("Quarter", back_populates="town")


class Quarter(Base):
    __tablename__ = "quarter"

    id = Column(Integer, primary_key=True, autoincrement=True)
    town_id = Column(
        Integer, ForeignKey("town.id", ondelete="CASCADE"), nullable=False, index=True
    )
    name = Column(Text, nullable=False)
    is_active = Column(Boolean, nullable=False, default=True)

    town = relationship("Town", back_populates="quarters")


class DeliveryArea(Base):
    """A town a tenant delivers to"""

    __tablename__ = "delivery_area"

    id = Column(Integer, primary_key=True, autoincrement=True)
    tenant_id = Column(
        Integer, ForeignKey("tenant.id", ondelete="CASCADE"), nullable=False, index=True
    )
    town_id = Column(
        Integer, ForeignKey("town.id", ondelete="CASCADE"), nullable=False
    )

    tenant = relationship("Tenant", back_populates="delivery_areas")
    town = relationship("Town")
    quarters = relationship(
        "DeliveryAreaQuarter",
        back_populates="delivery_area",
        cascade="all, delete-orphan",
    )

    __table_args__ = (
        UniqueConstraint("tenant_id", "town_id", name="uq_delivery_area_tenant_town"),
    )


class DeliveryAreaQuarter(Base):
    """A quarter inside a delivery area, with its individual fee"""

    __tablename__ = "delivery_area_quarter"

    id = Column(Integer, primary_key=True, autoincrement=True)
    delivery_area_id = Column(
        Integer,
        ForeignKey("delivery_area.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    quarter_id = Column(
        Integer, ForeignKey("quarter.id", ondelete="CASCADE"), nullable=False
    )
    delivery_fee = Column(Integer, nullable=False, default=0)

    delivery_area = relationship("DeliveryArea", back_populates="quarters")
    quarter = relationship("Quarter")

    __table_args__ = (
        UniqueConstraint(
            "delivery_area_id", "quarter_id", name="uq_delivery_area_quarter"
        ),
        CheckConstraint("delivery_fee >= 0", name="ck_daq_fee_nonneg"),
    )


class QuarterGroup(Base):
    """Quarters sharing one delivery fee; the group fee wins over the quarter fee"""

    __tablename__ = "quarter_group"

    id = Column(Integer, primary_key=True, autoincrement=True)
    tenant_id = Column(
        Integer, ForeignKey("tenant.id", ondelete="CASCADE"), nullable=False, index=True
    )
    name = Column(Text, nullable=False)
    delivery_fee = Column(Integer, nullable=False, default=0)

    tenant = relationship("Tenant", back_populates="quarter_groups")
    quarters = relationship("Quarter", secondary=quarter_group_member)

    __table_args__ = (
        CheckConstraint("delivery_fee >= 0", name="ck_quarter_group_fee_nonneg"),
    )


class PickupLocation(Base):
    __tablename__ = "pickup_location"

    id = Column(Integer, primary_key=True, autoincrement=True)
    tenant_id = Column(
        Integer, ForeignKey("tenant.id", ondelete="CASCADE"), nullable=False, index=True
    )
    name = Column(Text, nullable=False)
    town_id = Column(Integer, ForeignKey("town.id"), nullable=True)
    quarter_id = Column(Integer, ForeignKey("quarter.id"), nullable=True)
    address = Column(Text)
    instructions = Column(Text)

    tenant = relationship("Tenant", back_populates="pickup_locations")
    town = relationship("Town")
    quarter = relationship("Quarter")
