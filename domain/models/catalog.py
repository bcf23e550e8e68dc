"""
Meal catalogue models: meals, their orderable components and requirement rules.
"""

from sqlalchemy import (
    Column,
    Integer,
    Text,
    Boolean,
    TIMESTAMP,
    ForeignKey,
    Table,
    CheckConstraint,
    Enum as SQLEnum,
)
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from domain.models.database import Base
from domain.enums import MealStatus, RequirementRuleType


requirement_rule_target = Table(
    "requirement_rule_target",
    Base.metadata,
    Column(
        "rule_id",
        Integer,
        ForeignKey("component_requirement_rule.id", ondelete="CASCADE"),
        primary_key=True,
    ),
    Column(
        "component_id",
        Integer,
        ForeignKey("meal_component.id", ondelete="CASCADE"),
        primary_key=True,
    ),
)


class Meal(Base):
    """A meal offered by a tenant"""

    __tablename__ = "meal"

    id = Column(Integer, primary_key=True, autoincrement=True)
    tenant_id = Column(
        Integer, ForeignKey("tenant.id", ondelete="CASCADE"), nullable=False, index=True
    )
    name = Column(Text, nullable=False)
    description = Column(Text)
    status = Column(SQLEnum(MealStatus), nullable=False, default=MealStatus.DRAFT)
    is_available = Column(Boolean, nullable=False, default=True)
    created_at = Column(TIMESTAMP(timezone=True), server_default=func.now())
    updated_at = Column(
        TIMESTAMP(timezone=True), server_default=func.now(), onupdate=func.now()
    )

    tenant = relationship("Tenant", back_populates="meals")
    components = relationship(
        "MealComponent",
        back_populates="meal",
        cascade="all, delete-orphan",
        order_by="MealComponent.id",
    )

    @property
    def is_orderable(self) -> bool:
        return self.status == MealStatus.LIVE and bool(self.is_available)


class MealComponent(Base):
    """An orderable part of a meal with its own price and stock"""

    __tablename__ = "meal_component"

    id = Column(Integer, primary_key=True, autoincrement=True)
    meal_id = Column(
        Integer, ForeignKey("meal.id", ondelete="CASCADE"), nullable=False, index=True
    )
    name = Column(Text, nullable=False)
    price = Column(Integer, nullable=False)
    unit_label = Column(Text, nullable=False, default="plate")
    is_available = Column(Boolean, nullable=False, default=True)
    # NULL means unlimited
    max_quantity = Column(Integer, nullable=True)
    available_quantity = Column(Integer, nullable=True)

    meal = relationship("Meal", back_populates="components")
    requirement_rules = relationship(
        "ComponentRequirementRule",
        back_populates="component",
        cascade="all, delete-orphan",
        foreign_keys="ComponentRequirementRule.component_id",
    )

    __table_args__ = (
        CheckConstraint("price >= 0", name="ck_component_price_nonneg"),
        CheckConstraint(
            "available_quantity IS NULL OR available_quantity >= 0",
            name="ck_component_stock_nonneg",
        ),
    )

    @property
    def is_out_of_stock(self) -> bool:
        return self.available_quantity is not None and self.available_quantity <= 0


class ComponentRequirementRule(Base):
    """Constrains which other components must (or must not) be in the cart"""

    __tablename__ = "component_requirement_rule"

    id = Column(Integer, primary_key=True, autoincrement=True)
    component_id = Column(
        Integer,
        ForeignKey("meal_component.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    rule_type = Column(SQLEnum(RequirementRuleType), nullable=False)

    component = relationship(
        "MealComponent",
        back_populates="requirement_rules",
        foreign_keys=[component_id],
    )
    targets = relationship(
        "MealComponent",
        secondary=requirement_rule_target,
        order_by="MealComponent.id",
    )
