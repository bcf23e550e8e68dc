"""
Delivery Repository - Data access layer for delivery areas, quarter fees and pickup points
"""

from typing import Dict, List, Optional
from sqlalchemy.orm import Session, joinedload, selectinload

from domain.models import (
    Town,
    Quarter,
    DeliveryArea,
    DeliveryAreaQuarter,
    QuarterGroup,
    PickupLocation,
)


class DeliveryRepository:
    """Read access to a tenant's delivery configuration"""

    def __init__(self, db: Session):
        self.db = db

    def count_delivery_areas(self, tenant_id: int) -> int:
        return (
            self.db.query(DeliveryArea)
            .filter(DeliveryArea.tenant_id == tenant_id)
            .count()
        )

    def count_pickup_locations(self, tenant_id: int) -> int:
        return (
            self.db.query(PickupLocation)
            .filter(PickupLocation.tenant_id == tenant_id)
            .count()
        )

    def get_delivery_towns(self, tenant_id: int) -> List[Town]:
        """Towns where the tenant has a delivery area"""
        return (
            self.db.query(Town)
            .join(DeliveryArea, DeliveryArea.town_id == Town.id)
            .filter(DeliveryArea.tenant_id == tenant_id)
            .order_by(Town.name)
            .all()
        )

    def get_quarter(self, quarter_id: int) -> Optional[Quarter]:
        return self.db.query(Quarter).filter(Quarter.id == quarter_id).first()

    def get_active_quarters(self, town_id: int) -> List[Quarter]:
        return (
            self.db.query(Quarter)
            .filter(Quarter.town_id == town_id, Quarter.is_active.is_(True))
            .order_by(Quarter.name)
            .all()
        )

    def get_area_quarter(
        self, tenant_id: int, quarter_id: int
    ) -> Optional[DeliveryAreaQuarter]:
        """The tenant's delivery entry for a quarter, if it delivers there"""
        return (
            self.db.query(DeliveryAreaQuarter)
            .join(DeliveryArea, DeliveryArea.id == DeliveryAreaQuarter.delivery_area_id)
            .filter(
                DeliveryArea.tenant_id == tenant_id,
                DeliveryAreaQuarter.quarter_id == quarter_id,
            )
            .first()
        )

    def get_area_quarters_for_town(
        self, tenant_id: int, town_id: int
    ) -> List[DeliveryAreaQuarter]:
        return (
            self.db.query(DeliveryAreaQuarter)
            .join(DeliveryArea, DeliveryArea.id == DeliveryAreaQuarter.delivery_area_id)
            .filter(DeliveryArea.tenant_id == tenant_id, DeliveryArea.town_id == town_id)
            .all()
        )

    def get_group_fees(self, tenant_id: int) -> Dict[int, int]:
        """Map quarter_id -> group fee for every grouped quarter of the tenant"""
        groups = (
            self.db.query(QuarterGroup)
            .options(selectinload(QuarterGroup.quarters))
            .filter(QuarterGroup.tenant_id == tenant_id)
            .order_by(QuarterGroup.id)
            .all()
        )
        fees: Dict[int, int] = {}
        for group in groups:
            for quarter in group.quarters:
                # First group wins when a quarter is listed twice
                fees.setdefault(quarter.id, group.delivery_fee)
        return fees

    def get_group_fee(self, tenant_id: int, quarter_id: int) -> Optional[int]:
        return self.get_group_fees(tenant_id).get(quarter_id)

    def get_pickup_locations(self, tenant_id: int) -> List[PickupLocation]:
        return (
            self.db.query(PickupLocation)
            .options(joinedload(PickupLocation.town), joinedload(PickupLocation.quarter))
            .filter(PickupLocation.tenant_id == tenant_id)
            .order_by(PickupLocation.name)
            .all()
        )

    def get_pickup_location(
        self, tenant_id: int, pickup_location_id: int
    ) -> Optional[PickupLocation]:
        return (
            self.db.query(PickupLocation)
            .filter(
                PickupLocation.tenant_id == tenant_id,
                PickupLocation.id == pickup_location_id,
            )
            .first()
        )
