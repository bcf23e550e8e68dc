"""
Meal Repository - Data access layer for the tenant meal catalogue
"""

from typing import Dict, Iterable, List, Optional
from sqlalchemy.orm import Session, selectinload

from repositories.base import BaseRepository
from domain.models import Meal, MealComponent, ComponentRequirementRule
from domain.enums import MealStatus


class MealRepository(BaseRepository[Meal]):
    """Repository for meal data access"""

    def __init__(self, db: Session):
        super().__init__(db, Meal)

    def get_orderable(self, tenant_id: int, meal_id: int) -> Optional[Meal]:
        """Get a meal that is live and available for the tenant"""
        return (
            self.db.query(Meal)
            .filter(
                Meal.id == meal_id,
                Meal.tenant_id == tenant_id,
                Meal.status == MealStatus.LIVE,
                Meal.is_available.is_(True),
            )
            .first()
        )

    def list_live(self, tenant_id: int) -> List[Meal]:
        """List the tenant's live, available meals with components loaded"""
        return (
            self.db.query(Meal)
            .options(selectinload(Meal.components))
            .filter(
                Meal.tenant_id == tenant_id,
                Meal.status == MealStatus.LIVE,
                Meal.is_available.is_(True),
            )
            .order_by(Meal.name)
            .all()
        )

    def get_many(self, meal_ids: Iterable[int]) -> Dict[int, Meal]:
        ids = set(meal_ids)
        if not ids:
            return {}
        rows = self.db.query(Meal).filter(Meal.id.in_(ids)).all()
        return {meal.id: meal for meal in rows}


class MealComponentRepository(BaseRepository[MealComponent]):
    """Repository for meal component data access"""

    def __init__(self, db: Session):
        super().__init__(db, MealComponent)

    def get_for_meal(self, meal_id: int, component_id: int) -> Optional[MealComponent]:
        """Get a component only if it belongs to the given meal"""
        return (
            self.db.query(MealComponent)
            .filter(MealComponent.id == component_id, MealComponent.meal_id == meal_id)
            .first()
        )

    def get_many(self, component_ids: Iterable[int]) -> Dict[int, MealComponent]:
        """Load components by id, keyed by id; missing ids are simply absent"""
        ids = set(component_ids)
        if not ids:
            return {}
        rows = self.db.query(MealComponent).filter(MealComponent.id.in_(ids)).all()
        return {component.id: component for component in rows}

    def get_rules(self, component_id: int) -> List[ComponentRequirementRule]:
        """Requirement rules for a component with their targets loaded"""
        return (
            self.db.query(ComponentRequirementRule)
            .options(selectinload(ComponentRequirementRule.targets))
            .filter(ComponentRequirementRule.component_id == component_id)
            .order_by(ComponentRequirementRule.id)
            .all()
        )
