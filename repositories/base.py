"""
Base repository interface for data access layer.
This follows the Repository pattern to separate business logic from data access.
"""

from typing import Any, Generic, TypeVar, Optional, List, Type
from sqlalchemy.orm import Session
from abc import ABC

ModelType = TypeVar("ModelType")


class BaseRepository(Generic[ModelType], ABC):
    """
    Base repository providing common CRUD operations.
    All repositories should inherit from this class.

    Subclasses whose primary key is not called ``id`` set ``id_attr``.
    """

    id_attr = "id"

    def __init__(self, db: Session, model: Type[ModelType]):
        self.db = db
        self.model = model

    def get_by_id(self, entity_id: Any) -> Optional[ModelType]:
        """
        Get entity by primary key.

        Args:
            entity_id: integer id or UUID, depending on the model

        Returns:
            Entity or None if not found
        """
        column = getattr(self.model, self.id_attr)
        return self.db.query(self.model).filter(column == entity_id).first()

    def get_all(self, skip: int = 0, limit: int = 100) -> List[ModelType]:
        """Get all entities with pagination"""
        column = getattr(self.model, self.id_attr)
        return (
            self.db.query(self.model).order_by(column).offset(skip).limit(limit).all()
        )

    def count(self) -> int:
        return self.db.query(self.model).count()

    def update(self, entity: ModelType) -> ModelType:
        """Commit pending changes on an attached entity and reload it"""
        self.db.commit()
        self.db.refresh(entity)
        return entity
