"""
Base repository interface for data access layer.
This follows the Repository pattern to separate business logic from data access.

Repositories only ``flush``; committing or rolling back is the job of the
service that owns the request's transaction.
"""

from typing import Generic, TypeVar, Optional, List, Type, Any
from sqlalchemy.orm import Session
from abc import ABC

ModelType = TypeVar("ModelType")


class BaseRepository(Generic[ModelType], ABC):
    """
    Base repository providing common CRUD operations.
    All repositories should inherit from this class.
    """

    def __init__(self, db: Session, model: Type[ModelType]):
        self.db = db
        self.model = model

    def get_by_id(self, entity_id: Any) -> Optional[ModelType]:
        """Get entity by primary key"""
        return self.db.get(self.model, entity_id)

    def add(self, entity: ModelType) -> ModelType:
        """Stage a new entity and flush it so generated keys are populated"""
        self.db.add(entity)
        self.db.flush()
        return entity

    def add_all(self, entities: List[ModelType]) -> List[ModelType]:
        self.db.add_all(entities)
        self.db.flush()
        return entities

    def delete(self, entity: ModelType) -> None:
        """Delete entity; dependent rows go with it through FK cascades"""
        self.db.delete(entity)
        self.db.flush()

