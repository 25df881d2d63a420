"""
Ordered child repository - shared data access for rows that carry an
``ordinal`` position under a parent (ingredients and instructions).
"""

from typing import Any, Dict, Iterable, List, Optional, Type

from sqlalchemy import func, update
from sqlalchemy.orm import Session

from repositories.base import BaseRepository, ModelType


class OrderedChildRepository(BaseRepository[ModelType]):
    """Repository for a child table ordered by ``ordinal`` within a parent"""

    parent_model: Type = None
    parent_key: str = None

    def __init__(self, db: Session, model: Type[ModelType]):
        super().__init__(db, model)
        self._parent_column = getattr(model, self.parent_key)

    def parent_id_of(self, row: ModelType) -> Any:
        return getattr(row, self.parent_key)

    def lock_parent(self, parent_id: Any):
        """
        Lock the parent row for the rest of the transaction.

        Concurrent appends to the same parent queue up here, so each reads a
        count that already includes the rows of the append before it.
        Backends without row locks (SQLite) ignore FOR UPDATE.
        """
        return (
            self.db.query(self.parent_model)
            .filter(self.parent_model.id == parent_id)
            .with_for_update()
            .one_or_none()
        )

    def count(self, parent_id: Any) -> int:
        return (
            self.db.query(func.count(self.model.id))
            .filter(self._parent_column == parent_id)
            .scalar()
        )

    def get_all_for_parent(self, parent_id: Any) -> List[ModelType]:
        """All children of a parent in ordinal order"""
        return (
            self.db.query(self.model)
            .filter(self._parent_column == parent_id)
            .order_by(self.model.ordinal, self.model.id)
            .all()
        )

    def get_in_parent(self, parent_id: Any, child_id: Any) -> Optional[ModelType]:
        return (
            self.db.query(self.model)
            .filter(self.model.id == child_id, self._parent_column == parent_id)
            .first()
        )

    def bulk_update(self, rows: List[Dict[str, Any]]) -> None:
        """
        Update many rows in one executemany keyed by primary key.

        Each dict carries ``id`` plus the columns to set. Loaded instances are
        expired afterwards since bulk updates bypass the identity map.
        """
        if not rows:
            return
        self.db.flush()
        self.db.execute(update(self.model), rows)
        self.db.expire_all()

    def delete_ids(self, ids: Iterable[Any]) -> int:
        """
        Delete rows by id through the session.

        Loaded children are deleted by the ORM cascade, so none of them stay
        behind in the identity map under an id the database may hand out again.
        """
        ids = list(ids)
        if not ids:
            return 0
        rows = self.db.query(self.model).filter(self.model.id.in_(ids)).all()
        for row in rows:
            self.db.delete(row)
        self.db.flush()
        return len(rows)
