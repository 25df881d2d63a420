"""
Unit Repository - canonical US/metric unit pairs
"""

from typing import Iterable, List, Optional, Set, Tuple

from sqlalchemy.orm import Session

from repositories.base import BaseRepository
from domain.models import Unit


class UnitRepository(BaseRepository[Unit]):
    """Repository for unit pair data access"""

    def __init__(self, db: Session):
        super().__init__(db, Unit)

    def get_by_pair(self, us_unit: str, metric_unit: str) -> Optional[Unit]:
        return (
            self.db.query(Unit)
            .filter(Unit.us_unit == us_unit, Unit.metric_unit == metric_unit)
            .first()
        )

    def existing_pairs(self, pairs: Iterable[Tuple[str, str]]) -> Set[Tuple[str, str]]:
        """Return which of ``pairs`` are already stored"""
        pairs = set(pairs)
        if not pairs:
            return set()
        us_units = {us for us, _ in pairs}
        rows = (
            self.db.query(Unit.us_unit, Unit.metric_unit)
            .filter(Unit.us_unit.in_(us_units))
            .all()
        )
        return {(row.us_unit, row.metric_unit) for row in rows} & pairs

    def list_all(self) -> List[Unit]:
        return self.db.query(Unit).order_by(Unit.id).all()
