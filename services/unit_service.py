"""
Registry of canonical US/metric unit pairs seen on ingredients.
"""

from typing import Iterable, List, Tuple

from sqlalchemy.orm import Session

from app.exceptions import ConflictError
from domain.enums import UnitSystem
from domain.models import Unit
from domain.schemas import IngredientCreate
from repositories import UnitRepository
from services.base import BaseService


class UnitService(BaseService[UnitRepository]):
    def __init__(self, db: Session):
        super().__init__(db, "recipebox.units")
        self.repo = UnitRepository(db)

    def list_units(self) -> List[Unit]:
        return self.repo.list_all()

    def create(self, us_unit: str, metric_unit: str) -> Unit:
        with self.transaction("create_unit", us_unit=us_unit, metric_unit=metric_unit):
            if self.repo.get_by_pair(us_unit, metric_unit) is not None:
                raise ConflictError(
                    "Unit pair already exists",
                    details={"us_unit": us_unit, "metric_unit": metric_unit},
                )
            return self.repo.add(Unit(us_unit=us_unit, metric_unit=metric_unit))

    def ensure_pairs(self, pairs: Iterable[Tuple[str, str]]) -> List[Unit]:
        """Store every pair not yet known; duplicates and known pairs are skipped"""
        unique = list(dict.fromkeys(pairs))
        with self.transaction("ensure_units", count=len(unique)):
            known = self.repo.existing_pairs(unique)
            created = [
                Unit(us_unit=us, metric_unit=metric)
                for us, metric in unique
                if (us, metric) not in known
            ]
            if created:
                self.repo.add_all(created)
        if created:
            self.log_info("units_registered", count=len(created))
        return created

    def register_from_ingredients(self, ingredients: Iterable[IngredientCreate]) -> List[Unit]:
        pairs = []
        for ingredient in ingredients:
            us = ingredient.measure(UnitSystem.US)
            metric = ingredient.measure(UnitSystem.METRIC)
            if us is not None and metric is not None:
                pairs.append((us.unit, metric.unit))
        return self.ensure_pairs(pairs)
