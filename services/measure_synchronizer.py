"""
Keeps an ingredient's US and metric measures consistent.

When one measure is edited and the ingredient names a base food, the other
measure's amount is recomputed through the conversion service; its unit is
kept. Without a base food only the edited measure changes.
"""

from typing import List, Optional, Protocol, Union

from sqlalchemy.orm import Session

from app.exceptions import NotFoundError, ServiceValidationError, UpstreamError
from domain.models import Ingredient
from domain.schemas import FieldEdit, IngredientEditItem, MeasureEdit, MeasurePatch
from repositories import IngredientRepository
from services.base import BaseService
from services.ordinal_sequencer import OrdinalSequencer, ingredient_sequencer


class UnitConverter(Protocol):
    """Anything that can convert an amount of a food between two units"""

    def convert(
        self, base_food: str, amount: float, source_unit: str, target_unit: str
    ) -> float: ...


class MeasureSynchronizer(BaseService[IngredientRepository]):
    def __init__(
        self,
        db: Session,
        converter: Optional[UnitConverter],
        sequencer: Optional[OrdinalSequencer] = None,
    ):
        super().__init__(db, "recipebox.measures")
        self.repo = IngredientRepository(db)
        self.converter = converter
        self.sequencer = sequencer or ingredient_sequencer(db)

    def update(self, ingredient_id: int, edit: Union[FieldEdit, MeasureEdit]) -> Ingredient:
        """
        Apply one edit to an ingredient and return it with both measures.

        Raises:
            NotFoundError: ingredient or addressed measure does not exist
            ServiceValidationError: measure edit without a unit system
            UpstreamError: the conversion service failed; nothing is kept
        """
        with self.transaction("update_ingredient", ingredient_id=ingredient_id):
            ingredient = self.repo.get_by_id(ingredient_id)
            if ingredient is None:
                raise NotFoundError(f"Ingredient {ingredient_id} not found")

            fields = edit.model_dump(exclude_unset=True, include={"label", "base_food"})
            for key, value in fields.items():
                setattr(ingredient, key, value)

            if edit.kind == "measure":
                self._apply_measure(ingredient, edit.measure)

            self.db.flush()

            if edit.ordinal is not None:
                self.sequencer.move(ingredient.id, edit.ordinal)

            self.db.refresh(ingredient)
        return ingredient

    def update_many(self, items: List[IngredientEditItem]) -> List[Ingredient]:
        """Apply a batch of edits in order, all or nothing"""
        with self.transaction("update_ingredients", count=len(items)):
            return [self.update(item.id, item.data) for item in items]

    def _apply_measure(self, ingredient: Ingredient, patch: MeasurePatch) -> None:
        if patch.unit_system is None:
            raise ServiceValidationError(
                "Measure edit requires a unit system",
                details={"ingredient_id": ingredient.id},
            )

        measure = self.repo.get_measure(ingredient.id, patch.unit_system.value)
        if measure is None:
            raise NotFoundError(
                f"No {patch.unit_system.value} measure for ingredient {ingredient.id}"
            )

        changes = patch.model_dump(exclude_unset=True, exclude={"unit_system"})
        for key, value in changes.items():
            if value is not None:
                setattr(measure, key, value)

        if not ingredient.base_food:
            return

        other = self.repo.get_measure(ingredient.id, patch.unit_system.other.value)
        if other is None:
            self.log_warning(
                "measure_sync skipped", ingredient_id=ingredient.id, reason="no_target"
            )
            return

        if self.converter is None:
            raise UpstreamError("Unit conversion is not configured")

        other.amount = self.converter.convert(
            ingredient.base_food, measure.amount, measure.unit, other.unit
        )
        self.log_info(
            "measure_sync",
            ingredient_id=ingredient.id,
            source=f"{measure.amount}{measure.unit}",
            target=f"{other.amount}{other.unit}",
        )
