"""
Ordinal sequencing for ordered child rows of a recipe.

Every ingredient and instruction carries an ``ordinal``; within one recipe the
ordinals of a collection are expected to be 1..N without gaps. The sequencer
holds the algorithms that keep them that way and is configured per child
table with a repository, a row factory and a column-value extractor.
"""

from typing import Any, Callable, Dict, List, Optional, Union

from sqlalchemy.orm import Session

from app.exceptions import NotFoundError
from domain.models import Ingredient, IngredientMeasure, Instruction
from repositories import IngredientRepository, InstructionRepository, OrderedChildRepository
from services.base import BaseService

RowFactory = Callable[[Any, int, Any], Any]
ValueExtractor = Callable[[Any], Dict[str, Any]]
ChildSync = Callable[[Session, Any, Any], None]


class OrdinalSequencer(BaseService[OrderedChildRepository]):
    """Append, replace, move and compact ordered rows of one parent"""

    def __init__(
        self,
        db: Session,
        repository: OrderedChildRepository,
        build_row: RowFactory,
        values_of: ValueExtractor,
        sync_children: Optional[ChildSync] = None,
        logger_name: str = "recipebox.ordinals",
    ):
        super().__init__(db, logger_name)
        self.repo = repository
        self.build_row = build_row
        self.values_of = values_of
        self.sync_children = sync_children

    def count(self, parent_id: Any) -> int:
        return self.repo.count(parent_id)

    def get_all(self, parent_id: Any) -> List[Any]:
        return self.repo.get_all_for_parent(parent_id)

    def append(self, parent_id: Any, items: Union[Any, List[Any]]):
        """
        Add ``items`` after the current last row, in input order.

        A single item returns a single row; a list returns a list.
        """
        single = not isinstance(items, list)
        batch = [items] if single else items
        if not batch:
            return []

        with self.transaction("append", parent_id=parent_id, count=len(batch)):
            if self.repo.lock_parent(parent_id) is None:
                raise NotFoundError(f"Parent {parent_id} not found")

            start = self.repo.count(parent_id) + 1
            rows = [
                self.build_row(parent_id, start + offset, item)
                for offset, item in enumerate(batch)
            ]
            self.repo.add_all(rows)

        self.log_info("append", parent_id=parent_id, start=start, count=len(rows))
        return rows[0] if single else rows

    def replace_all(self, parent_id: Any, items: List[Any]) -> List[Any]:
        """
        Make the collection equal to ``items``.

        Overlapping positions are overwritten in place so their ids survive;
        the tail is appended or deleted depending on which list is longer.
        """
        with self.transaction("replace_all", parent_id=parent_id, count=len(items)):
            if self.repo.lock_parent(parent_id) is None:
                raise NotFoundError(f"Parent {parent_id} not found")

            existing = self.repo.get_all_for_parent(parent_id)
            overlap = min(len(existing), len(items))

            updates = []
            for position in range(overlap):
                row, item = existing[position], items[position]
                updates.append({"id": row.id, "ordinal": position + 1, **self.values_of(item)})
            self.repo.bulk_update(updates)

            if self.sync_children is not None:
                for position in range(overlap):
                    self.sync_children(self.db, existing[position].id, items[position])

            if len(items) > len(existing):
                start = len(existing) + 1
                tail = [
                    self.build_row(parent_id, start + offset, item)
                    for offset, item in enumerate(items[overlap:])
                ]
                self.repo.add_all(tail)
            elif len(items) < len(existing):
                self.repo.delete_ids(row.id for row in existing[overlap:])

            result = self.repo.get_all_for_parent(parent_id)

        self.log_info(
            "replace_all", parent_id=parent_id, before=len(existing), after=len(items)
        )
        return result

    def remove(self, child_id: Any):
        """Delete one row; the remaining ordinals are left as they are"""
        with self.transaction("remove", child_id=child_id):
            row = self.repo.get_by_id(child_id)
            if row is None:
                raise NotFoundError(f"{self.repo.model.__name__} {child_id} not found")
            self.repo.delete(row)
        return row

    def resequence(self, parent_id: Any) -> List[Any]:
        """Compact ordinals to 1..N keeping the current order"""
        with self.transaction("resequence", parent_id=parent_id):
            rows = self.repo.get_all_for_parent(parent_id)
            self._write_order(rows)
            return self.repo.get_all_for_parent(parent_id)

    def move(self, child_id: Any, new_ordinal: int) -> List[Any]:
        """
        Put one row at ``new_ordinal`` and shift its siblings around it.

        The target is clamped to 1..N. Returns the parent's rows in their
        new order.
        """
        with self.transaction("move", child_id=child_id, ordinal=new_ordinal):
            row = self.repo.get_by_id(child_id)
            if row is None:
                raise NotFoundError(f"{self.repo.model.__name__} {child_id} not found")

            parent_id = self.repo.parent_id_of(row)
            siblings = self.repo.get_all_for_parent(parent_id)
            target = max(1, min(new_ordinal, len(siblings)))

            ordered = [s for s in siblings if s.id != row.id]
            ordered.insert(target - 1, row)
            self._write_order(ordered)
            result = self.repo.get_all_for_parent(parent_id)

        self.log_info("move", child_id=child_id, ordinal=target)
        return result

    def _write_order(self, rows: List[Any]) -> None:
        changes = [
            {"id": row.id, "ordinal": position}
            for position, row in enumerate(rows, start=1)
            if row.ordinal != position
        ]
        self.repo.bulk_update(changes)


# =============================================================================
# Configured sequencers
# =============================================================================


def _measure_rows(ingredient_id, item) -> List[IngredientMeasure]:
    return [
        IngredientMeasure(
            ingredient_id=ingredient_id,
            unit_system=m.unit_system.value,
            amount=m.amount,
            unit=m.unit,
        )
        for m in item.measures
    ]


def _build_ingredient(recipe_id: int, ordinal: int, item) -> Ingredient:
    ingredient = Ingredient(
        recipe_id=recipe_id,
        label=item.label,
        base_food=item.base_food or None,
        ordinal=ordinal,
    )
    ingredient.measures = _measure_rows(None, item)
    return ingredient


def _ingredient_values(item) -> Dict[str, Any]:
    return {"label": item.label, "base_food": item.base_food or None}


def _replace_measures(db: Session, ingredient_id: int, item) -> None:
    ingredient = db.get(Ingredient, ingredient_id)
    current = {m.unit_system: m for m in ingredient.measures}
    wanted = {m.unit_system.value: m for m in item.measures}

    for system, row in current.items():
        if system not in wanted:
            ingredient.measures.remove(row)
    for system, measure in wanted.items():
        row = current.get(system)
        if row is None:
            ingredient.measures.append(
                IngredientMeasure(unit_system=system, amount=measure.amount, unit=measure.unit)
            )
        else:
            row.amount = measure.amount
            row.unit = measure.unit
    db.flush()


def _build_instruction(recipe_id: int, ordinal: int, step: str) -> Instruction:
    return Instruction(recipe_id=recipe_id, ordinal=ordinal, step=step)


def _instruction_values(step: str) -> Dict[str, Any]:
    return {"step": step}


def ingredient_sequencer(db: Session) -> OrdinalSequencer:
    """Sequencer over a recipe's ingredients; items are IngredientCreate"""
    return OrdinalSequencer(
        db,
        IngredientRepository(db),
        _build_ingredient,
        _ingredient_values,
        sync_children=_replace_measures,
        logger_name="recipebox.ingredients",
    )


def instruction_sequencer(db: Session) -> OrdinalSequencer:
    """Sequencer over a recipe's instructions; items are step strings"""
    return OrdinalSequencer(
        db,
        InstructionRepository(db),
        _build_instruction,
        _instruction_values,
        logger_name="recipebox.instructions",
    )
