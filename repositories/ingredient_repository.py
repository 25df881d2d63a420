"""
Ingredient Repository - Data access for recipe ingredients and their measures
"""

from typing import List, Optional

from sqlalchemy.orm import Session

from repositories.ordered_repository import OrderedChildRepository
from domain.models import Recipe, Ingredient, IngredientMeasure


class IngredientRepository(OrderedChildRepository[Ingredient]):
    """Repository for ingredient data access"""

    parent_model = Recipe
    parent_key = "recipe_id"

    def __init__(self, db: Session):
        super().__init__(db, Ingredient)

    def get_measure(
        self, ingredient_id: int, unit_system: str
    ) -> Optional[IngredientMeasure]:
        """Get one measure of an ingredient by unit system"""
        return self.db.get(IngredientMeasure, (ingredient_id, unit_system))

    def get_by_ids_in_recipe(self, recipe_id: int, ids: List[int]) -> List[Ingredient]:
        if not ids:
            return []
        return (
            self.db.query(Ingredient)
            .filter(Ingredient.recipe_id == recipe_id, Ingredient.id.in_(ids))
            .all()
        )
