"""
Recipe aggregate service.

A recipe is stored as one row plus its ordered ingredients (each with a US and
a metric measure), its ordered instructions and its category links. This
service composes the ordinal sequencers, the measure synchronizer and the
category tree so every operation on the whole runs in one transaction.
"""

from datetime import datetime, timezone
import re
from typing import List, Optional, Protocol, Union

from sqlalchemy.orm import Session

from app.exceptions import NotFoundError, ServiceValidationError, UpstreamError
from domain.enums import RecipeOrderColumn
from domain.models import Ingredient, Instruction, Recipe
from domain.schemas import (
    FieldEdit,
    IngredientCreate,
    IngredientEditItem,
    MeasureEdit,
    RecipeCreate,
    RecipeSearchParams,
    RecipeUpdate,
)
from repositories import (
    IngredientRepository,
    InstructionRepository,
    RecipeRepository,
    UserRepository,
)
from services.base import BaseService
from services.category_tree import CategoryTree
from services.measure_synchronizer import MeasureSynchronizer, UnitConverter
from services.ordinal_sequencer import ingredient_sequencer, instruction_sequencer
from services.unit_service import UnitService

_ORDER_COLUMNS = {c.value for c in RecipeOrderColumn}
_CAMEL_BOUNDARY = re.compile(r"(?<!^)(?=[A-Z])")


class RecipeExtractor(Protocol):
    def extract_recipe(self, url: str) -> RecipeCreate: ...


def normalize_order_columns(names: List[str]) -> List[str]:
    """
    Map requested sort keys onto orderable columns.

    camelCase is accepted; unknown names are dropped; repeats keep their
    first position.
    """
    columns: List[str] = []
    for name in names:
        column = _CAMEL_BOUNDARY.sub("_", name.strip()).lower()
        if column in _ORDER_COLUMNS and column not in columns:
            columns.append(column)
    return columns


class RecipeAggregate(BaseService[RecipeRepository]):
    def __init__(
        self,
        db: Session,
        converter: Optional[UnitConverter] = None,
        extractor: Optional[RecipeExtractor] = None,
    ):
        super().__init__(db, "recipebox.recipes")
        self.repo = RecipeRepository(db)
        self.users = UserRepository(db)
        self.ingredient_repo = IngredientRepository(db)
        self.instruction_repo = InstructionRepository(db)
        self.categories = CategoryTree(db)
        self.units = UnitService(db)
        self.ingredients = ingredient_sequencer(db)
        self.instructions = instruction_sequencer(db)
        self.measures = MeasureSynchronizer(db, converter, self.ingredients)
        self.extractor = extractor

    # ------------------------------------------------------------------
    # Whole recipe
    # ------------------------------------------------------------------

    def create(self, username: str, data: RecipeCreate) -> Recipe:
        """
        Store a recipe with its ingredients, instructions and categories.

        Each classification list (cuisines, diets, courses, occasions) is
        attached under the matching default root, creating missing labels.
        """
        with self.transaction("create_recipe", username=username):
            if self.users.get_by_username(username) is None:
                raise NotFoundError(f"User {username} not found")

            recipe = self.repo.add(
                Recipe(
                    username=username,
                    title=data.title,
                    url=data.url,
                    source_name=data.source_name,
                    image=data.image,
                    servings=data.servings,
                    notes=data.notes,
                )
            )

            self.units.register_from_ingredients(data.ingredients)
            if data.instructions:
                self.instructions.append(recipe.id, list(data.instructions))
            if data.ingredients:
                self.ingredients.append(recipe.id, list(data.ingredients))

            root_ids = self.categories.get_default_category_ids(username)
            classified = (data.cuisines, data.diets, data.courses, data.occasions)
            for root_id, labels in zip(root_ids, classified):
                self.categories.create_and_link(username, recipe.id, labels, root_id)

        self.log_info(
            "recipe_created",
            username=username,
            recipe_id=recipe.id,
            ingredients=len(data.ingredients),
            instructions=len(data.instructions),
        )
        return self._load(recipe)

    def create_from_url(self, username: str, url: str) -> Recipe:
        """Extract a recipe from a web page and store it"""
        if self.extractor is None:
            raise UpstreamError("Recipe extraction is not configured")
        payload = self.extractor.extract_recipe(url)
        self.log_info("recipe_extracted", username=username, url=url)
        return self.create(username, payload)

    def get(self, username: str, recipe_id: int) -> Recipe:
        return self._load(self._require(username, recipe_id))

    def list_recipes(self, username: str) -> List[Recipe]:
        return self.repo.get_by_owner(username)

    def update(self, username: str, recipe_id: int, data: RecipeUpdate) -> Recipe:
        """
        Apply a partial update.

        A non-empty ``instructions`` list replaces all steps; ``ingredients``
        holds per-ingredient edits that must target this recipe's ingredients.
        """
        if not data.model_fields_set:
            raise ServiceValidationError("No fields to update")

        with self.transaction("update_recipe", username=username, recipe_id=recipe_id):
            recipe = self._require(username, recipe_id)

            for key, value in data.scalar_fields().items():
                if value is None and key in ("title", "servings"):
                    raise ServiceValidationError(f"{key} cannot be null")
                setattr(recipe, key, value)

            if data.instructions:
                self.instructions.replace_all(recipe.id, data.instructions)

            if data.ingredients:
                self._require_ingredients(recipe.id, [item.id for item in data.ingredients])
                self.measures.update_many(data.ingredients)

            self._touch(recipe_id)

        self.log_info("recipe_updated", username=username, recipe_id=recipe_id)
        return self._load(recipe)

    def remove(self, username: str, recipe_id: int) -> None:
        """Delete a recipe; children and category links cascade"""
        with self.transaction("remove_recipe", username=username, recipe_id=recipe_id):
            recipe = self._require(username, recipe_id)
            self.repo.delete(recipe)
        self.log_info("recipe_removed", username=username, recipe_id=recipe_id)

    def toggle_favorite(self, username: str, recipe_id: int) -> bool:
        with self.transaction("toggle_favorite", username=username, recipe_id=recipe_id):
            value = self.repo.toggle_favorite(username, recipe_id)
            if value is None:
                raise NotFoundError(f"Recipe {recipe_id} not found")
        self.log_info("favorite_toggled", recipe_id=recipe_id, is_favorite=value)
        return value

    def search(self, username: str, params: RecipeSearchParams) -> List[Recipe]:
        query = (params.query or "").strip() or None
        columns = normalize_order_columns(params.order_by)
        recipes = self.repo.search(username, query, columns, params.ascending)
        self.log_info(
            "recipe_search", username=username, query=query, results=len(recipes)
        )
        return recipes

    # ------------------------------------------------------------------
    # Ingredients
    # ------------------------------------------------------------------

    def get_ingredients(self, username: str, recipe_id: int) -> List[Ingredient]:
        self._require(username, recipe_id)
        return self.ingredients.get_all(recipe_id)

    def add_ingredients(
        self, username: str, recipe_id: int, items: List[IngredientCreate]
    ) -> List[Ingredient]:
        with self.transaction("add_ingredients", recipe_id=recipe_id, count=len(items)):
            self._require(username, recipe_id)
            self.units.register_from_ingredients(items)
            rows = self.ingredients.append(recipe_id, list(items))
            self._touch(recipe_id)
        return rows

    def replace_ingredients(
        self, username: str, recipe_id: int, items: List[IngredientCreate]
    ) -> List[Ingredient]:
        with self.transaction("replace_ingredients", recipe_id=recipe_id, count=len(items)):
            self._require(username, recipe_id)
            self.units.register_from_ingredients(items)
            rows = self.ingredients.replace_all(recipe_id, list(items))
            self._touch(recipe_id)
        return rows

    def update_ingredient(
        self,
        username: str,
        recipe_id: int,
        ingredient_id: int,
        edit: Union[FieldEdit, MeasureEdit],
    ) -> Ingredient:
        with self.transaction("update_ingredient", recipe_id=recipe_id, ingredient_id=ingredient_id):
            self._require(username, recipe_id)
            self._require_ingredients(recipe_id, [ingredient_id])
            ingredient = self.measures.update(ingredient_id, edit)
            self._touch(recipe_id)
        return ingredient

    def update_ingredients(
        self, username: str, recipe_id: int, items: List[IngredientEditItem]
    ) -> List[Ingredient]:
        with self.transaction("update_ingredients", recipe_id=recipe_id, count=len(items)):
            self._require(username, recipe_id)
            self._require_ingredients(recipe_id, [item.id for item in items])
            ingredients = self.measures.update_many(items)
            self._touch(recipe_id)
        return ingredients

    def remove_ingredient(self, username: str, recipe_id: int, ingredient_id: int) -> None:
        """Delete one ingredient and close the gap it leaves"""
        with self.transaction("remove_ingredient", recipe_id=recipe_id, ingredient_id=ingredient_id):
            self._require(username, recipe_id)
            self._require_ingredients(recipe_id, [ingredient_id])
            self.ingredients.remove(ingredient_id)
            self.ingredients.resequence(recipe_id)
            self._touch(recipe_id)

    # ------------------------------------------------------------------
    # Instructions
    # ------------------------------------------------------------------

    def get_instructions(self, username: str, recipe_id: int) -> List[Instruction]:
        self._require(username, recipe_id)
        return self.instructions.get_all(recipe_id)

    def add_instructions(self, username: str, recipe_id: int, steps: List[str]) -> List[Instruction]:
        with self.transaction("add_instructions", recipe_id=recipe_id, count=len(steps)):
            self._require(username, recipe_id)
            rows = self.instructions.append(recipe_id, list(steps))
            self._touch(recipe_id)
        return rows

    def replace_instructions(
        self, username: str, recipe_id: int, steps: List[str]
    ) -> List[Instruction]:
        with self.transaction("replace_instructions", recipe_id=recipe_id, count=len(steps)):
            self._require(username, recipe_id)
            rows = self.instructions.replace_all(recipe_id, list(steps))
            self._touch(recipe_id)
        return rows

    def move_instruction(
        self, username: str, recipe_id: int, instruction_id: int, ordinal: int
    ) -> List[Instruction]:
        with self.transaction("move_instruction", recipe_id=recipe_id, instruction_id=instruction_id):
            self._require(username, recipe_id)
            self._require_instruction(recipe_id, instruction_id)
            rows = self.instructions.move(instruction_id, ordinal)
            self._touch(recipe_id)
        return rows

    def remove_instruction(self, username: str, recipe_id: int, instruction_id: int) -> None:
        """Delete one step and close the gap it leaves"""
        with self.transaction("remove_instruction", recipe_id=recipe_id, instruction_id=instruction_id):
            self._require(username, recipe_id)
            self._require_instruction(recipe_id, instruction_id)
            self.instructions.remove(instruction_id)
            self.instructions.resequence(recipe_id)
            self._touch(recipe_id)

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def _require(self, username: str, recipe_id: int) -> Recipe:
        recipe = self.repo.get_for_owner(username, recipe_id)
        if recipe is None:
            raise NotFoundError(f"Recipe {recipe_id} not found")
        return recipe

    def _require_ingredients(self, recipe_id: int, ids: List[int]) -> None:
        found = {i.id for i in self.ingredient_repo.get_by_ids_in_recipe(recipe_id, ids)}
        missing = [i for i in ids if i not in found]
        if missing:
            raise NotFoundError(
                f"Ingredient not found in recipe {recipe_id}",
                details={"ingredient_ids": missing},
            )

    def _require_instruction(self, recipe_id: int, instruction_id: int) -> Instruction:
        row = self.instruction_repo.get_in_parent(recipe_id, instruction_id)
        if row is None:
            raise NotFoundError(f"Instruction {instruction_id} not found in recipe {recipe_id}")
        return row

    def _touch(self, recipe_id: int) -> None:
        recipe = self.repo.get_by_id(recipe_id)
        recipe.edited_at = datetime.now(timezone.utc)
        self.db.flush()

    def _load(self, recipe: Recipe) -> Recipe:
        # Child rows may have been changed by bulk statements
        self.db.expire(recipe)
        return recipe
