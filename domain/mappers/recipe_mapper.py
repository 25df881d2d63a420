"""
Recipe domain mappers.
Handles transformation between recipe ORM models and response DTOs.
"""

from typing import List

from domain.enums import UnitSystem
from domain.models import Ingredient, Recipe
from domain.schemas.recipe_schemas import (
    IngredientMeasures,
    IngredientResponse,
    InstructionResponse,
    MeasureResponse,
    RecipeResponse,
    RecipeSummary,
)


class RecipeMapper:
    """Mapper for recipe-related transformations."""

    @staticmethod
    def ingredient_to_response(ingredient: Ingredient) -> IngredientResponse:
        """
        Convert an Ingredient with its measures to IngredientResponse.

        Measures are keyed by unit system; a missing one maps to None.
        """
        measures = {}
        for system in UnitSystem:
            measure = ingredient.measure_for(system)
            if measure is not None:
                measures[system.value] = MeasureResponse.model_validate(measure)

        return IngredientResponse(
            id=ingredient.id,
            recipe_id=ingredient.recipe_id,
            label=ingredient.label,
            base_food=ingredient.base_food,
            ordinal=ingredient.ordinal,
            measures=IngredientMeasures(**measures),
        )

    @staticmethod
    def ingredients_to_response(ingredients: List[Ingredient]) -> List[IngredientResponse]:
        return [RecipeMapper.ingredient_to_response(i) for i in ingredients]

    @staticmethod
    def to_summary(recipe: Recipe) -> RecipeSummary:
        return RecipeSummary.model_validate(recipe)

    @staticmethod
    def to_response(recipe: Recipe) -> RecipeResponse:
        """
        Convert a Recipe ORM model to RecipeResponse DTO.

        Args:
            recipe: Recipe ORM instance; child collections load on access

        Returns:
            RecipeResponse with ordered ingredients and instructions and the
            ids of linked categories
        """
        return RecipeResponse(
            id=recipe.id,
            username=recipe.username,
            title=recipe.title,
            url=recipe.url,
            source_name=recipe.source_name,
            image=recipe.image,
            servings=recipe.servings,
            notes=recipe.notes,
            is_favorite=recipe.is_favorite,
            created_at=recipe.created_at,
            edited_at=recipe.edited_at,
            ingredients=RecipeMapper.ingredients_to_response(recipe.ingredients),
            instructions=[
                InstructionResponse.model_validate(step) for step in recipe.instructions
            ],
            category_ids=[category.id for category in recipe.categories],
        )
