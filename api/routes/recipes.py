"""Recipe routes: whole recipes plus their ingredient and instruction lists"""

from fastapi import APIRouter, Depends, Query, status
import logging
from typing import List, Optional

from domain.schemas import (
    FavoriteToggleResponse,
    IngredientCreate,
    IngredientEditBody,
    IngredientEditItem,
    IngredientResponse,
    InstructionMove,
    InstructionResponse,
    InstructionsAppend,
    InstructionsReplace,
    RecipeCreate,
    RecipeImportRequest,
    RecipeResponse,
    RecipeSearchParams,
    RecipeSummary,
    RecipeUpdate,
)
from domain.mappers import RecipeMapper
from services import RecipeAggregate
from api.dependencies import get_recipe_service

router = APIRouter(prefix="/users/{username}/recipes", tags=["Recipes"])
logger = logging.getLogger("recipebox.api.recipes")


# ============================================================================
# Recipes
# ============================================================================


@router.post("", response_model=RecipeResponse, status_code=status.HTTP_201_CREATED)
def create_recipe(
    username: str,
    payload: RecipeCreate,
    service: RecipeAggregate = Depends(get_recipe_service),
):
    return RecipeMapper.to_response(service.create(username, payload))


@router.post(
    "/import", response_model=RecipeResponse, status_code=status.HTTP_201_CREATED
)
def import_recipe(
    username: str,
    payload: RecipeImportRequest,
    service: RecipeAggregate = Depends(get_recipe_service),
):
    """Create a recipe from a web page through the extraction service"""
    return RecipeMapper.to_response(service.create_from_url(username, payload.url))


@router.get("", response_model=List[RecipeSummary])
def search_recipes(
    username: str,
    q: Optional[str] = Query(default=None, description="Matches title, source, categories and ingredients"),
    order_by: List[str] = Query(default=[]),
    ascending: bool = False,
    service: RecipeAggregate = Depends(get_recipe_service),
):
    params = RecipeSearchParams(query=q, order_by=order_by, ascending=ascending)
    return [RecipeMapper.to_summary(r) for r in service.search(username, params)]


@router.get("/{recipe_id}", response_model=RecipeResponse)
def get_recipe(
    username: str,
    recipe_id: int,
    service: RecipeAggregate = Depends(get_recipe_service),
):
    return RecipeMapper.to_response(service.get(username, recipe_id))


@router.patch("/{recipe_id}", response_model=RecipeResponse)
def update_recipe(
    username: str,
    recipe_id: int,
    payload: RecipeUpdate,
    service: RecipeAggregate = Depends(get_recipe_service),
):
    return RecipeMapper.to_response(service.update(username, recipe_id, payload))


@router.delete("/{recipe_id}")
def delete_recipe(
    username: str,
    recipe_id: int,
    service: RecipeAggregate = Depends(get_recipe_service),
):
    service.remove(username, recipe_id)
    return {"status": "ok", "deleted": recipe_id}


@router.post("/{recipe_id}/favorite", response_model=FavoriteToggleResponse)
def toggle_favorite(
    username: str,
    recipe_id: int,
    service: RecipeAggregate = Depends(get_recipe_service),
):
    value = service.toggle_favorite(username, recipe_id)
    return FavoriteToggleResponse(id=recipe_id, is_favorite=value)


# ============================================================================
# Ingredients
# ============================================================================


@router.get("/{recipe_id}/ingredients", response_model=List[IngredientResponse])
def list_ingredients(
    username: str,
    recipe_id: int,
    service: RecipeAggregate = Depends(get_recipe_service),
):
    return RecipeMapper.ingredients_to_response(service.get_ingredients(username, recipe_id))


@router.post(
    "/{recipe_id}/ingredients",
    response_model=List[IngredientResponse],
    status_code=status.HTTP_201_CREATED,
)
def add_ingredients(
    username: str,
    recipe_id: int,
    items: List[IngredientCreate],
    service: RecipeAggregate = Depends(get_recipe_service),
):
    rows = service.add_ingredients(username, recipe_id, items)
    return RecipeMapper.ingredients_to_response(rows)


@router.put("/{recipe_id}/ingredients", response_model=List[IngredientResponse])
def replace_ingredients(
    username: str,
    recipe_id: int,
    items: List[IngredientCreate],
    service: RecipeAggregate = Depends(get_recipe_service),
):
    rows = service.replace_ingredients(username, recipe_id, items)
    return RecipeMapper.ingredients_to_response(rows)


@router.patch("/{recipe_id}/ingredients", response_model=List[IngredientResponse])
def update_ingredients(
    username: str,
    recipe_id: int,
    items: List[IngredientEditItem],
    service: RecipeAggregate = Depends(get_recipe_service),
):
    """Edit several ingredients at once; all edits apply or none do"""
    rows = service.update_ingredients(username, recipe_id, items)
    return RecipeMapper.ingredients_to_response(rows)


@router.patch(
    "/{recipe_id}/ingredients/{ingredient_id}", response_model=IngredientResponse
)
def update_ingredient(
    username: str,
    recipe_id: int,
    ingredient_id: int,
    edit: IngredientEditBody,
    service: RecipeAggregate = Depends(get_recipe_service),
):
    """
    Edit one ingredient. A body with ``measure`` also recomputes the other
    unit system's amount when the ingredient has a base food.
    """
    row = service.update_ingredient(username, recipe_id, ingredient_id, edit.root)
    return RecipeMapper.ingredient_to_response(row)


@router.delete("/{recipe_id}/ingredients/{ingredient_id}")
def delete_ingredient(
    username: str,
    recipe_id: int,
    ingredient_id: int,
    service: RecipeAggregate = Depends(get_recipe_service),
):
    service.remove_ingredient(username, recipe_id, ingredient_id)
    return {"status": "ok", "deleted": ingredient_id}


# ============================================================================
# Instructions
# ============================================================================


@router.get("/{recipe_id}/instructions", response_model=List[InstructionResponse])
def list_instructions(
    username: str,
    recipe_id: int,
    service: RecipeAggregate = Depends(get_recipe_service),
):
    return service.get_instructions(username, recipe_id)


@router.post(
    "/{recipe_id}/instructions",
    response_model=List[InstructionResponse],
    status_code=status.HTTP_201_CREATED,
)
def add_instructions(
    username: str,
    recipe_id: int,
    payload: InstructionsAppend,
    service: RecipeAggregate = Depends(get_recipe_service),
):
    return service.add_instructions(username, recipe_id, payload.steps)


@router.put("/{recipe_id}/instructions", response_model=List[InstructionResponse])
def replace_instructions(
    username: str,
    recipe_id: int,
    payload: InstructionsReplace,
    service: RecipeAggregate = Depends(get_recipe_service),
):
    return service.replace_instructions(username, recipe_id, payload.steps)


@router.patch(
    "/{recipe_id}/instructions/{instruction_id}",
    response_model=List[InstructionResponse],
)
def move_instruction(
    username: str,
    recipe_id: int,
    instruction_id: int,
    payload: InstructionMove,
    service: RecipeAggregate = Depends(get_recipe_service),
):
    return service.move_instruction(username, recipe_id, instruction_id, payload.ordinal)


@router.delete("/{recipe_id}/instructions/{instruction_id}")
def delete_instruction(
    username: str,
    recipe_id: int,
    instruction_id: int,
    service: RecipeAggregate = Depends(get_recipe_service),
):
    service.remove_instruction(username, recipe_id, instruction_id)
    return {"status": "ok", "deleted": instruction_id}
