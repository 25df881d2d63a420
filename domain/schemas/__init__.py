"""
Domain schemas package - Pydantic models for validation.
"""

from domain.schemas.recipe_schemas import (
    MeasureCreate,
    IngredientCreate,
    RecipeCreate,
    RecipeImportRequest,
    MeasurePatch,
    FieldEdit,
    MeasureEdit,
    SingleUpdate,
    IngredientEditItem,
    BatchUpdate,
    IngredientEditBody,
    RecipeUpdate,
    RecipeSearchParams,
    InstructionsAppend,
    InstructionsReplace,
    InstructionMove,
    MeasureResponse,
    IngredientResponse,
    InstructionResponse,
    RecipeSummary,
    RecipeResponse,
    FavoriteToggleResponse,
)
from domain.schemas.category_schemas import (
    CategoryCreate,
    CategoryUpdate,
    RecipeLinkRequest,
    CategoryResponse,
    CategoryDetail,
    CategoryNode,
)
from domain.schemas.user_schemas import UserCreate, UserResponse

__all__ = [
    # Recipe schemas
    "MeasureCreate",
    "IngredientCreate",
    "RecipeCreate",
    "RecipeImportRequest",
    "MeasurePatch",
    "FieldEdit",
    "MeasureEdit",
    "SingleUpdate",
    "IngredientEditItem",
    "BatchUpdate",
    "IngredientEditBody",
    "RecipeUpdate",
    "RecipeSearchParams",
    "InstructionsAppend",
    "InstructionsReplace",
    "InstructionMove",
    "MeasureResponse",
    "IngredientResponse",
    "InstructionResponse",
    "RecipeSummary",
    "RecipeResponse",
    "FavoriteToggleResponse",
    # Category schemas
    "CategoryCreate",
    "CategoryUpdate",
    "RecipeLinkRequest",
    "CategoryResponse",
    "CategoryDetail",
    "CategoryNode",
    # User schemas
    "UserCreate",
    "UserResponse",
]
