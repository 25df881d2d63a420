"""
Repositories package - Data access layer.
"""

from repositories.base import BaseRepository
from repositories.ordered_repository import OrderedChildRepository
from repositories.user_repository import UserRepository
from repositories.recipe_repository import RecipeRepository
from repositories.ingredient_repository import IngredientRepository
from repositories.instruction_repository import InstructionRepository
from repositories.category_repository import CategoryRepository
from repositories.unit_repository import UnitRepository

__all__ = [
    "BaseRepository",
    "OrderedChildRepository",
    "UserRepository",
    "RecipeRepository",
    "IngredientRepository",
    "InstructionRepository",
    "CategoryRepository",
    "UnitRepository",
]
