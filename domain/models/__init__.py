"""
Domain models package - SQLAlchemy ORM models.
"""

from domain.models.database import Base, Database, get_db_session
from domain.models.user import AppUser
from domain.models.recipe import (
    Recipe,
    Ingredient,
    IngredientMeasure,
    Instruction,
    Unit,
)
from domain.models.category import Category, RecipeCategory

__all__ = [
    # Database
    "Base",
    "Database",
    "get_db_session",
    # User models
    "AppUser",
    # Recipe models
    "Recipe",
    "Ingredient",
    "IngredientMeasure",
    "Instruction",
    "Unit",
    # Category models
    "Category",
    "RecipeCategory",
]
