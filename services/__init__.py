"""Services package - Business logic layer"""

from services.base import BaseService
from services.ordinal_sequencer import (
    OrdinalSequencer,
    ingredient_sequencer,
    instruction_sequencer,
)
from services.measure_synchronizer import MeasureSynchronizer, UnitConverter
from services.category_tree import CategoryTree
from services.unit_service import UnitService
from services.user_service import UserService
from services.recipe_aggregate import RecipeAggregate, normalize_order_columns

__all__ = [
    "BaseService",
    "OrdinalSequencer",
    "ingredient_sequencer",
    "instruction_sequencer",
    "MeasureSynchronizer",
    "UnitConverter",
    "CategoryTree",
    "UnitService",
    "UserService",
    "RecipeAggregate",
    "normalize_order_columns",
]
