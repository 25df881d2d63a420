"""
Instruction Repository - Data access for recipe preparation steps
"""

from sqlalchemy.orm import Session

from repositories.ordered_repository import OrderedChildRepository
from domain.models import Recipe, Instruction


class InstructionRepository(OrderedChildRepository[Instruction]):
    """Repository for instruction data access"""

    parent_model = Recipe
    parent_key = "recipe_id"

    def __init__(self, db: Session):
        super().__init__(db, Instruction)
