"""
Category Repository - Data access for category trees and recipe links
"""

from typing import List, Optional

from sqlalchemy.orm import Session

from repositories.base import BaseRepository
from domain.models import Category, RecipeCategory


class CategoryRepository(BaseRepository[Category]):
    """Repository for category data access"""

    def __init__(self, db: Session):
        super().__init__(db, Category)

    def get_for_owner(self, username: str, category_id: int) -> Optional[Category]:
        return (
            self.db.query(Category)
            .filter(Category.id == category_id, Category.username == username)
            .first()
        )

    def get_by_owner(self, username: str) -> List[Category]:
        """Every category of a user, ordered by id"""
        return (
            self.db.query(Category)
            .filter(Category.username == username)
            .order_by(Category.id)
            .all()
        )

    def get_roots(self, username: str) -> List[Category]:
        return (
            self.db.query(Category)
            .filter(Category.username == username, Category.parent_id.is_(None))
            .order_by(Category.id)
            .all()
        )

    def get_children(self, username: str, parent_id: int) -> List[Category]:
        return (
            self.db.query(Category)
            .filter(Category.username == username, Category.parent_id == parent_id)
            .order_by(Category.id)
            .all()
        )

    def get_child_ids(self, category_id: int) -> List[int]:
        rows = (
            self.db.query(Category.id)
            .filter(Category.parent_id == category_id)
            .order_by(Category.id)
            .all()
        )
        return [row.id for row in rows]

    def find_sibling(
        self,
        username: str,
        parent_id: Optional[int],
        label: str,
        exclude_id: Optional[int] = None,
    ) -> Optional[Category]:
        """
        Find a category with ``label`` under ``parent_id``.

        A None parent searches the owner's root level, which the table's
        unique constraint cannot cover since NULLs compare distinct.
        """
        q = self.db.query(Category).filter(
            Category.username == username, Category.label == label
        )
        if parent_id is None:
            q = q.filter(Category.parent_id.is_(None))
        else:
            q = q.filter(Category.parent_id == parent_id)
        if exclude_id is not None:
            q = q.filter(Category.id != exclude_id)
        return q.first()

    # ------------------------------------------------------------------
    # Recipe links
    # ------------------------------------------------------------------

    def get_link(self, category_id: int, recipe_id: int) -> Optional[RecipeCategory]:
        return self.db.get(RecipeCategory, (recipe_id, category_id))

    def get_recipe_ids(self, category_id: int) -> List[int]:
        rows = (
            self.db.query(RecipeCategory.recipe_id)
            .filter(RecipeCategory.category_id == category_id)
            .order_by(RecipeCategory.recipe_id)
            .all()
        )
        return [row.recipe_id for row in rows]

    def add_link(self, category_id: int, recipe_id: int) -> RecipeCategory:
        link = RecipeCategory(recipe_id=recipe_id, category_id=category_id)
        self.db.add(link)
        self.db.flush()
        return link
