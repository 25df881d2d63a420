"""
Recipe Repository - Data access layer for recipe rows
"""

from datetime import datetime, timezone
from typing import List, Optional, Sequence

from sqlalchemy import exists, not_, or_, update
from sqlalchemy.orm import Session

from repositories.base import BaseRepository
from domain.models import Recipe, Ingredient, Category, RecipeCategory


def _like_pattern(text: str) -> str:
    escaped = text.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")
    return f"%{escaped}%"


class RecipeRepository(BaseRepository[Recipe]):
    """Repository for recipe data access"""

    def __init__(self, db: Session):
        super().__init__(db, Recipe)

    def get_for_owner(self, username: str, recipe_id: int) -> Optional[Recipe]:
        """Get recipe by ID for a specific owner (authorization check)"""
        return (
            self.db.query(Recipe)
            .filter(Recipe.id == recipe_id, Recipe.username == username)
            .first()
        )

    def get_by_owner(self, username: str) -> List[Recipe]:
        return (
            self.db.query(Recipe)
            .filter(Recipe.username == username)
            .order_by(Recipe.id)
            .all()
        )

    def toggle_favorite(self, username: str, recipe_id: int) -> Optional[bool]:
        """
        Negate ``is_favorite`` in place for exactly one recipe and stamp
        ``edited_at`` like any other edit.

        Returns the new value, or None when no recipe matched.
        """
        result = self.db.execute(
            update(Recipe)
            .where(Recipe.id == recipe_id, Recipe.username == username)
            .values(
                is_favorite=not_(Recipe.is_favorite),
                edited_at=datetime.now(timezone.utc),
            )
            .execution_options(synchronize_session="fetch")
        )
        if result.rowcount == 0:
            return None
        return (
            self.db.query(Recipe.is_favorite).filter(Recipe.id == recipe_id).scalar()
        )

    def search(
        self,
        username: str,
        query: Optional[str] = None,
        order_columns: Sequence[str] = (),
        ascending: bool = False,
    ) -> List[Recipe]:
        """
        Case-insensitive partial match over title, source name, linked
        category labels and ingredient labels.

        ``order_columns`` must already be restricted to real column names.
        Each recipe appears once no matter how many of its parts match.
        """
        q = self.db.query(Recipe).filter(Recipe.username == username)

        if query:
            pattern = _like_pattern(query)
            category_match = exists().where(
                RecipeCategory.recipe_id == Recipe.id,
                RecipeCategory.category_id == Category.id,
                Category.label.ilike(pattern, escape="\\"),
            )
            ingredient_match = exists().where(
                Ingredient.recipe_id == Recipe.id,
                Ingredient.label.ilike(pattern, escape="\\"),
            )
            q = q.filter(
                or_(
                    Recipe.title.ilike(pattern, escape="\\"),
                    Recipe.source_name.ilike(pattern, escape="\\"),
                    category_match,
                    ingredient_match,
                )
            )

        for name in order_columns:
            column = getattr(Recipe, name)
            q = q.order_by(column.asc() if ascending else column.desc())

        return q.order_by(Recipe.id).all()
