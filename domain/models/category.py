"""
Category tree and recipe-category association models.
"""

from sqlalchemy import (
    Column,
    Integer,
    String,
    ForeignKey,
    CheckConstraint,
    UniqueConstraint,
    Index,
)
from sqlalchemy.orm import relationship

from domain.models.database import Base


class Category(Base):
    """Labeled node in a user's category forest"""

    __tablename__ = "categories"

    id = Column(Integer, primary_key=True, autoincrement=True)
    username = Column(
        String(25),
        ForeignKey("users.username", ondelete="CASCADE"),
        nullable=False,
    )
    label = Column(String(25), nullable=False)
    parent_id = Column(Integer, ForeignKey("categories.id", ondelete="CASCADE"))

    owner = relationship("AppUser", back_populates="categories")

    __table_args__ = (
        CheckConstraint("parent_id <> id", name="ck_categories_not_own_parent"),
        CheckConstraint("label = lower(label)", name="ck_categories_label_lower"),
        # NULL parent_id values are distinct, so root uniqueness is enforced in CategoryTree
        UniqueConstraint("username", "parent_id", "label", name="uq_categories_sibling_label"),
        Index("ix_categories_username_parent", "username", "parent_id"),
    )


class RecipeCategory(Base):
    """Link between a recipe and a category"""

    __tablename__ = "recipes_categories"

    recipe_id = Column(
        Integer, ForeignKey("recipes.id", ondelete="CASCADE"), primary_key=True
    )
    category_id = Column(
        Integer, ForeignKey("categories.id", ondelete="CASCADE"), primary_key=True
    )

    __table_args__ = (Index("ix_recipes_categories_category", "category_id"),)
