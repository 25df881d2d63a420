"""
Recipe aggregate models: recipes and their ordered ingredients and instructions.
"""

from sqlalchemy import (
    Column,
    Integer,
    SmallInteger,
    String,
    Text,
    Boolean,
    Numeric,
    TIMESTAMP,
    ForeignKey,
    CheckConstraint,
    UniqueConstraint,
    Index,
)
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func, false

from domain.models.database import Base


class Recipe(Base):
    """User-owned recipe"""

    __tablename__ = "recipes"

    id = Column(Integer, primary_key=True, autoincrement=True)
    username = Column(
        String(25),
        ForeignKey("users.username", ondelete="CASCADE"),
        nullable=False,
    )
    title = Column(Text, nullable=False)
    url = Column(Text)
    source_name = Column(Text)
    image = Column(Text)
    servings = Column(SmallInteger, nullable=False, default=1, server_default="1")
    notes = Column(Text)
    edited_at = Column(TIMESTAMP(timezone=True))
    created_at = Column(
        TIMESTAMP(timezone=True), nullable=False, server_default=func.now()
    )
    is_favorite = Column(Boolean, nullable=False, default=False, server_default=false())

    owner = relationship("AppUser", back_populates="recipes")
    ingredients = relationship(
        "Ingredient",
        back_populates="recipe",
        order_by="Ingredient.ordinal",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )
    instructions = relationship(
        "Instruction",
        back_populates="recipe",
        order_by="Instruction.ordinal",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )
    categories = relationship(
        "Category",
        secondary="recipes_categories",
        order_by="Category.id",
        viewonly=True,
    )

    __table_args__ = (
        CheckConstraint("servings > 0", name="ck_recipes_servings_positive"),
        Index("ix_recipes_username", "username"),
    )


class Ingredient(Base):
    """Ingredient line of a recipe; carries one measure per unit system"""

    __tablename__ = "ingredients"

    id = Column(Integer, primary_key=True, autoincrement=True)
    recipe_id = Column(
        Integer, ForeignKey("recipes.id", ondelete="CASCADE"), nullable=False
    )
    label = Column(Text, nullable=False)
    base_food = Column(Text)
    ordinal = Column(SmallInteger, nullable=False)

    recipe = relationship("Recipe", back_populates="ingredients")
    measures = relationship(
        "IngredientMeasure",
        back_populates="ingredient",
        cascade="all, delete-orphan",
        passive_deletes=True,
        lazy="selectin",
    )

    __table_args__ = (
        CheckConstraint("ordinal > 0", name="ck_ingredients_ordinal_positive"),
        Index("ix_ingredients_recipe_ordinal", "recipe_id", "ordinal"),
    )

    def measure_for(self, unit_system):
        """Return the measure row for ``unit_system`` or None"""
        value = getattr(unit_system, "value", unit_system)
        for measure in self.measures:
            if measure.unit_system == value:
                return measure
        return None


class IngredientMeasure(Base):
    """Amount and unit of an ingredient in one unit system"""

    __tablename__ = "ingredient_measures"

    ingredient_id = Column(
        Integer,
        ForeignKey("ingredients.id", ondelete="CASCADE"),
        primary_key=True,
    )
    unit_system = Column(String(10), primary_key=True)
    amount = Column(Numeric(asdecimal=False), nullable=False)
    unit = Column(String(20), nullable=False)

    ingredient = relationship("Ingredient", back_populates="measures")

    __table_args__ = (
        CheckConstraint("amount > 0", name="ck_measures_amount_positive"),
        CheckConstraint(
            "unit_system IN ('us', 'metric')", name="ck_measures_unit_system"
        ),
    )


class Instruction(Base):
    """Ordered preparation step of a recipe"""

    __tablename__ = "instructions"

    id = Column(Integer, primary_key=True, autoincrement=True)
    recipe_id = Column(
        Integer, ForeignKey("recipes.id", ondelete="CASCADE"), nullable=False
    )
    ordinal = Column(SmallInteger, nullable=False)
    step = Column(Text, nullable=False)

    recipe = relationship("Recipe", back_populates="instructions")

    __table_args__ = (
        CheckConstraint("ordinal > 0", name="ck_instructions_ordinal_positive"),
        Index("ix_instructions_recipe_ordinal", "recipe_id", "ordinal"),
    )


class Unit(Base):
    """Canonical pairing of a US unit with its metric counterpart"""

    __tablename__ = "units"

    id = Column(Integer, primary_key=True, autoincrement=True)
    us_unit = Column(String(20), nullable=False)
    metric_unit = Column(String(20), nullable=False)

    __table_args__ = (
        UniqueConstraint("us_unit", "metric_unit", name="uq_units_us_metric"),
    )
