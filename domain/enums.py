"""
Domain enums for RecipeBox application.
Contains all enumeration types used across the domain models.
"""

import enum


class UnitSystem(str, enum.Enum):
    """Measurement system of an ingredient measure"""

    US = "us"
    METRIC = "metric"

    @property
    def other(self) -> "UnitSystem":
        return UnitSystem.METRIC if self is UnitSystem.US else UnitSystem.US


class DefaultCategory(str, enum.Enum):
    """Canonical root categories seeded for every user, in resolution order"""

    CUISINES = "cuisines"
    DIETS = "diets"
    COURSES = "courses"
    OCCASIONS = "occasions"


DEFAULT_CATEGORY_LABELS = [c.value for c in DefaultCategory]


class RecipeOrderColumn(str, enum.Enum):
    """Columns recipes may be ordered by in search results"""

    TITLE = "title"
    EDITED_AT = "edited_at"
    CREATED_AT = "created_at"
    SOURCE_NAME = "source_name"
