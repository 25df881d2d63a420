"""Pydantic schemas for recipes, ingredients and instructions."""

from datetime import datetime
from typing import Annotated, List, Literal, Optional, Union

from pydantic import (
    BaseModel,
    ConfigDict,
    Discriminator,
    Field,
    RootModel,
    Tag,
    field_validator,
)

from domain.enums import UnitSystem


# =============================================================================
# CREATE
# =============================================================================


class MeasureCreate(BaseModel):
    """Amount of an ingredient in one unit system."""

    amount: float = Field(..., gt=0)
    # Countable foods ("2 eggs") have no unit
    unit: str = Field(default="", max_length=20)
    unit_system: UnitSystem


class IngredientCreate(BaseModel):
    """New ingredient line with its US and metric measures."""

    label: str = Field(..., min_length=1)
    base_food: Optional[str] = None
    measures: List[MeasureCreate] = Field(default_factory=list, max_length=2)

    @field_validator("measures")
    @classmethod
    def one_measure_per_system(cls, measures: List[MeasureCreate]):
        systems = [m.unit_system for m in measures]
        if len(systems) != len(set(systems)):
            raise ValueError("at most one measure per unit system")
        return measures

    def measure(self, unit_system: UnitSystem) -> Optional[MeasureCreate]:
        return next((m for m in self.measures if m.unit_system == unit_system), None)


class RecipeCreate(BaseModel):
    """
    Recipe payload as produced by the extraction service or a client form.

    The four classification lists hold category labels created (if needed)
    under the matching canonical root.
    """

    title: str = Field(..., min_length=1)
    url: Optional[str] = None
    source_name: Optional[str] = None
    image: Optional[str] = None
    servings: int = Field(default=1, gt=0)
    notes: Optional[str] = None
    ingredients: List[IngredientCreate] = Field(default_factory=list)
    instructions: List[str] = Field(default_factory=list)
    cuisines: List[str] = Field(default_factory=list)
    diets: List[str] = Field(default_factory=list)
    courses: List[str] = Field(default_factory=list)
    occasions: List[str] = Field(default_factory=list)


class RecipeImportRequest(BaseModel):
    """Create a recipe by extracting it from a web page."""

    url: str = Field(..., min_length=1)


# =============================================================================
# UPDATE
# =============================================================================


class MeasurePatch(BaseModel):
    """Edit of one measure; unit_system selects which one."""

    unit_system: Optional[UnitSystem] = None
    amount: Optional[float] = Field(default=None, gt=0)
    unit: Optional[str] = Field(default=None, min_length=1, max_length=20)


class FieldEdit(BaseModel):
    """Edit of an ingredient's own columns."""

    kind: Literal["fields"] = "fields"
    label: Optional[str] = Field(default=None, min_length=1)
    base_food: Optional[str] = None
    ordinal: Optional[int] = Field(default=None, ge=1)


class MeasureEdit(FieldEdit):
    """Field edit that also changes one of the measures."""

    kind: Literal["measure"] = "measure"
    measure: MeasurePatch


def _edit_kind(value) -> str:
    if isinstance(value, dict):
        return "measure" if value.get("measure") is not None else "fields"
    return getattr(value, "kind", "fields")


SingleUpdate = Annotated[
    Union[
        Annotated[FieldEdit, Tag("fields")],
        Annotated[MeasureEdit, Tag("measure")],
    ],
    Discriminator(_edit_kind),
]


class IngredientEditItem(BaseModel):
    """One entry of a batch ingredient update."""

    id: int
    data: SingleUpdate


BatchUpdate = List[IngredientEditItem]


class IngredientEditBody(RootModel[SingleUpdate]):
    """Request body for editing a single ingredient"""


class RecipeUpdate(BaseModel):
    """Partial recipe update; omitted fields are left untouched."""

    title: Optional[str] = Field(default=None, min_length=1)
    url: Optional[str] = None
    source_name: Optional[str] = None
    image: Optional[str] = None
    servings: Optional[int] = Field(default=None, gt=0)
    notes: Optional[str] = None
    instructions: Optional[List[str]] = None
    ingredients: Optional[BatchUpdate] = None

    def scalar_fields(self) -> dict:
        return self.model_dump(exclude_unset=True, exclude={"instructions", "ingredients"})


class InstructionsAppend(BaseModel):
    steps: List[str] = Field(..., min_length=1)


class InstructionsReplace(BaseModel):
    steps: List[str]


class InstructionMove(BaseModel):
    ordinal: int = Field(..., ge=1)


# =============================================================================
# SEARCH
# =============================================================================


class RecipeSearchParams(BaseModel):
    query: Optional[str] = None
    order_by: List[str] = Field(default_factory=list)
    ascending: bool = False


# =============================================================================
# RESPONSES
# =============================================================================


class MeasureResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    ingredient_id: int
    unit_system: UnitSystem
    amount: float
    unit: str


class IngredientMeasures(BaseModel):
    us: Optional[MeasureResponse] = None
    metric: Optional[MeasureResponse] = None


class IngredientResponse(BaseModel):
    id: int
    recipe_id: int
    label: str
    base_food: Optional[str] = None
    ordinal: int
    measures: IngredientMeasures


class InstructionResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    recipe_id: int
    ordinal: int
    step: str


class RecipeSummary(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    title: str
    url: Optional[str] = None
    source_name: Optional[str] = None
    image: Optional[str] = None
    servings: int
    is_favorite: bool
    created_at: Optional[datetime] = None
    edited_at: Optional[datetime] = None


class RecipeResponse(RecipeSummary):
    username: str
    notes: Optional[str] = None
    ingredients: List[IngredientResponse] = Field(default_factory=list)
    instructions: List[InstructionResponse] = Field(default_factory=list)
    category_ids: List[int] = Field(default_factory=list)


class FavoriteToggleResponse(BaseModel):
    id: int
    is_favorite: bool