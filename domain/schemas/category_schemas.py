"""Pydantic schemas for the category tree."""

from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator


LABEL_MAX_LENGTH = 25


def normalize_label(value: str) -> str:
    return " ".join(value.split()).lower()


class CategoryCreate(BaseModel):
    label: str = Field(..., min_length=1, max_length=LABEL_MAX_LENGTH)
    parent_id: Optional[int] = None

    @field_validator("label")
    @classmethod
    def lowercase_label(cls, v: str) -> str:
        v = normalize_label(v)
        if not v:
            raise ValueError("label must not be blank")
        return v


class CategoryUpdate(BaseModel):
    label: Optional[str] = Field(default=None, min_length=1, max_length=LABEL_MAX_LENGTH)
    parent_id: Optional[int] = None

    @field_validator("label")
    @classmethod
    def lowercase_label(cls, v: Optional[str]) -> Optional[str]:
        if v is None:
            return v
        v = normalize_label(v)
        if not v:
            raise ValueError("label must not be blank")
        return v


class RecipeLinkRequest(BaseModel):
    recipe_id: int


class CategoryResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    username: str
    label: str
    parent_id: Optional[int] = None


class CategoryDetail(CategoryResponse):
    """Category with its direct child ids and linked recipe ids."""

    children: List[int] = Field(default_factory=list)
    recipes: List[int] = Field(default_factory=list)


class CategoryNode(CategoryResponse):
    """Category with its fully expanded subtree."""

    children: List["CategoryNode"] = Field(default_factory=list)


CategoryNode.model_rebuild()
