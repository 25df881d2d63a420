"""Category tree routes"""

from fastapi import APIRouter, Depends, status
import logging
from typing import List

from domain.schemas import (
    CategoryCreate,
    CategoryDetail,
    CategoryNode,
    CategoryResponse,
    CategoryUpdate,
    RecipeLinkRequest,
)
from domain.mappers import UserMapper
from services import CategoryTree
from api.dependencies import get_category_service

router = APIRouter(prefix="/users/{username}/categories", tags=["Categories"])
logger = logging.getLogger("recipebox.api.categories")


@router.get("", response_model=List[CategoryResponse])
def list_roots(username: str, service: CategoryTree = Depends(get_category_service)):
    """Top-level categories of the user"""
    return UserMapper.categories_to_response(service.get_roots(username))


@router.get("/trees", response_model=List[CategoryNode])
def list_trees(username: str, service: CategoryTree = Depends(get_category_service)):
    return service.get_trees(username)


@router.get("/defaults", response_model=List[int])
def default_category_ids(
    username: str, service: CategoryTree = Depends(get_category_service)
):
    """Ids of the cuisines, diets, courses and occasions roots, in that order"""
    return service.get_default_category_ids(username)


@router.post("", response_model=CategoryResponse, status_code=status.HTTP_201_CREATED)
def create_category(
    username: str,
    payload: CategoryCreate,
    service: CategoryTree = Depends(get_category_service),
):
    return CategoryResponse.model_validate(
        service.create(username, payload.label, payload.parent_id)
    )


@router.get("/{category_id}", response_model=CategoryDetail)
def get_category(
    username: str,
    category_id: int,
    service: CategoryTree = Depends(get_category_service),
):
    return service.get(username, category_id)


@router.get("/{category_id}/tree", response_model=CategoryNode)
def get_category_tree(
    username: str,
    category_id: int,
    service: CategoryTree = Depends(get_category_service),
):
    return service.get_subtree(username, category_id)


@router.patch("/{category_id}", response_model=CategoryResponse)
def update_category(
    username: str,
    category_id: int,
    payload: CategoryUpdate,
    service: CategoryTree = Depends(get_category_service),
):
    return CategoryResponse.model_validate(
        service.update(username, category_id, payload)
    )


@router.delete("/{category_id}")
def delete_category(
    username: str,
    category_id: int,
    service: CategoryTree = Depends(get_category_service),
):
    """Delete a category with all its descendants"""
    service.remove(username, category_id)
    return {"status": "ok", "deleted": category_id}


@router.post("/{category_id}/recipes", status_code=status.HTTP_201_CREATED)
def link_recipe(
    username: str,
    category_id: int,
    payload: RecipeLinkRequest,
    service: CategoryTree = Depends(get_category_service),
):
    service.link_recipe(username, category_id, payload.recipe_id)
    return {"category_id": category_id, "recipe_id": payload.recipe_id}


@router.delete("/{category_id}/recipes/{recipe_id}")
def unlink_recipe(
    username: str,
    category_id: int,
    recipe_id: int,
    service: CategoryTree = Depends(get_category_service),
):
    service.unlink_recipe(username, category_id, recipe_id)
    return {"status": "ok", "category_id": category_id, "recipe_id": recipe_id}
