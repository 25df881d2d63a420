"""User management routes"""

from fastapi import APIRouter, Depends, status
import logging
from typing import List

from domain.schemas import UserCreate, UserResponse
from domain.mappers import UserMapper
from services import UserService
from api.dependencies import get_user_service

router = APIRouter(prefix="/users", tags=["Users"])
logger = logging.getLogger("recipebox.api.users")


@router.post("", response_model=UserResponse, status_code=status.HTTP_201_CREATED)
def create_user(user: UserCreate, service: UserService = Depends(get_user_service)):
    """Create a user together with their default category roots"""
    return UserMapper.to_response(service.create(user))


@router.get("", response_model=List[UserResponse])
def get_all_users(service: UserService = Depends(get_user_service)):
    return [UserMapper.to_response(u) for u in service.list_users()]


@router.get("/{username}", response_model=UserResponse)
def get_user(username: str, service: UserService = Depends(get_user_service)):
    return UserMapper.to_response(service.get(username))


@router.delete("/{username}")
def delete_user(username: str, service: UserService = Depends(get_user_service)):
    """Delete a user and all their recipes and categories."""
    service.remove(username)
    return {"status": "ok", "deleted": username}
