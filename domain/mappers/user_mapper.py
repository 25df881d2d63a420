"""
User domain mappers.
Handles transformation between ORM models and DTOs for user accounts.
"""

from typing import List

from domain.models import AppUser, Category
from domain.schemas import CategoryResponse, UserResponse


class UserMapper:
    """Mapper for user-related transformations."""

    @staticmethod
    def to_response(user: AppUser) -> UserResponse:
        return UserResponse.model_validate(user)

    @staticmethod
    def categories_to_response(categories: List[Category]) -> List[CategoryResponse]:
        """Convert a user's categories (e.g. their roots) to flat DTOs"""
        return [CategoryResponse.model_validate(c) for c in categories]
