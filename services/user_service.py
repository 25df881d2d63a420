"""User accounts; a new user starts with the four default category roots."""

from typing import List

from sqlalchemy.orm import Session

from app.exceptions import ConflictError, NotFoundError
from domain.models import AppUser
from domain.schemas import UserCreate
from repositories import UserRepository
from services.base import BaseService
from services.category_tree import CategoryTree


class UserService(BaseService[UserRepository]):
    def __init__(self, db: Session):
        super().__init__(db, "recipebox.users")
        self.repo = UserRepository(db)
        self.categories = CategoryTree(db)

    def create(self, data: UserCreate) -> AppUser:
        username = data.username.lower()
        with self.transaction("create_user", username=username):
            if self.repo.get_by_username(username) is not None:
                raise ConflictError(
                    f"Username {username} is taken", details={"username": username}
                )
            user = self.repo.add(
                AppUser(
                    username=username,
                    first_name=data.first_name,
                    last_name=data.last_name,
                    email=data.email,
                    is_admin=data.is_admin,
                )
            )
            self.categories.seed_defaults(username)

        self.log_info("user_created", username=username)
        return user

    def get(self, username: str) -> AppUser:
        user = self.repo.get_by_username(username)
        if user is None:
            raise NotFoundError(f"User {username} not found")
        return user

    def list_users(self) -> List[AppUser]:
        users = self.repo.list_users()
        self.log_info("users_listed", count=len(users))
        return users

    def remove(self, username: str) -> None:
        """Delete a user; their recipes and categories cascade"""
        with self.transaction("remove_user", username=username):
            self.repo.delete(self.get(username))
        self.log_info("user_removed", username=username)
