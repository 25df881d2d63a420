"""
User Repository - Data access layer for user accounts
"""

from typing import Optional, List
from sqlalchemy.orm import Session

from repositories.base import BaseRepository
from domain.models import AppUser


class UserRepository(BaseRepository[AppUser]):
    """Repository for user data access"""

    def __init__(self, db: Session):
        super().__init__(db, AppUser)

    def get_by_username(self, username: str) -> Optional[AppUser]:
        """Get user by username"""
        return self.db.get(AppUser, username.lower())

    def list_users(self, skip: int = 0, limit: int = 100) -> List[AppUser]:
        return (
            self.db.query(AppUser)
            .order_by(AppUser.username)
            .offset(skip)
            .limit(limit)
            .all()
        )
