"""
User account model.
"""

from sqlalchemy import Column, String, Text, Boolean, TIMESTAMP, CheckConstraint
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func, false

from domain.models.database import Base


class AppUser(Base):
    """User account; owns recipes and categories"""

    __tablename__ = "users"

    username = Column(String(25), primary_key=True)
    first_name = Column(Text, nullable=False)
    last_name = Column(Text, nullable=False)
    email = Column(Text, nullable=False)
    is_admin = Column(Boolean, nullable=False, default=False, server_default=false())
    created_at = Column(TIMESTAMP(timezone=True), server_default=func.now())

    # Relationships
    recipes = relationship(
        "Recipe", back_populates="owner", cascade="all, delete-orphan", passive_deletes=True
    )
    categories = relationship(
        "Category", back_populates="owner", cascade="all, delete-orphan", passive_deletes=True
    )

    __table_args__ = (
        CheckConstraint("username = lower(username)", name="ck_users_username_lower"),
    )
