"""
API dependencies for dependency injection
"""

from typing import Generator, Optional

from fastapi import Depends, Request
from sqlalchemy.orm import Session

from adapters import SpoonacularClient
from domain.models import get_db_session
from services import CategoryTree, RecipeAggregate, UserService


def get_db(request: Request) -> Generator[Session, None, None]:
    """
    Database session dependency for FastAPI routes.

    The Database handle is created by the application lifespan and kept on
    ``app.state.db``.

    Usage:
        @router.get("/example")
        def example(db: Session = Depends(get_db)):
            # Use db session here
            pass
    """
    yield from get_db_session(request.app.state.db)


def get_spoonacular(request: Request) -> Optional[SpoonacularClient]:
    return getattr(request.app.state, "spoonacular", None)


def get_recipe_service(
    db: Session = Depends(get_db),
    client: Optional[SpoonacularClient] = Depends(get_spoonacular),
) -> RecipeAggregate:
    return RecipeAggregate(db, converter=client, extractor=client)


def get_category_service(db: Session = Depends(get_db)) -> CategoryTree:
    return CategoryTree(db)


def get_user_service(db: Session = Depends(get_db)) -> UserService:
    return UserService(db)
