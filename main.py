"""
RecipeBox FastAPI Application
Main entry point: logging, database lifecycle, middleware and routers
"""

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.exceptions import RequestValidationError
from starlette.exceptions import HTTPException as StarletteHTTPException
import logging
import uvicorn
from contextlib import asynccontextmanager
import anyio
from typing import Optional

from api.routes import users, recipes, categories, health
from domain.models import Database
from adapters import SpoonacularClient
from app.config import settings
from api.middleware import (
    RequestLoggingMiddleware,
    validation_exception_handler,
    http_exception_handler,
    service_exception_handler,
    general_exception_handler,
)
from app.exceptions import ServiceError

# Setup logging with configured level and format
logging.basicConfig(
    level=getattr(logging, settings.log_level), format=settings.log_format
)
_logger = logging.getLogger("recipebox.main")


async def init_schema_with_retry(database: Database) -> None:
    """Create tables, retrying while the database is still starting up"""
    for attempt in range(1, settings.db_init_attempts + 1):
        try:
            # Blocking DDL runs in a worker thread to keep the event loop free
            await anyio.to_thread.run_sync(database.init_schema)
            _logger.info("Database initialization succeeded")
            return
        except Exception as exc:
            _logger.warning(
                "Database init attempt %d/%d failed: %s",
                attempt,
                settings.db_init_attempts,
                exc,
            )
            if attempt < settings.db_init_attempts:
                await anyio.sleep(settings.db_init_delay_sec)
            else:
                _logger.error(
                    "Database initialization failed after %d attempts", attempt
                )
                raise


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Lifespan context manager for application startup and shutdown.
    Owns the Database handle and the Spoonacular client unless they were
    supplied to create_app.
    """
    _logger.info(f"Starting RecipeBox in {settings.environment.value} mode")

    owns_db = getattr(app.state, "db", None) is None
    if owns_db:
        app.state.db = Database(settings.database_url, echo=settings.db_echo)
    await init_schema_with_retry(app.state.db)

    owns_client = getattr(app.state, "spoonacular", None) is None
    if owns_client:
        if not settings.spoonacular_api_key:
            _logger.warning("SPOONACULAR_API_KEY is not set; conversions will fail")
        app.state.spoonacular = SpoonacularClient(
            settings.spoonacular_base_url,
            api_key=settings.spoonacular_api_key,
            timeout=settings.spoonacular_timeout_sec,
        )

    try:
        yield
    finally:
        _logger.info("Shutting down RecipeBox")
        if owns_client:
            app.state.spoonacular.close()
            app.state.spoonacular = None
        if owns_db:
            app.state.db.dispose()
            app.state.db = None


def create_app(
    database: Optional[Database] = None,
    spoonacular: Optional[SpoonacularClient] = None,
) -> FastAPI:
    """Build the application; pre-built dependencies skip their startup step"""
    app = FastAPI(
        title=f"{settings.app_name} API",
        version=settings.app_version,
        description="Recipe organizer with category trees and dual-unit ingredients",
        lifespan=lifespan,
        debug=settings.debug,
        openapi_url=settings.docs_path("openapi.json"),
        docs_url=settings.docs_path("docs"),
        redoc_url=settings.docs_path("redoc"),
    )
    app.state.db = database
    app.state.spoonacular = spoonacular

    # Add CORS middleware
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Add request logging middleware
    app.add_middleware(RequestLoggingMiddleware)

    # Register exception handlers
    app.add_exception_handler(RequestValidationError, validation_exception_handler)
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(ServiceError, service_exception_handler)
    app.add_exception_handler(Exception, general_exception_handler)

    app.include_router(health.router, prefix=settings.api_prefix)
    app.include_router(users.router, prefix=settings.api_prefix)
    app.include_router(recipes.router, prefix=settings.api_prefix)
    app.include_router(categories.router, prefix=settings.api_prefix)
    return app


app = create_app()


if __name__ == "__main__":
    uvicorn.run(
        "main:app",
        host=settings.host,
        port=settings.port,
        reload=settings.is_development(),
        log_level=settings.log_level.lower(),
    )
