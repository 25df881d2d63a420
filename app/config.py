"""
RecipeBox settings.

Values come from the environment or a ``.env`` file in the working directory;
``SPOONACULAR_API_KEY`` and ``DATABASE_URL`` are the two most deployments set.
"""

from enum import Enum
from typing import Optional
from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic import Field, field_validator


class Environment(str, Enum):
    DEVELOPMENT = "development"
    PRODUCTION = "production"
    TESTING = "testing"


class Settings(BaseSettings):
    app_name: str = "RecipeBox"
    app_version: str = "1.0.0"
    environment: Environment = Environment.DEVELOPMENT
    debug: bool = False

    host: str = "0.0.0.0"
    port: int = Field(default=3001, ge=1, le=65535)
    # Mounted in front of every router, e.g. "/api"
    api_prefix: str = ""
    cors_origins: list[str] = Field(
        default=["*"], description="Origins allowed to call the API from a browser"
    )

    database_url: str = Field(
        default="postgresql+psycopg2://postgres@localhost:5432/recipebox",
        description="SQLAlchemy URL; sqlite:// gives a throwaway in-memory store",
    )
    db_echo: bool = False
    # Schema creation retries while the database is still starting up
    db_init_attempts: int = Field(default=8, ge=1)
    db_init_delay_sec: float = Field(default=2.0, ge=0)

    spoonacular_base_url: str = "https://api.spoonacular.com/recipes"
    spoonacular_api_key: Optional[str] = None
    spoonacular_timeout_sec: float = Field(default=10.0, gt=0)

    log_level: str = "INFO"
    log_format: str = "%(asctime)s %(levelname)s %(name)s: %(message)s"

    model_config = SettingsConfigDict(
        env_file=".env", env_file_encoding="utf-8", case_sensitive=False, extra="ignore"
    )

    @field_validator("environment", mode="before")
    @classmethod
    def validate_environment(cls, v):
        if isinstance(v, str):
            return Environment(v.lower())
        return v

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        return v.upper()

    def is_production(self) -> bool:
        return self.environment == Environment.PRODUCTION

    def is_development(self) -> bool:
        return self.environment == Environment.DEVELOPMENT

    def docs_path(self, name: str) -> Optional[str]:
        """Path of an interactive docs endpoint, hidden in production"""
        if self.is_production():
            return None
        return f"{self.api_prefix}/{name}"


settings = Settings()
