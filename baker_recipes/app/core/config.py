import logging
from functools import lru_cache
from typing import List

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    database_url: str = Field("sqlite:///./baker_recipes.db", alias="DATABASE_URL")
    log_level: str = Field("INFO", alias="LOG_LEVEL")
    cors_origins: List[str] = Field(default_factory=lambda: ["http://localhost:5173"], alias="CORS_ORIGINS")
    # Numeric checks pass when within the looser of the two tolerances
    recipe_relative_tolerance: float = Field(0.005, ge=0, alias="RECIPE_RELATIVE_TOLERANCE")
    recipe_absolute_tolerance: float = Field(0.01, ge=0, alias="RECIPE_ABSOLUTE_TOLERANCE")
    recipe_decimal_places: int = Field(2, ge=0, le=6, alias="RECIPE_DECIMAL_PLACES")
    recipe_case_insensitive_names: bool = Field(True, alias="RECIPE_CASE_INSENSITIVE_NAMES")

    model_config = SettingsConfigDict(env_file=".env", case_sensitive=False, extra="ignore")


logger = logging.getLogger(__name__)


@lru_cache
def get_settings() -> Settings:
    try:
        settings = Settings()
    except PermissionError:
        logger.warning("Unable to read .env; continuing with environment variables only")
        settings = Settings(_env_file=None)
    return settings
