"""Environment-driven configuration."""

from functools import lru_cache
from typing import Literal, Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Process settings read from the environment, then a local .env file.

    Fields are populated from the environment variable named by their
    alias; Python code may also pass them by field name.
    """

    model_config = SettingsConfigDict(
        env_file=".env", extra="ignore", populate_by_name=True
    )

    store_backend: Literal["memory", "sql", "firestore"] = Field(
        default="memory", alias="WORKOUT_STORE_BACKEND"
    )
    database_url: str = Field(default="sqlite:///./workouts.db", alias="DATABASE_URL")
    sql_echo: bool = Field(default=False, alias="SQL_ECHO")
    firebase_app_id: str = Field(default="default-app-id", alias="FIREBASE_APP_ID")
    workout_user_id: str = Field(default="local-user", alias="WORKOUT_USER_ID")
    rest_timer_seconds: int = Field(default=180, gt=0, alias="REST_TIMER_SECONDS")
    # Permissive by default: logging a set needs reps OR weight
    require_reps_and_weight: bool = Field(
        default=False, alias="REQUIRE_REPS_AND_WEIGHT"
    )
    log_level: str = Field(default="INFO", alias="LOG_LEVEL")


def load_settings(env_file: Optional[str] = None) -> Settings:
    """Build settings; ``env_file`` replaces the default ``.env`` lookup."""
    if env_file is None:
        return Settings()
    return Settings(_env_file=env_file)


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Process-wide settings (cached, only loaded once)."""
    return load_settings()
