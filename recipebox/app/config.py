from __future__ import annotations

from typing import Optional

from pydantic import AnyUrl, Field
from pydantic_settings import BaseSettings, SettingsConfigDict

STORAGE_KEY_PATTERN = r"^[A-Za-z0-9_.-]+$"


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8-sig",
        case_sensitive=False,
        extra="ignore",
    )

    # Without a base URL the store runs in local-only mode
    RECIPES_API_BASE_URL: Optional[AnyUrl] = None
    RECIPES_API_PATH: str = "/api/recipes"
    HTTP_TIMEOUT_SECONDS: float = 10.0

    STORAGE_DIR: str = ".recipebox"
    # Keys become file names under STORAGE_DIR
    SESSION_STORAGE_KEY: str = Field(default="recipebox-user", pattern=STORAGE_KEY_PATTERN)
    RECIPES_STORAGE_KEY: str = Field(default="recipebox-recipes", pattern=STORAGE_KEY_PATTERN)

    APP_ENV: str = "local"
    LOG_LEVEL: str = "INFO"


settings = Settings()


def get_settings() -> Settings:
    return settings
