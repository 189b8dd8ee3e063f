"""Application settings read from the environment and ``.env``."""
from __future__ import annotations

from functools import lru_cache

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_prefix="TRANSLATOR_", env_file=".env", env_file_encoding="utf-8", extra="ignore"
    )

    # Directory holding <code>.json documents
    translations_dir: str = "./translations"

    # Persistence
    save_indent: bool = True
    autosave: bool = True

    # App
    app_name: str = "Translation Store API"
    log_level: str = "INFO"


@lru_cache
def get_settings() -> Settings:
    return Settings()
