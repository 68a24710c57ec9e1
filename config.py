"""
Runtime settings, read from the environment (and an optional .env file)
"""

from functools import lru_cache
from typing import List

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    host: str = "0.0.0.0"
    port: int = 5000
    database_url: str = "sqlite+aiosqlite:///./orders.db"
    upload_dir: str = "uploads"
    cors_origins: List[str] = ["*"]
    log_level: str = "INFO"


@lru_cache
def get_settings() -> Settings:
    return Settings()
