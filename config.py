# config.py — settings read from BOOKSTORE_* environment variables
from functools import lru_cache

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_prefix="BOOKSTORE_", env_file=".env", extra="ignore"
    )

    # ---- DB ----
    DATABASE_URL: str = "sqlite+aiosqlite:///./bookstore.db"
    DB_ECHO: bool = False
    SEED_SAMPLE_DATA: bool = True

    # ---- API ----
    API_PREFIX: str = "/api"
    DEFAULT_PAGE_LIMIT: int = 10
    RECENT_BOOKS_LIMIT: int = 5

    # ---- Runtime ----
    LOG_LEVEL: str = "INFO"
    HOST: str = "127.0.0.1"
    PORT: int = 3000


@lru_cache
def get_settings() -> Settings:
    return Settings()


settings = get_settings()
