from typing import Literal

from pydantic_settings import BaseSettings
from functools import lru_cache


class Settings(BaseSettings):
    DATABASE_URL: str = "sqlite:///./projects.db"

    # HTTP
    API_PREFIX: str = "/api"
    CORS_ORIGINS: list[str] = ["*"]

    # Rate limiting
    RATE_LIMIT_ENABLED: bool = True
    CREATE_RATE_LIMIT: str = "30/minute"

    # Defaults stamped on new projects
    DEFAULT_AI_MODEL: str = "moonshotai/kimi-k2-instruct"
    DEFAULT_FRAMEWORK: Literal["react", "vue", "angular", "other"] = "react"
    DEFAULT_THEME: Literal["light", "dark", "auto"] = "auto"
    DEFAULT_AUTOSAVE: bool = True

    # App
    LOG_LEVEL: str = "INFO"
    DEBUG: bool = False
    API_PORT: int = 8400

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"


@lru_cache()
def get_settings() -> Settings:
    return Settings()
