from pathlib import Path
from pydantic_settings import BaseSettings
from typing import Optional
from functools import lru_cache


_BACKEND_DIR = Path(__file__).resolve().parents[2]


class Settings(BaseSettings):
    """Application configuration settings."""

    # Application
    APP_NAME: str = "AutoDash - Schema-free Analytics Dashboard"
    APP_VERSION: str = "0.1.0"
    DEBUG: bool = False
    API_PREFIX: str = "/api/v1"
    LOG_LEVEL: str = "INFO"

    # Server
    HOST: str = "0.0.0.0"
    PORT: int = 8000
    CORS_ORIGINS: str = "http://localhost:3000,http://localhost:5173"

    # Data Directory
    DATA_DIR: str = str(_BACKEND_DIR / "data")

    # Ingestion
    MAX_UPLOAD_MB: int = 20
    ROW_PREVIEW_LIMIT: int = 100

    # Profiling - bounded prefixes
    CARDINALITY_SAMPLE_ROWS: int = 200  # Rows used for distinct-value counting
    AI_SAMPLE_ROWS: int = 50  # Rows sent to the analyst service

    # AI Services
    ANTHROPIC_API_KEY: Optional[str] = None
    AI_MODEL: str = "claude-sonnet-4-20250514"
    AI_TIMEOUT_SECONDS: int = 60
    AI_MAX_TOKENS: int = 2048

    class Config:
        env_file = ".env"
        case_sensitive = True


@lru_cache()
def get_settings() -> Settings:
    return Settings()


settings = get_settings()
