from pydantic_settings import BaseSettings
from functools import lru_cache
from typing import Optional

class Settings(BaseSettings):
    # Database settings
    DATABASE_URL: str = "sqlite:///./gradebook.db"

    # JWT settings
    SECRET_KEY: str = "change-me-in-production"
    ALGORITHM: str = "HS256"
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 60 * 24

    # File upload settings
    UPLOAD_DIR: str = "uploads"
    MAX_UPLOAD_SIZE: int = 52_428_800  # 50MB in bytes
    UPLOAD_CHUNK_SIZE: int = 1_048_576
    ALLOWED_MIME_TYPES: set = {
        "application/pdf",
        "application/msword",
        "application/vnd.openxmlformats-officedocument.wordprocessingml.document",
        "text/plain",
        "application/zip",
        "text/javascript",
        "text/html",
        "text/css",
    }

    # API settings
    API_PREFIX: str = "/api"
    PROJECT_NAME: str = "Gradebook API"
    DEBUG: bool = False
    CORS_ORIGINS: list = ["*"]

    # Rate limiting (only active when REDIS_URL is set)
    REDIS_URL: Optional[str] = None
    RATE_LIMIT_PER_MINUTE: int = 100

    # Logging
    LOG_DIR: str = "logs"
    LOG_LEVEL: str = "INFO"

    class Config:
        env_file = ".env"
        case_sensitive = True

@lru_cache()
def get_settings() -> Settings:
    """
    Get settings instance with caching
    Returns:
        Settings instance
    """
    return Settings()
