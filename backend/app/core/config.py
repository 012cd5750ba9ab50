"""
Application configuration and environment settings.
"""
from pydantic_settings import BaseSettings
from pydantic import field_validator
from typing import List, Union


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # Application
    APP_NAME: str = "EventBook"
    DEBUG: bool = False
    LOG_LEVEL: str = "INFO"

    # Database
    DATABASE_URL: str = "sqlite:///./eventbook.db"
    DB_ECHO: bool = False
    AUTO_CREATE_TABLES: bool = True

    # JWT
    SECRET_KEY: str = "your-secret-key-change-in-production"
    ALGORITHM: str = "HS256"
    ACCESS_TOKEN_EXPIRE_DAYS: int = 7

    # CORS
    CORS_ORIGINS: Union[List[str], str] = ["http://localhost:3000", "http://localhost:5173"]

    @field_validator("CORS_ORIGINS", mode="before")
    @classmethod
    def parse_cors_origins(cls, v):
        """Parse CORS_ORIGINS from comma-separated string or list."""
        if isinstance(v, str):
            return [origin.strip() for origin in v.split(",") if origin.strip()]
        return v

    # Image upload
    MAX_UPLOAD_SIZE: int = 10 * 1024 * 1024  # 10MB
    ALLOWED_IMAGE_TYPES: List[str] = ["image/jpeg", "image/png", "image/jpg", "image/webp"]
    UPLOAD_DIR: str = "app/static"
    PUBLIC_BASE_URL: str = ""  # Prefix for image URLs, e.g. "https://api.example.com"

    # Email
    EMAIL_PROVIDER: str = "console"  # Options: "smtp", "console"
    EMAIL_HOST: str = "smtp.gmail.com"
    EMAIL_PORT: int = 465
    EMAIL_USER: str = ""
    EMAIL_PASSWORD: str = ""
    EMAIL_FROM: str = ""  # Falls back to EMAIL_USER
    EMAIL_TIMEOUT_SECONDS: float = 10.0

    # Booking notifications
    NOTIFICATION_DELIVERY: str = "sync"  # Options: "sync" (before responding), "background"
    NOTIFICATION_MAX_ATTEMPTS: int = 5

    @field_validator("NOTIFICATION_DELIVERY", "EMAIL_PROVIDER")
    @classmethod
    def normalize_choice(cls, v: str) -> str:
        return v.strip().lower()

    class Config:
        env_file = ".env"
        case_sensitive = True


settings = Settings()
