"""Application configuration."""
from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic import field_validator
from typing import List, Union
import os

from polly.core.constants import (
    CSRF_COOKIE_NAME as DEFAULT_CSRF_COOKIE_NAME,
    CSRF_TOKEN_TTL_SECONDS as DEFAULT_CSRF_TOKEN_TTL_SECONDS,
    SESSION_EXPIRE_MINUTES as DEFAULT_SESSION_EXPIRE_MINUTES,
)


class Settings(BaseSettings):
    """Application settings."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=True,
        extra="ignore"
    )

    # Database
    DATABASE_URL: str = "sqlite:///polly.db"
    DB_POOL_SIZE: int = 10
    DB_MAX_OVERFLOW: int = 20

    # Security
    SECRET_KEY: str = "your-secret-key-change-in-production"
    ALGORITHM: str = "HS256"
    SESSION_COOKIE_NAME: str = "polly_session"
    SESSION_EXPIRE_MINUTES: int = DEFAULT_SESSION_EXPIRE_MINUTES

    # CSRF protection for form submissions
    CSRF_COOKIE_NAME: str = DEFAULT_CSRF_COOKIE_NAME
    CSRF_TOKEN_TTL_SECONDS: int = DEFAULT_CSRF_TOKEN_TTL_SECONDS
    CSRF_TOKEN_STORE: str = "cookie"  # cookie or server
    CSRF_SERVER_STORE_MAX_SIZE: int = 10000  # sessions holding a server-side token

    # CORS - Can be a list or comma-separated string
    CORS_ORIGINS: Union[list, str] = ["http://localhost:3000"]

    @field_validator('CORS_ORIGINS', mode='before')
    @classmethod
    def parse_cors_origins(cls, v):
        """Parse CORS_ORIGINS from comma-separated string or list."""
        if isinstance(v, str):
            return [origin.strip() for origin in v.split(',') if origin.strip()]
        return v

    @field_validator('CSRF_TOKEN_STORE')
    @classmethod
    def check_token_store(cls, v: str) -> str:
        if v not in ("cookie", "server"):
            raise ValueError("CSRF_TOKEN_STORE must be 'cookie' or 'server'")
        return v

    # Routing
    LOGIN_PATH: str = "/login"
    PUBLIC_PATH_PREFIXES: List[str] = [
        "/login",
        "/register",
        "/auth",
        "/api/v1/auth",
        "/health",
        "/docs",
        "/openapi.json",
    ]

    # Application
    APP_TITLE: str = "Polly"
    APP_DESCRIPTION: str = "Create polls, vote once, view results"
    APP_VERSION: str = "1.0.0"

    # Environment
    ENVIRONMENT: str = "development"  # development, production

    # Logging
    LOG_LEVEL: str = "INFO"

    # View cache
    CACHE_TTL_SECONDS: float = 5.0
    CACHE_MAX_SIZE: int = 500

    @property
    def cookie_secure(self) -> bool:
        """Cookies carry the Secure flag only in production (HTTPS)."""
        return self.ENVIRONMENT == "production"

    def is_public_path(self, path: str) -> bool:
        return any(path.startswith(prefix) for prefix in self.PUBLIC_PATH_PREFIXES)

    def validate_production_config(self) -> None:
        """Validate that production-critical settings are properly configured."""
        if self.ENVIRONMENT == "production":
            issues = []

            if self.SECRET_KEY == "your-secret-key-change-in-production":
                issues.append("SECRET_KEY must be changed from default value")

            if "*" in self.CORS_ORIGINS:
                issues.append("CORS_ORIGINS should be restricted to specific domains")

            if issues:
                raise ValueError(
                    "Production configuration errors:\n" +
                    "\n".join(f"  - {issue}" for issue in issues)
                )


settings = Settings()

# Validate production configuration on startup
if os.getenv("ENVIRONMENT") == "production":
    settings.validate_production_config()
