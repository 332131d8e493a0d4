"""
Application configuration using 12-factor environment variables.
"""
from functools import lru_cache
from typing import Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Application
    app_name: str = Field(default="Marketplace API")
    app_version: str = Field(default="1.0.0")
    debug: bool = Field(default=False)
    frontend_url: str = Field(default="http://localhost:5173")

    # Server
    host: str = Field(default="0.0.0.0")
    port: int = Field(default=8000)

    # Database
    database_url: str = Field(default="sqlite:///./data/marketplace.db")
    seed_categories: bool = Field(default=True)

    # Authentication
    jwt_secret: Optional[str] = Field(default=None, description="HMAC secret used to sign access tokens")
    jwt_algorithm: str = Field(default="HS256")
    jwt_expire_minutes: int = Field(default=15)
    jwt_issuer: str = Field(default="marketplace-platform")
    jwt_audience: str = Field(default="marketplace-users")
    bcrypt_rounds: int = Field(default=12, ge=4, le=31)
    verification_token_hours: int = Field(default=24)
    password_reset_token_hours: int = Field(default=1)

    # Uploads
    upload_dir: str = Field(default="./uploads")
    max_upload_bytes: int = Field(default=5 * 1024 * 1024)

    # Logging
    log_level: str = Field(default="INFO")
    log_format: str = Field(default="json")  # json or text

    @property
    def is_jwt_secret_configured(self) -> bool:
        """Check if the token signing secret is set."""
        return bool(self.jwt_secret and len(self.jwt_secret) > 0)


@lru_cache()
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
