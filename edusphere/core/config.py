"""Core application configuration and settings.

Handles environment variables for the token cache, SMTP, media uploads
and session signing.
"""
from pathlib import Path
from typing import Optional
from dotenv import load_dotenv
from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


# Load environment variables
ROOT = Path(__file__).resolve().parents[2]
load_dotenv(dotenv_path=ROOT / ".env")

DEV_SECRET_KEY = "development-secret-key-change-in-production"


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        case_sensitive=False,
        env_file=".env",
        populate_by_name=True,
        extra="ignore",
    )

    # Application Settings
    environment: str = Field(default="development", alias="ENVIRONMENT")
    debug: bool = Field(default=False, alias="DEBUG")
    log_level: str = Field(default="INFO", alias="LOG_LEVEL")

    # API Settings
    api_prefix: str = Field(default="/api/v1", alias="API_PREFIX")
    cors_origins: list[str] = Field(
        default_factory=lambda: [
            "http://localhost:3000",
            "http://127.0.0.1:3000"
        ],
        alias="CORS_ORIGINS"
    )

    # JWT Authentication
    jwt_secret_key: str = Field(default=DEV_SECRET_KEY, alias="JWT_SECRET_KEY")
    jwt_algorithm: str = Field(default="HS256", alias="JWT_ALGORITHM")
    access_token_expire_minutes: int = Field(default=4320, alias="ACCESS_TOKEN_EXPIRE_MINUTES")  # 3 days
    cookie_max_age_days: int = Field(default=3, alias="COOKIE_MAX_AGE_DAYS")

    # Redis Configuration
    redis_enabled: bool = Field(default=True, alias="REDIS_ENABLED")
    redis_host: str = Field(default="localhost", alias="REDIS_HOST")
    redis_port: int = Field(default=6379, alias="REDIS_PORT")
    redis_password: Optional[str] = Field(default=None, alias="REDIS_PASSWORD")
    redis_db: int = Field(default=0, alias="REDIS_DB")

    # Credential lifecycle
    otp_ttl_seconds: int = Field(default=300, alias="OTP_TTL_SECONDS")
    login_cache_ttl_seconds: int = Field(default=600, alias="LOGIN_CACHE_TTL_SECONDS")
    reset_token_ttl_seconds: int = Field(default=300, alias="RESET_TOKEN_TTL_SECONDS")
    bcrypt_rounds: int = Field(default=10, alias="BCRYPT_ROUNDS")
    hash_max_attempts: int = Field(default=3, alias="HASH_MAX_ATTEMPTS")

    # Mail (SMTP)
    smtp_host: Optional[str] = Field(default=None, alias="MAIL_HOST")
    smtp_port: int = Field(default=587, alias="MAIL_PORT")
    smtp_user: Optional[str] = Field(default=None, alias="MAIL_USER")
    smtp_password: Optional[str] = Field(default=None, alias="MAIL_PASS")
    smtp_use_tls: bool = Field(default=True, alias="MAIL_USE_TLS")
    smtp_timeout: int = Field(default=10, alias="MAIL_TIMEOUT")
    mail_from: Optional[str] = Field(default=None, alias="MAIL_FROM")
    mail_from_name: str = Field(default="EduSphere", alias="MAIL_FROM_NAME")

    # Frontend links embedded in emails
    frontend_url: str = Field(default="https://edusphere.app", alias="FRONTEND_URL")
    local_frontend_url: str = Field(default="http://localhost:3000", alias="LOCAL_FRONTEND_URL")

    # Media uploads (Cloudinary)
    cloudinary_cloud_name: Optional[str] = Field(default=None, alias="CLOUDINARY_CLOUD_NAME")
    cloudinary_api_key: Optional[str] = Field(default=None, alias="CLOUDINARY_API_KEY")
    cloudinary_api_secret: Optional[str] = Field(default=None, alias="CLOUDINARY_API_SECRET")
    upload_folder: str = Field(default="EduSphere", alias="UPLOAD_FOLDER")
    upload_timeout_seconds: int = Field(default=30, alias="UPLOAD_TIMEOUT_SECONDS")
    max_upload_bytes: int = Field(default=2 * 1024 * 1024, alias="MAX_UPLOAD_BYTES")

    @property
    def is_production(self) -> bool:
        return self.environment == "production"

    @property
    def frontend_base_url(self) -> str:
        """Base URL used for links in outgoing emails."""
        base = self.frontend_url if self.is_production else self.local_frontend_url
        return base.rstrip("/")

    def validate_required_settings(self):
        """Validate that required settings are present."""
        if self.is_production and self.jwt_secret_key == DEV_SECRET_KEY:
            raise ValueError(
                "JWT_SECRET_KEY must be set to a secure value in production."
            )
        if self.is_production and not self.smtp_host:
            raise ValueError(
                "MAIL_HOST not set. Define MAIL_HOST in .env for production."
            )
        if self.bcrypt_rounds < 4 or self.bcrypt_rounds > 31:
            raise ValueError("BCRYPT_ROUNDS must be between 4 and 31.")


# Global settings instance
settings = Settings()


# Validate settings on module import (only in non-test environments)
if settings.environment != "test":
    try:
        settings.validate_required_settings()
    except ValueError as e:
        print(f"Configuration Error: {e}")
        # Don't raise in development to allow partial setup
        if settings.is_production:
            raise
