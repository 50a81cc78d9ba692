"""Application configuration using Pydantic BaseSettings.

All settings are loaded from environment variables.
No .env files - use AWS Secrets Manager or parameter store.

Usage:
    from skinflow.config import get_settings

    settings = get_settings()
    print(settings.asset_bucket_name)
    print(settings.diagnosis_max_attempts)
"""

from enum import StrEnum
from functools import lru_cache
from urllib.parse import urlparse

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from skinflow.exceptions.server_errors import ConfigurationError

_LOCAL_HOSTS = frozenset({"localhost", "127.0.0.1", "::1"})


class Environment(StrEnum):
    """Valid deployment environments."""

    DEVELOPMENT = "development"
    TESTING = "testing"
    DEMO = "demo"
    PRODUCTION = "production"


class Settings(BaseSettings):
    """Application settings loaded from environment variables.

    Attributes:
        service_name: Name of this service for logging/tracing.
        environment: Deployment environment.
        aws_region: AWS region for service calls.
        asset_bucket_name: S3 bucket holding original and resized captures.
        asset_public_base_url: Public URL prefix for stored objects.
        diagnosis_service_url: Base URL of the edge functions host.
        analyze_function_name: Edge function that runs the diagnosis.
        save_function_name: Edge function that persists the diagnosis record.
        http_timeout_seconds: Timeout for outbound HTTP calls.
        diagnosis_max_attempts: Total attempts for the diagnosis call.
        diagnosis_initial_delay_ms: First backoff delay, doubled per retry.
        upload_max_workers: Thread pool size for original uploads.
        resize_max_width: Width cap for derived assets.
        resize_quality: Encoder quality (0-1) for derived assets.
        stage_pacing_seconds: Delay between analyze milestones.
        log_level: Logging level.
    """

    model_config = SettingsConfigDict(
        env_file=None,
        case_sensitive=False,
        extra="ignore",
        str_strip_whitespace=True,
    )

    # Service identification
    service_name: str = Field(default="skinflow", min_length=1)
    environment: Environment = Field(default=Environment.DEVELOPMENT)

    # Storage
    aws_region: str = Field(default="us-east-1", min_length=1)
    asset_bucket_name: str = Field(default="skin-images-development", min_length=1)
    asset_public_base_url: str = Field(default="")

    # Diagnosis service
    diagnosis_service_url: str = Field(default="http://localhost:54321", min_length=1)
    analyze_function_name: str = Field(default="analyze", min_length=1)
    save_function_name: str = Field(default="analyze-save", min_length=1)
    http_timeout_seconds: int = Field(default=60, ge=1, le=300)
    diagnosis_max_attempts: int = Field(default=3, ge=1, le=10)
    diagnosis_initial_delay_ms: int = Field(default=1000, ge=0, le=60000)

    # Assets
    upload_max_workers: int = Field(default=3, ge=1, le=16)
    resize_max_width: int = Field(default=1024, ge=64, le=8192)
    resize_quality: float = Field(default=0.85, gt=0.0, le=1.0)

    # UX pacing
    stage_pacing_seconds: float = Field(default=0.0, ge=0.0, le=10.0)

    # Logging
    log_level: str = Field(default="INFO")

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, value: str) -> str:
        """Validate log level is one of the allowed values."""
        allowed = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}
        upper_value = value.upper()
        if upper_value not in allowed:
            error_message = f"log_level must be one of {allowed}, got '{value}'"
            raise ValueError(error_message)
        return upper_value

    @field_validator("diagnosis_service_url", "asset_public_base_url")
    @classmethod
    def strip_trailing_slash(cls, value: str) -> str:
        """Normalize URL prefixes so paths can be joined with a single slash."""
        return value.rstrip("/")

    @property
    def public_base_url(self) -> str:
        """Public URL prefix for objects in the asset bucket."""
        if self.asset_public_base_url:
            return self.asset_public_base_url
        return f"https://{self.asset_bucket_name}.s3.{self.aws_region}.amazonaws.com"

    @property
    def is_production(self) -> bool:
        """Check if running in production environment."""
        return self.environment == Environment.PRODUCTION

    @property
    def is_development(self) -> bool:
        """Check if running in development environment."""
        return self.environment == Environment.DEVELOPMENT


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance.

    Returns:
        Cached Settings instance.
    """
    return Settings()


def validate_startup_config() -> Settings:
    """Validate configuration on application startup.

    Returns:
        Validated Settings instance.

    Raises:
        pydantic.ValidationError: If configuration is invalid.
        ConfigurationError: If production points at a local diagnosis service.
    """
    settings = get_settings()
    if settings.is_production and urlparse(settings.diagnosis_service_url).hostname in _LOCAL_HOSTS:
        error_message = f"diagnosis_service_url must not be local in production: {settings.diagnosis_service_url}"
        raise ConfigurationError(error_message, context={"environment": str(settings.environment)})
    return settings
