"""
Application configuration settings.
"""

from pydantic import Field, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict
from typing import List, Literal, Self


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # Application
    APP_NAME: str = "Exam Room API"
    APP_VERSION: str = "0.1.0"
    ENV: str = "development"
    DEBUG: bool = True
    LOG_LEVEL: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = "INFO"

    # API
    API_V1_PREFIX: str = "/v1"

    # CORS
    CORS_ORIGINS: List[str] = [
        "http://localhost:3000",
        "http://localhost:5173",
    ]

    # Server
    HOST: str = "0.0.0.0"
    PORT: int = 8000

    # Security
    # IMPORTANT: These MUST be set in .env file - no defaults for security
    SECRET_KEY: str = Field(..., description="Application secret key (required)")
    JWT_SECRET_KEY: str = Field(..., description="JWT signing secret key (required)")
    JWT_ALGORITHM: str = "HS256"
    # Test-takers keep one token for a whole sitting
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 60 * 24

    # Request body limit for answer submissions (bytes)
    MAX_REQUEST_BODY_BYTES: int = 1024 * 1024

    # Sentry Error Tracking
    SENTRY_DSN: str = Field(
        default="",
        description="Sentry DSN for error tracking (leave empty to disable)",
    )
    SENTRY_TRACES_SAMPLE_RATE: float = Field(
        default=0.1,
        ge=0.0,
        le=1.0,
        description="Sentry traces sample rate (0.0-1.0, 0.1 = 10% of transactions)",
    )

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=True,
        extra="ignore",  # Ignore extra fields from .env not defined in Settings
    )

    @model_validator(mode="after")
    def validate_production_secrets(self) -> Self:
        """Reject the development placeholder secrets in production."""
        if self.ENV == "production":
            weak = [
                name
                for name in ("SECRET_KEY", "JWT_SECRET_KEY")
                if len(getattr(self, name)) < 32
            ]
            if weak:
                raise ValueError(
                    f"{', '.join(weak)} must be at least 32 characters in production"
                )
        return self


# mypy doesn't understand that pydantic_settings loads required fields from env vars
settings = Settings()  # type: ignore[call-arg]
