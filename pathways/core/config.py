"""Core application configuration and settings.

Handles environment variables, storage/AI backend selection and the
thresholds used by the analytics engine.
"""
import os
from pathlib import Path
from typing import Optional
from dotenv import load_dotenv
from google.auth import default
from google.auth.transport.requests import Request
from google.oauth2 import service_account
from pydantic import Field
from pydantic_settings import BaseSettings


# Load environment variables
ROOT = Path(__file__).resolve().parents[2]
load_dotenv(dotenv_path=ROOT / ".env", override=False)


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # Storage
    storage_backend: str = Field(default="memory", alias="STORAGE_BACKEND")  # redis | memory
    redis_host: str = Field(default="localhost", alias="REDIS_HOST")
    redis_port: int = Field(default=6379, alias="REDIS_PORT")
    redis_password: Optional[str] = Field(default=None, alias="REDIS_PASSWORD")
    redis_db: int = Field(default=0, alias="REDIS_DB")
    redis_key_prefix: str = Field(default="pathways:", alias="REDIS_KEY_PREFIX")
    analytics_cache_ttl_hours: int = Field(default=24, alias="ANALYTICS_CACHE_TTL_HOURS")

    # Generative AI
    ai_provider: str = Field(default="gemini", alias="AI_PROVIDER")  # gemini | vertex
    gemini_api_key: Optional[str] = Field(default=None, alias="GEMINI_API_KEY")
    gemini_model: str = Field(default="gemini-2.0-flash", alias="GEMINI_MODEL")
    gemini_base_url: str = Field(
        default="https://generativelanguage.googleapis.com/v1beta",
        alias="GEMINI_BASE_URL"
    )
    ai_timeout_seconds: float = Field(default=30.0, alias="AI_TIMEOUT_SECONDS")
    project_id: str = Field(
        default_factory=lambda: (
            os.getenv("PROJECT_ID")
            or os.getenv("GOOGLE_CLOUD_PROJECT")
            or ""
        ),
        alias="PROJECT_ID"
    )
    region: str = Field(default="us-central1", alias="REGION")
    service_account_file: str = Field(
        default_factory=lambda: (
            os.getenv("GOOGLE_APPLICATION_CREDENTIALS")
            or os.getenv("SERVICE_ACCOUNT_FILE")
            or ""
        ),
        alias="GOOGLE_APPLICATION_CREDENTIALS"
    )

    # Analytics thresholds
    slow_learner_threshold_pct: float = Field(default=60.0, alias="SLOW_LEARNER_THRESHOLD_PCT")
    # 1 = any low score flags a slow learner, 2 = more than one low score
    slow_learner_min_low_scores: int = Field(default=1, alias="SLOW_LEARNER_MIN_LOW_SCORES")

    # Application Settings
    environment: str = Field(default="development", alias="ENVIRONMENT")
    debug: bool = Field(default=False, alias="DEBUG")
    log_level: str = Field(default="INFO", alias="LOG_LEVEL")
    cors_origins: list[str] = Field(
        default_factory=lambda: [
            "http://localhost:5173",
            "http://127.0.0.1:5173"
        ],
        alias="CORS_ORIGINS"
    )

    class Config:
        case_sensitive = False
        env_file = ".env"
        populate_by_name = True
        extra = "ignore"

    def validate_required_settings(self):
        """Validate that the configured backends can actually be used."""
        if self.storage_backend not in ("redis", "memory"):
            raise ValueError(
                f"STORAGE_BACKEND must be 'redis' or 'memory', got '{self.storage_backend}'."
            )
        if self.storage_backend == "redis" and not self.redis_host:
            raise ValueError("REDIS_HOST not set while STORAGE_BACKEND=redis.")
        if self.ai_provider not in ("gemini", "vertex"):
            raise ValueError(
                f"AI_PROVIDER must be 'gemini' or 'vertex', got '{self.ai_provider}'."
            )
        if self.ai_provider == "vertex" and not self.project_id:
            raise ValueError(
                "PROJECT_ID not set. Define PROJECT_ID in .env "
                "(or GOOGLE_CLOUD_PROJECT) to use the Vertex AI provider."
            )
        if self.slow_learner_min_low_scores < 1:
            raise ValueError("SLOW_LEARNER_MIN_LOW_SCORES must be at least 1.")


# Global settings instance
settings = Settings()


def get_vertex_credentials():
    """Get credentials for Vertex AI (service account file or ADC).

    Returns:
        Credentials object

    Example:
        >>> creds = get_vertex_credentials()
        >>> init(project=settings.project_id, location=settings.region, credentials=creds)
    """
    scopes = ["https://www.googleapis.com/auth/cloud-platform"]
    if settings.service_account_file:
        return service_account.Credentials.from_service_account_file(
            settings.service_account_file,
            scopes=scopes
        )

    credentials, _ = default(scopes=scopes)
    credentials.refresh(Request())
    return credentials


# Validate settings on module import (only in non-test environments)
if settings.environment != "test":
    try:
        settings.validate_required_settings()
    except ValueError as e:
        print(f"Configuration Error: {e}")
        # Don't raise in development to allow partial setup
        if settings.environment == "production":
            raise
