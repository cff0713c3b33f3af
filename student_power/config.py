"""Application configuration."""

import os
from dataclasses import dataclass
from functools import lru_cache

from dotenv import load_dotenv

# Load environment variables
load_dotenv()


@dataclass(frozen=True, slots=True)
class RateLimitPolicy:
    """Fixed-window limit applied to one class of endpoints."""

    window_ms: int
    max_requests: int


# Static per-endpoint rate limit table
RATE_LIMIT_POLICIES: dict[str, RateLimitPolicy] = {
    "upload": RateLimitPolicy(window_ms=60 * 1000, max_requests=5),
    "create": RateLimitPolicy(window_ms=60 * 1000, max_requests=20),
    "read": RateLimitPolicy(window_ms=60 * 1000, max_requests=100),
    "auth": RateLimitPolicy(window_ms=15 * 60 * 1000, max_requests=5),
    "ai": RateLimitPolicy(window_ms=60 * 1000, max_requests=20),
}


class Settings:
    """Application settings loaded from environment variables."""

    def __init__(self):
        """Initialize settings from environment variables."""
        # API Settings
        self.API_TITLE: str = os.getenv("API_TITLE", "Student Power")
        self.API_VERSION: str = os.getenv("API_VERSION", "0.1.0")
        self.ENVIRONMENT: str = os.getenv("ENVIRONMENT", "development").lower()
        self.DEBUG: bool = os.getenv("DEBUG", "False").lower() == "true"
        self.LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO").upper()

        # Server Settings
        self.HOST: str = os.getenv("HOST", "0.0.0.0")
        self.PORT: int = int(os.getenv("PORT", "8000"))

        # Database Settings
        self.DB_HOST: str = os.getenv("DB_HOST", "localhost")
        self.DB_PORT: int = int(os.getenv("DB_PORT", "5432"))
        self.DB_USER: str = os.getenv("DB_USER", "postgres")
        self.DB_PASSWORD: str = os.getenv("DB_PASSWORD", "")
        self.DB_NAME: str = os.getenv("DB_NAME", "student_power")
        self.RUN_MIGRATIONS: bool = (
            os.getenv("RUN_MIGRATIONS", "True").lower() == "true"
        )

        # Object storage Settings
        self.S3_ENDPOINT_URL: str = os.getenv(
            "S3_ENDPOINT_URL", "http://localhost:9000"
        )
        self.S3_ACCESS_KEY_ID: str = os.getenv("S3_ACCESS_KEY_ID", "")
        self.S3_SECRET_ACCESS_KEY: str = os.getenv("S3_SECRET_ACCESS_KEY", "")
        self.S3_BUCKET_NAME: str = os.getenv("S3_BUCKET_NAME", "student-power")
        self.S3_REGION: str = os.getenv("S3_REGION", "us-east-1")

        # Admin Settings
        self.ADMIN_USERNAME: str = os.getenv("ADMIN_USERNAME", "admin")
        self.ADMIN_PASSWORD: str = os.getenv("ADMIN_PASSWORD", "admin123")
        self.API_KEY: str = os.getenv("API_KEY", "change-me")

        # AI Settings
        self.PERPLEXITY_API_KEY: str = os.getenv("PERPLEXITY_API_KEY", "").strip()
        self.PERPLEXITY_API_URL: str = os.getenv(
            "PERPLEXITY_API_URL", "https://api.perplexity.ai/chat/completions"
        )
        self.PERPLEXITY_MODEL: str = os.getenv("PERPLEXITY_MODEL", "sonar")
        self.AI_TIMEOUT: float = float(os.getenv("AI_TIMEOUT", "60"))

        # Rate limiting
        self.RATE_LIMIT_SWEEP_INTERVAL_SECONDS: float = float(
            os.getenv("RATE_LIMIT_SWEEP_INTERVAL_SECONDS", "300")
        )

    @property
    def is_production(self) -> bool:
        """Whether the service runs in production mode."""
        return self.ENVIRONMENT == "production"

    @property
    def is_development(self) -> bool:
        """Whether the service runs in development mode."""
        return self.ENVIRONMENT == "development"


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
