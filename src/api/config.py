"""HTTP service configuration with environment variable loading."""

import logging
import os
import secrets

from dotenv import load_dotenv
from pydantic import BaseModel, Field

load_dotenv()

logger = logging.getLogger(__name__)


def _secret_key() -> str:
    key = os.getenv("SECRET_KEY")
    if key:
        return key
    logger.warning(
        "SECRET_KEY not set. Using a random key; issued tokens stop working after a restart."
    )
    return secrets.token_urlsafe(32)


class ApiConfig(BaseModel):
    """Configuration for the API process.

    Attributes:
        database_url: SQLAlchemy async URL of the document store.
        secret_key: Key used to sign bearer tokens.
        token_algorithm: JWT signing algorithm.
        access_token_minutes: Lifetime of issued tokens.
        cors_origins: Comma-separated list of allowed origins.
        min_password_length: Shortest password accepted at signup.
    """

    database_url: str = Field(
        default_factory=lambda: os.getenv("DATABASE_URL", "sqlite+aiosqlite:///data/lms.db"),
        description="Document store database URL",
    )
    secret_key: str = Field(
        default_factory=_secret_key,
        min_length=16,
        description="Secret key for token signing",
    )
    token_algorithm: str = "HS256"
    access_token_minutes: int = Field(
        default_factory=lambda: int(os.getenv("ACCESS_TOKEN_MINUTES", "60")),
        ge=1,
    )
    cors_origins: str = Field(default_factory=lambda: os.getenv("CORS_ORIGINS", "*"))
    min_password_length: int = Field(default=6, ge=1)

    @property
    def cors_origins_list(self) -> list[str]:
        """Convert CORS_ORIGINS string to a list."""
        return [origin.strip() for origin in self.cors_origins.split(",") if origin.strip()]


def get_api_config() -> ApiConfig:
    """Create API configuration from environment."""
    return ApiConfig()
