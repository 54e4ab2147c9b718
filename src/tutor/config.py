"""Tutor configuration with environment variable loading.

Pydantic-based configuration for the LLM tutor.
Supports OpenAI and Groq (through its OpenAI-compatible endpoint).
A missing API key is allowed: the tutor then answers with an echo.
"""

import os
from typing import Literal

from dotenv import load_dotenv
from pydantic import BaseModel, Field, field_validator, model_validator

# Load environment variables from .env file
load_dotenv()

GROQ_BASE_URL = "https://api.groq.com/openai/v1"

DEFAULT_MODELS = {
    "openai": "gpt-4o-mini",
    "groq": "llama-3.1-8b-instant",
}


def _env_api_key() -> str:
    return (
        os.getenv("LLM_API_KEY")
        or os.getenv("OPENAI_API_KEY")
        or os.getenv("GROQ_API_KEY")
        or ""
    )


class TutorConfig(BaseModel):
    """Configuration for the LLM tutor.

    Attributes:
        provider: Which provider to talk to ("openai" or "groq").
        api_key: API key for the provider. Empty means echo mode.
        base_url: API base URL (None for the OpenAI default).
        model_name: Model identifier. Defaults per provider.
        temperature: Sampling temperature (0.0 = deterministic, 2.0 = creative).
        max_tokens: Maximum tokens in generated response.
    """

    provider: Literal["openai", "groq"] = Field(
        default_factory=lambda: os.getenv("LLM_PROVIDER", "openai").lower(),
        description="LLM provider",
    )
    api_key: str = Field(
        default_factory=_env_api_key,
        description="API key for LLM provider",
    )
    base_url: str | None = Field(
        default_factory=lambda: os.getenv("LLM_BASE_URL") or None,
        description="API base URL (None for provider default)",
    )
    model_name: str | None = Field(
        default_factory=lambda: os.getenv("LLM_MODEL") or os.getenv("GROQ_MODEL") or None,
        description="Model to use",
    )
    temperature: float = Field(
        default=0.25,
        ge=0.0,
        le=2.0,
        description="Sampling temperature for response generation",
    )
    max_tokens: int = Field(
        default=800,
        ge=1,
        le=128000,
        description="Maximum tokens in generated response",
    )

    @field_validator("api_key")
    @classmethod
    def strip_api_key(cls, v: str) -> str:
        """Strip whitespace so a blank key counts as missing."""
        return v.strip()

    @model_validator(mode="after")
    def fill_provider_defaults(self) -> "TutorConfig":
        """Pick model and base URL defaults for the chosen provider."""
        if not self.model_name:
            self.model_name = DEFAULT_MODELS[self.provider]
        if self.provider == "groq" and not self.base_url:
            self.base_url = GROQ_BASE_URL
        return self

    @property
    def is_configured(self) -> bool:
        """Whether a provider key is available."""
        return bool(self.api_key)


def get_tutor_config() -> TutorConfig:
    """Create tutor configuration from environment.

    Returns:
        Configured TutorConfig instance.
    """
    return TutorConfig()
