"""LLM tutor used by the chat endpoints.

Responsibilities:
    - Provider configuration (OpenAI or Groq) from the environment
    - Echo fallback when no key is configured
    - Normalizing provider output into a single reply type

Leverages the Agno framework for the model call.
Maintains clean separation from the HTTP layer.
"""

from src.tutor.config import TutorConfig, get_tutor_config
from src.tutor.tutor_agent import (
    DEFAULT_SYSTEM_PROMPT,
    TutorReply,
    TutorService,
    UpstreamResponseError,
    UpstreamServiceError,
    echo_reply,
    normalize_reply,
)

__all__ = [
    "DEFAULT_SYSTEM_PROMPT",
    "TutorConfig",
    "TutorReply",
    "TutorService",
    "UpstreamResponseError",
    "UpstreamServiceError",
    "echo_reply",
    "get_tutor_config",
    "normalize_reply",
]
