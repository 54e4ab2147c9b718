"""Agno-backed tutor service.

Single entry point for every LLM call made by the backend. Both the callable
`aiChat` function and the REST chat endpoint go through `TutorService.ask`.

Provider responses are normalized at this boundary: a run output is accepted
only when its `content` is a non-blank string. Everything else raises
`UpstreamResponseError`, and provider/transport failures are wrapped in
`UpstreamServiceError`, so callers handle exactly one reply shape.
"""

import logging
from typing import Any

from agno.agent import Agent
from agno.models.openai import OpenAIChat
from pydantic import BaseModel, Field

from src.tutor.config import TutorConfig, get_tutor_config

logger = logging.getLogger(__name__)

DEFAULT_SYSTEM_PROMPT = (
    "You are a helpful AI tutor. Keep responses short, friendly, and clear."
)

ECHO_MODEL = "echo"


class UpstreamServiceError(Exception):
    """Raised when the LLM provider call itself fails."""


class UpstreamResponseError(UpstreamServiceError):
    """Raised when the provider answers with an unexpected shape."""


class TutorReply(BaseModel):
    """Normalized reply from the tutor.

    Attributes:
        text: Reply text, stripped of surrounding whitespace.
        model: Model that produced the reply ("echo" for the fallback).
    """

    text: str = Field(..., min_length=1)
    model: str


def echo_reply(prompt: str) -> TutorReply:
    """Fallback reply used when no provider key is configured."""
    return TutorReply(text=f"Echo: {prompt}", model=ECHO_MODEL)


def normalize_reply(output: Any, model: str) -> TutorReply:
    """Validate a run output and turn it into a TutorReply.

    Args:
        output: Whatever the agent run returned.
        model: Model identifier recorded on the reply.

    Returns:
        The normalized reply.

    Raises:
        UpstreamResponseError: If the output has no non-blank string content.
    """
    content = getattr(output, "content", None)
    if not isinstance(content, str):
        raise UpstreamResponseError(
            f"Unexpected response shape from model: {type(content).__name__} content"
        )
    text = content.strip()
    if not text:
        raise UpstreamResponseError("Model returned an empty reply")
    return TutorReply(text=text, model=model)


class TutorService:
    """Service for answering student prompts with the configured LLM.

    Wraps Agno's Agent with:
    - Per-request system message (the caller's context)
    - Echo fallback when no API key is configured
    - A single normalized reply type
    """

    def __init__(self, config: TutorConfig | None = None) -> None:
        """Initialize the tutor service.

        Args:
            config: Optional tutor configuration.
                    Loads from environment if not provided.
        """
        self._config = config or get_tutor_config()
        self._model = self._create_model() if self._config.is_configured else None

    @property
    def config(self) -> TutorConfig:
        return self._config

    @property
    def is_configured(self) -> bool:
        return self._model is not None

    def _create_model(self) -> OpenAIChat:
        """Create the OpenAI-compatible chat model.

        Returns:
            Configured OpenAIChat instance.
        """
        return OpenAIChat(
            id=self._config.model_name,
            api_key=self._config.api_key,
            base_url=self._config.base_url,
            temperature=self._config.temperature,
            max_tokens=self._config.max_tokens,
        )

    def _create_agent(self, system_message: str) -> Agent:
        """Create an agent bound to one system message."""
        return Agent(
            model=self._model,
            system_message=system_message,
            markdown=True,
        )

    async def ask(self, prompt: str, context: str | None = None) -> TutorReply:
        """Answer a prompt.

        Args:
            prompt: The user's (already validated, non-blank) prompt.
            context: Optional system message. Defaults to the tutor persona.

        Returns:
            Normalized tutor reply.

        Raises:
            UpstreamServiceError: If the provider call fails or returns
                an unusable response.
        """
        if self._model is None:
            logger.warning("LLM not configured. Returning echo.")
            return echo_reply(prompt)

        agent = self._create_agent(context or DEFAULT_SYSTEM_PROMPT)
        try:
            output = await agent.arun(prompt)
        except Exception as e:
            logger.error(f"LLM request failed: {e}")
            raise UpstreamServiceError(str(e)) from e

        return normalize_reply(output, self._config.model_name)
