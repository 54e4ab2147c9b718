"""Client-side configuration with environment variable loading."""

import os

from dotenv import load_dotenv
from pydantic import BaseModel, Field

load_dotenv()


class ClientConfig(BaseModel):
    """Configuration for the chat client.

    Attributes:
        api_base_url: Base URL of the LMS API.
        queue_path: File holding the offline write queue.
        timeout: HTTP timeout in seconds.
        probe_interval: Seconds between connectivity probes.
    """

    api_base_url: str = Field(
        default_factory=lambda: os.getenv("API_BASE_URL", "http://localhost:8000"),
    )
    queue_path: str = Field(
        default_factory=lambda: os.getenv("OFFLINE_QUEUE_PATH", "data/offline_queue.json"),
    )
    timeout: float = Field(default=30.0, gt=0)
    probe_interval: float = Field(default=5.0, gt=0)


def get_client_config() -> ClientConfig:
    """Create client configuration from environment."""
    return ClientConfig()
