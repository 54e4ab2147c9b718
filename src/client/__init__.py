"""Chat client used by the UI.

Responsibilities:
    - HTTP access to the API with the user's bearer token
    - Chat session state with optimistic updates
    - Offline write queue with a bounded retry policy
    - Connectivity tracking that triggers queue replay
"""

from src.client.api_client import APIError, LmsApiClient, OfflineError
from src.client.config import ClientConfig, get_client_config
from src.client.connectivity import ConnectivityMonitor
from src.client.offline_queue import FlushReport, OfflineWriteQueue, QueuedWrite, WriteState
from src.client.retry import RetryPolicy
from src.client.session_manager import ChatSessionManager

__all__ = [
    "APIError",
    "ChatSessionManager",
    "ClientConfig",
    "ConnectivityMonitor",
    "FlushReport",
    "LmsApiClient",
    "OfflineError",
    "OfflineWriteQueue",
    "QueuedWrite",
    "RetryPolicy",
    "WriteState",
    "get_client_config",
]
