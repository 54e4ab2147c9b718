"""Explicitly constructed application context.

Holds the long-lived resources a request needs (document store, tutor,
configuration). One context is built at process start, attached to the
FastAPI app, and closed at shutdown.
"""

import logging
from dataclasses import dataclass
from pathlib import Path

from fastapi import Request
from sqlalchemy.engine import make_url

from src.api.config import ApiConfig, get_api_config
from src.store import DocumentStore
from src.tutor import TutorConfig, TutorService

logger = logging.getLogger(__name__)


@dataclass
class AppContext:
    """Resources shared by every request of one app instance."""

    config: ApiConfig
    store: DocumentStore
    tutor: TutorService

    @classmethod
    def create(
        cls,
        config: ApiConfig | None = None,
        tutor_config: TutorConfig | None = None,
    ) -> "AppContext":
        """Build a context from configuration (environment by default)."""
        config = config or get_api_config()
        _ensure_sqlite_dir(config.database_url)
        return cls(
            config=config,
            store=DocumentStore(config.database_url),
            tutor=TutorService(tutor_config),
        )

    async def start(self) -> None:
        """Prepare resources that need async setup."""
        await self.store.init_schema()
        mode = "configured" if self.tutor.is_configured else "echo fallback"
        logger.info(f"Application context started (LLM: {mode})")

    async def close(self) -> None:
        """Release resources."""
        await self.store.close()
        logger.info("Application context closed")


def _ensure_sqlite_dir(database_url: str) -> None:
    url = make_url(database_url)
    if url.get_backend_name() == "sqlite" and url.database and url.database != ":memory:":
        Path(url.database).parent.mkdir(parents=True, exist_ok=True)


def get_context(request: Request) -> AppContext:
    """FastAPI dependency returning the app's context."""
    return request.app.state.context
