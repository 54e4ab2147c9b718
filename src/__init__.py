"""LMS Tutor - a small learning platform with an AI tutor chat.

Combines FastAPI for the HTTP API, Agno for the tutor agent,
SQLAlchemy for document storage, NiceGUI for the web UI,
and Pydantic for data validation.

Components:
    - api: callable functions, auth and REST endpoints
    - tutor: LLM configuration and the tutor agent
    - store: path-addressed JSON document store
    - client: HTTP client, chat sessions and the offline write queue
    - ui: web interface
    - models: request/response and document schemas
"""

__version__ = "0.1.0"
