"""Document persistence for users, courses, chat sessions and settings.

Stores JSON documents at collection/document paths on top of SQLAlchemy's
async engine (SQLite via aiosqlite by default).
"""

from src.store.documents import (
    Document,
    DocumentNotFoundError,
    DocumentStore,
    collection_path,
    document_path,
    new_document_id,
)

__all__ = [
    "Document",
    "DocumentNotFoundError",
    "DocumentStore",
    "collection_path",
    "document_path",
    "new_document_id",
]
