"""Path-addressed JSON document store on SQLAlchemy.

Documents live at slash-separated paths such as ``users/{uid}`` or
``users/{uid}/sessions/{session_id}``. A collection path has an odd number of
segments, a document path an even number. Every document is one row in the
``documents`` table, keyed by its full path.
"""

import logging
import uuid
from datetime import UTC, datetime
from typing import Any

from sqlalchemy import JSON, DateTime, Integer, String, delete, func, select
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column

logger = logging.getLogger(__name__)


class Base(DeclarativeBase):
    """Base class for store tables."""

    pass


class DocumentRow(Base):
    __tablename__ = "documents"

    path: Mapped[str] = mapped_column(String(512), primary_key=True)
    collection: Mapped[str] = mapped_column(String(512), index=True)
    doc_id: Mapped[str] = mapped_column(String(128))
    data: Mapped[dict[str, Any]] = mapped_column(JSON, default=dict)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True))
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True))
    # insertion order, breaks ties between equal timestamps
    seq: Mapped[int] = mapped_column(Integer, index=True)


class DocumentNotFoundError(KeyError):
    """Raised when updating a document that does not exist."""


class Document(dict):
    """Document data plus its id and server timestamps."""

    def __init__(
        self,
        doc_id: str,
        data: dict[str, Any],
        created_at: datetime,
        updated_at: datetime,
    ) -> None:
        super().__init__(data)
        self.id = doc_id
        self.created_at = created_at
        self.updated_at = updated_at


def _segments(path: str) -> list[str]:
    parts = path.strip("/").split("/")
    if not all(parts):
        raise ValueError(f"Invalid path: {path!r}")
    return parts


def document_path(*segments: str) -> str:
    """Join segments into a document path, validating the segment count."""
    path = "/".join(segments)
    if len(_segments(path)) % 2:
        raise ValueError(f"Not a document path: {path!r}")
    return path


def collection_path(*segments: str) -> str:
    """Join segments into a collection path, validating the segment count."""
    path = "/".join(segments)
    if not len(_segments(path)) % 2:
        raise ValueError(f"Not a collection path: {path!r}")
    return path


def new_document_id() -> str:
    """Generate a 20 character document id."""
    return uuid.uuid4().hex[:20]


def _split(path: str) -> tuple[str, str]:
    parts = _segments(document_path(path))
    return "/".join(parts[:-1]), parts[-1]


def _now() -> datetime:
    return datetime.now(UTC)


def _aware(value: datetime) -> datetime:
    # SQLite hands back naive datetimes
    return value if value.tzinfo else value.replace(tzinfo=UTC)


def _to_document(row: DocumentRow) -> Document:
    return Document(
        row.doc_id, dict(row.data or {}), _aware(row.created_at), _aware(row.updated_at)
    )


class DocumentStore:
    """Async document store backed by one SQLAlchemy table.

    The store owns its engine. Call `init_schema()` once before use and
    `close()` when the process shuts down.
    """

    def __init__(self, database_url: str, echo: bool = False) -> None:
        self._engine: AsyncEngine = create_async_engine(database_url, echo=echo)
        self._session_maker = async_sessionmaker(
            bind=self._engine,
            class_=AsyncSession,
            expire_on_commit=False,
        )

    async def init_schema(self) -> None:
        """Create the documents table if needed."""
        async with self._engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)

    async def close(self) -> None:
        """Dispose the engine and its connections."""
        await self._engine.dispose()

    async def _next_seq(self, session: AsyncSession) -> int:
        result = await session.execute(select(func.max(DocumentRow.seq)))
        return (result.scalar_one_or_none() or 0) + 1

    async def get(self, path: str) -> Document | None:
        """Read one document, or None if it does not exist."""
        document_path(path)
        async with self._session_maker() as session:
            row = await session.get(DocumentRow, path)
            return _to_document(row) if row else None

    async def set(self, path: str, data: dict[str, Any], merge: bool = False) -> Document:
        """Create or overwrite a document.

        Args:
            path: Document path.
            data: Field values.
            merge: Merge into existing fields instead of replacing them.

        Returns:
            The stored document.
        """
        collection, doc_id = _split(path)
        now = _now()
        async with self._session_maker() as session:
            row = await session.get(DocumentRow, path)
            if row is None:
                row = DocumentRow(
                    path=path,
                    collection=collection,
                    doc_id=doc_id,
                    data=dict(data),
                    created_at=now,
                    updated_at=now,
                    seq=await self._next_seq(session),
                )
                session.add(row)
            else:
                row.data = {**row.data, **data} if merge else dict(data)
                row.updated_at = now
            await session.commit()
            return _to_document(row)

    async def update(self, path: str, data: dict[str, Any]) -> Document:
        """Merge fields into an existing document.

        Raises:
            DocumentNotFoundError: If the document does not exist.
        """
        document_path(path)
        async with self._session_maker() as session:
            row = await session.get(DocumentRow, path)
            if row is None:
                raise DocumentNotFoundError(path)
            row.data = {**row.data, **data}
            row.updated_at = _now()
            await session.commit()
            return _to_document(row)

    async def add(self, collection: str, data: dict[str, Any]) -> str:
        """Create a document with a generated id inside a collection.

        Returns:
            The new document id.
        """
        collection_path(collection)
        doc_id = new_document_id()
        await self.set(f"{collection}/{doc_id}", data)
        return doc_id

    async def delete(self, path: str) -> bool:
        """Delete a document. Returns False if it did not exist."""
        document_path(path)
        async with self._session_maker() as session:
            result = await session.execute(delete(DocumentRow).where(DocumentRow.path == path))
            await session.commit()
            return result.rowcount > 0

    async def list(self, collection: str, newest_first: bool = True) -> list[Document]:
        """List the direct children of a collection in creation order."""
        collection_path(collection)
        order = DocumentRow.seq.desc() if newest_first else DocumentRow.seq.asc()
        async with self._session_maker() as session:
            result = await session.execute(
                select(DocumentRow).where(DocumentRow.collection == collection).order_by(order)
            )
            return [_to_document(row) for row in result.scalars()]
