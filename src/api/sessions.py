"""Chat session endpoints.

Sessions live at ``users/{uid}/sessions/{session_id}``. Every route is scoped
to the authenticated caller's own subtree.
"""

import logging
from datetime import UTC, datetime

from fastapi import APIRouter, Depends, HTTPException, Response, status

from src.api.context import AppContext, get_context
from src.api.deps import Caller, require_user
from src.models.schemas import ChatSession, SessionCreate, SessionRename, SessionSave
from src.store import Document, DocumentNotFoundError, document_path

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/sessions", tags=["sessions"])


def default_session_name() -> str:
    return f"Session {datetime.now(UTC).strftime('%Y-%m-%d %H:%M:%S')}"


def _collection(uid: str) -> str:
    return f"users/{uid}/sessions"


def _path(uid: str, session_id: str) -> str:
    try:
        return document_path(_collection(uid), session_id)
    except ValueError as e:
        raise _not_found() from e


def _to_session(doc: Document) -> ChatSession:
    return ChatSession(
        id=doc.id,
        name=doc.get("name") or default_session_name(),
        created_at=doc.created_at.isoformat(),
        updated_at=doc.updated_at.isoformat(),
        messages=doc.get("messages", []),
    )


def _not_found() -> HTTPException:
    return HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Session not found")


@router.get("", response_model=list[ChatSession])
async def list_sessions(
    caller: Caller = Depends(require_user),
    ctx: AppContext = Depends(get_context),
) -> list[ChatSession]:
    """List the caller's sessions, newest first."""
    docs = await ctx.store.list(_collection(caller.uid), newest_first=True)
    return [_to_session(doc) for doc in docs]


@router.post("", response_model=ChatSession, status_code=status.HTTP_201_CREATED)
async def create_session(
    session_in: SessionCreate,
    caller: Caller = Depends(require_user),
    ctx: AppContext = Depends(get_context),
) -> ChatSession:
    """Create a session with a generated id."""
    session_id = await ctx.store.add(
        _collection(caller.uid),
        {
            "name": session_in.name or default_session_name(),
            "messages": [m.to_document() for m in session_in.messages],
        },
    )
    logger.info(f"Session {session_id} created for {caller.uid}")
    return _to_session(await ctx.store.get(_path(caller.uid, session_id)))


@router.get("/{session_id}", response_model=ChatSession)
async def get_session(
    session_id: str,
    caller: Caller = Depends(require_user),
    ctx: AppContext = Depends(get_context),
) -> ChatSession:
    """Read one session."""
    doc = await ctx.store.get(_path(caller.uid, session_id))
    if doc is None:
        raise _not_found()
    return _to_session(doc)


@router.put("/{session_id}", response_model=ChatSession)
async def save_session(
    session_id: str,
    session_in: SessionSave,
    caller: Caller = Depends(require_user),
    ctx: AppContext = Depends(get_context),
) -> ChatSession:
    """Create or replace a session's messages under a client-chosen id.

    Idempotent: replaying the same save leaves the same document.
    The name is kept when omitted.
    """
    path = _path(caller.uid, session_id)
    existing = await ctx.store.get(path)
    name = session_in.name or (existing or {}).get("name") or default_session_name()
    doc = await ctx.store.set(
        path,
        {"name": name, "messages": [m.to_document() for m in session_in.messages]},
    )
    logger.info(
        f"Session {session_id} {'updated' if existing else 'created'} "
        f"({len(session_in.messages)} messages)"
    )
    return _to_session(doc)


@router.patch("/{session_id}", response_model=ChatSession)
async def rename_session(
    session_id: str,
    session_in: SessionRename,
    caller: Caller = Depends(require_user),
    ctx: AppContext = Depends(get_context),
) -> ChatSession:
    """Rename a session."""
    try:
        doc = await ctx.store.update(_path(caller.uid, session_id), {"name": session_in.name})
    except DocumentNotFoundError as e:
        raise _not_found() from e
    return _to_session(doc)


@router.delete("/{session_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_session(
    session_id: str,
    caller: Caller = Depends(require_user),
    ctx: AppContext = Depends(get_context),
) -> Response:
    """Delete a session."""
    if not await ctx.store.delete(_path(caller.uid, session_id)):
        raise _not_found()
    logger.info(f"Session {session_id} deleted for {caller.uid}")
    return Response(status_code=status.HTTP_204_NO_CONTENT)
