"""Authentication dependencies shared by the routers."""

from dataclasses import dataclass

from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from src.api.context import AppContext, get_context
from src.api.security import decode_access_token

bearer_scheme = HTTPBearer(auto_error=False)


@dataclass(frozen=True)
class Caller:
    """Authenticated identity attached to a request."""

    uid: str


def get_caller(
    credentials: HTTPAuthorizationCredentials | None = Depends(bearer_scheme),
    ctx: AppContext = Depends(get_context),
) -> Caller | None:
    """Resolve the caller from the bearer token, or None if absent/invalid."""
    if credentials is None:
        return None
    uid = decode_access_token(credentials.credentials, ctx.config)
    return Caller(uid=uid) if uid else None


def require_user(caller: Caller | None = Depends(get_caller)) -> Caller:
    """Like get_caller, but rejects anonymous requests with 401."""
    if caller is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Authentication required",
            headers={"WWW-Authenticate": "Bearer"},
        )
    return caller
