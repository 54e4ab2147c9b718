"""Authentication endpoints: signup, login and current profile.

Signup creates a credential document under ``accounts/`` and mirrors the
identity into a ``users/{uid}`` profile with the default ``student`` role.
"""

import hashlib
import logging
import uuid

from fastapi import APIRouter, Depends, HTTPException, status

from src.api.context import AppContext, get_context
from src.api.deps import Caller, require_user
from src.api.security import create_access_token, hash_password, verify_password
from src.models.schemas import (
    LoginRequest,
    SignupRequest,
    TokenResponse,
    UserProfile,
    utc_now_iso,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/auth", tags=["auth"])


def account_path(email: str) -> str:
    """Credential document path for an email (hashed, never raw)."""
    digest = hashlib.sha256(email.lower().encode()).hexdigest()
    return f"accounts/{digest}"


async def load_profile(ctx: AppContext, uid: str) -> UserProfile | None:
    """Read a user profile document."""
    data = await ctx.store.get(f"users/{uid}")
    if data is None:
        return None
    return UserProfile.model_validate({**data, "uid": uid})


@router.post("/signup", status_code=status.HTTP_201_CREATED, response_model=TokenResponse)
async def signup(
    user_in: SignupRequest,
    ctx: AppContext = Depends(get_context),
) -> TokenResponse:
    """Create an account and its student profile.

    Raises:
        400: Password too short.
        409: Email already registered.
    """
    if len(user_in.password) < ctx.config.min_password_length:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"Password must be at least {ctx.config.min_password_length} characters",
        )

    path = account_path(user_in.email)
    if await ctx.store.get(path) is not None:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail="Email already registered",
        )

    uid = uuid.uuid4().hex[:28]
    await ctx.store.set(
        path,
        {"uid": uid, "email": user_in.email, "passwordHash": hash_password(user_in.password)},
    )

    profile = UserProfile(
        uid=uid,
        email=user_in.email,
        display_name=user_in.display_name,
        role="student",
        created_at=utc_now_iso(),
    )
    await ctx.store.set(f"users/{uid}", profile.to_document())
    logger.info(f"User profile created for {uid}")

    return TokenResponse(access_token=create_access_token(uid, ctx.config), user=profile)


@router.post("/login", response_model=TokenResponse)
async def login(
    user_in: LoginRequest,
    ctx: AppContext = Depends(get_context),
) -> TokenResponse:
    """Exchange email and password for a bearer token."""
    account = await ctx.store.get(account_path(user_in.email))
    if account is None or not verify_password(user_in.password, account["passwordHash"]):
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Incorrect email or password",
        )

    uid = account["uid"]
    profile = await load_profile(ctx, uid)
    if profile is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Profile not found",
        )

    logger.info(f"User logged in: {uid}")
    return TokenResponse(access_token=create_access_token(uid, ctx.config), user=profile)


@router.get("/me", response_model=UserProfile)
async def me(
    caller: Caller = Depends(require_user),
    ctx: AppContext = Depends(get_context),
) -> UserProfile:
    """Return the caller's profile."""
    profile = await load_profile(ctx, caller.uid)
    if profile is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Profile not found")
    return profile
