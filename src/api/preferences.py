"""Per-user settings stored at ``users/{uid}/settings/prefs``."""

from fastapi import APIRouter, Depends

from src.api.context import AppContext, get_context
from src.api.deps import Caller, require_user
from src.models.schemas import ThemePrefs

router = APIRouter(prefix="/api/settings", tags=["settings"])


def _prefs_path(uid: str) -> str:
    return f"users/{uid}/settings/prefs"


@router.get("/prefs", response_model=ThemePrefs)
async def get_prefs(
    caller: Caller = Depends(require_user),
    ctx: AppContext = Depends(get_context),
) -> ThemePrefs:
    """Return saved preferences, defaulting to the system theme."""
    data = await ctx.store.get(_prefs_path(caller.uid))
    return ThemePrefs.model_validate(data or {})


@router.put("/prefs", response_model=ThemePrefs)
async def set_prefs(
    prefs: ThemePrefs,
    caller: Caller = Depends(require_user),
    ctx: AppContext = Depends(get_context),
) -> ThemePrefs:
    """Save preferences (merged into the existing document)."""
    await ctx.store.set(_prefs_path(caller.uid), prefs.model_dump(), merge=True)
    return prefs
