"""Callable functions.

Request/response functions invoked as ``POST /functions/{name}`` with a JSON
body ``{"data": {...}}``. Success returns ``{"result": {...}}``; failures
raise `CallableError` and are rendered by the callable error handler.

Every function receives the resolved caller (or None). Authentication is
checked first, before any validation, store access or upstream call.
"""

import logging
import math
from collections.abc import Awaitable, Callable
from typing import Any

from fastapi import APIRouter, Depends
from sqlalchemy.exc import SQLAlchemyError

from src.api.context import AppContext, get_context
from src.api.deps import Caller, get_caller
from src.api.errors import CallableError
from src.models.schemas import (
    PRIVILEGED_ROLES,
    CallableRequest,
    utc_now_iso,
)
from src.tutor import UpstreamServiceError, echo_reply

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/functions", tags=["functions"])

CallableHandler = Callable[[dict[str, Any], Caller, AppContext], Awaitable[dict[str, Any]]]

_registry: dict[str, CallableHandler] = {}

VALID_ROLES = ("student", "instructor", "admin")


def callable_function(name: str) -> Callable[[CallableHandler], CallableHandler]:
    """Register an authenticated callable function under a name."""

    def decorator(func: CallableHandler) -> CallableHandler:
        _registry[name] = func
        return func

    return decorator


def _optional_text(value: Any) -> str:
    return value.strip() if isinstance(value, str) else ""


def _require_text(data: dict[str, Any], field: str) -> str:
    text = _optional_text(data.get(field))
    if not text:
        raise CallableError("invalid-argument", f"Missing '{field}'.")
    return text


def _parse_price(value: Any) -> float:
    if value is None or value == "":
        return 0.0
    if isinstance(value, bool):
        raise CallableError("invalid-argument", "'price' must be a number.")
    try:
        price = float(value)
    except (TypeError, ValueError) as e:
        raise CallableError("invalid-argument", "'price' must be a number.") from e
    if not math.isfinite(price) or price < 0:
        raise CallableError("invalid-argument", "'price' must be zero or positive.")
    return price


async def _caller_role(ctx: AppContext, uid: str) -> str | None:
    profile = await ctx.store.get(f"users/{uid}")
    return profile.get("role") if profile else None


@callable_function("aiChat")
async def ai_chat(data: dict[str, Any], caller: Caller, ctx: AppContext) -> dict[str, Any]:
    """Answer a prompt with the tutor and record the exchange."""
    prompt = _require_text(data, "prompt")
    extra_context = _optional_text(data.get("context"))

    if not ctx.tutor.is_configured:
        logger.warning("LLM not configured. Returning echo.")
        return {"reply": echo_reply(prompt).text}

    try:
        reply = await ctx.tutor.ask(prompt, extra_context or None)
        await ctx.store.add(
            "ai_sessions",
            {
                "uid": caller.uid,
                "prompt": prompt,
                "context": extra_context or None,
                "response": reply.text,
                "model": reply.model,
                "createdAt": utc_now_iso(),
            },
        )
    except (UpstreamServiceError, SQLAlchemyError) as e:
        logger.error(f"aiChat error: {e}")
        raise CallableError("internal", "AI request failed.") from e
    return {"reply": reply.text}


@callable_function("createCourse")
async def create_course(data: dict[str, Any], caller: Caller, ctx: AppContext) -> dict[str, Any]:
    """Create an unpublished course owned by the calling instructor."""
    title = _require_text(data, "title")
    description = _optional_text(data.get("description"))
    price = _parse_price(data.get("price"))

    if await _caller_role(ctx, caller.uid) not in PRIVILEGED_ROLES:
        raise CallableError("permission-denied", "Requires instructor role.")

    course_id = await ctx.store.add(
        "courses",
        {
            "title": title,
            "description": description,
            "price": price,
            "instructorId": caller.uid,
            "published": False,
            "createdAt": utc_now_iso(),
        },
    )
    logger.info(f"Course {course_id} created by {caller.uid}")
    return {"id": course_id}


@callable_function("setUserRole")
async def set_user_role(data: dict[str, Any], caller: Caller, ctx: AppContext) -> dict[str, Any]:
    """Change another user's role. Admin only."""
    uid = _require_text(data, "uid")
    role = _require_text(data, "role")
    if role not in VALID_ROLES:
        raise CallableError("invalid-argument", f"Unknown role '{role}'.")

    if await _caller_role(ctx, caller.uid) != "admin":
        raise CallableError("permission-denied", "Requires admin role.")

    if await ctx.store.get(f"users/{uid}") is None:
        raise CallableError("not-found", f"User '{uid}' not found.")

    await ctx.store.update(f"users/{uid}", {"role": role})
    logger.info(f"Role of {uid} set to {role} by {caller.uid}")
    return {"uid": uid, "role": role}


@router.post("/{name}")
async def invoke(
    name: str,
    body: CallableRequest,
    caller: Caller | None = Depends(get_caller),
    ctx: AppContext = Depends(get_context),
) -> dict[str, Any]:
    """Dispatch a callable function request."""
    handler = _registry.get(name)
    if handler is None:
        raise CallableError("not-found", f"Function '{name}' not found.")
    if caller is None:
        raise CallableError("unauthenticated", "Authentication required.")

    return {"result": await handler(body.data or {}, caller, ctx)}

