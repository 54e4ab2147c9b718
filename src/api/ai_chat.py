"""REST chat endpoint used by the page-embedded chat UI.

``POST /api/ai/aichat`` with ``{"prompt": ..., "context": ...}`` returns
``{"reply": ...}`` on success and ``{"error": ...}`` otherwise. Unlike the
callable ``aiChat`` it does not require a signed-in caller.
"""

import json
import logging
from typing import Any

from fastapi import APIRouter, Depends, Request, status
from fastapi.responses import JSONResponse

from src.api.context import AppContext, get_context
from src.models.schemas import AiChatResponse
from src.tutor import UpstreamServiceError

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/ai", tags=["ai"])


def _error(status_code: int, message: str, headers: dict[str, str] | None = None) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"error": message}, headers=headers)


async def _read_json(request: Request) -> dict[str, Any] | None:
    try:
        payload = await request.json()
    except (json.JSONDecodeError, UnicodeDecodeError):
        return None
    return payload if isinstance(payload, dict) else None


@router.post("/aichat")
async def ai_chat(request: Request, ctx: AppContext = Depends(get_context)) -> JSONResponse:
    """Answer a prompt with the tutor.

    Returns:
        200 with the reply; echo reply when no provider key is configured.

    Errors:
        400: Body not a JSON object, prompt missing, not a string or blank.
        500: Upstream LLM failure.
    """
    payload = await _read_json(request)
    if payload is None:
        return _error(status.HTTP_400_BAD_REQUEST, "Request body must be a JSON object.")

    prompt = payload.get("prompt")
    if not isinstance(prompt, str) or not prompt.strip():
        return _error(
            status.HTTP_400_BAD_REQUEST,
            "Prompt is required and must be a string.",
        )
    prompt = prompt.strip()

    context = payload.get("context")
    context = context.strip() if isinstance(context, str) and context.strip() else None

    try:
        reply = await ctx.tutor.ask(prompt, context)
    except UpstreamServiceError as e:
        logger.error(f"AI Chat API Error: {e}")
        return _error(status.HTTP_500_INTERNAL_SERVER_ERROR, "AI request failed.")

    return JSONResponse(content=AiChatResponse(reply=reply.text).model_dump())


@router.api_route("/aichat", methods=["GET", "PUT", "PATCH", "DELETE"], include_in_schema=False)
async def ai_chat_wrong_method() -> JSONResponse:
    """Reject non-POST requests with the JSON error shape."""
    return _error(
        status.HTTP_405_METHOD_NOT_ALLOWED,
        "Method not allowed. Use POST.",
        headers={"Allow": "POST"},
    )
