"""HTTP client for all UI -> API communication.

One `LmsApiClient` per signed-in browser session. It attaches the bearer
token to every request and turns failures into two exception types:
`APIError` for HTTP error responses and `OfflineError` when the server could
not be reached at all.
"""

import logging
from typing import Any

import httpx

from src.models.schemas import ChatMessage, ChatSession, Course, ThemePrefs, UserProfile

logger = logging.getLogger(__name__)


class APIError(Exception):
    def __init__(self, message: str, status_code: int = 0) -> None:
        super().__init__(message)
        self.status_code = status_code


class OfflineError(APIError):
    """The API could not be reached."""


def _error_message(resp: httpx.Response) -> str:
    try:
        body = resp.json()
    except ValueError:
        return resp.text or f"HTTP {resp.status_code}"
    if isinstance(body, dict):
        error = body.get("error")
        if isinstance(error, dict):
            return error.get("message") or str(error)
        if error:
            return str(error)
        if detail := body.get("detail"):
            return detail if isinstance(detail, str) else str(detail)
    return resp.text


class LmsApiClient:
    """Async client for the LMS API.

    Args:
        base_url: API base URL.
        token: Bearer token of the signed-in user, if any.
        transport: Optional httpx transport (ASGITransport in tests).
        timeout: Request timeout in seconds.
    """

    def __init__(
        self,
        base_url: str,
        token: str | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
        timeout: float = 30.0,
    ) -> None:
        self.token = token
        self._client = httpx.AsyncClient(base_url=base_url, transport=transport, timeout=timeout)

    async def __aenter__(self) -> "LmsApiClient":
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self._client.aclose()

    def _headers(self) -> dict[str, str]:
        return {"Authorization": f"Bearer {self.token}"} if self.token else {}

    async def _request(self, method: str, path: str, **kwargs: Any) -> Any:
        try:
            resp = await self._client.request(method, path, headers=self._headers(), **kwargs)
        except httpx.RequestError as e:
            raise OfflineError(f"Connection failed: {e}") from e
        if resp.is_error:
            raise APIError(_error_message(resp), resp.status_code)
        if resp.status_code == 204 or not resp.content:
            return None
        return resp.json()

    # ── Auth ─────────────────────────────────────────────────────────────────

    async def signup(
        self, email: str, password: str, display_name: str | None = None
    ) -> UserProfile:
        data = await self._request(
            "POST",
            "/api/auth/signup",
            json={"email": email, "password": password, "display_name": display_name},
        )
        self.token = data["access_token"]
        return UserProfile.model_validate(data["user"])

    async def login(self, email: str, password: str) -> UserProfile:
        data = await self._request(
            "POST", "/api/auth/login", json={"email": email, "password": password}
        )
        self.token = data["access_token"]
        return UserProfile.model_validate(data["user"])

    async def me(self) -> UserProfile:
        return UserProfile.model_validate(await self._request("GET", "/api/auth/me"))

    async def current_profile(self) -> UserProfile | None:
        """Fresh profile of the token's user, or None once the token is rejected."""
        try:
            return await self.me()
        except APIError as e:
            if e.status_code == 401:
                return None
            raise

    # ── Chat ─────────────────────────────────────────────────────────────────

    async def ai_chat(self, prompt: str, context: str | None = None) -> str:
        """Ask the REST chat endpoint. Returns the reply text."""
        data = await self._request(
            "POST", "/api/ai/aichat", json={"prompt": prompt, "context": context}
        )
        return data.get("reply") or ""

    async def call(self, name: str, data: dict[str, Any]) -> dict[str, Any]:
        """Invoke a callable function and return its result."""
        body = await self._request("POST", f"/functions/{name}", json={"data": data})
        return body["result"]

    async def create_course(
        self, title: str, description: str | None = None, price: float | None = None
    ) -> str:
        result = await self.call(
            "createCourse", {"title": title, "description": description, "price": price}
        )
        return result["id"]

    async def list_courses(self) -> list[Course]:
        return [Course.model_validate(c) for c in await self._request("GET", "/api/courses")]

    # ── Sessions ─────────────────────────────────────────────────────────────

    async def list_sessions(self) -> list[ChatSession]:
        return [ChatSession.model_validate(s) for s in await self._request("GET", "/api/sessions")]

    async def get_session(self, session_id: str) -> ChatSession:
        return ChatSession.model_validate(
            await self._request("GET", f"/api/sessions/{session_id}")
        )

    async def create_session(self, name: str | None = None) -> ChatSession:
        return ChatSession.model_validate(
            await self._request("POST", "/api/sessions", json={"name": name, "messages": []})
        )

    async def save_session(
        self,
        session_id: str,
        messages: list[ChatMessage],
        name: str | None = None,
    ) -> ChatSession:
        """Upsert a session under a client-chosen id."""
        payload = {"name": name, "messages": [m.to_document() for m in messages]}
        return ChatSession.model_validate(
            await self._request("PUT", f"/api/sessions/{session_id}", json=payload)
        )

    async def rename_session(self, session_id: str, name: str) -> ChatSession:
        return ChatSession.model_validate(
            await self._request("PATCH", f"/api/sessions/{session_id}", json={"name": name})
        )

    async def delete_session(self, session_id: str) -> None:
        await self._request("DELETE", f"/api/sessions/{session_id}")

    # ── Settings ─────────────────────────────────────────────────────────────

    async def get_prefs(self) -> ThemePrefs:
        return ThemePrefs.model_validate(await self._request("GET", "/api/settings/prefs"))

    async def set_prefs(self, prefs: ThemePrefs) -> ThemePrefs:
        return ThemePrefs.model_validate(
            await self._request("PUT", "/api/settings/prefs", json=prefs.model_dump())
        )

    async def health(self) -> bool:
        """True when the API answers its health check."""
        try:
            await self._request("GET", "/health")
        except APIError:
            return False
        return True
