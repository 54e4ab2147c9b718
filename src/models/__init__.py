"""Pydantic models for API requests, responses and stored documents.

Provides type safety, validation, and automatic OpenAPI documentation.

Models:
    - ChatMessage / ChatSession: persisted chat history
    - UserProfile / TokenResponse: identity and auth
    - Course: instructor-created course
    - ThemePrefs: appearance settings
    - CallableRequest: callable function envelope
"""

from src.models.schemas import (
    PRIVILEGED_ROLES,
    AiChatResponse,
    CallableRequest,
    ChatMessage,
    ChatRole,
    ChatSession,
    Course,
    LoginRequest,
    Role,
    SessionCreate,
    SessionRename,
    SessionSave,
    SignupRequest,
    Theme,
    ThemePrefs,
    TokenResponse,
    UserProfile,
    utc_now_iso,
)

__all__ = [
    "PRIVILEGED_ROLES",
    "AiChatResponse",
    "CallableRequest",
    "ChatMessage",
    "ChatRole",
    "ChatSession",
    "Course",
    "LoginRequest",
    "Role",
    "SessionCreate",
    "SessionRename",
    "SessionSave",
    "SignupRequest",
    "Theme",
    "ThemePrefs",
    "TokenResponse",
    "UserProfile",
    "utc_now_iso",
]
