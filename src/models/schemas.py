from datetime import UTC, datetime
from enum import Enum
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

Role = Literal["student", "instructor", "admin"]
Theme = Literal["light", "dark", "system"]

PRIVILEGED_ROLES = ("instructor", "admin")


def utc_now_iso() -> str:
    """Current UTC time as an ISO 8601 string."""
    return datetime.now(UTC).isoformat()


class DocumentModel(BaseModel):
    """Base for shapes persisted as documents.

    Field names are snake_case in Python and camelCase on the wire and in
    the document store.
    """

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    def to_document(self) -> dict[str, Any]:
        return self.model_dump(by_alias=True, mode="json")


class ChatRole(str, Enum):
    """Speaker of a chat message."""

    USER = "user"
    ASSISTANT = "assistant"


class ChatMessage(DocumentModel):
    """A single chat message in a session.

    Attributes:
        role: Who sent the message (user or assistant).
        text: The message text.
        created_at: ISO timestamp set by the client when the message was made.
    """

    role: ChatRole
    text: str
    created_at: str = Field(default_factory=utc_now_iso)


class ChatSession(DocumentModel):
    """A persisted, ordered list of chat messages owned by one user.

    Attributes:
        id: Session document id.
        name: Display name.
        created_at: Server timestamp of the first write.
        updated_at: Server timestamp of the last write.
        messages: Messages in the order they were sent.
    """

    id: str
    name: str
    created_at: str | None = None
    updated_at: str | None = None
    messages: list[ChatMessage] = Field(default_factory=list)


class SessionCreate(DocumentModel):
    """Payload for creating a session with a server-generated id."""

    name: str | None = None
    messages: list[ChatMessage] = Field(default_factory=list)


class SessionSave(DocumentModel):
    """Payload for the idempotent session save (upsert)."""

    name: str | None = None
    messages: list[ChatMessage]


class SessionRename(DocumentModel):
    """Payload for renaming a session."""

    name: str = Field(..., min_length=1)

    @field_validator("name", mode="before")
    @classmethod
    def strip_name(cls, v: str) -> str:
        """Strip whitespace from name before validation."""
        if isinstance(v, str):
            return v.strip()
        return v


class SignupRequest(BaseModel):
    """Request payload for account creation.

    Attributes:
        email: Login email, stored lower-case.
        password: Plain-text password (hashed before storage).
        display_name: Optional name shown in the UI.
    """

    email: str = Field(..., min_length=3)
    password: str
    display_name: str | None = None

    @field_validator("email", mode="before")
    @classmethod
    def normalize_email(cls, v: str) -> str:
        """Lower-case and strip email before validation."""
        if isinstance(v, str):
            return v.strip().lower()
        return v

    @field_validator("email")
    @classmethod
    def validate_email(cls, v: str) -> str:
        """Require a minimally well-formed address."""
        local, _, domain = v.partition("@")
        if not local or not domain:
            raise ValueError("email must look like name@domain")
        return v


class LoginRequest(BaseModel):
    """Request payload for login."""

    email: str
    password: str

    @field_validator("email", mode="before")
    @classmethod
    def normalize_email(cls, v: str) -> str:
        if isinstance(v, str):
            return v.strip().lower()
        return v


class UserProfile(DocumentModel):
    """Profile document mirrored from the account at signup.

    Attributes:
        uid: User id.
        email: Login email.
        display_name: Optional display name.
        role: student, instructor or admin.
        created_at: Server timestamp of profile creation.
    """

    uid: str
    email: str | None = None
    display_name: str | None = None
    role: Role = "student"
    created_at: str | None = None


class TokenResponse(BaseModel):
    """Bearer token returned by signup and login."""

    access_token: str
    token_type: str = "bearer"
    user: UserProfile


class Course(DocumentModel):
    """A course created by an instructor.

    Attributes:
        id: Course document id.
        title: Course title.
        description: Optional description (empty string when absent).
        price: Price, 0 for free courses.
        instructor_id: Uid of the creating instructor.
        published: Whether the course is visible to students.
        created_at: Server timestamp of creation.
    """

    id: str
    title: str
    description: str = ""
    price: float = 0
    instructor_id: str
    published: bool = False
    created_at: str | None = None


class ThemePrefs(BaseModel):
    """Per-user appearance settings."""

    theme: Theme = "system"


class CallableRequest(BaseModel):
    """Envelope of a callable function request."""

    data: dict[str, Any] | None = None


class AiChatResponse(BaseModel):
    """Reply of the chat endpoints."""

    reply: str
