"""Shared page frame, auth guard and theme handling for the NiceGUI pages."""

import logging
from collections.abc import Iterator
from contextlib import contextmanager

from nicegui import app, ui

from src.client import APIError, LmsApiClient, get_client_config
from src.models.schemas import Theme

logger = logging.getLogger(__name__)

DARK_MODE_VALUES: dict[str, bool | None] = {"light": False, "dark": True, "system": None}

NAV_LINKS = [
    ("AI Tutor", "/", "smart_toy"),
    ("Dashboard", "/dashboard", "dashboard"),
    ("Create course", "/instructor/create-course", "add_box"),
    ("Settings", "/settings", "settings"),
]


def api_client(token: str | None = None) -> LmsApiClient:
    """Build an API client for the current browser session."""
    config = get_client_config()
    return LmsApiClient(
        config.api_base_url,
        token=token if token is not None else app.storage.user.get("token"),
        timeout=config.timeout,
    )


def current_user() -> dict | None:
    """The signed-in user stored for this browser, or None."""
    if not app.storage.user.get("token"):
        return None
    return app.storage.user.get("user")


def require_login() -> dict | None:
    """Return the signed-in user or redirect to the login page."""
    user = current_user()
    if user is None:
        ui.navigate.to("/login")
    return user


def remember_login(token: str, user: dict) -> None:
    app.storage.user["token"] = token
    app.storage.user["user"] = user


async def refresh_login() -> dict | None:
    """Re-read the signed-in user's profile from the API.

    Picks up role changes made since login. A rejected token (expired, or
    signed with a key the server no longer has) signs the browser out.

    Returns:
        The refreshed user, or None after redirecting to the login page.
    """
    user = require_login()
    if user is None:
        return None
    async with api_client() as api:
        try:
            profile = await api.current_profile()
        except APIError as e:
            logger.warning(f"Could not refresh profile: {e}")
            return user
    if profile is None:
        logout()
        return None
    user = profile.model_dump()
    app.storage.user["user"] = user
    return user


def logout() -> None:
    app.storage.user.pop("token", None)
    app.storage.user.pop("user", None)
    ui.navigate.to("/login")


def apply_theme(theme: Theme | None = None) -> None:
    """Apply a theme choice (or the stored one) to the page."""
    theme = theme or app.storage.user.get("theme", "system")
    app.storage.user["theme"] = theme
    ui.dark_mode(DARK_MODE_VALUES.get(theme))


@contextmanager
def frame(title: str) -> Iterator[None]:
    """Page chrome: header with navigation and logout."""
    apply_theme()
    user = current_user() or {}
    with ui.header().classes("items-center justify-between bg-indigo-600"):
        with ui.row().classes("items-center gap-3"):
            ui.icon("school").classes("text-white text-2xl")
            ui.label(title).classes("text-lg font-semibold text-white")
        with ui.row().classes("items-center gap-1"):
            for label, target, icon in NAV_LINKS:
                ui.button(label, icon=icon, on_click=lambda t=target: ui.navigate.to(t)).props(
                    "flat color=white dense no-caps"
                )
            if user:
                ui.label(user.get("email") or "").classes("text-xs text-white/80 ml-3")
                ui.button(icon="logout", on_click=logout).props("flat round color=white")
    with ui.column().classes("w-full max-w-6xl mx-auto p-4 gap-4"):
        yield
