"""Account, dashboard, settings and instructor pages."""

from nicegui import app, ui

from src.client import APIError
from src.models.schemas import PRIVILEGED_ROLES, ThemePrefs
from src.ui.layout import (
    api_client,
    apply_theme,
    current_user,
    frame,
    refresh_login,
    remember_login,
)


def _auth_form(title: str, submit_label: str, on_submit, footer: tuple[str, str, str]) -> None:
    apply_theme()
    with ui.card().classes("w-96 mx-auto mt-20 p-6 gap-3"):
        ui.label(title).classes("text-xl font-semibold")
        email = ui.input("Email").props("type=email outlined dense").classes("w-full")
        password = ui.input("Password", password=True).props("outlined dense").classes("w-full")
        ui.button(
            submit_label, on_click=lambda: on_submit(email.value or "", password.value or "")
        ).classes("w-full")
        text, link_label, target = footer
        with ui.row().classes("w-full justify-center gap-1 text-sm text-gray-500"):
            ui.label(text)
            ui.link(link_label, target)


async def _sign_in(action: str, email: str, password: str) -> None:
    async with api_client(token="") as api:
        try:
            if action == "signup":
                user = await api.signup(email, password)
            else:
                user = await api.login(email, password)
        except APIError as e:
            ui.notify(str(e), type="negative")
            return
        remember_login(api.token, user.model_dump())
        try:
            prefs = await api.get_prefs()
        except APIError:
            prefs = ThemePrefs()
    apply_theme(prefs.theme)
    ui.notify("Signup successful!" if action == "signup" else "Welcome back!", type="positive")
    ui.navigate.to("/dashboard")


@ui.page("/login")
def login_page() -> None:
    if current_user():
        ui.navigate.to("/dashboard")
        return
    _auth_form(
        "Login",
        "Login",
        lambda email, password: _sign_in("login", email, password),
        ("Don't have an account?", "Sign up", "/signup"),
    )


@ui.page("/signup")
def signup_page() -> None:
    _auth_form(
        "Create account",
        "Sign Up",
        lambda email, password: _sign_in("signup", email, password),
        ("Have an account?", "Login", "/login"),
    )


@ui.page("/dashboard")
async def dashboard_page() -> None:
    user = await refresh_login()
    if user is None:
        return

    async with api_client() as api:
        try:
            courses = await api.list_courses()
            sessions = await api.list_sessions()
        except APIError as e:
            ui.notify(f"Could not load dashboard: {e}", type="negative")
            courses, sessions = [], []

    name = user.get("display_name") or (user.get("email") or "User").split("@")[0]
    with frame("Dashboard"):
        ui.label(f"Welcome back, {name}").classes("text-2xl font-semibold")
        ui.label(f"Role: {user.get('role', 'student')}").classes("text-gray-500")

        with ui.row().classes("w-full gap-4"):
            for label, value in (
                ("Total Courses", len(courses)),
                ("Your AI Chats", len(sessions)),
            ):
                with ui.card().classes("w-56 p-5"):
                    ui.label(label).classes("text-sm text-gray-500")
                    ui.label(str(value)).classes("text-2xl font-semibold")

        with ui.card().classes("w-full p-6"):
            ui.label("Courses").classes("text-lg font-semibold")
            if not courses:
                ui.label("No courses yet.").classes("text-sm text-gray-500")
            for course in courses:
                with ui.row().classes("w-full justify-between items-center"):
                    ui.label(course.title).classes("font-medium")
                    ui.label(course.description).classes("text-sm text-gray-500 flex-grow")
                    ui.label("Free" if not course.price else f"{course.price:.2f}")
                    ui.badge("published" if course.published else "draft")


@ui.page("/instructor/create-course")
async def create_course_page() -> None:
    user = await refresh_login()
    if user is None:
        return

    async def submit() -> None:
        async with api_client() as api:
            try:
                course_id = await api.create_course(
                    title.value or "",
                    description.value or None,
                    price.value,
                )
            except APIError as e:
                ui.notify(str(e), type="negative")
                return
        ui.notify(f"Course created: {course_id}", type="positive")
        title.value = description.value = ""
        price.value = 0

    with frame("Create course"):
        if user.get("role") not in PRIVILEGED_ROLES:
            ui.label("Only instructors can create courses.").classes("text-amber-600")
        with ui.card().classes("w-full max-w-xl p-6 gap-3"):
            title = ui.input("Title").props("outlined dense").classes("w-full")
            description = ui.textarea("Description").props("outlined dense").classes("w-full")
            price = ui.number("Price", value=0, min=0, format="%.2f").props("outlined dense")
            ui.button("Create course", on_click=submit)


@ui.page("/settings")
async def settings_page() -> None:
    user = await refresh_login()
    if user is None:
        return

    async def choose(theme: str) -> None:
        apply_theme(theme)
        async with api_client() as api:
            try:
                await api.set_prefs(ThemePrefs(theme=theme))
            except APIError as e:
                ui.notify(f"Could not save theme: {e}", type="warning")
                return
        ui.notify("Theme saved", type="positive")

    with frame("Settings"):
        ui.label("Settings").classes("text-2xl font-semibold")
        ui.label("Personalize your experience.").classes("text-sm text-gray-500")
        with ui.card().classes("w-full max-w-xl p-6"):
            ui.label("Appearance").classes("text-lg font-medium")
            ui.toggle(
                {"light": "Light", "dark": "Dark", "system": "System"},
                value=app.storage.user.get("theme", "system"),
                on_change=lambda e: choose(e.value),
            )
