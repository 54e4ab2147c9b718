"""NiceGUI AI tutor page with persisted sessions."""

import asyncio
from datetime import datetime

from nicegui import ui

from src.client import ChatSessionManager, ConnectivityMonitor, OfflineWriteQueue, get_client_config
from src.models.schemas import ChatMessage, ChatRole
from src.ui.layout import api_client, frame, refresh_login
from src.ui.markdown import markdown_to_html

CHAT_CSS = """
<style>
    .message-user {
        background: linear-gradient(135deg, #667eea 0%, #764ba2 100%);
        color: white;
        border-radius: 18px 18px 4px 18px;
    }
    .message-assistant {
        background: #f3f4f6;
        color: #1f2937;
        border-radius: 18px 18px 18px 4px;
    }
    .avatar-user { background: linear-gradient(135deg, #667eea 0%, #764ba2 100%); }
    .avatar-assistant { background: #6b7280; }
    .typing-dot {
        width: 8px; height: 8px;
        background: #667eea;
        border-radius: 50%;
        animation: bounce 1.4s infinite ease-in-out;
    }
    .typing-dot:nth-child(2) { animation-delay: 0.2s; }
    .typing-dot:nth-child(3) { animation-delay: 0.4s; }
    @keyframes bounce {
        0%, 60%, 100% { transform: translateY(0); }
        30% { transform: translateY(-6px); }
    }
</style>
"""


def format_time(iso: str | None) -> str:
    if not iso:
        return ""
    try:
        return datetime.fromisoformat(iso).astimezone().strftime("%I:%M %p")
    except ValueError:
        return ""


def render_message(msg: ChatMessage) -> None:
    is_user = msg.role == ChatRole.USER
    align = "justify-end" if is_user else "justify-start"
    bubble = "message-user" if is_user else "message-assistant"

    with ui.row().classes(f"w-full {align} gap-3 items-end"):
        if not is_user:
            with ui.element("div").classes(
                "w-9 h-9 rounded-full flex items-center justify-center avatar-assistant"
            ):
                ui.icon("smart_toy").classes("text-white text-lg")
        with ui.column().classes("max-w-[70%] gap-1"):
            with ui.element("div").classes(f"px-4 py-3 {bubble}"):
                content = (
                    msg.text.replace("\n", "<br>") if is_user else markdown_to_html(msg.text)
                )
                ui.html(content, sanitize=False).classes("text-sm leading-relaxed")
            with ui.row().classes(f"gap-2 {'self-end' if is_user else 'self-start'}"):
                ui.label(format_time(msg.created_at)).classes("text-[10px] text-gray-400")
                if not is_user:
                    ui.button(
                        icon="content_copy",
                        on_click=lambda text=msg.text: ui.clipboard.write(text),
                    ).props("flat dense round size=xs")


@ui.page("/")
async def chat_page() -> None:
    """AI tutor chat with a session sidebar."""
    user = await refresh_login()
    if user is None:
        return

    ui.add_head_html(CHAT_CSS)
    config = get_client_config()
    api = api_client()
    manager = ChatSessionManager(
        api=api,
        queue=OfflineWriteQueue(config.queue_path),
        user_id=user["uid"],
        notify=lambda message, kind: ui.notify(message, type=kind),
    )
    monitor = ConnectivityMonitor(
        probe=api.health,
        on_online=manager.on_online,
        interval=config.probe_interval,
    )
    ui.context.client.on_disconnect(api.aclose)

    sessions_container: ui.column
    messages_container: ui.column
    input_field: ui.input
    send_btn: ui.button

    def refresh_messages() -> None:
        messages_container.clear()
        with messages_container:
            if not manager.messages:
                with ui.column().classes("w-full h-64 items-center justify-center gap-3"):
                    ui.icon("forum").classes("text-5xl text-gray-300")
                    ui.label("Ask the AI something...").classes("text-lg text-gray-400")
            for msg in manager.messages:
                render_message(msg)
            if manager.loading:
                with ui.row().classes("gap-1 p-2"):
                    for _ in range(3):
                        ui.element("div").classes("typing-dot")

    def refresh_sessions() -> None:
        sessions_container.clear()
        with sessions_container:
            if not manager.sessions:
                ui.label("No sessions yet - click New to start.").classes("text-sm text-gray-500")
            for session in manager.sessions:
                active = "bg-indigo-50" if session.id == manager.current_session_id else "bg-white"
                with ui.card().classes(f"w-full p-2 {active}").props("flat bordered"):
                    ui.button(
                        session.name,
                        on_click=lambda sid=session.id: open_session(sid),
                    ).props("flat dense no-caps align=left").classes("w-full truncate")
                    with ui.row().classes("w-full justify-between items-center"):
                        ui.label(format_time(session.created_at)).classes("text-xs text-gray-400")
                        with ui.row().classes("gap-1"):
                            ui.button(
                                icon="edit", on_click=lambda sid=session.id: ask_rename(sid)
                            ).props("flat dense round size=sm color=amber")
                            ui.button(
                                icon="delete", on_click=lambda sid=session.id: ask_delete(sid)
                            ).props("flat dense round size=sm color=red")

    def refresh_all() -> None:
        refresh_sessions()
        refresh_messages()

    async def open_session(session_id: str) -> None:
        await manager.load_session(session_id)
        refresh_all()

    async def new_session() -> None:
        await manager.new_session()
        refresh_all()

    async def ask_rename(session_id: str) -> None:
        with ui.dialog() as dialog, ui.card():
            name_input = ui.input("Enter new session name:")
            with ui.row():
                ui.button("Cancel", on_click=lambda: dialog.submit(None)).props("flat")
                ui.button("Rename", on_click=lambda: dialog.submit(name_input.value))
        name = await dialog
        if name and await manager.rename_session(session_id, name):
            refresh_sessions()

    async def ask_delete(session_id: str) -> None:
        with ui.dialog() as dialog, ui.card():
            ui.label("Are you sure you want to delete this session?")
            with ui.row():
                ui.button("Cancel", on_click=lambda: dialog.submit(False)).props("flat")
                ui.button("Delete", on_click=lambda: dialog.submit(True)).props("color=red")
        if await dialog and await manager.delete_session(session_id):
            refresh_all()

    async def send_message() -> None:
        text = input_field.value or ""
        if not text.strip() or manager.loading:
            return
        input_field.value = ""
        send_btn.disable()
        pending = asyncio.create_task(manager.send_message(text))
        await asyncio.sleep(0)
        refresh_messages()
        try:
            await pending
        finally:
            send_btn.enable()
            refresh_all()

    with frame("AI Tutor"):
        with ui.row().classes("w-full gap-4 items-stretch no-wrap"):
            with ui.card().classes("w-72 p-3").style("max-height: 75vh; overflow-y: auto"):
                with ui.row().classes("w-full justify-between items-center"):
                    ui.label("Past Sessions").classes("font-semibold")
                    ui.button("New", on_click=new_session).props("dense color=green")
                sessions_container = ui.column().classes("w-full gap-2")

            with ui.card().classes("flex-grow p-0").style("height: 75vh"):
                with ui.row().classes("w-full px-4 py-3 border-b justify-between items-center"):
                    with ui.column().classes("gap-0"):
                        ui.label("AI Tutor").classes("text-lg font-semibold")
                        ui.label(
                            "Ask questions - multi-message sessions are saved automatically."
                        ).classes("text-xs text-gray-500")
                    ui.label().bind_text_from(
                        manager,
                        "current_session_id",
                        lambda sid: "Session active" if sid else "No session selected",
                    ).classes("text-sm text-gray-400")

                with (
                    ui.scroll_area().classes("flex-grow w-full bg-gray-50"),
                    ui.column().classes("w-full p-4"),
                ):
                    messages_container = ui.column().classes("w-full gap-4")

                with ui.row().classes("w-full p-4 gap-3 items-center border-t"):
                    input_field = (
                        ui.input(placeholder="Ask the AI something...")
                        .props("outlined dense")
                        .classes("flex-grow")
                        .on("keydown.enter", send_message)
                    )
                    send_btn = ui.button(icon="send", on_click=send_message).props(
                        "round unelevated color=indigo"
                    )

    refresh_all()
    ui.timer(config.probe_interval, monitor.check)
    await manager.start()
    refresh_all()
