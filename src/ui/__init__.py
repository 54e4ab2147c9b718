"""NiceGUI interface for the tutor, dashboard and settings pages.

Responsibilities:
    - Login and signup forms that keep the token in per-browser storage
    - AI tutor chat with a session sidebar and offline save queue
    - Course dashboard and instructor course form
    - Light/dark/system theme preference

Contains minimal business logic. Delegates all operations to the API client.
"""
