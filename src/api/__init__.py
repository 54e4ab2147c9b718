"""FastAPI endpoints for the LMS tutor.

Endpoints:
    - GET /health: Service health status
    - POST /api/auth/{signup,login}, GET /api/auth/me: Accounts
    - POST /functions/{aiChat,createCourse,setUserRole}: Callable functions
    - POST /api/ai/aichat: REST chat endpoint
    - /api/sessions: Chat session documents
    - GET /api/courses: Course listing
    - /api/settings/prefs: Theme preference
"""

from src.api.app import app, create_app
from src.api.context import AppContext

__all__ = ["AppContext", "app", "create_app"]
