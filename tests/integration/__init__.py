"""Integration tests for components working together as a system.

Coverage:
    - Auth endpoints and profile creation
    - Callable functions and their error taxonomy
    - REST chat endpoint
    - Session, course and settings endpoints
    - Chat session manager against the real API, including offline replay

No network access required: the LLM is either in echo mode or replaced
by a fake service.
"""
