"""Test package for LMS Tutor.

Structure:
    - unit/: Individual function and class tests
    - integration/: API and client workflows against a real app instance

Integration tests run the FastAPI app in-process over ASGITransport with a
temporary SQLite document store. The tutor runs in echo mode unless a test
swaps in a fake. Leverages pytest with pytest-check for soft assertions.
"""
