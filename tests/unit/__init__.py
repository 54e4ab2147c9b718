"""Unit tests for individual components in isolation.

Coverage:
    - store/: Document paths, reads, writes and ordering
    - tutor/: Configuration, echo fallback and reply normalization
    - client/: Retry policy, offline queue and connectivity tracking
    - api/security: Password hashing and token round trips

Uses mocks for external services when needed.
"""
