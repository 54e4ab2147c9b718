"""Error taxonomy of the callable functions.

A `CallableError` carries one of a fixed set of codes. The exception handler
registered in `create_app` turns it into the callable wire shape
``{"error": {"status": "INVALID_ARGUMENT", "message": "..."}}`` with the
matching HTTP status.
"""

from typing import Literal

from fastapi import Request, status
from fastapi.responses import JSONResponse

ErrorCode = Literal[
    "unauthenticated",
    "invalid-argument",
    "permission-denied",
    "not-found",
    "internal",
]

HTTP_STATUS_BY_CODE: dict[str, int] = {
    "unauthenticated": status.HTTP_401_UNAUTHORIZED,
    "invalid-argument": status.HTTP_400_BAD_REQUEST,
    "permission-denied": status.HTTP_403_FORBIDDEN,
    "not-found": status.HTTP_404_NOT_FOUND,
    "internal": status.HTTP_500_INTERNAL_SERVER_ERROR,
}


class CallableError(Exception):
    """Error raised by a callable function."""

    def __init__(self, code: ErrorCode, message: str) -> None:
        super().__init__(message)
        self.code = code
        self.message = message

    @property
    def http_status(self) -> int:
        return HTTP_STATUS_BY_CODE[self.code]

    def to_body(self) -> dict[str, dict[str, str]]:
        return {
            "error": {
                "status": self.code.replace("-", "_").upper(),
                "message": self.message,
            }
        }


async def callable_error_handler(request: Request, exc: CallableError) -> JSONResponse:
    """Render a CallableError in the callable wire format."""
    return JSONResponse(status_code=exc.http_status, content=exc.to_body())
