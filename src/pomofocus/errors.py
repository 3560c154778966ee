# src/pomofocus/errors.py

"""Error kinds shared by the stores, services and front-ends.

Every failure is local and surfaced: nothing here is retried. Each kind
carries the HTTP status the web layer answers with, so one exception handler
can map all of them.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Mapping


@dataclass(frozen=True)
class ErrorResponse:
    """Error code, message and details; the code and details go to the logs."""

    code: str
    message: str
    details: dict[str, Any] = field(default_factory=dict)


class PomofocusError(RuntimeError):
    """Base error carrying a structured error response."""

    code = "INTERNAL_ERROR"
    status_code = 500

    def __init__(
        self,
        message: str,
        details: Mapping[str, Any] | None = None,
        *,
        code: str | None = None,
    ) -> None:
        super().__init__(message)
        self.error = ErrorResponse(
            code=code or self.code, message=message, details=dict(details or {})
        )

    @property
    def message(self) -> str:
        return self.error.message


class ValidationError(PomofocusError):
    """A required field is missing or a value is not acceptable."""

    code = "VALIDATION_ERROR"
    status_code = 400


class AuthorizationError(PomofocusError):
    """Agent shared-secret mismatch."""

    code = "UNAUTHORIZED"
    status_code = 401


class TaskNotFoundError(PomofocusError):
    code = "TASK_NOT_FOUND"
    status_code = 404


class StoreError(PomofocusError):
    """Any failure of the underlying task/user store."""

    code = "STORE_ERROR"
    status_code = 500


class MalformedResponseError(PomofocusError):
    """The enhancement reply did not match the expected payload shape."""

    code = "MALFORMED_RESPONSE"
    status_code = 500


class NetworkError(PomofocusError):
    """The language-model call failed (auth, rate limit, connection, API error)."""

    code = "LLM_ERROR"
    status_code = 500


def error_body(message: str) -> dict[str, Any]:
    """Wire shape of an error answer: {"error": "..."}."""
    return {"error": message}
