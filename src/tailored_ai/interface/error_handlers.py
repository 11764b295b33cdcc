"""Global exception handlers — translate domain errors to HTTP responses.

Each domain exception maps to a specific HTTP status code and the
standard ``{"success": false, "message": "..."}`` envelope.
"""

from __future__ import annotations

import logging

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from tailored_ai.domain.exceptions import (
    GitHubAuthError,
    GitHubRateLimitError,
    GitHubRequestError,
    GitHubUnavailableError,
    InvalidRepositoryError,
    LlmError,
    LlmTimeoutError,
    RepositoryAccessDeniedError,
    RepositoryNotFoundError,
    TailoredAiError,
)

logger = logging.getLogger(__name__)

# Starlette resolves handlers along the exception's MRO, so subclasses
# (LlmTimeoutError) win over their bases (LlmError).
_EXCEPTION_STATUS: list[tuple[type[TailoredAiError], int]] = [
    (InvalidRepositoryError, 422),
    (GitHubAuthError, 401),
    (RepositoryAccessDeniedError, 403),
    (RepositoryNotFoundError, 404),
    (GitHubRateLimitError, 429),
    (GitHubRequestError, 502),
    (GitHubUnavailableError, 503),
    (LlmError, 502),
    (LlmTimeoutError, 504),
    (TailoredAiError, 500),
]


def _error_json(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content={"success": False, "message": message},
    )


def register_error_handlers(app: FastAPI) -> None:
    """Attach exception handlers to the FastAPI application."""

    # ── Domain exceptions ───────────────────────────────────────────────

    def _make_handler(status_code: int):  # type: ignore[no-untyped-def]
        async def handler(request: Request, exc: Exception) -> JSONResponse:
            logger.warning("%s: %s", type(exc).__name__, exc)
            return _error_json(status_code, str(exc))

        return handler

    for exc_type, code in _EXCEPTION_STATUS:
        app.add_exception_handler(exc_type, _make_handler(code))

    # ── Pydantic / FastAPI validation errors ────────────────────────────

    @app.exception_handler(RequestValidationError)
    async def validation_handler(
        request: Request, exc: RequestValidationError
    ) -> JSONResponse:
        messages = []
        for err in exc.errors():
            loc = " → ".join(str(p) for p in err.get("loc", []))
            messages.append(f"{loc}: {err.get('msg', 'validation error')}")
        return _error_json(422, "; ".join(messages))

    # ── Catch-all for unexpected errors ─────────────────────────────────

    @app.exception_handler(Exception)
    async def generic_handler(request: Request, exc: Exception) -> JSONResponse:
        logger.exception("Unhandled exception")
        return _error_json(500, "An unexpected error occurred. Please try again later.")
