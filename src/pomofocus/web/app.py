# src/pomofocus/web/app.py

"""FastAPI entrypoint for the pomofocus HTTP API."""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from ..core.state import AppState
from ..errors import PomofocusError, error_body

# Import modules to register routes with the shared router.
from . import api_agent, api_chat, api_tasks  # noqa: F401
from .router import api_router

logger = logging.getLogger(__name__)


def create_app(state: AppState | None = None) -> FastAPI:
    """
    Build the app around an AppState.

    Without an explicit state one is bootstrapped from settings at startup.
    """

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        if getattr(app.state, "pomofocus", None) is None:
            from ..cli.bootstrap import create_initial_state

            app.state.pomofocus = create_initial_state()
        yield

    app = FastAPI(title="pomofocus", lifespan=lifespan)
    app.state.pomofocus = state

    @app.exception_handler(PomofocusError)
    def handle_pomofocus_error(request: Request, exc: PomofocusError) -> JSONResponse:
        err = exc.error
        level = logging.WARNING if exc.status_code >= 500 else logging.INFO
        logger.log(
            level,
            "%s %s failed [%s]: %s %s",
            request.method,
            request.url.path,
            err.code,
            err.message,
            err.details,
        )
        return JSONResponse(status_code=exc.status_code, content=error_body(exc.message))

    @app.exception_handler(RequestValidationError)
    def handle_invalid_request(request: Request, exc: RequestValidationError) -> JSONResponse:
        return JSONResponse(status_code=400, content=error_body("Invalid request"))

    @app.get("/health", status_code=200)
    def health() -> dict[str, str]:
        return {"status": "ok"}

    app.include_router(api_router)
    return app
