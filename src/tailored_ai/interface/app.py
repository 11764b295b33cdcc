"""FastAPI application factory."""

from __future__ import annotations

from contextlib import asynccontextmanager
from typing import AsyncIterator

from fastapi import FastAPI

from tailored_ai.interface.dependencies import get_llm_gateway, shutdown, startup
from tailored_ai.interface.error_handlers import register_error_handlers
from tailored_ai.interface.routes import router


@asynccontextmanager
async def _lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Manage startup / shutdown of shared resources."""
    await startup()
    yield
    await shutdown()


def create_app() -> FastAPI:
    """Build and wire the FastAPI application."""
    app = FastAPI(
        title="GitHub Tailored AI",
        version="1.0.0",
        description=(
            "Scores, sorts and reviews a developer's GitHub repositories for a "
            "portfolio or CV, and manages them through a chat assistant."
        ),
        lifespan=_lifespan,
    )

    register_error_handlers(app)
    app.include_router(router)

    # ── Health check (simple liveness probe) ────────────────────────────

    @app.get("/health", include_in_schema=False)
    async def health() -> dict[str, str]:
        return {"status": "ok", "ai": "configured" if get_llm_gateway() else "fallback"}

    return app
