"""FastAPI application entry point."""

from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from statsync.api.routers import session_router, stats_router
from statsync.app_context import AppContext
from statsync.config.logging_config import setup_logging
from statsync.config.settings import get_settings
from statsync.core.exceptions import AppError, MissingScopeError


def create_app(context: Optional[AppContext] = None) -> FastAPI:
    """Build the application; `context` is created at startup when omitted."""

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """Application lifespan handler."""
        # Startup
        setup_logging()
        app.state.context = context or AppContext()
        yield
        # Shutdown
        await app.state.context.close()

    settings = get_settings()

    app = FastAPI(
        title=settings.app_name,
        description="Optimistic aggregate statistics for interactive clients",
        version=settings.app_version,
        lifespan=lifespan,
    )

    app.include_router(session_router)
    app.include_router(stats_router)

    @app.exception_handler(AppError)
    async def app_error_handler(request: Request, exc: AppError) -> JSONResponse:
        """Global handler for application errors."""
        status_code = 409 if isinstance(exc, MissingScopeError) else 400
        return JSONResponse(
            status_code=status_code,
            content={"error": exc.code, "message": exc.message},
        )

    @app.get("/health")
    def health_check() -> dict[str, str]:
        """Health check endpoint."""
        return {"status": "healthy"}

    return app


app = create_app()
