"""
Dota Companion Web API

FastAPI application serving authentication, player profile and stats
endpoints to the companion frontend.

This package exposes:
- create_app: Application factory (used by wsgi.py, the CLI and the tests)
- AppContext: Startup-built container handed to the routes
"""

import logging
import time
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.responses import Response

from dotacompanion import __version__
from dotacompanion.api.context import AppContext
from dotacompanion.core.errors import DotaCompanionError, UpstreamError

logger = logging.getLogger(__name__)


# =============================================================================
# Error Handlers
# =============================================================================


def install_error_handlers(app: FastAPI) -> None:
    """Map the error taxonomy to JSON responses by type."""

    @app.exception_handler(DotaCompanionError)
    async def app_error_handler(request: Request, exc: DotaCompanionError) -> JSONResponse:
        if exc.status_code >= 500:
            extra = f" (upstream status {exc.status})" if isinstance(exc, UpstreamError) else ""
            logger.error(f"{request.method} {request.url.path}: {exc.code}: {exc.message}{extra}")
        else:
            logger.info(f"{request.method} {request.url.path}: {exc.code}: {exc.message}")
        headers = {"WWW-Authenticate": "Bearer"} if exc.status_code == 401 else None
        return JSONResponse(status_code=exc.status_code, content=exc.to_dict(), headers=headers)

    @app.exception_handler(RequestValidationError)
    async def validation_error_handler(
        request: Request, exc: RequestValidationError
    ) -> JSONResponse:
        errors = [
            {"field": ".".join(str(part) for part in err["loc"][1:]), "message": err["msg"]}
            for err in exc.errors()
        ]
        return JSONResponse(
            status_code=400,
            content={"error": "validation_error", "detail": "Invalid request", "errors": errors},
        )

    @app.exception_handler(Exception)
    async def global_exception_handler(request: Request, exc: Exception) -> JSONResponse:
        """Unclassified failures: log everything, disclose nothing."""
        logger.exception(f"Unhandled exception for {request.method} {request.url.path}")
        return JSONResponse(
            status_code=500,
            content={
                "error": "internal_error",
                "detail": "An unexpected error occurred. Please try again later.",
            },
        )


# =============================================================================
# App Factory
# =============================================================================


def create_app(context: AppContext | None = None) -> FastAPI:
    """Build the FastAPI application around ``context`` (built from config if omitted)."""
    context = context or AppContext.from_config()

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        yield
        await context.aclose()

    app = FastAPI(
        title="Dota Companion API",
        description="Backend for the Dota 2 companion app - auth, player profiles and stats",
        version=__version__,
        lifespan=lifespan,
    )
    app.state.context = context

    # =========================================================================
    # Middleware
    # =========================================================================

    origins = context.config.server.cors_origins
    app.add_middleware(
        CORSMiddleware,
        allow_origins=origins,
        # Browsers refuse credentials with a wildcard origin
        allow_credentials="*" not in origins,
        allow_methods=["GET", "HEAD", "PUT", "PATCH", "POST", "DELETE"],
        allow_headers=["*"],
        expose_headers=["Authorization"],
    )

    @app.middleware("http")
    async def request_logging_middleware(request: Request, call_next) -> Response:
        """Log one line per request and add basic security headers."""
        start = time.perf_counter()
        response = await call_next(request)
        elapsed_ms = (time.perf_counter() - start) * 1000
        logger.info(
            f"{request.method} {request.url.path} -> {response.status_code} ({elapsed_ms:.0f}ms)"
        )
        response.headers["X-Content-Type-Options"] = "nosniff"
        response.headers["Referrer-Policy"] = "strict-origin-when-cross-origin"
        return response

    install_error_handlers(app)

    # =========================================================================
    # Routes
    # =========================================================================

    from dotacompanion.api.routes_analytics import router as analytics_router
    from dotacompanion.api.routes_auth import router as auth_router
    from dotacompanion.api.routes_misc import router as misc_router
    from dotacompanion.api.routes_profile import router as profile_router
    from dotacompanion.api.routes_steam import router as steam_router

    app.include_router(auth_router)
    app.include_router(steam_router)
    app.include_router(profile_router)
    app.include_router(analytics_router)
    app.include_router(misc_router)

    return app


__all__ = ["AppContext", "create_app"]
