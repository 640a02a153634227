"""FastAPI application factory.

Learn: App factory pattern — create_app() returns a configured FastAPI
instance. Lifespan manages startup/shutdown (database engine).
Middleware, CORS, error handlers and routers are all registered here.
"""

from contextlib import asynccontextmanager

import structlog
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from brickbase import __version__
from brickbase.api import api_router
from brickbase.config import settings
from brickbase.errors import BrickBaseError

logger = structlog.get_logger()


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup and shutdown lifecycle."""
    logger.info(
        "brickbase.starting",
        version=__version__,
        environment=settings.environment,
        port=settings.port,
    )

    yield

    logger.info("brickbase.shutdown")

    from brickbase.db.engine import engine
    await engine.dispose()


async def handle_domain_error(request: Request, exc: BrickBaseError) -> JSONResponse:
    """Named errors that escaped a route. 5xx details never reach the client."""
    if exc.status_code >= 500:
        logger.error(
            "request.failed",
            error_type=type(exc).__name__,
            error=exc.message,
            path=request.url.path,
        )
        return JSONResponse(
            status_code=500, content={"detail": "Internal Server Error"}
        )
    return JSONResponse(status_code=exc.status_code, content={"detail": exc.message})


async def handle_unexpected_error(request: Request, exc: Exception) -> JSONResponse:
    logger.exception("request.unhandled_error", path=request.url.path)
    return JSONResponse(status_code=500, content={"detail": "Internal Server Error"})


def create_app() -> FastAPI:
    """Build and return the FastAPI application."""
    app = FastAPI(
        title="BrickBase",
        description="Residential tenancy management — agreements, residents, rent",
        version=__version__,
        lifespan=lifespan,
    )

    # ── Middleware stack ──────────────────────────────────────
    # Starlette middleware executes in reverse order of registration.
    # Request flow: RequestContext → CORS → handler

    from brickbase.middleware.request_context import RequestContextMiddleware

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.add_middleware(RequestContextMiddleware)

    app.add_exception_handler(BrickBaseError, handle_domain_error)
    app.add_exception_handler(Exception, handle_unexpected_error)

    app.include_router(api_router)

    return app


# Default app instance (used by uvicorn: brickbase.main:app)
app = create_app()
