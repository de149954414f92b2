"""
Library API Application

Builds the FastAPI app served by uvicorn (library_api.main:app).

Layout:
=======

1. create_app() wires everything and returns a new application; the book
   cache it creates lives on app.state.book_cache

2. Lifespan
   - logs the effective configuration on startup
   - empties the book cache on shutdown

3. Middleware
   - slowapi: login throttling
   - CORS for the configured origins

4. Error rendering
   - LibraryError subclasses -> their status with a JSON body
   - request parsing errors -> the same 422 shape as rule violations
   - database and unexpected errors -> logged, 500 with a generic message
"""

import logging
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from slowapi.errors import RateLimitExceeded
from slowapi.middleware import SlowAPIMiddleware
from sqlalchemy.exc import SQLAlchemyError

from library_api.config import get_settings
from library_api.exceptions import LibraryError, Unauthenticated, ValidationFailed
from library_api.routers import auth_router, books_router
from library_api.services.cache import ReadThroughCache
from library_api.services.rate_limiter import limiter, rate_limit_exceeded_handler

# =============================================================================
# Logging Configuration
# =============================================================================
settings = get_settings()

logging.basicConfig(
    level=getattr(logging, settings.log_level),
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)


# =============================================================================
# Lifespan Events
# =============================================================================
@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Log the configuration on startup; drop cached books on shutdown."""
    logger.info(f"Starting {settings.app_name} ({settings.environment})...")
    logger.info(f"Debug mode: {settings.debug}")
    logger.info(f"API version: {settings.api_version}")
    logger.info(
        f"Book cache: TTL {settings.cache_ttl_books}s, "
        f"invalidate on write: {settings.cache_invalidate_on_write}"
    )

    yield

    logger.info(f"Shutting down {settings.app_name}...")
    app.state.book_cache.clear()


# =============================================================================
# Error Rendering
# =============================================================================
def _field_from_location(loc: tuple) -> str:
    """Turn a pydantic error location into a field name."""
    parts = [str(part) for part in loc if part not in ("body", "query", "path", "header")]
    return ".".join(parts) or "body"


def request_validation_errors(exc: RequestValidationError) -> dict[str, list[str]]:
    """Group FastAPI request parsing errors by field."""
    errors: dict[str, list[str]] = {}
    for error in exc.errors():
        field = _field_from_location(tuple(error.get("loc", ())))
        errors.setdefault(field, []).append(error.get("msg", "Invalid value."))
    return errors


# =============================================================================
# Application Factory
# =============================================================================
def create_app() -> FastAPI:
    """
    Build a Library API application.

    Each call returns an independent app with its own book cache; the
    limiter and the database engine are shared per process.
    """
    app = FastAPI(
        title=settings.app_name,
        description="""
## Library API

A RESTful API for managing a catalog of books.

### Features
- **Books**: CRUD operations, paginated listing, cached single reads
- **Auth**: registration, login, logout

### Authentication
Mutating book endpoints and logout require a bearer token obtained from
`POST /login`:

    Authorization: Bearer <token>

### Rate Limiting
Login attempts are throttled per client.
        """,
        version=settings.api_version,
        docs_url="/docs",
        redoc_url="/redoc",
        openapi_url="/openapi.json",
        lifespan=lifespan,
    )

    # -------------------------------------------------------------------------
    # Book Cache
    # -------------------------------------------------------------------------
    app.state.book_cache = ReadThroughCache(
        ttl_seconds=settings.cache_ttl_books,
        maxsize=settings.cache_max_entries,
        name="book",
    )

    # -------------------------------------------------------------------------
    # Rate Limiting
    # -------------------------------------------------------------------------
    app.state.limiter = limiter
    app.add_exception_handler(RateLimitExceeded, rate_limit_exceeded_handler)
    app.add_middleware(SlowAPIMiddleware)

    # -------------------------------------------------------------------------
    # CORS Middleware
    # -------------------------------------------------------------------------
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.allowed_origins_list,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # -------------------------------------------------------------------------
    # Exception Handlers
    # -------------------------------------------------------------------------
    @app.exception_handler(LibraryError)
    async def library_exception_handler(
        request: Request,
        exc: LibraryError,
    ) -> JSONResponse:
        """
        Render domain errors.

        422 {"message", "errors"}, 401 {"message"} with a Bearer challenge,
        404 {"message"}.
        """
        headers = None
        if isinstance(exc, Unauthenticated):
            headers = {"WWW-Authenticate": "Bearer"}

        return JSONResponse(
            status_code=exc.status_code,
            content=exc.to_dict(),
            headers=headers,
        )

    @app.exception_handler(RequestValidationError)
    async def request_validation_exception_handler(
        request: Request,
        exc: RequestValidationError,
    ) -> JSONResponse:
        """Render malformed bodies and parameters like rule violations."""
        failure = ValidationFailed(request_validation_errors(exc))
        return JSONResponse(
            status_code=failure.status_code,
            content=failure.to_dict(),
        )

    @app.exception_handler(SQLAlchemyError)
    async def sqlalchemy_exception_handler(
        request: Request,
        exc: SQLAlchemyError,
    ) -> JSONResponse:
        """A failed query or commit that no service turned into a domain error."""
        logger.error(f"Database error on {request.method} {request.url.path}: {exc}")
        return JSONResponse(
            status_code=500,
            content={
                "message": "A database error occurred. Please try again later."
            },
        )

    @app.exception_handler(Exception)
    async def general_exception_handler(
        request: Request,
        exc: Exception,
    ) -> JSONResponse:
        """
        Catch-all exception handler.

        In debug mode the error text is returned to the client.
        """
        logger.error(f"Unhandled error: {exc}", exc_info=True)

        if settings.debug:
            return JSONResponse(
                status_code=500,
                content={"message": str(exc)},
            )

        return JSONResponse(
            status_code=500,
            content={"message": "An internal error occurred."},
        )

    # -------------------------------------------------------------------------
    # Register Routers
    # -------------------------------------------------------------------------
    # prefix="/api/v1" creates versioned URLs: /api/v1/books, /api/v1/login
    app.include_router(auth_router, prefix=settings.api_prefix)
    app.include_router(books_router, prefix=settings.api_prefix)

    # -------------------------------------------------------------------------
    # Health Check Endpoint
    # -------------------------------------------------------------------------
    @app.get(
        "/health",
        tags=["Health"],
        summary="Health check",
        description="Liveness probe with book cache statistics.",
    )
    async def health_check(request: Request) -> dict:
        """
        Health check endpoint.

        Returns API status including book cache statistics.
        """
        return {
            "status": "healthy",
            "app": settings.app_name,
            "version": settings.api_version,
            "cache": request.app.state.book_cache.stats(),
            "rate_limiting": {
                "enabled": settings.rate_limit_enabled,
                "login_limit": settings.rate_limit_login,
            },
        }

    @app.get(
        "/",
        tags=["Root"],
        summary="API root",
        description="Service name, version and entry points.",
    )
    async def root() -> dict:
        """Root endpoint with API information."""
        return {
            "message": f"Welcome to {settings.app_name}",
            "version": settings.api_version,
            "docs": "/docs",
            "health": "/health",
            "books": f"{settings.api_prefix}/books",
        }

    return app


# =============================================================================
# Application Instance
# =============================================================================
# This is what uvicorn imports: uvicorn library_api.main:app

app = create_app()


# =============================================================================
# Development Server
# =============================================================================
# python -m library_api.main

if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "library_api.main:app",
        host=settings.host,
        port=settings.port,
        reload=settings.debug,
    )
