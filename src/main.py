"""FastAPI application for the handles service."""

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

import structlog
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.gzip import GZipMiddleware
from fastapi.responses import ORJSONResponse
from slowapi.errors import RateLimitExceeded
from slowapi.middleware import SlowAPIMiddleware
from sqlalchemy.exc import SQLAlchemyError

from api.exception_handlers import setup_exception_handlers
from api.middleware.logging import RequestLoggingMiddleware
from api.middleware.request_id import RequestIDMiddleware
from api.routes.health import router as health_router
from api.v1 import router as v1_router
from api.v1.dependencies import get_uow_factory, set_reserved_registry
from core.config import settings
from core.logging import setup_logging
from core.rate_limit import limiter, rate_limit_exceeded_handler
from domain.services.reserved_registry import load_reserved_registry

logger = structlog.get_logger()

setup_logging()

API_DESCRIPTION = f"""## User Handles

Unique, human-readable `@handles` for every account.

### Features
- **Availability**: format, reserved-word and uniqueness checks with suggestions
- **Renames**: case-insensitive uniqueness, one rename per {settings.handle_rename_cooldown_days} days, full history
- **Search**: exact, prefix and substring matches for autocomplete

### Authentication
Endpoints under `/handles/me` need a bearer token:
```
Authorization: Bearer <your_token>
```

### Rate Limits
- Reads: {settings.rate_limit_read}
- Renames: {settings.rate_limit_write}
"""

OPENAPI_TAGS = [
    {"name": "health", "description": "Liveness and database connectivity"},
    {"name": "handles", "description": "Handle availability, renames, history and search"},
]


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Load the reserved handle registry before serving requests."""
    try:
        registry = await load_reserved_registry(get_uow_factory())
    except (SQLAlchemyError, OSError):
        logger.exception("reserved_registry_load_failed")
    else:
        set_reserved_registry(registry)
    yield


def create_app() -> FastAPI:
    """Build the application with middleware, handlers and routers."""
    app = FastAPI(
        lifespan=lifespan,
        default_response_class=ORJSONResponse,
        title=settings.app_name,
        description=API_DESCRIPTION,
        version=settings.app_version,
        debug=settings.debug,
        openapi_tags=OPENAPI_TAGS,
    )

    app.state.limiter = limiter
    app.add_exception_handler(RateLimitExceeded, rate_limit_exceeded_handler)
    app.add_middleware(SlowAPIMiddleware)

    # Last added runs outermost, so the request id exists before logging.
    app.add_middleware(RequestLoggingMiddleware)
    app.add_middleware(RequestIDMiddleware)

    app.add_middleware(GZipMiddleware, minimum_size=1000)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins_list,
        allow_credentials=True,
        allow_methods=["GET", "PUT", "OPTIONS"],
        allow_headers=["Authorization", "Content-Type", "X-Request-ID"],
    )

    setup_exception_handlers(app)

    app.include_router(health_router)
    app.include_router(v1_router, prefix="/api/v1")

    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "main:app",
        host=settings.host,
        port=settings.port,
        reload=not settings.is_production,
    )
