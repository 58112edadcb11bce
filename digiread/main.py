"""
DigiRead API entry point.

create_app() wires the pieces together:
- logging, configured once from settings.log_level
- slowapi rate limiting and CORS (credentials allowed for the session cookie)
- exception handlers: domain errors keep their status, a rejected session
  credential is a 401, database and unexpected failures are a generic 500
- routers, all under /api/{version}

Run locally with:
    uvicorn digiread.main:app --reload --port 8989
"""

import logging
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from jose import JWTError
from slowapi.errors import RateLimitExceeded
from slowapi.middleware import SlowAPIMiddleware
from sqlalchemy.exc import SQLAlchemyError

from digiread.config import get_settings
from digiread.exceptions import DigiReadError, Unauthorized
from digiread.routers import (
    auth_router,
    authors_router,
    books_router,
    cart_router,
    checkout_router,
    history_router,
    reviews_router,
)
from digiread.services.rate_limiter import limiter, rate_limit_exceeded_handler

settings = get_settings()

logging.basicConfig(
    level=getattr(logging, settings.log_level),
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)

API_DESCRIPTION = """
## DigiRead API

Backend of a digital book store.

- **Auth**: passwordless sign-in with emailed magic links
- **Authors & Books**: publish epubs, covers served from S3
- **Reviews & History**: ratings and reading progress for owned books
- **Cart & Checkout**: Stripe Checkout, fulfilled by webhook

### Signing in
Request a link at `/api/v1/auth/generate-link`, open it, then exchange the
credential at `/api/v1/auth/exchange-token` for an http-only cookie.
`Authorization: Bearer <credential>` is accepted as well.
"""


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    logger.info(
        f"Starting {settings.app_name} ({settings.environment}, api {settings.api_version})"
    )
    yield
    logger.info(f"Shutting down {settings.app_name}")


def register_exception_handlers(app: FastAPI) -> None:
    @app.exception_handler(DigiReadError)
    async def domain_exception_handler(request: Request, exc: DigiReadError) -> JSONResponse:
        if exc.status_code >= 500:
            logger.error(f"{type(exc).__name__} on {request.url.path}: {exc.message}")
        return JSONResponse(status_code=exc.status_code, content={"detail": exc.message})

    @app.exception_handler(JWTError)
    async def jwt_exception_handler(request: Request, exc: JWTError) -> JSONResponse:
        logger.warning(f"Rejected session credential on {request.url.path}: {exc}")
        return JSONResponse(
            status_code=Unauthorized.status_code,
            content={"detail": Unauthorized.default_message},
        )

    @app.exception_handler(SQLAlchemyError)
    async def sqlalchemy_exception_handler(request: Request, exc: SQLAlchemyError) -> JSONResponse:
        # Details stay in the log; clients get a generic message
        logger.error(f"Database error on {request.url.path}: {exc}")
        return JSONResponse(
            status_code=500,
            content={"detail": "A database error occurred. Please try again later."},
        )

    @app.exception_handler(Exception)
    async def general_exception_handler(request: Request, exc: Exception) -> JSONResponse:
        logger.error(f"Unhandled error on {request.url.path}: {exc}", exc_info=True)
        detail = str(exc) if settings.debug else "An internal error occurred."
        return JSONResponse(status_code=500, content={"detail": detail})


def create_app() -> FastAPI:
    app = FastAPI(
        title=settings.app_name,
        description=API_DESCRIPTION,
        version=settings.api_version,
        docs_url="/docs",
        redoc_url="/redoc",
        openapi_url="/openapi.json",
        lifespan=lifespan,
    )

    app.state.limiter = limiter
    app.add_exception_handler(RateLimitExceeded, rate_limit_exceeded_handler)
    app.add_middleware(SlowAPIMiddleware)

    # allow_credentials rules out "*", so origins are listed explicitly
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.allowed_origins_list,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    register_exception_handlers(app)

    api_prefix = f"/api/{settings.api_version}"
    for router in (
        auth_router,
        authors_router,
        books_router,
        reviews_router,
        history_router,
        cart_router,
        checkout_router,
    ):
        app.include_router(router, prefix=api_prefix)

    @app.get("/health", tags=["Health"], summary="Health check")
    async def health_check() -> dict:
        """Liveness probe for load balancers and orchestrators."""
        return {
            "status": "healthy",
            "app": settings.app_name,
            "version": settings.api_version,
            "environment": settings.environment,
            "rate_limiting": settings.rate_limit_enabled,
        }

    @app.get("/", tags=["Root"], summary="API root")
    async def root() -> dict:
        return {
            "message": f"Welcome to {settings.app_name}",
            "version": settings.api_version,
            "docs": "/docs",
            "health": "/health",
        }

    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "digiread.main:app",
        host=settings.host,
        port=settings.port,
        reload=settings.debug,
    )
