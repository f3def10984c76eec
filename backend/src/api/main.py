"""FastAPI application entry point."""
import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, RedirectResponse
from sqlalchemy.exc import SQLAlchemyError

from api.routers import auth, health, tasks
from core.auth import LOGIN_PATH, AuthenticationRequiredError, clear_session_cookie
from core.config import get_settings
from core.logging_setup import setup_logging
from core.redis import RedisClient, set_redis_client
from db.session import async_session_factory, init_models
from services.session_store import SessionStoreError, purge_expired_sessions

logger = logging.getLogger(__name__)

GENERIC_ERROR = "Something went wrong."


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:  # noqa: ARG001
    """Create tables, drop expired sessions and connect Redis; close Redis on shutdown."""
    settings = get_settings()
    setup_logging(settings.log_level)

    await init_models()
    async with async_session_factory() as db:
        purged = await purge_expired_sessions(db)
        await db.commit()
    logger.info("expired_sessions_purged", extra={"count": purged})

    redis_client = RedisClient(settings.redis_url, enabled=settings.redis_enabled)
    await redis_client.connect()
    set_redis_client(redis_client)
    try:
        yield
    finally:
        await redis_client.close()
        set_redis_client(None)


async def redirect_to_login(request: Request, exc: AuthenticationRequiredError) -> RedirectResponse:  # noqa: ARG001
    """No live session: send the client to the login page and drop any stale cookie."""
    response = RedirectResponse(LOGIN_PATH, status_code=status.HTTP_303_SEE_OTHER)
    clear_session_cookie(response)
    return response


async def store_error(request: Request, exc: Exception) -> JSONResponse:
    """Persistence failures are logged in full and reported without details."""
    logger.exception(
        "store_error",
        exc_info=exc,
        extra={"path": request.url.path, "user_id": getattr(request.state, "user_id", None)},
    )
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"detail": GENERIC_ERROR},
    )


def create_app() -> FastAPI:
    """Build the application with middleware, exception handlers and routers."""
    settings = get_settings()
    app = FastAPI(
        title="Fastodo API",
        description="A multi-user personal task tracker with buckets, filtering and sorting.",
        version="0.1.0",
        lifespan=lifespan,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["GET", "POST", "DELETE"],
        allow_headers=["Content-Type"],
    )

    app.add_exception_handler(AuthenticationRequiredError, redirect_to_login)
    app.add_exception_handler(SQLAlchemyError, store_error)
    app.add_exception_handler(SessionStoreError, store_error)

    app.include_router(health.router)
    app.include_router(auth.router)
    app.include_router(tasks.router)
    return app


app = create_app()
