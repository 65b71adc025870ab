"""
Application factory.

    app = create_app()                      # settings from the environment
    app = create_app(settings, engine=...)  # tests: bring your own engine
"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from sqlalchemy.ext.asyncio import AsyncEngine

from ..config import Settings, get_settings
from ..core.logging import RequestIDMiddleware, setup_logging
from ..database import table_resources
from ..database.session import create_engine, create_session_factory
from ..exceptions import ErrorDispatcher
from ..core.logging.formatters import get_project_version
from . import health
from .error_handlers import register_exception_handlers
from .middleware import BodySizeLimitMiddleware, UnhandledErrorMiddleware
from .v1.router import get_api_router

logger = logging.getLogger(__name__)


def create_app(
    settings: Settings | None = None,
    *,
    engine: AsyncEngine | None = None,
    configure_logging: bool = True,
) -> FastAPI:
    settings = settings or get_settings()
    if configure_logging:
        setup_logging(settings)

    owns_engine = engine is None
    engine = engine or create_engine(settings)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        logger.info("app.startup", extra={"service": settings.SERVICE_NAME, "env": settings.ENV})
        yield
        if owns_engine:
            await engine.dispose()
        logger.info("app.shutdown", extra={"service": settings.SERVICE_NAME})

    app = FastAPI(title=settings.SERVICE_NAME, version=get_project_version(), lifespan=lifespan)
    app.state.settings = settings
    app.state.engine = engine
    app.state.session_factory = create_session_factory(engine)

    dispatcher = ErrorDispatcher(include_stack=settings.INCLUDE_ERROR_STACK, table_resources=table_resources())
    register_exception_handlers(app, dispatcher)

    # last added runs first: request id wraps everything, including 413 rejections
    # and the 500 envelopes built for unhandled errors
    app.add_middleware(UnhandledErrorMiddleware, dispatcher=dispatcher)
    app.add_middleware(BodySizeLimitMiddleware, max_bytes=settings.MAX_BODY_BYTES, dispatcher=dispatcher)
    app.add_middleware(RequestIDMiddleware)

    app.include_router(health.router)
    app.include_router(get_api_router())
    return app
