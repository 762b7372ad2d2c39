"""
FastAPI application factory.

    uvicorn villa_api.main:app
"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI

from villa_api.api.v1.error_handlers import register_exception_handlers
from villa_api.api.v1.villas import router as villa_router
from villa_api.config.settings import Settings, get_settings
from villa_api.core.logging import RequestIDMiddleware, setup_logging, stop_queue_logging
from villa_api.database.session import dispose_engine, init_models
from villa_api.utils.logging import get_project_version

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    settings: Settings = app.state.settings
    if settings.DB_CREATE_ALL:
        await init_models()
    logger.info("app.startup", extra={"env": settings.ENV})
    try:
        yield
    finally:
        logger.info("app.shutdown")
        await dispose_engine()
        stop_queue_logging()


def create_app(settings: Settings | None = None) -> FastAPI:
    settings = settings or get_settings()
    setup_logging(settings)

    app = FastAPI(title="Magic Villa API", version=get_project_version(), lifespan=lifespan)
    app.state.settings = settings

    app.add_middleware(RequestIDMiddleware)
    app.include_router(villa_router)
    register_exception_handlers(app)

    return app


app = create_app()
