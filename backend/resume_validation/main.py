"""Application entrypoint: sets up FastAPI app, CORS, logging and registers API routers.

The validation worker runs as a separate process (resume_validation.workers.validation_worker);
this app only accepts requests and enqueues jobs.
"""
from __future__ import annotations

from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from resume_validation.api.routers import health as health_router
from resume_validation.api.routers import notifications as notifications_router
from resume_validation.api.routers import validation as validation_router
from resume_validation.core.config import Settings, get_settings
from resume_validation.core.logging_config import configure_logging
from resume_validation.db.session import dispose_engines


configure_logging()


@asynccontextmanager
async def lifespan(app: FastAPI):
    yield
    await dispose_engines()


def create_app(settings: Optional[Settings] = None) -> FastAPI:
    settings = settings or get_settings()
    app = FastAPI(title=settings.APP_NAME, version="0.1.0", lifespan=lifespan)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.CORS_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.include_router(health_router.router)
    app.include_router(validation_router.router)
    app.include_router(notifications_router.router)

    return app


app = create_app()
