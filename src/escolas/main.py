"""
Application factory.

    uvicorn escolas.main:app        # or the `escolas-api` console script

The lifespan configures logging, opens the Database (engine + pool), creates
missing tables when DB_CREATE_TABLES is on, and disposes everything at
shutdown. A Database placed on `app.state.database` before startup (tests)
is used as is and left for its owner to dispose.
"""

import logging
from contextlib import asynccontextmanager

import uvicorn
from fastapi import FastAPI

from escolas.api.v1.error_handlers import register_exception_handlers
from escolas.api.v1.escolas import router as escolas_router
from escolas.config.settings import Settings, get_settings
from escolas.core.logging import RequestIDMiddleware, setup_logging, stop_queue_logging
from escolas.database.session import Database
from escolas.utils.logging import get_project_version

logger = logging.getLogger(__name__)


def create_app(settings: Settings | None = None) -> FastAPI:
    settings = settings or get_settings()

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        setup_logging(settings)

        owns_database = getattr(app.state, "database", None) is None
        if owns_database:
            app.state.database = Database.from_settings(settings)

        database: Database = app.state.database
        if settings.DB_CREATE_TABLES:
            await database.create_tables()

        logger.info("app.startup", extra={"env": settings.ENV})
        try:
            yield
        finally:
            if owns_database:
                await database.dispose()
                app.state.database = None
            logger.info("app.shutdown")
            stop_queue_logging()

    app = FastAPI(title="Escolas API", version=get_project_version(), lifespan=lifespan)
    app.state.settings = settings
    app.state.database = None

    app.add_middleware(RequestIDMiddleware)
    register_exception_handlers(app)
    app.include_router(escolas_router)

    return app


app = create_app()


def run() -> None:
    uvicorn.run("escolas.main:app", host="0.0.0.0", port=8000)
