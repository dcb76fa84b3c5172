"""
FastAPI application for the scouting CRM.
"""
from contextlib import asynccontextmanager
import logging
import os

from fastapi import FastAPI

from scoutcrm.config import settings
from scoutcrm.logging_config import setup_logging
from scoutcrm.routes import auth, players
from scoutcrm.routes.admin import router as admin_router
from scoutcrm.utils.db_async import DATABASE_URL, dispose_engine, init_db
from scoutcrm.utils.db_url import describe_database_url

logger = logging.getLogger(__name__)

setup_logging(level=settings.log_level, access_log=settings.access_log)


def _should_create_tables() -> bool:
    """Dev servers create missing tables; managed deployments run Alembic."""
    return settings.is_dev and settings.auto_init_db and not os.getenv("FLY_APP_NAME")


@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info(f"DB target: {describe_database_url(DATABASE_URL)}")
    logger.info(f"External player data API: {settings.tm_api_base}")

    if _should_create_tables():
        try:
            await init_db()
        except Exception:
            logger.exception("init_db failed")
            raise
        logger.info("Tables ready (create_all).")
    else:
        logger.info("Skipping create_all; schema is managed by Alembic")

    yield

    try:
        await dispose_engine()
        logger.info("DB engine disposed.")
    except Exception:
        logger.exception("Failed to dispose DB engine")


def create_app() -> FastAPI:
    application = FastAPI(
        title="Scout CRM",
        lifespan=lifespan,
        # interactive docs only outside production
        docs_url="/docs" if settings.env != "prod" else None,
        redoc_url=None,
    )
    application.include_router(auth.router)
    application.include_router(players.router)
    application.include_router(admin_router)

    @application.get("/health")
    async def health_check():
        """Health Check Endpoint"""
        return {"status": "ok", "env": settings.env}

    return application


app = create_app()

if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=8080)
