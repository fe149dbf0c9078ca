import asyncio
import logging
from contextlib import asynccontextmanager
from pathlib import Path
from typing import Optional

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.staticfiles import StaticFiles

from nom_records.core.config import Settings, settings as default_settings
from nom_records.core.database import ConnectionPool, init_db
from nom_records.core.exceptions import register_exception_handlers
from nom_records.core.logging import configure_logging
from nom_records.middleware import CorrelationIdMiddleware
from nom_records.utils.file_utils import ImageStore

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    settings: Settings = app.state.settings
    logger.info("Starting app", extra={"app": settings.APP_NAME})

    owns_pool = app.state.pool is None
    if owns_pool:
        app.state.pool = ConnectionPool.from_settings(settings)

    if settings.CREATE_TABLES_ON_START:
        logger.info("CREATE_TABLES_ON_START enabled: creating missing tables")
        await init_db(app.state.pool)

    # connectivity check runs in the background; a failure is logged, not fatal
    app.state.health_task = asyncio.create_task(app.state.pool.check_health())

    try:
        yield
    finally:
        logger.info("Shutting down")
        health_task = app.state.health_task
        if not health_task.done():
            health_task.cancel()
        if owns_pool:
            await app.state.pool.dispose()
            app.state.pool = None


def create_app(settings: Optional[Settings] = None, pool: Optional[ConnectionPool] = None) -> FastAPI:
    """
    Build the application. Served with `uvicorn nom_records.main:create_app --factory`.

    A pool passed in is used as-is and left for the caller to dispose;
    otherwise one is built from settings at startup and drained at shutdown.
    """
    settings = settings or default_settings
    configure_logging(settings.LOG_LEVEL, sql_echo=settings.DB_ECHO)

    app = FastAPI(title=settings.APP_NAME, lifespan=lifespan)
    app.state.settings = settings
    app.state.pool = pool
    app.state.image_store = ImageStore.from_settings(settings)

    # Middleware: correlation id
    app.add_middleware(CorrelationIdMiddleware)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.CORS_ORIGINS,
        allow_credentials=False,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Route imports
    from nom_records.api.health import router as health_router
    from nom_records.api.v1 import auth as auth_router
    from nom_records.api.v1 import clients as clients_router
    from nom_records.api.v1 import positions as positions_router
    from nom_records.api.v1 import catalogs as catalogs_router
    from nom_records.api.v1 import questionnaires as questionnaires_router

    prefix = settings.API_PREFIX.rstrip("/")

    # Register routers
    app.include_router(health_router, prefix=prefix)
    app.include_router(auth_router.router, prefix=prefix)
    app.include_router(clients_router.router, prefix=prefix)
    app.include_router(positions_router.router, prefix=prefix)
    app.include_router(catalogs_router.router, prefix=prefix)
    app.include_router(questionnaires_router.router, prefix=prefix)

    # Uploaded images
    upload_dir = Path(settings.UPLOAD_DIR)
    upload_dir.mkdir(parents=True, exist_ok=True)
    app.mount(f"{prefix}/uploads", StaticFiles(directory=str(upload_dir)), name="uploads")

    # Exception handlers
    register_exception_handlers(app)

    return app

