"""ASGI entry point: `uvicorn doconnect.main:app`.

Invariants:
    - Every router is listed in ROUTERS; nothing is discovered implicitly
    - Startup order: logging, engine, optional create_all, optional seed,
      upload directory
    - The engine is disposed on shutdown
"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from doconnect.api.error_handlers import register_error_handlers
from doconnect.api.routes import (
    admin, answers, auth, files, health, notification_socket, notifications,
    profile, questions, votes,
)
from doconnect.config import get_settings
from doconnect.infrastructure.database import init_db
from doconnect.infrastructure.file_storage import LocalFileStorage
from doconnect.infrastructure.observability import setup_logging
from doconnect.services.seed import seed_database

logger = logging.getLogger(__name__)

ROUTERS = (
    health, auth, questions, answers, votes, notifications,
    notification_socket, admin, files, profile,
)


@asynccontextmanager
async def lifespan(app: FastAPI):
    settings = get_settings()
    setup_logging(settings.log_level, settings.log_format)
    manager = init_db(
        settings.database_url,
        pool_size=settings.database_pool_size,
        max_overflow=settings.database_max_overflow,
    )
    if settings.create_tables_on_startup:
        await manager.create_all()
    if settings.seed_on_startup:
        async with manager.session() as db:
            await seed_database(db, settings)
    LocalFileStorage(settings.upload_dir).ensure_root()
    logger.info("DoConnect API ready", extra={"path": str(settings.upload_dir)})
    yield
    logger.info("DoConnect API stopping")
    await manager.dispose()


app = FastAPI(title="DoConnect API", version="1.0.0", lifespan=lifespan)

settings = get_settings()
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

register_error_handlers(app)

for module in ROUTERS:
    app.include_router(module.router)
