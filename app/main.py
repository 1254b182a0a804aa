from __future__ import annotations

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from .api.deps import get_confirmation_dispatcher
from .api.errors import register_exception_handlers
from .api.routers.auth import router as auth_router
from .infrastructure.db.engine import create_schema, get_engine
from .shared.config import get_settings
from .shared.logging import configure_logging


logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(_app: FastAPI):
    settings = get_settings()
    configure_logging(settings.log_level)
    if settings.auto_create_schema and settings.postgres_dsn:
        logger.info("main: creating account schema")
        create_schema(get_engine(settings.postgres_dsn))
    yield
    if get_confirmation_dispatcher.cache_info().currsize:
        get_confirmation_dispatcher().shutdown(wait=True)


app = FastAPI(title="Auth API", lifespan=lifespan)
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_methods=["*"],
    allow_headers=["*"],
)
register_exception_handlers(app)
app.include_router(auth_router)


@app.get("/health")
def health():
    return {"status": "ok"}
