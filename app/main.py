from __future__ import annotations
from contextlib import asynccontextmanager
from typing import AsyncIterator

from fastapi import FastAPI

from app.api import query_error_handler, router
from logging_config import configure_logging
from models.errors import QueryError
from services.interpolator import build_default_engine
from services.tabulator import build_default_tabulator
from storage.sample_store import build_default_store


@asynccontextmanager
async def lifespan(_app: FastAPI) -> AsyncIterator[None]:
    # Ingestion runs to completion here, before any request is served.
    build_default_tabulator()
    try:
        yield
    finally:
        build_default_tabulator.cache_clear()
        build_default_engine.cache_clear()
        build_default_store.cache_clear()


def create_app() -> FastAPI:
    configure_logging()
    app = FastAPI(
        title="Hardware Sample Interpolator",
        description="Interpolated, evenly spaced tabulations of sparse per-channel sensor samples.",
        version="0.1.0",
        lifespan=lifespan,
    )
    app.add_exception_handler(QueryError, query_error_handler)
    app.include_router(router)
    return app

app = create_app()
