import logging
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager
from importlib.metadata import version as pkg_version

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from cubedraft.api import draft_router, health_router, images_router
from cubedraft.config import settings
from cubedraft.db.database import async_session_factory, init_db
from cubedraft.db.store import DatabaseStore
from cubedraft.models.failure import (
    KnownError,
    create_known_failure,
    create_unknown_failure,
)
from cubedraft.services.context import DraftContext

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Application lifespan handler for startup/shutdown."""
    await init_db()
    context = DraftContext(DatabaseStore(async_session_factory))
    app.state.context = context
    try:
        await context.reload()
    except KnownError as e:
        # Serve /health and report not ready until a reload succeeds
        logger.error("Initial cube load failed: %s", e)
    yield
    await context.close()


app = FastAPI(
    title=settings.app_name,
    version=pkg_version("cubedraft"),
    lifespan=lifespan,
)

app.include_router(draft_router)
app.include_router(health_router)
app.include_router(images_router)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],  # Tighten in production
    allow_credentials=False,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(KnownError)
async def known_error_handler(_request: Request, exc: KnownError) -> JSONResponse:
    """Render an expected failure as a known-failure envelope."""
    return JSONResponse(
        status_code=exc.status_code,
        content=create_known_failure(exc).model_dump(mode="json"),
    )


@app.exception_handler(Exception)
async def unknown_error_handler(_request: Request, exc: Exception) -> JSONResponse:
    """Render anything else as an unknown-failure envelope."""
    logger.exception("Unhandled error", exc_info=exc)
    return JSONResponse(
        status_code=500,
        content=create_unknown_failure(exc).model_dump(mode="json"),
    )
