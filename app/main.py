"""FastAPI application entrypoint. No business logic; only wiring, middleware and error mapping."""

from dotenv import load_dotenv

load_dotenv()

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from datetime import timedelta

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from app.api.v1 import router as v1_router
from app.core.config import settings
from app.core.database import SessionLocal
from app.core.errors import (
    AuthzError,
    InsufficientPermissionError,
    InvalidCredentialError,
)
from app.services.catalog import seed_catalog
from app.services.code_store import ExpiringCodeStore

logging.basicConfig(
    level=settings.LOG_LEVEL,
    format="%(asctime)s %(levelname)s %(name)s %(message)s",
    datefmt="%Y-%m-%dT%H:%M:%SZ",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    if settings.SEED_CATALOG_ON_STARTUP:
        db = SessionLocal()
        try:
            seed_catalog(db)
        finally:
            db.close()
    yield


app = FastAPI(
    title="HealthSync API",
    version="0.1.0",
    docs_url="/docs",
    redoc_url="/redoc",
    lifespan=lifespan,
)
app.state.code_store = ExpiringCodeStore(
    timedelta(minutes=settings.VERIFICATION_CODE_TTL_MINUTES),
    max_entries=settings.VERIFICATION_CODE_MAX_ENTRIES,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"] if settings.APP_ENV == "dev" else [],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(AuthzError)
async def authz_error_handler(request: Request, exc: AuthzError) -> JSONResponse:
    """Map domain errors to their HTTP status with a {"detail": ...} body."""
    headers = None
    if isinstance(exc, InvalidCredentialError):
        logger.info(
            "Authentication failed: %s %s reason=%s",
            request.method,
            request.url.path,
            exc.reason or exc.message,
        )
        headers = {"WWW-Authenticate": "Bearer"}
    elif isinstance(exc, InsufficientPermissionError):
        logger.info(
            "Authorization denied: %s %s missing=%s",
            request.method,
            request.url.path,
            exc.missing,
        )
    return JSONResponse(
        status_code=exc.status_code,
        content={"detail": exc.message},
        headers=headers,
    )


app.include_router(v1_router, prefix=settings.API_V1_PREFIX)


@app.get("/")
def root() -> dict[str, str]:
    """Root route; minimal payload for discovery."""
    return {"message": "HealthSync API"}
