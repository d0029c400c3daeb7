"""Inkwell engagement API - FastAPI application."""
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, Response
from sqlalchemy import text

from app.api.v1.api import api_router
from app.core.config import settings
from app.core.exceptions import (
    CommentsDisabledError,
    DuplicateForbiddenTermError,
    EmptyCommentError,
    EngagementError,
    ForbiddenTermError,
    ForbiddenTermNotFoundError,
    InvalidParentError,
    LikesUnavailableError,
    RateLimitedError,
    TargetUnavailableError,
    ValidationError,
)
from app.core.logging import configure_logging, get_logger
from app.core.redis import init_redis, shutdown_redis
from app.db.session import engine

logger = get_logger(__name__)

ERROR_STATUS: dict[type[EngagementError], int] = {
    ValidationError: status.HTTP_422_UNPROCESSABLE_ENTITY,
    EmptyCommentError: status.HTTP_422_UNPROCESSABLE_ENTITY,
    InvalidParentError: status.HTTP_422_UNPROCESSABLE_ENTITY,
    ForbiddenTermError: status.HTTP_422_UNPROCESSABLE_ENTITY,
    DuplicateForbiddenTermError: status.HTTP_422_UNPROCESSABLE_ENTITY,
    TargetUnavailableError: status.HTTP_404_NOT_FOUND,
    ForbiddenTermNotFoundError: status.HTTP_404_NOT_FOUND,
    CommentsDisabledError: status.HTTP_403_FORBIDDEN,
    RateLimitedError: status.HTTP_429_TOO_MANY_REQUESTS,
    LikesUnavailableError: status.HTTP_503_SERVICE_UNAVAILABLE,
}


def error_status(exc: EngagementError) -> int:
    for cls in type(exc).__mro__:
        if cls in ERROR_STATUS:
            return ERROR_STATUS[cls]
    return status.HTTP_400_BAD_REQUEST


@asynccontextmanager
async def lifespan(app: FastAPI):
    configure_logging(settings)
    try:
        async with engine.connect() as conn:
            await conn.execute(text("SELECT 1"))
        logger.info("database_connected")
    except Exception as e:
        logger.warning("database_connection_failed", error=str(e))
    await init_redis()
    yield
    await shutdown_redis()


app = FastAPI(
    title=settings.APP_NAME,
    version="1.0.0",
    lifespan=lifespan,
    docs_url="/docs",
    redoc_url="/redoc",
)
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)
app.include_router(api_router, prefix="/api")


@app.exception_handler(EngagementError)
async def engagement_error_handler(request: Request, exc: EngagementError) -> JSONResponse:
    content = {"detail": exc.message, "code": exc.code}
    if getattr(exc, "phrase", None):
        content["phrase"] = exc.phrase
    if getattr(exc, "field", None):
        content["field"] = exc.field
    status_code = error_status(exc)
    logger.info("engagement_error", code=exc.code, status=status_code, path=request.url.path)
    return JSONResponse(status_code=status_code, content=content)


@app.get("/favicon.ico", include_in_schema=False)
async def favicon():
    return Response(status_code=204)


@app.get("/health")
async def health():
    return {"status": "ok"}


@app.get("/ready")
async def ready():
    """Health check including DB."""
    try:
        async with engine.connect() as conn:
            await conn.execute(text("SELECT 1"))
        return {"status": "ok", "database": "connected"}
    except Exception as e:
        return JSONResponse(
            status_code=503,
            content={"status": "error", "database": str(e)},
        )
