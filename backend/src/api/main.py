"""FastAPI application entry point."""
import logging
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

import httpx
from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse

from api.dependencies import set_aggietime_client
from api.routers import aggietime, health
from core.cache import RedisCache
from core.config import get_settings
from core.exceptions import AmbiguousPositionError, MissingPathParameterError, NotFoundError
from core.redis import RedisClient, set_redis_client
from services.aggietime import AggieTimeClient

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None]:  # noqa: ARG001
    """Create the AggieTime client (and optional Redis cache) for the app's lifetime."""
    settings = get_settings()

    redis_client = None
    cache = None
    if settings.redis_enabled:
        redis_client = RedisClient(settings.redis_url)
        await redis_client.connect()
        set_redis_client(redis_client)
        cache = RedisCache(redis_client)

    client = AggieTimeClient(settings, cache=cache)
    set_aggietime_client(client)
    try:
        yield
    finally:
        set_aggietime_client(None)
        await client.aclose()
        if redis_client is not None:
            set_redis_client(None)
            await redis_client.close()


app = FastAPI(
    title="AggieTime API",
    description="Clock in/out and hour summaries backed by the AggieTime service.",
    version="0.1.0",
    lifespan=lifespan,
)


@app.exception_handler(AmbiguousPositionError)
async def ambiguous_position_handler(
    request: Request, exc: AmbiguousPositionError,  # noqa: ARG001
) -> JSONResponse:
    """A position must be chosen explicitly."""
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={"detail": str(exc), "error": exc.kind.value},
    )


@app.exception_handler(MissingPathParameterError)
async def missing_path_parameter_handler(
    request: Request, exc: MissingPathParameterError,  # noqa: ARG001
) -> JSONResponse:
    """Endpoint templates are misconfigured."""
    logger.error("path_template_misconfigured", extra={"missing": exc.missing})
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"detail": str(exc), "error": exc.kind.value},
    )


@app.exception_handler(NotFoundError)
async def not_found_handler(
    request: Request, exc: NotFoundError,  # noqa: ARG001
) -> JSONResponse:
    """The service did not issue what we need (e.g. the CSRF cookie)."""
    return JSONResponse(
        status_code=status.HTTP_502_BAD_GATEWAY,
        content={"detail": str(exc), "error": exc.kind.value},
    )


@app.exception_handler(httpx.HTTPStatusError)
async def upstream_status_handler(
    request: Request, exc: httpx.HTTPStatusError,  # noqa: ARG001
) -> JSONResponse:
    """AggieTime answered with an error status."""
    logger.warning(
        "aggietime_error_response",
        extra={"status_code": exc.response.status_code, "url": str(exc.request.url)},
    )
    return JSONResponse(
        status_code=status.HTTP_502_BAD_GATEWAY,
        content={
            "detail": f"AggieTime responded with {exc.response.status_code}",
            "upstream_status": exc.response.status_code,
        },
    )


@app.exception_handler(httpx.RequestError)
async def upstream_unreachable_handler(
    request: Request, exc: httpx.RequestError,  # noqa: ARG001
) -> JSONResponse:
    """AggieTime could not be reached."""
    logger.warning("aggietime_unreachable", extra={"error": repr(exc)})
    return JSONResponse(
        status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
        content={"detail": "AggieTime is unreachable"},
    )


app.include_router(health.router)
app.include_router(aggietime.router)
