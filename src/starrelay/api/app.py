"""FastAPI application factory."""

import os
import uuid
from contextlib import asynccontextmanager
from typing import AsyncGenerator, List, Optional

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import PlainTextResponse, Response

from .. import __version__
from ..context import EphemerisContext
from ..logging import get_logger
from ..metrics import export
from .routes import router

logger = get_logger(__name__)

REQUEST_ID_HEADER = "X-Request-Id"
EXPOSED_HEADERS = [
    "X-Horizons-Cache",
    "X-Horizons-Cache-Backend",
    "X-Horizons-Cache-Age",
    "X-Horizons-TTL",
    "X-Horizons-Cache-Stale",
    "X-Horizons-Frozen",
    "X-Horizons-Latency",
    REQUEST_ID_HEADER,
]


def allowed_origins() -> List[str]:
    raw = os.getenv("ALLOWED_ORIGINS", "*")
    return [origin.strip() for origin in raw.split(",") if origin.strip()]


def create_app(context: Optional[EphemerisContext] = None) -> FastAPI:
    """Build the API.

    Args:
        context: Cache context to serve from. When omitted, one is created from
            the environment at startup and closed at shutdown; an injected
            context is started and closed the same way.

    Returns:
        The FastAPI application
    """

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
        ctx = context or EphemerisContext.create()
        app.state.context = ctx
        await ctx.start()
        try:
            yield
        finally:
            await ctx.close()
            logger.info("Ephemeris caches closed")

    app = FastAPI(
        title="starrelay",
        version=__version__,
        description="Cached planetary state vectors from JPL Horizons",
        lifespan=lifespan,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=allowed_origins(),
        allow_methods=["GET"],
        allow_headers=["*"],
        expose_headers=EXPOSED_HEADERS,
    )

    @app.middleware("http")
    async def assign_request_id(request: Request, call_next):
        request_id = request.headers.get(REQUEST_ID_HEADER) or str(uuid.uuid4())
        request.state.request_id = request_id
        response = await call_next(request)
        if REQUEST_ID_HEADER not in response.headers:
            response.headers[REQUEST_ID_HEADER] = request_id
        return response

    @app.get("/", response_class=PlainTextResponse)
    async def banner() -> str:
        return "starrelay - JPL Horizons ephemeris API"

    @app.get("/health")
    async def health(request: Request):
        ctx: EphemerisContext = request.app.state.context
        return {
            "ok": True,
            "cacheBackend": ctx.store.backend.value,
            "ttlMs": ctx.settings.ttl_ms,
            "staleMs": ctx.settings.stale_ms,
        }

    @app.get("/metrics")
    async def metrics() -> Response:
        body, content_type = export()
        return Response(content=body, media_type=content_type)

    app.include_router(router)
    return app
