"""Ephemeris and catalog routes."""

from typing import Optional

from fastapi import APIRouter, Request
from fastapi.responses import JSONResponse

from ..cache import SnapshotMode
from ..cache.presentation import body_headers, snapshot_headers
from ..catalog import BODIES, PLANETS
from ..context import EphemerisContext
from ..errors import UnknownBodyError
from ..logging import get_logger

logger = get_logger(__name__)

FAILURE_MESSAGE = "Failed to retrieve ephemerides"
REFRESH_VALUES = ("1", "true")

router = APIRouter(prefix="/api")


def _context(request: Request) -> EphemerisContext:
    return request.app.state.context


def _request_id(request: Request) -> Optional[str]:
    return getattr(request.state, "request_id", None)


def wants_refresh(request: Request) -> bool:
    """True when ?refresh=1|true or X-Refresh-Cache: 1|true is present."""
    if any(v in REFRESH_VALUES for v in request.query_params.getlist("refresh")):
        return True
    return request.headers.get("X-Refresh-Cache") in REFRESH_VALUES


async def _snapshot_response(request: Request, mode: SnapshotMode) -> JSONResponse:
    context = _context(request)
    request_id = _request_id(request)
    try:
        result = await context.snapshots.get(
            force_refresh=wants_refresh(request),
            correlation_id=request_id,
            mode=mode,
        )
    except Exception as e:
        logger.error(
            f"Snapshot request failed (request {request_id}, "
            f"path {request.url.path}, query {dict(request.query_params)}): {e}"
        )
        return JSONResponse({"error": FAILURE_MESSAGE}, status_code=500)

    return JSONResponse(
        result.payload,
        headers=snapshot_headers(result, context.settings.ttl_ms, request_id),
    )


@router.get("/ephemeris/planets")
async def planets(request: Request):
    return await _snapshot_response(request, SnapshotMode.STATE_VECTORS)


@router.get("/ephemeris/planets/state-vectors")
async def planets_state_vectors(request: Request):
    return await _snapshot_response(request, SnapshotMode.STATE_VECTORS)


@router.get("/ephemeris/planets/full")
async def planets_full(request: Request):
    return await _snapshot_response(request, SnapshotMode.FULL)


@router.get("/ephemeris/body/{body_id}")
async def body(body_id: str, request: Request):
    context = _context(request)
    request_id = _request_id(request)
    try:
        payload = await context.bodies.get(
            body_id,
            force_refresh=wants_refresh(request),
            correlation_id=request_id,
        )
    except UnknownBodyError:
        return JSONResponse({"error": "Unknown body id"}, status_code=404)
    except Exception as e:
        logger.error(f"Body request for {body_id} failed (request {request_id}): {e}")
        return JSONResponse({"error": FAILURE_MESSAGE}, status_code=500)

    return JSONResponse(payload, headers=body_headers(payload, request_id))


@router.get("/catalog")
async def catalog(request: Request):
    """The static body catalog: snapshot planets and single-body ids."""
    return {
        "planets": [planet.to_dict() for planet in PLANETS],
        "bodies": [entry.to_dict() for entry in BODIES],
        "requestId": _request_id(request),
    }
