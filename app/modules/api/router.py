"""
API Router - BFF endpoints for frontend consumption.

Frontend calls `/api/*` only. The BFF handles:
- Movie listing (filter/sort/pagination), detail, statistics
- Movie create/update/delete with offline fallback
- Connectivity status, manual probe and runtime network signals
- Pending operation queue inspection and "sync now"
"""

from __future__ import annotations

import logging
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query, Request
from fastapi.responses import JSONResponse

from app.core.services.container import ServiceContainer
from app.integrations.movies_api.errors import MoviesApiError, RemoteApplicationError
from app.modules.api.models import MovieIn, MoviePage, NetworkEventIn

_logger = logging.getLogger(__name__)

router = APIRouter()


def get_services(request: Request) -> ServiceContainer:
    return request.app.state.services


def _upstream_error(e: MoviesApiError) -> HTTPException:
    """Translate a movies service error that was not absorbed by the offline fallback."""
    if isinstance(e, RemoteApplicationError):
        return HTTPException(status_code=e.status_code, detail=e.detail)
    _logger.error("Movies service error: %s", e)
    return HTTPException(status_code=502, detail=f"Movies service error: {e}")


def _status_payload(services: ServiceContainer) -> dict:
    return {
        **services.monitor.to_dict(),
        "pendingOperations": services.movies.pending_count(),
    }


# =============================================================================
# MOVIES ENDPOINTS
# =============================================================================


@router.get("/movies")
async def list_movies(
    filter: Optional[str] = None,
    sort: Optional[str] = None,
    order: str = Query("asc", pattern="^(asc|desc)$"),
    page: int = Query(1, ge=1),
    pageSize: Optional[int] = Query(None, ge=1, le=100),
    services: ServiceContainer = Depends(get_services),
):
    """List movies (live or from the local mirror) one page at a time."""
    try:
        movies, source = await services.movies.fetch_movies(filter=filter, sort=sort, order=order)
    except MoviesApiError as e:
        raise _upstream_error(e)

    size = pageSize or services.settings.MOVIES_PAGE_SIZE
    start = (page - 1) * size
    items = movies[start:start + size]
    result = MoviePage(
        items=items,
        page=page,
        pageSize=size,
        total=len(movies),
        hasMore=start + size < len(movies),
    )
    return JSONResponse(
        content=result.model_dump(),
        headers={
            "X-Data-Source": source,
            "X-Network-Status": services.monitor.get_status().value,
        },
    )


@router.get("/movies/statistics")
async def movie_statistics(services: ServiceContainer = Depends(get_services)):
    try:
        return await services.movies.get_statistics()
    except MoviesApiError as e:
        raise _upstream_error(e)


@router.get("/movies/{movie_id}")
async def get_movie(movie_id: str, services: ServiceContainer = Depends(get_services)):
    try:
        movie = await services.movies.get_movie_by_id(movie_id)
    except MoviesApiError as e:
        raise _upstream_error(e)
    if movie is None:
        raise HTTPException(status_code=404, detail="Movie not found")
    return movie


@router.post("/movies", status_code=201)
async def create_movie(payload: MovieIn, services: ServiceContainer = Depends(get_services)):
    try:
        return await services.movies.add_movie(payload.to_movie())
    except MoviesApiError as e:
        raise _upstream_error(e)


@router.patch("/movies/{movie_id}")
async def update_movie(movie_id: str, payload: MovieIn, services: ServiceContainer = Depends(get_services)):
    try:
        return await services.movies.update_movie(payload.to_movie(movie_id))
    except MoviesApiError as e:
        raise _upstream_error(e)


@router.delete("/movies/{movie_id}")
async def delete_movie(movie_id: str, services: ServiceContainer = Depends(get_services)):
    try:
        await services.movies.delete_movie(movie_id)
    except MoviesApiError as e:
        raise _upstream_error(e)
    return {"message": "Movie deleted successfully"}


# =============================================================================
# CONNECTIVITY ENDPOINTS
# =============================================================================


@router.get("/network/status")
def network_status(services: ServiceContainer = Depends(get_services)):
    """Status indicator + pending operations counter."""
    return _status_payload(services)


@router.post("/network/check")
async def network_check(services: ServiceContainer = Depends(get_services)):
    """Probe the movies service now instead of waiting for the timer."""
    reachable = await services.monitor.probe_once()
    return {"reachable": reachable, **_status_payload(services)}


@router.post("/network/event")
def network_event(payload: NetworkEventIn, services: ServiceContainer = Depends(get_services)):
    """Runtime connectivity signal forwarded by the client (browser online/offline)."""
    services.monitor.handle_network_event(payload.reachable)
    return _status_payload(services)


# =============================================================================
# SYNC ENDPOINTS
# =============================================================================


@router.get("/sync/pending")
def list_pending(services: ServiceContainer = Depends(get_services)):
    return [op.model_dump() for op in services.pending.get_pending_operations()]


@router.post("/sync")
async def sync_now(services: ServiceContainer = Depends(get_services)):
    if not services.monitor.is_online:
        raise HTTPException(
            status_code=409,
            detail=f"Sync is only available while online (status: {services.monitor.get_status().value})",
        )
    report = await services.movies.sync_pending_operations()
    return {**report.to_dict(), "pendingOperations": services.movies.pending_count()}
