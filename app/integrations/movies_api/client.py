"""
Movies API Integration - HTTP Client

SRP: Only HTTP communication with the hosted movies service.
No mirror, no queue, no business logic. Just requests and response parsing.

Responsibilities:
- GET/POST/PATCH/DELETE on /movies
- Lightweight reachability probe
- Timeout handling (default 8s)
- Error translation to custom exceptions
"""
from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional

import httpx
from pydantic import ValidationError

from app.core.config import settings
from .errors import BadUpstreamResponse, RemoteApplicationError, UpstreamTimeout, UpstreamUnavailable
from .types import Movie

logger = logging.getLogger(__name__)


class MoviesApiClient:
    """
    HTTP client for the hosted movies REST service.

    SRP: Only HTTP, no fallback logic.

    Endpoints:
    - GET /movies - List movies (filter, sort, order)
    - GET /movies/{id} - Movie detail
    - POST /movies - Create
    - PATCH /movies - Update (id in body)
    - DELETE /movies?id=... - Delete
    """

    def __init__(
        self,
        base_url: Optional[str] = None,
        *,
        timeout: Optional[float] = None,
        api_key: Optional[str] = None,
        probe_path: Optional[str] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.base_url = (base_url or settings.MOVIES_API_BASE_URL).rstrip("/")
        self.timeout = settings.MOVIES_API_TIMEOUT if timeout is None else timeout
        self.api_key = settings.MOVIES_API_KEY if api_key is None else api_key
        self.probe_path = probe_path or settings.MOVIES_API_PROBE_PATH
        self._transport = transport

    def _headers(self) -> Dict[str, str]:
        headers = {"Accept": "application/json"}
        if self.api_key:
            headers["apikey"] = self.api_key
        return headers

    @staticmethod
    def _error_detail(response: httpx.Response) -> str:
        try:
            body = response.json()
        except ValueError:
            return response.text[:200] or response.reason_phrase
        if isinstance(body, dict):
            for key in ("error", "detail", "message"):
                if body.get(key):
                    return str(body[key])
        return str(body)[:200]

    async def _request(
        self,
        method: str,
        path: str,
        *,
        params: Optional[Dict[str, Any]] = None,
        json: Optional[Dict[str, Any]] = None,
    ) -> httpx.Response:
        url = f"{self.base_url}{path}"
        try:
            async with httpx.AsyncClient(timeout=self.timeout, transport=self._transport) as client:
                r = await client.request(method, url, params=params, json=json, headers=self._headers())
        except httpx.TimeoutException:
            raise UpstreamTimeout(f"Movies service timeout after {self.timeout}s")
        except httpx.RequestError as e:
            raise UpstreamUnavailable(f"Cannot connect to movies service: {e}")

        if r.status_code >= 400:
            raise RemoteApplicationError(
                f"Movies service responded {r.status_code} for {method} {path}",
                status_code=r.status_code,
                detail=self._error_detail(r),
            )
        return r

    @staticmethod
    def _json(response: httpx.Response) -> Any:
        try:
            return response.json()
        except ValueError as e:
            raise BadUpstreamResponse(f"Malformed JSON from movies service: {e}")

    @staticmethod
    def _to_movie(data: Any) -> Movie:
        try:
            return Movie.model_validate(data)
        except ValidationError as e:
            raise BadUpstreamResponse(f"Unexpected movie payload: {e}")

    async def probe(self) -> None:
        """
        GET the probe path (default /movies).

        Returns normally when the service answers with a success status.
        Raises UpstreamUnavailable/UpstreamTimeout when the host is
        unreachable and RemoteApplicationError for HTTP error responses.
        """
        await self._request("GET", self.probe_path)

    async def list_movies(
        self,
        filter: Optional[str] = None,
        sort: Optional[str] = None,
        order: str = "asc",
    ) -> List[Movie]:
        """
        GET /movies with optional filtering and sorting.

        Args:
            filter: Case-insensitive match on name or description
            sort: Field to sort by (name, releaseDate, rating)
            order: "asc" or "desc"
        """
        params: Dict[str, Any] = {}
        if filter:
            params["filter"] = filter
        if sort:
            params["sort"] = sort
            params["order"] = order

        r = await self._request("GET", "/movies", params=params)
        data = self._json(r)
        if not isinstance(data, list):
            raise BadUpstreamResponse(f"Expected a list of movies, got {type(data).__name__}")
        return [self._to_movie(item) for item in data]

    async def get_movie(self, movie_id: str) -> Optional[Movie]:
        """GET /movies/{id}. Returns None if the movie does not exist (404)."""
        try:
            r = await self._request("GET", f"/movies/{movie_id}")
        except RemoteApplicationError as e:
            if e.status_code == 404:
                return None
            raise
        return self._to_movie(self._json(r))

    async def create_movie(self, movie: Movie) -> Movie:
        """POST /movies. The service assigns the id of the stored record."""
        payload = movie.model_dump(exclude={"id"})
        logger.info("Creating movie on movies service: %s", movie.name)
        r = await self._request("POST", "/movies", json=payload)
        return self._to_movie(self._json(r))

    async def update_movie(self, movie: Movie) -> Movie:
        """PATCH /movies with the full record (id in body)."""
        if not movie.id:
            raise ValueError("Movie ID is required for update")
        r = await self._request("PATCH", "/movies", json=movie.model_dump())
        if not r.content:
            return movie
        return self._to_movie(self._json(r))

    async def delete_movie(self, movie_id: str) -> None:
        """DELETE /movies?id=..."""
        await self._request("DELETE", "/movies", params={"id": movie_id})
