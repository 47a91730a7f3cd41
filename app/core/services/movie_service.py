"""
Movie Service - Orchestration Layer

SRP: Only business logic orchestration.
Combines client (HTTP) + local mirror + pending operation log behind one
read/write surface.

Responsibilities:
- Remote-first reads with fallback to the local mirror
- Remote-first writes with fallback to mirror + queued operation
- In-memory filtering/sorting of the mirror
- Replay of queued operations once the movies service is back
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Tuple

from app.core.services.connectivity import ConnectivityMonitor, ConnectivityState
from app.core.services.local_mirror import LocalMirror
from app.core.services.movie_statistics import compute_statistics
from app.core.services.pending_operations import PendingOperationLog
from app.core.utils.id import new_id
from app.integrations.movies_api.client import MoviesApiClient
from app.integrations.movies_api.errors import (
    MoviesApiError,
    RemoteApplicationError,
    is_connectivity_failure,
    is_write_fallback_failure,
)
from app.integrations.movies_api.types import Movie, PendingOperation

logger = logging.getLogger(__name__)

_SORT_KEYS = {
    "name": lambda m: m.name.lower(),
    "releaseDate": lambda m: m.releaseDate,
    "rating": lambda m: m.rating,
}


def query_movies(
    movies: List[Movie],
    filter: Optional[str] = None,
    sort: Optional[str] = None,
    order: str = "asc",
) -> List[Movie]:
    """Apply the movies service's filter/sort semantics to a local list."""
    result = list(movies)
    if filter:
        needle = filter.lower()
        result = [m for m in result if needle in m.name.lower() or needle in m.description.lower()]
    key = _SORT_KEYS.get(sort or "")
    if key is not None:
        result.sort(key=key, reverse=(order == "desc"))
    return result


@dataclass
class SyncFailure:
    kind: str
    movie_id: Optional[str]
    error: str


@dataclass
class SyncReport:
    attempted: int = 0
    succeeded: int = 0
    failed: List[SyncFailure] = field(default_factory=list)
    skipped: bool = False

    def to_dict(self) -> Dict[str, Any]:
        return {
            "attempted": self.attempted,
            "succeeded": self.succeeded,
            "failed": [
                {"kind": f.kind, "id": f.movie_id, "error": f.error}
                for f in self.failed
            ],
            "skipped": self.skipped,
        }


class MovieService:
    """
    Unifies remote and local movie access.

    Connectivity-class failures (host unreachable, timeout, 5xx) are absorbed:
    reads fall back to the mirror, writes land in the mirror and the pending
    log. A failed write also moves the connectivity state off `online`, so
    later writes queue without waiting on the network. Application errors
    (4xx) from the movies service propagate, and so does a malformed reply to
    a write.
    """

    def __init__(
        self,
        client: MoviesApiClient,
        monitor: ConnectivityMonitor,
        mirror: LocalMirror,
        pending: PendingOperationLog,
    ):
        self.client = client
        self.monitor = monitor
        self.mirror = mirror
        self.pending = pending
        self._sync_lock = asyncio.Lock()

    def load(self) -> None:
        """Reload mirror and pending log from disk (call before serving reads)."""
        self.mirror.load()
        self.pending.load_pending_operations()

    def pending_count(self) -> int:
        return len(self.pending)

    # --- Reads ---

    async def fetch_movies(
        self,
        filter: Optional[str] = None,
        sort: Optional[str] = None,
        order: str = "asc",
    ) -> Tuple[List[Movie], str]:
        """
        List movies and report where they came from.

        Returns (movies, source) where source is "live" or "mirror".
        Only an unfiltered remote result overwrites the mirror.
        """
        if self.monitor.is_online:
            try:
                movies = await self.client.list_movies(filter=filter, sort=sort, order=order)
            except MoviesApiError as e:
                if not is_connectivity_failure(e):
                    raise
                logger.warning("Movies service unavailable, serving local mirror: %s", e)
            else:
                if not filter:
                    self.mirror.replace_all(movies)
                return movies, "live"

        return query_movies(self.mirror.list_movies(), filter=filter, sort=sort, order=order), "mirror"

    async def get_all_movies(
        self,
        filter: Optional[str] = None,
        sort: Optional[str] = None,
        order: str = "asc",
    ) -> List[Movie]:
        movies, _ = await self.fetch_movies(filter=filter, sort=sort, order=order)
        return movies

    async def get_movie_by_id(self, movie_id: str) -> Optional[Movie]:
        if self.monitor.is_online:
            try:
                return await self.client.get_movie(movie_id)
            except MoviesApiError as e:
                if not is_connectivity_failure(e):
                    raise
                logger.warning("Cannot fetch movie %s remotely, using mirror: %s", movie_id, e)
        return self.mirror.get(movie_id)

    async def get_statistics(self) -> Dict[str, Any]:
        return compute_statistics(await self.get_all_movies())

    # --- Writes ---

    def _mark_unreachable(self, action: str, e: MoviesApiError) -> None:
        logger.warning("%s failed remotely, queueing locally: %s", action, e)
        if isinstance(e, RemoteApplicationError):
            self.monitor.set_status(ConnectivityState.SERVER_DOWN)
        else:
            self.monitor.set_status(ConnectivityState.OFFLINE)

    async def add_movie(self, movie: Movie) -> Movie:
        if self.monitor.is_online:
            try:
                created = await self.client.create_movie(movie)
            except MoviesApiError as e:
                if not is_write_fallback_failure(e):
                    raise
                self._mark_unreachable("Create", e)
            else:
                self.mirror.upsert(created)
                return created

        local = movie.model_copy(update={"id": movie.id or new_id("local")})
        self.mirror.append(local)
        self.pending.add_pending_operation("create", local.model_dump())
        return local

    async def update_movie(self, movie: Movie) -> Movie:
        if not movie.id:
            raise ValueError("Movie ID is required for update")

        if self.monitor.is_online:
            try:
                updated = await self.client.update_movie(movie)
            except MoviesApiError as e:
                if not is_write_fallback_failure(e):
                    raise
                self._mark_unreachable(f"Update of {movie.id}", e)
            else:
                self.mirror.upsert(updated)
                return updated

        # the mirror may not hold the record yet (empty or stale); keep the edit anyway
        self.mirror.upsert(movie)
        self.pending.add_pending_operation("update", movie.model_dump())
        return movie

    async def delete_movie(self, movie_id: str) -> None:
        if self.monitor.is_online:
            try:
                await self.client.delete_movie(movie_id)
            except MoviesApiError as e:
                if not is_write_fallback_failure(e):
                    raise
                self._mark_unreachable(f"Delete of {movie_id}", e)
            else:
                self.mirror.remove(movie_id)
                return

        self.mirror.remove(movie_id)
        self.pending.add_pending_operation("delete", {"id": movie_id})

    # --- Replay ---

    async def sync_pending_operations(self) -> SyncReport:
        """
        Replay the pending log in insertion order.

        Each entry is awaited before the next one starts. A failed entry is
        logged and dropped (no retry, no re-queue). The replayed entries are
        removed from the log once the pass ends, whatever the outcome.
        """
        if not self.monitor.is_online:
            logger.info("Sync skipped: movies service is %s", self.monitor.get_status().value)
            return SyncReport(skipped=True)

        async with self._sync_lock:
            operations = self.pending.get_pending_operations()
            report = SyncReport(attempted=len(operations))
            if not operations:
                return report

            logger.info("Replaying %d pending operations", len(operations))
            id_map: Dict[str, str] = {}
            for op in operations:
                try:
                    await self._replay(op, id_map)
                except Exception as e:
                    logger.warning("Replay of %s %s failed, dropping it: %s", op.kind, op.target_id, e)
                    report.failed.append(SyncFailure(op.kind, op.target_id, str(e)))
                else:
                    report.succeeded += 1

            if len(self.pending) == len(operations):
                self.pending.clear_pending_operations()
            else:
                # entries queued while the pass was awaiting stay for the next pass
                self.pending.discard_head(len(operations))

            logger.info(
                "Sync finished: %d/%d replayed, %d dropped",
                report.succeeded,
                report.attempted,
                len(report.failed),
            )
            return report

    async def _replay(self, op: PendingOperation, id_map: Dict[str, str]) -> None:
        payload = dict(op.payload)
        target = op.target_id
        if target is not None and target in id_map:
            payload["id"] = id_map[target]

        if op.kind == "create":
            created = await self.client.create_movie(Movie.model_validate(payload))
            if target and created.id and created.id != target:
                id_map[target] = created.id
                self.mirror.rekey(target, created.id)
            self.mirror.replace(created)
        elif op.kind == "update":
            updated = await self.client.update_movie(Movie.model_validate(payload))
            self.mirror.replace(updated)
        else:
            movie_id = str(payload["id"])
            await self.client.delete_movie(movie_id)
            self.mirror.remove(movie_id)
