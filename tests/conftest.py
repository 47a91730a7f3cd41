"""Shared test fixtures for the movie catalog tests."""
import sys
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple

import pytest

# Ensure the project root is in sys.path so that `app.*` imports work
# when running pytest from the repo root.
PROJECT_ROOT = Path(__file__).resolve().parent.parent
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from app.core.config import Settings  # noqa: E402
from app.core.services.container import build_services  # noqa: E402
from app.core.services.movie_service import query_movies  # noqa: E402
from app.integrations.movies_api.errors import RemoteApplicationError  # noqa: E402
from app.integrations.movies_api.types import Movie  # noqa: E402


class StubMoviesClient:
    """In-memory stand-in for MoviesApiClient that records every call."""

    def __init__(self) -> None:
        self.movies: Dict[str, Movie] = {}
        self.calls: List[Tuple[str, Any]] = []
        self.errors: Dict[str, Exception] = {}
        self._next_id = 1

    def _maybe_fail(self, method: str) -> None:
        exc = self.errors.get(method)
        if exc is not None:
            raise exc

    def seed(self, *movies: Movie) -> None:
        for movie in movies:
            self.movies[str(movie.id)] = movie

    async def probe(self) -> None:
        self.calls.append(("probe", None))
        self._maybe_fail("probe")

    async def list_movies(self, filter=None, sort=None, order="asc") -> List[Movie]:
        self.calls.append(("list", filter))
        self._maybe_fail("list_movies")
        return query_movies(list(self.movies.values()), filter=filter, sort=sort, order=order)

    async def get_movie(self, movie_id: str) -> Optional[Movie]:
        self.calls.append(("get", movie_id))
        self._maybe_fail("get_movie")
        return self.movies.get(movie_id)

    async def create_movie(self, movie: Movie) -> Movie:
        self.calls.append(("create", movie.name))
        self._maybe_fail("create_movie")
        movie_id = f"srv-{self._next_id}"
        self._next_id += 1
        stored = movie.model_copy(update={"id": movie_id})
        self.movies[movie_id] = stored
        return stored

    async def update_movie(self, movie: Movie) -> Movie:
        self.calls.append(("update", movie.id))
        self._maybe_fail("update_movie")
        if movie.id not in self.movies:
            raise RemoteApplicationError("Movie not found", status_code=404, detail="Movie not found")
        self.movies[movie.id] = movie
        return movie

    async def delete_movie(self, movie_id: str) -> None:
        self.calls.append(("delete", movie_id))
        self._maybe_fail("delete_movie")
        if movie_id not in self.movies:
            raise RemoteApplicationError("Movie not found", status_code=404, detail="Movie not found")
        del self.movies[movie_id]


def make_movie(name: str, movie_id: Optional[str] = None, **overrides: Any) -> Movie:
    data: Dict[str, Any] = {
        "id": movie_id,
        "name": name,
        "genres": ["Drama"],
        "releaseDate": "2020-01-01",
        "rating": 7.0,
        "description": "",
    }
    data.update(overrides)
    return Movie.model_validate(data)


@pytest.fixture
def stub_client():
    return StubMoviesClient()


@pytest.fixture
def test_settings(tmp_path):
    return Settings(
        OFFLINE_DATA_DIR=str(tmp_path / "data"),
        STATUS_PROBE_INTERVAL_SECONDS=0.01,
        SYNC_ON_RECONNECT=True,
        MOVIES_PAGE_SIZE=10,
    )


@pytest.fixture
def services(test_settings, stub_client):
    return build_services(test_settings, client=stub_client)


@pytest.fixture
def movie_factory():
    return make_movie
