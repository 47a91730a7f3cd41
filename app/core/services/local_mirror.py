"""Locally persisted copy of the last known movie collection."""

from __future__ import annotations

import logging
import threading
from pathlib import Path
from typing import List, Optional

from pydantic import ValidationError

from app.core.storage.json_store import JsonStore
from app.integrations.movies_api.types import Movie

logger = logging.getLogger(__name__)


class LocalMirror:
    """
    Read fallback for when the movies service is unreachable.

    Overwritten wholesale after a successful full fetch; patched record by
    record (append / replace / remove) by local writes. Every change is
    persisted before the call returns.
    """

    def __init__(self, path: str | Path = "data/movies_mirror.json"):
        self.store = JsonStore(path)
        self._lock = threading.RLock()
        self._movies: List[Movie] = []
        self.load()

    def load(self) -> None:
        loaded: List[Movie] = []
        for raw in self.store.read_list():
            try:
                loaded.append(Movie.model_validate(raw))
            except ValidationError as e:
                logger.warning("Skipping malformed movie in %s: %s", self.store.path, e)
        with self._lock:
            self._movies = loaded

    def list_movies(self) -> List[Movie]:
        with self._lock:
            return [m.model_copy(deep=True) for m in self._movies]

    def get(self, movie_id: str) -> Optional[Movie]:
        with self._lock:
            for movie in self._movies:
                if movie.id == movie_id:
                    return movie.model_copy(deep=True)
        return None

    def replace_all(self, movies: List[Movie]) -> None:
        with self._lock:
            self._movies = [m.model_copy(deep=True) for m in movies]
            self._save()

    def append(self, movie: Movie) -> None:
        with self._lock:
            self._movies.append(movie.model_copy(deep=True))
            self._save()

    def replace(self, movie: Movie) -> bool:
        """Replace the record with the same id. Returns False if there is none."""
        with self._lock:
            for i, current in enumerate(self._movies):
                if current.id == movie.id:
                    self._movies[i] = movie.model_copy(deep=True)
                    self._save()
                    return True
        return False

    def upsert(self, movie: Movie) -> None:
        with self._lock:
            if not self.replace(movie):
                self.append(movie)

    def remove(self, movie_id: str) -> bool:
        with self._lock:
            remaining = [m for m in self._movies if m.id != movie_id]
            if len(remaining) == len(self._movies):
                return False
            self._movies = remaining
            self._save()
            return True

    def rekey(self, old_id: str, new_id: str) -> None:
        with self._lock:
            for movie in self._movies:
                if movie.id == old_id:
                    movie.id = new_id
                    self._save()
                    return

    def __len__(self) -> int:
        with self._lock:
            return len(self._movies)

    def _save(self) -> None:
        self.store.write_list([m.model_dump() for m in self._movies])
