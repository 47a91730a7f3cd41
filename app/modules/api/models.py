from __future__ import annotations
from typing import List, Optional
from pydantic import BaseModel

from app.integrations.movies_api.types import Movie


class MovieIn(Movie):
    """Create/update body. On update the path id wins over any id in the body."""

    def to_movie(self, movie_id: Optional[str] = None) -> Movie:
        data = self.model_dump()
        data["id"] = movie_id if movie_id is not None else self.id
        return Movie.model_validate(data)


class NetworkEventIn(BaseModel):
    reachable: bool


class MoviePage(BaseModel):
    items: List[Movie]
    page: int
    pageSize: int
    total: int
    hasMore: bool
