from __future__ import annotations

import math
from typing import Any, Dict, List

from app.integrations.movies_api.types import Movie


def compute_statistics(movies: List[Movie]) -> Dict[str, Any]:
    """Chart data for a movie collection: genres, rating histogram (1..10), release years."""
    genre_counts: Dict[str, int] = {}
    rating_counts = [0] * 10
    year_counts: Dict[str, int] = {}

    for movie in movies:
        for genre in movie.genres:
            genre_counts[genre] = genre_counts.get(genre, 0) + 1

        bucket = math.floor(movie.rating) - 1
        if 0 <= bucket < 10:
            rating_counts[bucket] += 1

        year = str(movie.release_year)
        year_counts[year] = year_counts.get(year, 0) + 1

    average = round(sum(m.rating for m in movies) / len(movies), 2) if movies else None
    return {
        "total": len(movies),
        "averageRating": average,
        "genreCounts": dict(sorted(genre_counts.items(), key=lambda kv: (-kv[1], kv[0]))),
        "ratingCounts": rating_counts,
        "releaseYearCounts": dict(sorted(year_counts.items())),
    }
