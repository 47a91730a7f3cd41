"""
Movies API Integration - DTOs (Data Transfer Objects)

Pydantic models mirroring the hosted movies service contracts, plus the
record persisted in the pending operation log.
Validation rules follow the movies service schema (name required, at least
one genre, parseable release date, rating 1..10).
"""
from __future__ import annotations

import datetime as dt
from typing import Any, Dict, List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

OperationKind = Literal["create", "update", "delete"]
OPERATION_KINDS = ("create", "update", "delete")


class Movie(BaseModel):
    """Movie record as exchanged with the movies service."""
    model_config = ConfigDict(extra="ignore")

    id: Optional[str] = None  # absent for new movies
    name: str = Field(..., min_length=1)
    genres: List[str] = Field(..., min_length=1)
    releaseDate: str  # ISO format, e.g. "2025-05-04"
    rating: float = Field(..., ge=1, le=10)
    description: str = ""

    @model_validator(mode="before")
    @classmethod
    def normalize_aliases(cls, data: Any) -> Any:
        """Accept snake_case rows coming straight from the database layer."""
        if not isinstance(data, dict):
            return data
        remapped = dict(data)
        if "release_date" in remapped and "releaseDate" not in remapped:
            remapped["releaseDate"] = remapped["release_date"]
        return remapped

    @field_validator("id", mode="before")
    @classmethod
    def _id_as_text(cls, value: Any) -> Any:
        if value is None or value == "":
            return None
        return str(value)

    @field_validator("description", mode="before")
    @classmethod
    def _description_default(cls, value: Any) -> Any:
        return "" if value is None else value

    @field_validator("releaseDate")
    @classmethod
    def _valid_date(cls, value: str) -> str:
        try:
            dt.datetime.fromisoformat(value.replace("Z", "+00:00"))
        except ValueError:
            raise ValueError("Invalid date")
        return value

    @property
    def release_year(self) -> int:
        return dt.datetime.fromisoformat(self.releaseDate.replace("Z", "+00:00")).year


class PendingOperation(BaseModel):
    """A mutation recorded while the movies service was unreachable."""

    kind: OperationKind
    payload: Dict[str, Any]
    recordedAtMillis: int

    @property
    def target_id(self) -> Optional[str]:
        raw = self.payload.get("id")
        return None if raw is None else str(raw)
