"""TMDB API Response Models.

Pydantic models for TMDB API responses, validated at the external API
boundary. Models are frozen and ignore unknown fields, so new TMDB fields
never break validation.
"""

from __future__ import annotations

from typing import Any, Union

import orjson
from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator, model_validator

from reelfinder.shared.errors import ErrorContext, MalformedResponseError


class TMDBModel(BaseModel):
    """Base model for TMDB payloads."""

    model_config = ConfigDict(frozen=True, extra="ignore")


class Genre(TMDBModel):
    """TMDB genre information.

    Example:
        >>> genre = Genre(id=28, name="Action")
        >>> genre.name
        'Action'
    """

    id: int = Field(..., description="TMDB genre ID")
    name: str = Field(..., description="Genre name")


class CastMember(TMDBModel):
    """A credited cast member."""

    name: str = Field(..., description="Actor name")
    character: str = Field("", description="Character played")

    @field_validator("character", mode="before")
    @classmethod
    def _none_to_empty(cls, value: Any) -> Any:
        return "" if value is None else value


class SearchResult(TMDBModel):
    """Single movie from a TMDB search response.

    Attributes:
        id: TMDB movie ID
        title: Movie title
        poster_path: Poster image path relative to the image base URL
        overview: Plot synopsis
        release_date: Release date (YYYY-MM-DD), empty when unknown
        vote_average: Average user rating (0-10)
    """

    id: int = Field(..., description="TMDB movie ID")
    title: str = Field(..., description="Movie title")
    poster_path: str | None = Field(None, description="Poster image path")
    overview: str = Field("", description="Plot synopsis")
    release_date: str = Field("", description="Release date (YYYY-MM-DD)")
    vote_average: float = Field(0.0, description="Average rating (0-10)")

    @field_validator("overview", "release_date", mode="before")
    @classmethod
    def _none_to_empty(cls, value: Any) -> Any:
        return "" if value is None else value

    @field_validator("vote_average", mode="before")
    @classmethod
    def _none_to_zero(cls, value: Any) -> Any:
        return 0.0 if value is None else value


class SearchResponse(TMDBModel):
    """Body of ``GET /search/movie``."""

    results: tuple[SearchResult, ...] = Field(..., description="Matching movies")


class MovieDetails(SearchResult):
    """Body of ``GET /movie/{id}``.

    The cast is read from a top-level ``cast`` list, or from the
    ``credits.cast`` block TMDB returns with ``append_to_response=credits``.
    """

    genres: tuple[Genre, ...] = Field(default_factory=tuple, description="Genres")
    cast: tuple[CastMember, ...] = Field(default_factory=tuple, description="Cast")

    @model_validator(mode="before")
    @classmethod
    def _lift_credits_cast(cls, data: Any) -> Any:
        if isinstance(data, dict) and "cast" not in data:
            credits = data.get("credits")
            if isinstance(credits, dict) and isinstance(credits.get("cast"), list):
                return {**data, "cast": credits["cast"]}
        return data

    @field_validator("genres", "cast", mode="before")
    @classmethod
    def _none_to_empty_sequence(cls, value: Any) -> Any:
        return () if value is None else value


Payload = Union[bytes, str]


def _load_json(payload: Payload, operation: str) -> Any:
    try:
        return orjson.loads(payload)
    except orjson.JSONDecodeError as e:
        raise MalformedResponseError(
            f"Response is not valid JSON: {e}",
            context=ErrorContext(operation=operation),
            original_error=e,
        ) from e


def decode_search_results(payload: Payload) -> tuple[SearchResult, ...]:
    """Decode a search response body.

    Raises:
        MalformedResponseError: If the body is not a valid search response
    """
    data = _load_json(payload, "decode_search_results")
    try:
        return SearchResponse.model_validate(data).results
    except ValidationError as e:
        raise MalformedResponseError(
            f"Unexpected search response shape: {e.error_count()} validation error(s)",
            context=ErrorContext(operation="decode_search_results"),
            original_error=e,
        ) from e


def decode_movie_details(payload: Payload) -> MovieDetails:
    """Decode a movie details response body.

    Raises:
        MalformedResponseError: If the body is not a valid details response
    """
    data = _load_json(payload, "decode_movie_details")
    try:
        return MovieDetails.model_validate(data)
    except ValidationError as e:
        raise MalformedResponseError(
            f"Unexpected movie details shape: {e.error_count()} validation error(s)",
            context=ErrorContext(operation="decode_movie_details"),
            original_error=e,
        ) from e


__all__ = [
    "CastMember",
    "Genre",
    "MovieDetails",
    "SearchResponse",
    "SearchResult",
    "TMDBModel",
    "decode_movie_details",
    "decode_search_results",
]
