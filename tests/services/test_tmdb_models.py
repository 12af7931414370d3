"""Tests for TMDB response models and payload decoding."""

from __future__ import annotations

import orjson
import pytest
from pydantic import ValidationError

from reelfinder.services.tmdb_models import (
    CastMember,
    Genre,
    MovieDetails,
    SearchResult,
    decode_movie_details,
    decode_search_results,
)
from reelfinder.shared.errors import ErrorCode, MalformedResponseError
from tests.test_helpers import movie, search_body


class TestSearchResult:
    def test_minimal_fields(self):
        result = SearchResult(id=155, title="The Dark Knight")

        assert result.poster_path is None
        assert result.overview == ""
        assert result.release_date == ""
        assert result.vote_average == 0.0

    def test_nulls_normalized(self):
        result = SearchResult.model_validate(
            {"id": 1, "title": "X", "overview": None, "release_date": None, "vote_average": None}
        )
        assert result.overview == ""
        assert result.release_date == ""
        assert result.vote_average == 0.0

    def test_unknown_fields_ignored(self):
        result = SearchResult.model_validate({"id": 1, "title": "X", "adult": False, "video": False})
        assert not hasattr(result, "adult")

    def test_frozen(self):
        result = SearchResult(id=1, title="X")
        with pytest.raises(ValidationError):
            result.title = "Y"  # type: ignore[misc]

    def test_title_required(self):
        with pytest.raises(ValidationError):
            SearchResult.model_validate({"id": 1})


class TestMovieDetails:
    def test_cast_lifted_from_credits(self):
        details = MovieDetails.model_validate(
            {
                "id": 155,
                "title": "The Dark Knight",
                "genres": [{"id": 28, "name": "Action"}],
                "credits": {"cast": [{"name": "Christian Bale", "character": "Bruce Wayne"}]},
            }
        )

        assert details.genres == (Genre(id=28, name="Action"),)
        assert details.cast == (CastMember(name="Christian Bale", character="Bruce Wayne"),)

    def test_top_level_cast_preferred(self):
        details = MovieDetails.model_validate(
            {
                "id": 1,
                "title": "X",
                "cast": [{"name": "Top Level"}],
                "credits": {"cast": [{"name": "From Credits"}]},
            }
        )
        assert [member.name for member in details.cast] == ["Top Level"]

    def test_missing_sequences_default_to_empty(self):
        details = MovieDetails.model_validate({"id": 1, "title": "X", "genres": None})
        assert details.genres == ()
        assert details.cast == ()

    def test_character_null(self):
        member = CastMember.model_validate({"name": "Extra", "character": None})
        assert member.character == ""


class TestDecodeSearchResults:
    def test_preserves_server_order(self):
        body = search_body(movie(3, "C"), movie(1, "A"), movie(2, "B"))
        results = decode_search_results(body)
        assert [result.id for result in results] == [3, 1, 2]
        assert isinstance(results, tuple)

    def test_empty_results(self):
        assert decode_search_results(b'{"results": []}') == ()

    def test_accepts_str_payload(self):
        results = decode_search_results('{"results": [{"id": 1, "title": "X"}]}')
        assert results[0].title == "X"

    @pytest.mark.parametrize(
        "payload",
        [
            b"not json",
            b"[1, 2, 3]",
            b'{"page": 1}',
            b'{"results": "nope"}',
            b'{"results": [{"title": "no id"}]}',
        ],
    )
    def test_malformed(self, payload):
        with pytest.raises(MalformedResponseError) as exc_info:
            decode_search_results(payload)

        assert exc_info.value.code is ErrorCode.TMDB_API_INVALID_RESPONSE
        assert exc_info.value.original_error is not None


class TestDecodeMovieDetails:
    def test_decodes(self):
        payload = orjson.dumps(movie(155, "The Dark Knight", genres=[{"id": 18, "name": "Drama"}]))
        details = decode_movie_details(payload)
        assert details.id == 155
        assert details.genres[0].name == "Drama"

    @pytest.mark.parametrize("payload", [b"<html>", b'{"title": "no id"}', b"null"])
    def test_malformed(self, payload):
        with pytest.raises(MalformedResponseError):
            decode_movie_details(payload)
