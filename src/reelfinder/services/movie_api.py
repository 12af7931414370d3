"""Consumer-facing movie API.

Adapts the coroutine-based ``MetadataClient`` and ``ImageFetcher`` to the
two-continuation contract the UI layer consumes: every call schedules a
task and exactly one of its continuations fires, exactly once.

The API and the UI handler expose themselves to each other once at start
up through ``wire``.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable, Callable, Coroutine
from dataclasses import dataclass
from typing import Any, Protocol, TypeVar

from reelfinder.services.image_fetcher import ImageFetcher
from reelfinder.services.tmdb_client import MetadataClient
from reelfinder.services.tmdb_models import MovieDetails, SearchResult
from reelfinder.shared.errors import (
    ApplicationError,
    ErrorCode,
    ErrorContext,
    MissingCredentialError,
    ReelFinderError,
)
from reelfinder.shared.logging import log_operation_error

logger = logging.getLogger(__name__)

T = TypeVar("T")

ErrorCallback = Callable[[ReelFinderError], None]


@dataclass(frozen=True)
class ImageRequest:
    """What the UI knows about an image it wants displayed."""

    title: str
    poster_path: str | None = None


class UIHandler(Protocol):
    """Operations the UI layer exposes to the movie API."""

    def show_api_key_prompt(self) -> None: ...

    def submit_api_key(self, api_key: str) -> None: ...

    def search_movies(self, query: str) -> Awaitable[Any] | None: ...

    def back_to_search_screen(self) -> None: ...

    def set_movie_api(self, movie_api: MovieAPI) -> None: ...


class MovieAPI:
    """Callback facade over the metadata client and image fetcher."""

    def __init__(self, client: MetadataClient, image_fetcher: ImageFetcher) -> None:
        self.client = client
        self.image_fetcher = image_fetcher
        self.ui_handler: UIHandler | None = None

    @property
    def loading(self) -> bool:
        """True while a network operation is in flight."""
        return self.client.loading or self.image_fetcher.activity.busy

    def set_api_key(self, api_key: str) -> None:
        self.client.set_credential(api_key)

    def set_ui_handler(self, ui_handler: UIHandler) -> None:
        self.ui_handler = ui_handler

    def search_movies(
        self,
        query: str,
        on_success: Callable[[tuple[SearchResult, ...]], None],
        on_error: ErrorCallback,
    ) -> asyncio.Task[None]:
        """Schedule a search; deliver results or a classified error."""
        return asyncio.create_task(
            self._dispatch(self.client.search(query), on_success, on_error, "search_movies")
        )

    def get_movie_details(
        self,
        movie_id: int,
        on_success: Callable[[MovieDetails], None],
        on_error: ErrorCallback,
    ) -> asyncio.Task[None]:
        """Schedule a details lookup; deliver details or a classified error."""
        return asyncio.create_task(
            self._dispatch(self.client.get_details(movie_id), on_success, on_error, "get_movie_details")
        )

    def get_movie_image(
        self,
        request: ImageRequest,
        on_complete: Callable[[bytes | None], None],
    ) -> asyncio.Task[None]:
        """Schedule a poster download; ``on_complete`` receives bytes or None."""
        return asyncio.create_task(self._fetch_image(request, on_complete))

    async def _fetch_image(
        self,
        request: ImageRequest,
        on_complete: Callable[[bytes | None], None],
    ) -> None:
        try:
            image = await self.image_fetcher.fetch_image(request.poster_path)
        except Exception:
            # Boundary: image failures degrade to "no image"
            logger.exception("Image fetch for '%s' failed unexpectedly", request.title)
            image = None

        if image is None and request.poster_path:
            logger.info("No image available for '%s'", request.title)
        on_complete(image)

    async def _dispatch(
        self,
        operation: Coroutine[Any, Any, T],
        on_success: Callable[[T], None],
        on_error: ErrorCallback,
        operation_name: str,
    ) -> None:
        try:
            result = await operation
        except MissingCredentialError as e:
            if self.ui_handler is not None:
                self.ui_handler.show_api_key_prompt()
            on_error(e)
            return
        except ReelFinderError as e:
            on_error(e)
            return
        except Exception as e:
            # Boundary: unexpected failures still reach the error continuation
            error = ApplicationError(
                code=ErrorCode.APPLICATION_ERROR,
                message=f"Unexpected error during {operation_name}: {e!s}",
                context=ErrorContext(operation=operation_name),
                original_error=e,
            )
            log_operation_error(logger=logger, error=error, operation=operation_name)
            on_error(error)
            return

        on_success(result)


def wire(movie_api: MovieAPI, ui_handler: UIHandler) -> None:
    """Exchange the two interfaces once at start up."""
    ui_handler.set_movie_api(movie_api)
    movie_api.set_ui_handler(ui_handler)


__all__ = [
    "ImageRequest",
    "MovieAPI",
    "UIHandler",
    "wire",
]
