"""Console implementation of the UI handler.

Renders search results, movie details and errors with Rich, standing in
for the search and details screens.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Any

import orjson
from rich.console import Console
from rich.table import Table

from reelfinder.services.movie_api import MovieAPI
from reelfinder.services.tmdb_models import MovieDetails, SearchResult
from reelfinder.shared.constants import CLIDefaults, CLIMessages
from reelfinder.shared.errors import EmptyResultError, MissingCredentialError, ReelFinderError

logger = logging.getLogger(__name__)


class ConsoleUIHandler:
    """UI handler writing to a Rich console.

    ``exit_code`` reflects the outcome of the last rendered operation.
    """

    def __init__(self, console: Console | None = None, *, json_output: bool = False) -> None:
        self.console = console or Console()
        self.json_output = json_output
        self.movie_api: MovieAPI | None = None
        self.exit_code = CLIDefaults.EXIT_SUCCESS
        self.prompted_for_api_key = False

    # ------------------------------------------------------------------
    # UIHandler protocol
    # ------------------------------------------------------------------
    def set_movie_api(self, movie_api: MovieAPI) -> None:
        self.movie_api = movie_api

    def show_api_key_prompt(self) -> None:
        self.prompted_for_api_key = True
        if not self.json_output:
            self.console.print(f"[yellow]{CLIMessages.API_KEY_PROMPT}[/yellow]")

    def submit_api_key(self, api_key: str) -> None:
        api_key = api_key.strip()
        if not api_key:
            logger.warning(CLIMessages.API_KEY_EMPTY)
            return
        self._api().set_api_key(api_key)

    def search_movies(self, query: str) -> asyncio.Task[None]:
        return self._api().search_movies(query, self.show_search_results, self.show_error)

    def show_movie_details(self, movie_id: int) -> asyncio.Task[None]:
        return self._api().get_movie_details(movie_id, self.render_movie_details, self.show_error)

    def back_to_search_screen(self) -> None:
        logger.debug("Returning to search screen")

    # ------------------------------------------------------------------
    # Rendering
    # ------------------------------------------------------------------
    def show_search_results(self, results: tuple[SearchResult, ...]) -> None:
        self.exit_code = CLIDefaults.EXIT_SUCCESS
        if self.json_output:
            self._print_json({"results": [r.model_dump() for r in results]})
            return

        if not results:
            self.console.print(CLIMessages.NO_RESULTS)
            return

        table = Table(title=f"{len(results)} result(s)")
        table.add_column("ID", justify="right", style="cyan")
        table.add_column("Title", style="bold")
        table.add_column("Release Date")
        table.add_column("Rating", justify="right")
        for movie in results:
            table.add_row(
                str(movie.id),
                movie.title,
                movie.release_date,
                f"{movie.vote_average:.1f}",
            )
        self.console.print(table)

    def render_movie_details(self, details: MovieDetails) -> None:
        self.exit_code = CLIDefaults.EXIT_SUCCESS
        if self.json_output:
            self._print_json(details.model_dump())
            return

        self.console.print(f"[bold]{details.title}[/bold] ({details.release_date or 'unknown'})")
        self.console.print(f"Vote Average: {details.vote_average:.2f}")
        if details.genres:
            self.console.print("Genres: " + ", ".join(genre.name for genre in details.genres))
        if details.overview:
            self.console.print()
            self.console.print(details.overview)
        if details.cast:
            self.console.print()
            self.console.print("[bold]Cast[/bold]")
            for member in details.cast:
                role = f" as {member.character}" if member.character else ""
                self.console.print(f"  {member.name}{role}")

    def show_error(self, error: ReelFinderError) -> None:
        if isinstance(error, MissingCredentialError):
            self.exit_code = CLIDefaults.EXIT_MISSING_CREDENTIAL
        else:
            self.exit_code = CLIDefaults.EXIT_ERROR

        if self.json_output:
            self._print_json({"error": error.to_dict()})
        elif isinstance(error, EmptyResultError):
            self.console.print(CLIMessages.NO_RESULTS)
        elif not isinstance(error, MissingCredentialError):
            self.console.print(f"[red]Error:[/red] {error.message}")

    def _print_json(self, data: dict[str, Any]) -> None:
        self.console.print_json(orjson.dumps(data).decode("utf-8"))

    def _api(self) -> MovieAPI:
        if self.movie_api is None:
            msg = "UI handler is not wired to a movie API"
            raise RuntimeError(msg)
        return self.movie_api


__all__ = ["ConsoleUIHandler"]
