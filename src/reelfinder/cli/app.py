"""
ReelFinder Typer CLI Application

A console front end over the metadata access layer: search for movies,
show movie details and download posters.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable
from dataclasses import dataclass
from pathlib import Path
from typing import Annotated

import typer
from dependency_injector import providers

from reelfinder.cli.ui_handler import ConsoleUIHandler
from reelfinder.config import Settings, load_env_file, load_settings
from reelfinder.containers import Container
from reelfinder.services.movie_api import ImageRequest, wire
from reelfinder.shared.constants import Application, CLIDefaults, CLIMessages
from reelfinder.shared.errors import ApplicationError
from reelfinder.shared.logging import setup_structured_logger

logger = logging.getLogger(__name__)


@dataclass
class CliState:
    """Per-invocation state shared by all commands."""

    container: Container
    json_output: bool = False
    api_key: str | None = None


def build_container(settings: Settings) -> Container:
    """Create the component graph for *settings*."""
    container = Container()
    container.config.override(providers.Object(settings))
    return container


def version_callback(value: bool) -> None:
    """Print version information and exit."""
    if value:
        typer.echo(f"{Application.NAME} {Application.VERSION}")
        raise typer.Exit


app = typer.Typer(
    name=Application.NAME,
    help="Search TMDB for movies, show details and fetch posters.",
    rich_markup_mode="rich",
    no_args_is_help=True,
)


@app.callback()
def main(
    ctx: typer.Context,
    api_key: Annotated[
        str | None,
        typer.Option("--api-key", help="TMDB API key (overrides configuration)"),
    ] = None,
    config: Annotated[
        Path | None,
        typer.Option("--config", help="Path of a TOML configuration file"),
    ] = None,
    log_level: Annotated[
        str | None,
        typer.Option("--log-level", help="Logging level (DEBUG, INFO, WARNING, ERROR)"),
    ] = None,
    json_output: Annotated[
        bool,
        typer.Option("--json", help="Print machine-readable JSON"),
    ] = False,
    version: Annotated[
        bool,
        typer.Option(
            "--version",
            callback=version_callback,
            is_eager=True,
            help="Show version and exit",
        ),
    ] = False,
) -> None:
    """Load configuration and set up logging before any command runs."""
    load_env_file()

    try:
        settings = load_settings(config)
    except ApplicationError as e:
        typer.echo(f"Configuration error: {e.message}", err=True)
        raise typer.Exit(CLIDefaults.EXIT_ERROR) from e

    if log_level:
        settings.logging.level = log_level

    setup_structured_logger(
        level=settings.logging.level,
        log_file=settings.logging.file,
        use_rich_console=settings.logging.console_output,
    )
    logger.debug("CLI started with %r", settings.api.tmdb)

    ctx.obj = CliState(
        container=build_container(settings),
        json_output=json_output,
        api_key=api_key,
    )


def _run(state: CliState, action: Callable[[ConsoleUIHandler], asyncio.Task[None]]) -> int:
    """Wire the UI handler, run *action* to completion and release resources."""

    async def runner() -> int:
        container = state.container
        handler = ConsoleUIHandler(json_output=state.json_output)
        wire(container.movie_api(), handler)
        if state.api_key is not None:
            handler.submit_api_key(state.api_key)

        try:
            await action(handler)
        finally:
            await container.transport().close()
            container.kv_store().close()
        return handler.exit_code

    return asyncio.run(runner())


def _exit_with(code: int) -> None:
    if code != CLIDefaults.EXIT_SUCCESS:
        raise typer.Exit(code)


@app.command("search")
def search_command(
    ctx: typer.Context,
    query: Annotated[str, typer.Argument(help="Title (or part of it) to search for")],
) -> None:
    """Search movies by title."""
    state: CliState = ctx.obj
    _exit_with(_run(state, lambda handler: handler.search_movies(query)))


@app.command("details")
def details_command(
    ctx: typer.Context,
    movie_id: Annotated[int, typer.Argument(help="TMDB movie id")],
) -> None:
    """Show the details of one movie."""
    state: CliState = ctx.obj
    _exit_with(_run(state, lambda handler: handler.show_movie_details(movie_id)))


@app.command("poster")
def poster_command(
    ctx: typer.Context,
    poster_path: Annotated[str, typer.Argument(help="Poster path, e.g. /abc.jpg")],
    output: Annotated[
        Path,
        typer.Option("--output", "-o", help="File to write the image to"),
    ],
) -> None:
    """Download a poster image."""
    state: CliState = ctx.obj
    exit_code = CLIDefaults.EXIT_SUCCESS

    def save(image: bytes | None) -> None:
        nonlocal exit_code
        if image is None:
            typer.echo(CLIMessages.NO_IMAGE.format(path=poster_path), err=True)
            exit_code = CLIDefaults.EXIT_ERROR
            return
        output.parent.mkdir(parents=True, exist_ok=True)
        output.write_bytes(image)
        typer.echo(CLIMessages.IMAGE_SAVED.format(path=output))

    def fetch(handler: ConsoleUIHandler) -> asyncio.Task[None]:
        request = ImageRequest(title=Path(poster_path).stem, poster_path=poster_path)
        return handler.movie_api.get_movie_image(request, save)

    _run(state, fetch)
    _exit_with(exit_code)


if __name__ == "__main__":
    app()
