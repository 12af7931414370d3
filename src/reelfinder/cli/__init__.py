"""Console front end for ReelFinder."""

from .app import app, build_container
from .ui_handler import ConsoleUIHandler

__all__ = ["ConsoleUIHandler", "app", "build_container"]
