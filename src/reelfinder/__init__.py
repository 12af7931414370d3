"""ReelFinder: TMDB movie metadata access layer with a local search cache."""

from reelfinder.shared.constants import Application

__version__ = Application.VERSION

__all__ = ["__version__"]
