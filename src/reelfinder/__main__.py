"""Entry point for ``python -m reelfinder``."""

from reelfinder.cli.app import app

if __name__ == "__main__":
    app()
