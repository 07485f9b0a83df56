"""CLI package for dockhand.

This package contains the Typer application.
"""

from dockhand.cli.main import app

__all__ = ["app"]
