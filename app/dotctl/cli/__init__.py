"""CLI package for dotctl.

This package contains the Typer application.
"""

from dotctl.cli.main import app

__all__ = ["app"]
