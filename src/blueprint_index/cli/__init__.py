"""Command-line interface for the blueprint index."""

from .main import app

__all__ = ["app"]
