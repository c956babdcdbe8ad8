"""JSON API exposing the game and the AI over HTTP."""

from .app import create_app

__all__ = ["create_app"]
