"""
Mira API package.

Provides the FastAPI application for the Mira companion chat service.
"""

from .app import app, create_app

__all__ = ["app", "create_app"]
