"""Reference implementation of the remote analytics and auth endpoints."""

from .main import API_PREFIX, create_app

__all__ = ["API_PREFIX", "create_app"]
