"""HTTP surface: OAuth flow and the read API over mirrored data."""

from .app import create_app

__all__ = ["create_app"]
