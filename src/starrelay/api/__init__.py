"""HTTP surface for the ephemeris caches."""

from .app import create_app

__all__ = ["create_app"]
