"""API routes."""

from . import health, identities

__all__ = [
    "health",
    "identities",
]
