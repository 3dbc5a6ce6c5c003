"""Domain models for Geist meta."""

from geist.domain.model.identity import Identity, NewIdentity

__all__ = [
    "Identity",
    "NewIdentity",
]
