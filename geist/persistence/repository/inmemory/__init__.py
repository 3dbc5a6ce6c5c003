"""In-memory repository implementations for testing."""

from geist.persistence.repository.inmemory.identity import InMemoryIdentityRepository
from geist.persistence.repository.inmemory.transaction import InMemoryTransaction

__all__ = [
    "InMemoryIdentityRepository",
    "InMemoryTransaction",
]
