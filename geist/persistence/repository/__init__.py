"""PostgreSQL repository implementations."""

from geist.persistence.repository.identity import PostgresIdentityRepository
from geist.persistence.repository.transaction import PostgresTransaction

__all__ = [
    "PostgresIdentityRepository",
    "PostgresTransaction",
]
