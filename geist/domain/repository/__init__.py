"""Domain repository interfaces."""

from geist.domain.repository.identity import IdentityRepository
from geist.domain.repository.transaction import Transaction

__all__ = [
    "IdentityRepository",
    "Transaction",
]
