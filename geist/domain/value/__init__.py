"""Domain value objects for Geist meta."""

from geist.domain.value.identifiers import IdentityId, UserId
from geist.domain.value.types import (
    IdentityProvider,
    IdentitySelector,
    ProviderAccount,
)

__all__ = [
    # Identifiers
    "UserId",
    "IdentityId",
    # Types
    "IdentityProvider",
    "IdentitySelector",
    "ProviderAccount",
]
