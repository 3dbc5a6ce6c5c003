"""Identity use cases."""

from .get_identity import GetIdentityRequest, GetIdentityUseCase
from .link_identity import LinkIdentityRequest, LinkIdentityUseCase
from .list_identities import ListIdentitiesRequest, ListIdentitiesUseCase
from .set_primary_identity import (
    SetPrimaryIdentityRequest,
    SetPrimaryIdentityUseCase,
)
from .unlink_identity import UnlinkIdentityRequest, UnlinkIdentityUseCase

__all__ = [
    "GetIdentityRequest",
    "GetIdentityUseCase",
    "LinkIdentityRequest",
    "LinkIdentityUseCase",
    "ListIdentitiesRequest",
    "ListIdentitiesUseCase",
    "SetPrimaryIdentityRequest",
    "SetPrimaryIdentityUseCase",
    "UnlinkIdentityRequest",
    "UnlinkIdentityUseCase",
]
