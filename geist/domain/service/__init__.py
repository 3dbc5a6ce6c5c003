"""Domain services."""

from geist.domain.service.identity_service import IdentityService
from geist.domain.service.token_cipher import PassthroughTokenCipher, TokenCipher

__all__ = [
    "IdentityService",
    "PassthroughTokenCipher",
    "TokenCipher",
]
