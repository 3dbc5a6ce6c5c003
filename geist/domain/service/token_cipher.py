"""Provider token encryption seam.

Provider access and refresh tokens go through a TokenCipher before they
reach the ``*_encrypted`` columns. No cipher or key management scheme has
been chosen yet, so the only implementation stores tokens as given.
"""

from abc import ABC, abstractmethod

import logfire


class TokenCipher(ABC):
    """Turns a plaintext provider token into its stored form."""

    @abstractmethod
    def encrypt(self, token: str) -> str:
        """Encrypt a provider token.

        Args:
            token: Plaintext token from the provider

        Returns:
            Opaque string to persist
        """
        pass


class PassthroughTokenCipher(TokenCipher):
    """Stores tokens unchanged.

    Warns once per instance so plaintext storage never goes unnoticed.
    """

    def __init__(self) -> None:
        self._warned = False

    def encrypt(self, token: str) -> str:
        if not self._warned:
            logfire.warn("Provider tokens are stored without encryption")
            self._warned = True
        return token
