"""Domain layer DI providers."""

from dishka import Scope, provide

from geist.domain.repository import IdentityRepository
from geist.domain.service import IdentityService, PassthroughTokenCipher, TokenCipher
from geist.util.di.base import ProviderBase


class ProdDomainProvider(ProviderBase):
    """Production domain services provider - concrete, no mocks needed.

    Domain services are REQUEST-scoped to align with repository/session lifecycle.
    Each request gets fresh service instances with their own transaction.
    """

    scope = Scope.REQUEST

    @provide(scope=Scope.APP)
    def get_token_cipher(self) -> TokenCipher:
        """Provide the provider token cipher."""
        return PassthroughTokenCipher()

    @provide
    def get_identity_service(
        self, identity_repository: IdentityRepository, token_cipher: TokenCipher
    ) -> IdentityService:
        """Provide identity domain service."""
        return IdentityService(
            identity_repository=identity_repository, token_cipher=token_cipher
        )
