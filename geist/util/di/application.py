"""Application layer DI providers."""

from dishka import Scope, provide

from geist.application.usecase.identity import (
    GetIdentityUseCase,
    LinkIdentityUseCase,
    ListIdentitiesUseCase,
    SetPrimaryIdentityUseCase,
    UnlinkIdentityUseCase,
)
from geist.domain.repository import Transaction
from geist.domain.service import IdentityService
from geist.util.di.base import ProviderBase


class ProdApplicationProvider(ProviderBase):
    """Production application use cases provider - concrete, no mocks needed."""

    @provide(scope=Scope.REQUEST)
    def get_get_identity_use_case(
        self, identity_service: IdentityService
    ) -> GetIdentityUseCase:
        """Provide get identity use case."""
        return GetIdentityUseCase(identity_service=identity_service)

    @provide(scope=Scope.REQUEST)
    def get_list_identities_use_case(
        self, identity_service: IdentityService
    ) -> ListIdentitiesUseCase:
        """Provide list identities use case."""
        return ListIdentitiesUseCase(identity_service=identity_service)

    @provide(scope=Scope.REQUEST)
    def get_link_identity_use_case(
        self, identity_service: IdentityService, transaction: Transaction
    ) -> LinkIdentityUseCase:
        """Provide link identity use case."""
        return LinkIdentityUseCase(
            identity_service=identity_service, transaction=transaction
        )

    @provide(scope=Scope.REQUEST)
    def get_unlink_identity_use_case(
        self, identity_service: IdentityService, transaction: Transaction
    ) -> UnlinkIdentityUseCase:
        """Provide unlink identity use case."""
        return UnlinkIdentityUseCase(
            identity_service=identity_service, transaction=transaction
        )

    @provide(scope=Scope.REQUEST)
    def get_set_primary_identity_use_case(
        self, identity_service: IdentityService, transaction: Transaction
    ) -> SetPrimaryIdentityUseCase:
        """Provide set primary identity use case."""
        return SetPrimaryIdentityUseCase(
            identity_service=identity_service, transaction=transaction
        )
