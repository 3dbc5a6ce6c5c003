"""Link identity use case."""

from pydantic import BaseModel

from geist.application.usecase.base import BaseUseCase, parse_uuid
from geist.application.wire import (
    IdentityResponse,
    Timestamp,
    identities_response,
    optional_text,
    provider_from_wire,
    timestamp_from_wire,
)
from geist.domain.repository import Transaction
from geist.domain.service import IdentityService
from geist.domain.value import ProviderAccount, UserId


class LinkIdentityRequest(BaseModel):
    """Link identity request.

    Empty strings mean "not provided" for every optional text field.
    """

    user_uid: str | None = None
    provider: int
    provider_user_id: str
    provider_email: str = ""
    provider_username: str = ""
    provider_avatar_url: str = ""
    access_token: str = ""
    refresh_token: str = ""
    token_expires_at: Timestamp | None = None
    verified: bool = False


class LinkIdentityUseCase(BaseUseCase):
    """Use case for linking a provider account to a user."""

    def __init__(
        self, identity_service: IdentityService, transaction: Transaction
    ) -> None:
        """Initialize link identity use case.

        Args:
            identity_service: Identity domain service
            transaction: Request transaction, committed before responding
        """
        self.identity_service = identity_service
        self.transaction = transaction

    async def execute(self, request: LinkIdentityRequest) -> IdentityResponse:
        """Execute link identity flow.

        Args:
            request: Link identity request

        Returns:
            Response holding the new or refreshed identity

        Raises:
            ValidationError: If the provider or user UID is invalid
            UnimplementedError: If the account is new and no user UID is given
        """
        provider = provider_from_wire(request.provider)
        user_id = (
            UserId(parse_uuid(request.user_uid, "user_uid"))
            if request.user_uid
            else None
        )

        account = ProviderAccount(
            provider=provider,
            provider_user_id=request.provider_user_id,
            email=optional_text(request.provider_email),
            username=optional_text(request.provider_username),
            avatar_url=optional_text(request.provider_avatar_url),
            access_token=optional_text(request.access_token),
            refresh_token=optional_text(request.refresh_token),
            token_expires_at=(
                timestamp_from_wire(request.token_expires_at)
                if request.token_expires_at
                else None
            ),
            verified=request.verified,
        )

        identity = await self.identity_service.link_identity(account, user_id)
        await self.transaction.commit()
        return identities_response([identity])
