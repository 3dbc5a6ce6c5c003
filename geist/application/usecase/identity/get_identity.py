"""Get identity use case."""

from pydantic import BaseModel

from geist.application.usecase.base import BaseUseCase, parse_uuid
from geist.application.wire import (
    IdentityResponse,
    WireIdentityProvider,
    identities_response,
    provider_from_wire,
)
from geist.domain.service import IdentityService
from geist.domain.value import IdentityId, IdentitySelector, UserId


class GetIdentityRequest(BaseModel):
    """Get identity request.

    Exactly one of ``uid``, ``user_uid`` or ``provider_user_id`` must be
    set; ``provider`` qualifies ``provider_user_id``.
    """

    uid: str | None = None
    user_uid: str | None = None
    provider_user_id: str | None = None
    provider: int = WireIdentityProvider.UNSPECIFIED


class GetIdentityUseCase(BaseUseCase):
    """Use case for looking up a single identity."""

    def __init__(self, identity_service: IdentityService) -> None:
        """Initialize get identity use case.

        Args:
            identity_service: Identity domain service
        """
        self.identity_service = identity_service

    async def execute(self, request: GetIdentityRequest) -> IdentityResponse:
        """Execute get identity flow.

        Args:
            request: Get identity request

        Returns:
            Response holding the identity, or no identities if none matched

        Raises:
            ValidationError: If the selector is malformed or ambiguous
        """
        selector = IdentitySelector(
            identity_id=(
                IdentityId(parse_uuid(request.uid, "uid"))
                if request.uid is not None
                else None
            ),
            user_id=(
                UserId(parse_uuid(request.user_uid, "user_uid"))
                if request.user_uid is not None
                else None
            ),
            provider_user_id=request.provider_user_id,
            provider=(
                provider_from_wire(request.provider)
                if request.provider_user_id is not None
                else None
            ),
        )

        identity = await self.identity_service.get_identity(selector)
        return identities_response([identity] if identity else [])
