"""Set primary identity use case."""

from pydantic import BaseModel

from geist.application.usecase.base import BaseUseCase, parse_uuid
from geist.application.wire import IdentityResponse, identities_response
from geist.domain.repository import Transaction
from geist.domain.service import IdentityService
from geist.domain.value import IdentityId, UserId


class SetPrimaryIdentityRequest(BaseModel):
    """Set primary identity request."""

    identity_uid: str
    user_uid: str


class SetPrimaryIdentityUseCase(BaseUseCase):
    """Use case for choosing a user's primary identity."""

    def __init__(
        self, identity_service: IdentityService, transaction: Transaction
    ) -> None:
        self.identity_service = identity_service
        self.transaction = transaction

    async def execute(self, request: SetPrimaryIdentityRequest) -> IdentityResponse:
        """Execute set primary flow.

        Raises:
            NotFoundError: If the identity does not exist
            NotAuthorizedError: If the identity belongs to another user
        """
        identity_id = IdentityId(parse_uuid(request.identity_uid, "identity_uid"))
        user_id = UserId(parse_uuid(request.user_uid, "user_uid"))

        identity = await self.identity_service.set_primary_identity(
            identity_id, user_id
        )
        await self.transaction.commit()
        return identities_response([identity])
