"""Unlink identity use case."""

from pydantic import BaseModel

from geist.application.usecase.base import BaseUseCase, parse_uuid
from geist.application.wire import IdentityResponse
from geist.domain.repository import Transaction
from geist.domain.service import IdentityService
from geist.domain.value import IdentityId, UserId


class UnlinkIdentityRequest(BaseModel):
    """Unlink identity request."""

    identity_uid: str
    user_uid: str


class UnlinkIdentityUseCase(BaseUseCase):
    """Use case for removing one of a user's identities."""

    def __init__(
        self, identity_service: IdentityService, transaction: Transaction
    ) -> None:
        self.identity_service = identity_service
        self.transaction = transaction

    async def execute(self, request: UnlinkIdentityRequest) -> IdentityResponse:
        """Execute unlink flow.

        Raises:
            NotFoundError: If the identity does not exist
            NotAuthorizedError: If the identity belongs to another user
            LastIdentityError: If it is the user's only identity
        """
        identity_id = IdentityId(parse_uuid(request.identity_uid, "identity_uid"))
        user_id = UserId(parse_uuid(request.user_uid, "user_uid"))

        await self.identity_service.unlink_identity(identity_id, user_id)
        await self.transaction.commit()
        return IdentityResponse()
