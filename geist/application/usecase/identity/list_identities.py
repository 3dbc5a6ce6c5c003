"""List identities use case."""

from pydantic import BaseModel

from geist.application.usecase.base import BaseUseCase, parse_uuid
from geist.application.wire import IdentityResponse, identities_response
from geist.domain.service import IdentityService
from geist.domain.value import UserId


class ListIdentitiesRequest(BaseModel):
    """List identities request."""

    user_uid: str


class ListIdentitiesUseCase(BaseUseCase):
    """Use case for listing a user's identities, primary first."""

    def __init__(self, identity_service: IdentityService) -> None:
        self.identity_service = identity_service

    async def execute(self, request: ListIdentitiesRequest) -> IdentityResponse:
        user_id = UserId(parse_uuid(request.user_uid, "user_uid"))
        identities = await self.identity_service.list_identities(user_id)
        return identities_response(identities)
