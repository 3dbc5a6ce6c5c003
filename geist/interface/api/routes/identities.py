"""Identity RPC routes.

Callers are authenticated upstream; user UIDs in request bodies are
trusted as given. Domain errors are rendered by the handlers in
``geist.interface.error``.
"""

from dishka.integrations.fastapi import DishkaRoute, FromDishka
from fastapi import APIRouter

from geist.application.usecase.identity import (
    GetIdentityRequest,
    GetIdentityUseCase,
    LinkIdentityRequest,
    LinkIdentityUseCase,
    ListIdentitiesRequest,
    ListIdentitiesUseCase,
    SetPrimaryIdentityRequest,
    SetPrimaryIdentityUseCase,
    UnlinkIdentityRequest,
    UnlinkIdentityUseCase,
)
from geist.application.wire import IdentityResponse

router = APIRouter(
    prefix="/v1alpha/identities", tags=["identities"], route_class=DishkaRoute
)


@router.post(":get", response_model=IdentityResponse)
async def get_identity(
    request: GetIdentityRequest,
    get_identity_use_case: FromDishka[GetIdentityUseCase],
) -> IdentityResponse:
    """Get one identity by uid, by user (primary first) or by provider account.

    Returns an empty list when nothing matches.
    """
    return await get_identity_use_case.execute(request)


@router.post(":list", response_model=IdentityResponse)
async def list_identities(
    request: ListIdentitiesRequest,
    list_identities_use_case: FromDishka[ListIdentitiesUseCase],
) -> IdentityResponse:
    """List a user's identities, primary first."""
    return await list_identities_use_case.execute(request)


@router.post(":link", response_model=IdentityResponse)
async def link_identity(
    request: LinkIdentityRequest,
    link_identity_use_case: FromDishka[LinkIdentityUseCase],
) -> IdentityResponse:
    """Link a provider account, or refresh it if it is already linked."""
    return await link_identity_use_case.execute(request)


@router.post(":unlink", response_model=IdentityResponse)
async def unlink_identity(
    request: UnlinkIdentityRequest,
    unlink_identity_use_case: FromDishka[UnlinkIdentityUseCase],
) -> IdentityResponse:
    """Unlink an identity. A user's last identity cannot be unlinked."""
    return await unlink_identity_use_case.execute(request)


@router.post(":setPrimary", response_model=IdentityResponse)
async def set_primary_identity(
    request: SetPrimaryIdentityRequest,
    set_primary_identity_use_case: FromDishka[SetPrimaryIdentityUseCase],
) -> IdentityResponse:
    """Make an identity its owner's primary identity."""
    return await set_primary_identity_use_case.execute(request)
