"""Identity domain service."""

import logfire

from geist.domain.error import (
    IdentityConflictError,
    LastIdentityError,
    NotAuthorizedError,
    NotFoundError,
    PrimaryIdentityConflictError,
    UnimplementedError,
    ValidationError,
)
from geist.domain.model.identity import Identity, NewIdentity
from geist.domain.repository.identity import IdentityRepository
from geist.domain.service.base import Service
from geist.domain.service.token_cipher import TokenCipher
from geist.domain.value import (
    IdentityId,
    IdentitySelector,
    ProviderAccount,
    UserId,
)


class IdentityService(Service):
    """Domain service for linking identities and choosing the primary one.

    Keeps two invariants on top of the repository: a user with identities
    has exactly one primary identity, and unlinking never leaves a user
    with none.
    """

    def __init__(
        self, identity_repository: IdentityRepository, token_cipher: TokenCipher
    ) -> None:
        """Initialize identity service.

        Args:
            identity_repository: Identity repository
            token_cipher: Cipher applied to provider tokens before storage
        """
        self.identity_repository = identity_repository
        self.token_cipher = token_cipher

    async def get_identity(self, selector: IdentitySelector) -> Identity | None:
        """Look up a single identity.

        By user, the primary identity is returned (or the oldest one).

        Args:
            selector: Exactly one of identity ID, user ID or provider user ID

        Returns:
            Identity if found, None otherwise

        Raises:
            ValidationError: If zero or several selectors are set, or the
                provider is missing for a provider user ID lookup
        """
        chosen = [
            name
            for name in ("identity_id", "user_id", "provider_user_id")
            if getattr(selector, name) is not None
        ]
        if len(chosen) != 1:
            raise ValidationError(
                "Exactly one of uid, user_uid, or provider_user_id must be provided"
            )

        with logfire.span("identity_service.get_identity", selector=chosen[0]):
            if selector.identity_id is not None:
                identity = await self.identity_repository.find_by_id(
                    selector.identity_id
                )
            elif selector.user_id is not None:
                identities = await self.identity_repository.find_by_user(
                    selector.user_id
                )
                identity = identities[0] if identities else None
            else:
                if selector.provider is None:
                    raise ValidationError(
                        "provider is required when looking up by provider_user_id"
                    )
                identity = await self.identity_repository.find_by_provider(
                    selector.provider, selector.provider_user_id
                )

            if identity:
                logfire.info(
                    "Identity found",
                    identity_id=str(identity.id),
                    provider=identity.provider.value,
                )
            else:
                logfire.warn("Identity not found", selector=chosen[0])
            return identity

    async def list_identities(self, user_id: UserId) -> list[Identity]:
        """Get all identities linked to a user, primary first.

        Args:
            user_id: User ID

        Returns:
            List of identities (may be empty)
        """
        with logfire.span("identity_service.list_identities", user_id=str(user_id)):
            identities = await self.identity_repository.find_by_user(user_id)
            logfire.info(
                "Identities retrieved for user",
                user_id=str(user_id),
                count=len(identities),
            )
            return identities

    async def link_identity(
        self, account: ProviderAccount, user_id: UserId | None = None
    ) -> Identity:
        """Link a provider account to a user.

        Linking an account that is already linked only refreshes its
        last_used_at, whoever it belongs to. The first identity a user
        links becomes primary.

        Args:
            account: Provider account details
            user_id: Owner for a new identity

        Returns:
            The new or refreshed identity

        Raises:
            UnimplementedError: If the account is new and no user is given
            NotFoundError: If the user does not exist
        """
        with logfire.span(
            "identity_service.link_identity",
            provider=account.provider.value,
            provider_user_id=account.provider_user_id,
        ):
            existing = await self.identity_repository.find_by_provider(
                account.provider, account.provider_user_id
            )
            if existing:
                return await self._refresh(existing)

            if user_id is None:
                raise UnimplementedError(
                    "Automatic user creation not yet implemented. Provide user_uid."
                )

            is_primary = await self.identity_repository.count_by_user(user_id) == 0
            try:
                identity = await self._create_as_primary_or_secondary(
                    account, user_id, is_primary
                )
            except IdentityConflictError:
                winner = await self.identity_repository.find_by_provider(
                    account.provider, account.provider_user_id
                )
                if winner is None:
                    raise
                logfire.info(
                    "Concurrent link detected, refreshing existing identity",
                    identity_id=str(winner.id),
                )
                return await self._refresh(winner)

            logfire.info(
                "Identity linked",
                identity_id=str(identity.id),
                user_id=str(user_id),
                provider=identity.provider.value,
                is_primary=identity.is_primary,
            )
            return identity

    async def unlink_identity(self, identity_id: IdentityId, user_id: UserId) -> None:
        """Remove an identity from a user.

        If the identity is primary, the oldest remaining identity becomes
        primary before the delete.
        The owner is locked first, so concurrent unlinks for one user run
        one after another and the last-identity check sees their outcome.

        Args:
            identity_id: Identity to remove
            user_id: User the identity must belong to

        Raises:
            NotFoundError: If the identity does not exist
            NotAuthorizedError: If the identity belongs to someone else
            LastIdentityError: If it is the user's only identity
        """
        with logfire.span(
            "identity_service.unlink_identity",
            identity_id=str(identity_id),
            user_id=str(user_id),
        ):
            await self.identity_repository.lock_owner(user_id)
            identity = await self._get_owned(identity_id, user_id)

            count = await self.identity_repository.count_by_user(user_id)
            if count <= 1:
                logfire.warn("Refusing to unlink last identity", user_id=str(user_id))
                raise LastIdentityError(str(user_id))

            if identity.is_primary:
                identities = await self.identity_repository.find_by_user(user_id)
                remaining = [i for i in identities if i.id != identity_id]
                successor = min(remaining, key=lambda i: (i.create_time, str(i.id)))
                await self.identity_repository.set_primary(successor.id, user_id)
                logfire.info(
                    "Primary identity transferred",
                    user_id=str(user_id),
                    identity_id=str(successor.id),
                )

            deleted = await self.identity_repository.delete(identity_id, user_id)
            logfire.info(
                "Identity unlinked",
                identity_id=str(identity_id),
                user_id=str(user_id),
                deleted=deleted,
            )

    async def set_primary_identity(
        self, identity_id: IdentityId, user_id: UserId
    ) -> Identity:
        """Make an identity the user's primary identity.

        Args:
            identity_id: Identity to promote
            user_id: User the identity must belong to

        Returns:
            The updated identity

        Raises:
            NotFoundError: If the identity does not exist
            NotAuthorizedError: If the identity belongs to someone else
        """
        with logfire.span(
            "identity_service.set_primary_identity",
            identity_id=str(identity_id),
            user_id=str(user_id),
        ):
            await self.identity_repository.lock_owner(user_id)
            await self._get_owned(identity_id, user_id)
            await self.identity_repository.set_primary(identity_id, user_id)

            updated = await self.identity_repository.find_by_id(identity_id)
            if updated is None:
                raise NotFoundError("Identity", str(identity_id))
            logfire.info(
                "Primary identity set",
                identity_id=str(identity_id),
                user_id=str(user_id),
            )
            return updated

    async def _get_owned(self, identity_id: IdentityId, user_id: UserId) -> Identity:
        identity = await self.identity_repository.find_by_id(identity_id)
        if identity is None:
            raise NotFoundError("Identity", str(identity_id))
        if identity.user_id != user_id:
            logfire.warn(
                "Identity ownership mismatch",
                identity_id=str(identity_id),
                user_id=str(user_id),
            )
            raise NotAuthorizedError("Identity", str(identity_id), str(user_id))
        return identity

    async def _create(
        self, account: ProviderAccount, user_id: UserId, is_primary: bool
    ) -> Identity:
        draft = NewIdentity(
            user_id=user_id,
            provider=account.provider,
            provider_user_id=account.provider_user_id,
            provider_email=account.email,
            provider_username=account.username,
            provider_avatar_url=account.avatar_url,
            access_token_encrypted=self._encrypt(account.access_token),
            refresh_token_encrypted=self._encrypt(account.refresh_token),
            token_expires_at=account.token_expires_at,
            is_primary=is_primary,
            verified=account.verified,
        )
        return await self.identity_repository.create(draft)

    async def _create_as_primary_or_secondary(
        self, account: ProviderAccount, user_id: UserId, is_primary: bool
    ) -> Identity:
        try:
            return await self._create(account, user_id, is_primary)
        except PrimaryIdentityConflictError:
            # Another link for this user won the first-identity race
            logfire.warn(
                "Lost primary race, linking as secondary", user_id=str(user_id)
            )
            return await self._create(account, user_id, is_primary=False)

    async def _refresh(self, identity: Identity) -> Identity:
        await self.identity_repository.touch_last_used(identity.id)
        refreshed = await self.identity_repository.find_by_id(identity.id)
        if refreshed is None:
            raise NotFoundError("Identity", str(identity.id))
        logfire.info("Identity refreshed", identity_id=str(identity.id))
        return refreshed

    def _encrypt(self, token: str | None) -> str | None:
        if not token:
            return None
        return self.token_cipher.encrypt(token)
