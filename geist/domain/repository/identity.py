"""Identity repository interface."""

from abc import ABC, abstractmethod
from typing import Optional

from geist.domain.model.identity import Identity, NewIdentity
from geist.domain.value import IdentityId, IdentityProvider, UserId


class IdentityRepository(ABC):
    """Repository for Identity entity.

    Owns both the ``user_identities`` rows and the owner's
    ``primary_identity_id`` pointer, so the two can only change together.
    Store failures surface as RepositoryError; a missing row is always
    signalled with None.
    """

    @abstractmethod
    async def find_by_id(self, identity_id: IdentityId) -> Optional[Identity]:
        """Find an identity by ID.

        Args:
            identity_id: The identity's unique identifier

        Returns:
            The identity if found, None otherwise
        """
        pass

    @abstractmethod
    async def find_by_provider(
        self, provider: IdentityProvider, provider_user_id: str
    ) -> Optional[Identity]:
        """Find an identity by provider and provider user ID.

        Args:
            provider: The authentication provider
            provider_user_id: The user's ID on that provider

        Returns:
            The identity if found, None otherwise
        """
        pass

    @abstractmethod
    async def find_by_user(self, user_id: UserId) -> list[Identity]:
        """Get all identities linked to a user.

        Args:
            user_id: The user's unique identifier

        Returns:
            Primary identity first, the rest oldest first (may be empty)
        """
        pass

    @abstractmethod
    async def create(self, draft: NewIdentity) -> Identity:
        """Insert a new identity.

        Generates the ID and both timestamps. When the draft is primary the
        owner's pointer is moved to the new row in the same transaction.

        Args:
            draft: The identity to create

        Returns:
            The stored identity

        Raises:
            IdentityConflictError: If (provider, provider_user_id) is taken
        """
        pass

    @abstractmethod
    async def delete(self, identity_id: IdentityId, user_id: UserId) -> bool:
        """Delete an identity owned by the given user.

        Args:
            identity_id: The identity to delete
            user_id: The owner the delete is scoped to

        Returns:
            True if a row was removed
        """
        pass

    @abstractmethod
    async def set_primary(self, identity_id: IdentityId, user_id: UserId) -> None:
        """Make an identity the user's only primary identity.

        Clears every primary flag of the user, flags the target and moves
        the owner's pointer, all in one transaction.

        Args:
            identity_id: The identity to promote
            user_id: The identity's owner
        """
        pass

    @abstractmethod
    async def touch_last_used(self, identity_id: IdentityId) -> None:
        """Bump last_used_at and update_time of an identity.

        Args:
            identity_id: The identity that was used
        """
        pass

    @abstractmethod
    async def count_by_user(self, user_id: UserId) -> int:
        """Count identities owned by a user.

        Args:
            user_id: The user's unique identifier

        Returns:
            Number of linked identities
        """
        pass

    @abstractmethod
    async def lock_owner(self, user_id: UserId) -> None:
        """Lock the owner for the rest of the current transaction.

        Mutations that read the user's identities before changing them
        call this first, so two such mutations for one user never
        interleave. Locking an unknown user is a no-op.

        Args:
            user_id: The user's unique identifier
        """
        pass

    @abstractmethod
    async def find_primary_pointer(self, user_id: UserId) -> Optional[IdentityId]:
        """Read the user's stored primary identity pointer.

        Args:
            user_id: The user's unique identifier

        Returns:
            The pointed-to identity ID, or None if unset or user unknown
        """
        pass
