"""In-memory identity repository for testing."""

from datetime import datetime, timedelta, timezone
from typing import Optional
from uuid import uuid4

from geist.domain.error import IdentityConflictError, PrimaryIdentityConflictError
from geist.domain.model.identity import Identity, NewIdentity
from geist.domain.repository.identity import IdentityRepository
from geist.domain.value import IdentityId, IdentityProvider, UserId


class InMemoryIdentityRepository(IdentityRepository):
    """In-memory implementation of IdentityRepository for testing.

    Enforces the same uniqueness rules as the database constraints and
    keeps the owner pointers in a dict standing in for the users table.
    """

    def __init__(self) -> None:
        self._identities: list[Identity] = []
        self._primary_pointers: dict[UserId, IdentityId] = {}
        self._last_timestamp: datetime | None = None

    def _now(self) -> datetime:
        # Strictly increasing so creation order survives coarse clocks
        now = datetime.now(timezone.utc)
        if self._last_timestamp is not None and now <= self._last_timestamp:
            now = self._last_timestamp + timedelta(microseconds=1)
        self._last_timestamp = now
        return now

    def _replace(self, identity: Identity) -> None:
        for i, existing in enumerate(self._identities):
            if existing.id == identity.id:
                self._identities[i] = identity

    async def find_by_id(self, identity_id: IdentityId) -> Optional[Identity]:
        """Find identity by ID."""
        for identity in self._identities:
            if identity.id == identity_id:
                return identity
        return None

    async def find_by_provider(
        self, provider: IdentityProvider, provider_user_id: str
    ) -> Optional[Identity]:
        """Find identity by provider and provider user ID."""
        for identity in self._identities:
            if (
                identity.provider == provider
                and identity.provider_user_id == provider_user_id
            ):
                return identity
        return None

    async def find_by_user(self, user_id: UserId) -> list[Identity]:
        """Find all identities for a user, primary first."""
        matches = [i for i in self._identities if i.user_id == user_id]
        matches.sort(key=lambda i: (not i.is_primary, i.create_time, str(i.id)))
        return matches

    async def create(self, draft: NewIdentity) -> Identity:
        """Create identity, enforcing provider and primary uniqueness."""
        if await self.find_by_provider(draft.provider, draft.provider_user_id):
            raise IdentityConflictError(draft.provider.value, draft.provider_user_id)
        if draft.is_primary and any(
            i.user_id == draft.user_id and i.is_primary for i in self._identities
        ):
            raise PrimaryIdentityConflictError(str(draft.user_id))

        now = self._now()
        identity = Identity(
            id=IdentityId(uuid4()),
            create_time=now,
            update_time=now,
            **draft.model_dump(),
        )
        self._identities.append(identity)
        if identity.is_primary:
            self._primary_pointers[identity.user_id] = identity.id
        return identity

    async def delete(self, identity_id: IdentityId, user_id: UserId) -> bool:
        """Delete identity scoped to its owner."""
        before = len(self._identities)
        self._identities = [
            i
            for i in self._identities
            if not (i.id == identity_id and i.user_id == user_id)
        ]
        if self._primary_pointers.get(user_id) == identity_id:
            # ON DELETE SET NULL
            del self._primary_pointers[user_id]
        return len(self._identities) < before

    async def set_primary(self, identity_id: IdentityId, user_id: UserId) -> None:
        """Switch the user's primary identity."""
        now = self._now()
        for identity in list(self._identities):
            if identity.user_id != user_id:
                continue
            is_primary = identity.id == identity_id
            self._replace(
                identity.model_copy(
                    update={"is_primary": is_primary, "update_time": now}
                )
            )
        self._primary_pointers[user_id] = identity_id

    async def touch_last_used(self, identity_id: IdentityId) -> None:
        """Bump last_used_at and update_time."""
        identity = await self.find_by_id(identity_id)
        if identity is None:
            return
        now = self._now()
        self._replace(
            identity.model_copy(update={"last_used_at": now, "update_time": now})
        )

    async def count_by_user(self, user_id: UserId) -> int:
        """Count identities linked to a user."""
        return sum(1 for i in self._identities if i.user_id == user_id)

    async def lock_owner(self, user_id: UserId) -> None:
        """No-op; one repository instance serves one test at a time."""

    async def find_primary_pointer(self, user_id: UserId) -> Optional[IdentityId]:
        """Read the owner pointer."""
        return self._primary_pointers.get(user_id)
