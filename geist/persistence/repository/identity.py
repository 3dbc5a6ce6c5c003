"""Identity repository implementation using PostgreSQL."""

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from datetime import datetime, timezone
from typing import Optional
from uuid import uuid4

import logfire
from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from geist.domain.error import (
    IdentityConflictError,
    NotFoundError,
    PrimaryIdentityConflictError,
    RepositoryError,
)
from geist.domain.model.identity import Identity, NewIdentity
from geist.domain.repository.identity import IdentityRepository
from geist.domain.value import IdentityId, IdentityProvider, UserId
from geist.persistence.mappers import identity_to_dict, row_to_identity
from geist.persistence.tables import user_identities_table, users_table


class PostgresIdentityRepository(IdentityRepository):
    """PostgreSQL implementation of IdentityRepository.

    Runs on the request's session, so everything a request does commits or
    rolls back together. ``create`` and ``set_primary`` additionally run
    inside a savepoint so a failure leaves none of their statements applied.
    """

    def __init__(self, session: AsyncSession) -> None:
        """Initialize repository with database session.

        Args:
            session: SQLAlchemy async session
        """
        self.session = session

    async def find_by_id(self, identity_id: IdentityId) -> Optional[Identity]:
        """Get identity by ID."""
        stmt = select(user_identities_table).where(
            user_identities_table.c.id == identity_id
        )
        async with self._store_errors("find_by_id"):
            result = await self.session.execute(stmt)
            row = result.mappings().first()

        if not row:
            return None

        return row_to_identity(dict(row))

    async def find_by_provider(
        self, provider: IdentityProvider, provider_user_id: str
    ) -> Optional[Identity]:
        """Get identity by provider and provider user ID."""
        stmt = select(user_identities_table).where(
            user_identities_table.c.provider == provider.value,
            user_identities_table.c.provider_user_id == provider_user_id,
        )
        async with self._store_errors("find_by_provider"):
            result = await self.session.execute(stmt)
            row = result.mappings().first()

        if not row:
            return None

        return row_to_identity(dict(row))

    async def find_by_user(self, user_id: UserId) -> list[Identity]:
        """Find all identities for a user, primary first then oldest first."""
        stmt = (
            select(user_identities_table)
            .where(user_identities_table.c.user_id == user_id)
            .order_by(
                user_identities_table.c.is_primary.desc(),
                user_identities_table.c.create_time.asc(),
                user_identities_table.c.id.asc(),
            )
        )
        async with self._store_errors("find_by_user"):
            result = await self.session.execute(stmt)
            rows = result.mappings().all()

        return [row_to_identity(dict(row)) for row in rows]

    async def create(self, draft: NewIdentity) -> Identity:
        """Insert identity and, for a primary one, point the owner at it.

        Raises:
            IdentityConflictError: If (provider, provider_user_id) is taken
            PrimaryIdentityConflictError: If the user already has a primary
            NotFoundError: If the owning user does not exist
        """
        now = datetime.now(timezone.utc)
        identity = Identity(
            id=IdentityId(uuid4()),
            create_time=now,
            update_time=now,
            **draft.model_dump(),
        )

        async with self._store_errors("create"):
            try:
                async with self.session.begin_nested():
                    await self.session.execute(
                        user_identities_table.insert().values(
                            **identity_to_dict(identity)
                        )
                    )
                    if identity.is_primary:
                        await self._point_owner_at(identity.id, identity.user_id)
            except IntegrityError as e:
                raise self._integrity_error(e, draft) from e

        return identity

    async def delete(self, identity_id: IdentityId, user_id: UserId) -> bool:
        """Delete identity scoped to its owner."""
        stmt = user_identities_table.delete().where(
            user_identities_table.c.id == identity_id,
            user_identities_table.c.user_id == user_id,
        )
        async with self._store_errors("delete"):
            result = await self.session.execute(stmt)
            await self.session.flush()

        return result.rowcount > 0

    async def set_primary(self, identity_id: IdentityId, user_id: UserId) -> None:
        """Switch the user's primary identity in one savepoint."""
        clear_stmt = (
            user_identities_table.update()
            .where(user_identities_table.c.user_id == user_id)
            .values(is_primary=False, update_time=func.now())
        )
        set_stmt = (
            user_identities_table.update()
            .where(
                user_identities_table.c.id == identity_id,
                user_identities_table.c.user_id == user_id,
            )
            .values(is_primary=True, update_time=func.now())
        )
        async with self._store_errors("set_primary"):
            async with self.session.begin_nested():
                await self.session.execute(clear_stmt)
                await self.session.execute(set_stmt)
                await self._point_owner_at(identity_id, user_id)

    async def touch_last_used(self, identity_id: IdentityId) -> None:
        """Bump last_used_at and update_time."""
        stmt = (
            user_identities_table.update()
            .where(user_identities_table.c.id == identity_id)
            .values(last_used_at=func.now(), update_time=func.now())
        )
        async with self._store_errors("touch_last_used"):
            await self.session.execute(stmt)
            await self.session.flush()

    async def count_by_user(self, user_id: UserId) -> int:
        """Count identities linked to a user."""
        stmt = (
            select(func.count())
            .select_from(user_identities_table)
            .where(user_identities_table.c.user_id == user_id)
        )
        async with self._store_errors("count_by_user"):
            result = await self.session.execute(stmt)
            return result.scalar_one()

    async def lock_owner(self, user_id: UserId) -> None:
        """Take a row lock on the owner until the transaction ends."""
        stmt = (
            select(users_table.c.id)
            .where(users_table.c.id == user_id)
            .with_for_update()
        )
        async with self._store_errors("lock_owner"):
            await self.session.execute(stmt)

    async def find_primary_pointer(self, user_id: UserId) -> Optional[IdentityId]:
        """Read users.primary_identity_id."""
        stmt = select(users_table.c.primary_identity_id).where(
            users_table.c.id == user_id
        )
        async with self._store_errors("find_primary_pointer"):
            result = await self.session.execute(stmt)
            pointer = result.scalar_one_or_none()

        return IdentityId(pointer) if pointer else None

    @asynccontextmanager
    async def _store_errors(self, operation: str) -> AsyncIterator[None]:
        """Translate SQLAlchemy failures into RepositoryError.

        Rolls the session back so nothing the request did so far commits.
        The driver's message is logged but never carried on the raised error.
        """
        try:
            yield
        except SQLAlchemyError as e:
            logfire.error(
                "Identity store failure",
                operation=operation,
                error=str(e),
                error_type=type(e).__name__,
            )
            await self.session.rollback()
            raise RepositoryError(f"Identity store failure during {operation}") from e

    async def _point_owner_at(self, identity_id: IdentityId, user_id: UserId) -> None:
        await self.session.execute(
            users_table.update()
            .where(users_table.c.id == user_id)
            .values(primary_identity_id=identity_id, update_time=func.now())
        )

    @staticmethod
    def _integrity_error(error: IntegrityError, draft: NewIdentity) -> Exception:
        """Map a constraint violation on insert to a domain error."""
        message = str(error.orig)
        if "uq_user_identities_provider_user_id" in message:
            return IdentityConflictError(draft.provider.value, draft.provider_user_id)
        if "uq_user_identities_primary" in message:
            return PrimaryIdentityConflictError(str(draft.user_id))
        if "fk_user_identities_user_id" in message:
            return NotFoundError("User", str(draft.user_id))
        logfire.error("Unexpected constraint violation", error=message)
        return RepositoryError("Identity store rejected the new identity")
