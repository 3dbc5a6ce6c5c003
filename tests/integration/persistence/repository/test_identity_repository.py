"""Integration tests for PostgresIdentityRepository.

These tests need a migrated PostgreSQL database at DATABASE__URL and are
skipped otherwise.
"""

import asyncio
import os
from uuid import uuid4

import pytest
from sqlalchemy.ext.asyncio import AsyncSession

from geist.domain.error import (
    IdentityConflictError,
    LastIdentityError,
    NotFoundError,
    PrimaryIdentityConflictError,
)
from geist.domain.model import NewIdentity
from geist.domain.repository import IdentityRepository
from geist.domain.service import IdentityService
from geist.domain.value import IdentityProvider, UserId
from geist.persistence.tables import users_table
from tests.conftest import make_account
from tests.di import build_test_container
from tests.harness import create_env_fixture

pytestmark = [
    pytest.mark.integration,
    pytest.mark.skipif(
        not os.environ.get("DATABASE__URL"), reason="DATABASE__URL not set"
    ),
]

# Integration test fixture - real persistence
integration_env = create_env_fixture(unmock={"persistence"})


async def create_user(env) -> UserId:
    session = await env.get(AsyncSession)
    user_id = UserId(uuid4())
    await session.execute(users_table.insert().values(id=user_id))
    return user_id


def draft(user_id, provider_user_id, is_primary=False, **fields) -> NewIdentity:
    return NewIdentity(
        user_id=user_id,
        provider=fields.pop("provider", IdentityProvider.GOOGLE),
        provider_user_id=provider_user_id,
        is_primary=is_primary,
        **fields,
    )


class TestIdentityRepositoryIntegration:
    """Integration tests for PostgresIdentityRepository constraints."""

    @pytest.mark.asyncio
    async def test_create_primary_points_owner(self, integration_env):
        # Arrange
        repo = await integration_env.get(IdentityRepository)
        user_id = await create_user(integration_env)

        # Act
        identity = await repo.create(
            draft(user_id, f"g-{uuid4()}", is_primary=True, metadata={"k": "v"})
        )

        # Assert
        stored = await repo.find_by_id(identity.id)
        assert stored.is_primary is True
        assert stored.metadata == {"k": "v"}
        assert await repo.find_primary_pointer(user_id) == identity.id

    @pytest.mark.asyncio
    async def test_provider_uniqueness_is_enforced(self, integration_env):
        repo = await integration_env.get(IdentityRepository)
        user_id = await create_user(integration_env)
        provider_user_id = f"g-{uuid4()}"
        await repo.create(draft(user_id, provider_user_id, is_primary=True))

        with pytest.raises(IdentityConflictError):
            await repo.create(draft(user_id, provider_user_id))

        # The savepoint rolled back; the session is still usable
        assert await repo.count_by_user(user_id) == 1

    @pytest.mark.asyncio
    async def test_single_primary_is_enforced(self, integration_env):
        repo = await integration_env.get(IdentityRepository)
        user_id = await create_user(integration_env)
        first = await repo.create(draft(user_id, f"g-{uuid4()}", is_primary=True))

        with pytest.raises(PrimaryIdentityConflictError):
            await repo.create(
                draft(
                    user_id,
                    f"gh-{uuid4()}",
                    is_primary=True,
                    provider=IdentityProvider.GITHUB,
                )
            )

        assert await repo.find_primary_pointer(user_id) == first.id

    @pytest.mark.asyncio
    async def test_unknown_user_is_not_found(self, integration_env):
        repo = await integration_env.get(IdentityRepository)

        with pytest.raises(NotFoundError):
            await repo.create(draft(UserId(uuid4()), f"g-{uuid4()}"))

    @pytest.mark.asyncio
    async def test_set_primary_and_delete(self, integration_env):
        # Arrange
        repo = await integration_env.get(IdentityRepository)
        user_id = await create_user(integration_env)
        a = await repo.create(draft(user_id, f"g-{uuid4()}", is_primary=True))
        b = await repo.create(
            draft(user_id, f"gh-{uuid4()}", provider=IdentityProvider.GITHUB)
        )

        # Act
        await repo.set_primary(b.id, user_id)
        deleted_elsewhere = await repo.delete(a.id, UserId(uuid4()))
        deleted = await repo.delete(a.id, user_id)

        # Assert
        assert deleted_elsewhere is False
        assert deleted is True
        identities = await repo.find_by_user(user_id)
        assert [i.id for i in identities] == [b.id]
        assert identities[0].is_primary is True
        assert await repo.find_primary_pointer(user_id) == b.id


class TestIdentityServiceIntegration:
    """Service flows against the real schema."""

    @pytest.mark.asyncio
    async def test_unlink_primary_transfers(self, integration_env):
        service = await integration_env.get(IdentityService)
        repo = await integration_env.get(IdentityRepository)
        user_id = await create_user(integration_env)
        a = await service.link_identity(
            make_account(IdentityProvider.GOOGLE), user_id
        )
        b = await service.link_identity(
            make_account(IdentityProvider.GITHUB), user_id
        )

        await service.unlink_identity(a.id, user_id)

        assert (await repo.find_by_id(b.id)).is_primary is True
        assert await repo.find_primary_pointer(user_id) == b.id

    @pytest.mark.asyncio
    async def test_relink_bumps_last_used(self, integration_env):
        service = await integration_env.get(IdentityService)
        user_id = await create_user(integration_env)
        account = make_account(IdentityProvider.DISCORD)
        original = await service.link_identity(account, user_id)

        refreshed = await service.link_identity(account, user_id)

        assert refreshed.id == original.id
        assert refreshed.last_used_at is not None


class TestConcurrentUnlink:
    """Concurrent unlinks for one user, each in its own transaction."""

    @pytest.mark.asyncio
    async def test_one_of_two_concurrent_unlinks_is_refused(self):
        # Arrange
        container = build_test_container(unmock={"persistence"})
        try:
            async with container() as setup:
                service = await setup.get(IdentityService)
                user_id = await create_user(setup)
                a = await service.link_identity(
                    make_account(IdentityProvider.GOOGLE), user_id
                )
                b = await service.link_identity(
                    make_account(IdentityProvider.GITHUB), user_id
                )

            async def unlink(identity_id):
                async with container() as request:
                    service = await request.get(IdentityService)
                    await service.unlink_identity(identity_id, user_id)

            # Act
            results = await asyncio.gather(
                unlink(a.id), unlink(b.id), return_exceptions=True
            )

            # Assert
            refused = [r for r in results if isinstance(r, LastIdentityError)]
            assert len(refused) == 1
            assert sum(r is None for r in results) == 1

            async with container() as check:
                repo = await check.get(IdentityRepository)
                remaining = await repo.find_by_user(user_id)
                assert len(remaining) == 1
                assert remaining[0].is_primary is True
                assert await repo.find_primary_pointer(user_id) == remaining[0].id
        finally:
            await container.close()
