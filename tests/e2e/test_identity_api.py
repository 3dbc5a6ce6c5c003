"""End-to-end tests for the identity RPC routes."""

from uuid import uuid4

import pytest
from dishka import Provider, Scope, provide
from dishka.integrations.fastapi import FastapiProvider
from fastapi.testclient import TestClient

from geist.application.wire import WireIdentityProvider
from geist.domain.error import RepositoryError
from geist.domain.repository import IdentityRepository
from geist.interface.api.app import create_app
from geist.persistence.repository.inmemory import InMemoryIdentityRepository
from tests.di import build_test_container


class SharedRepositoryProvider(Provider):
    """One in-memory repository for the whole app, so state spans requests."""

    @provide(scope=Scope.APP)
    def get_identity_repository(self) -> IdentityRepository:
        return InMemoryIdentityRepository()


class BrokenIdentityRepository(InMemoryIdentityRepository):
    async def find_by_user(self, user_id):
        raise RepositoryError("connection refused to db.internal:5432")


class BrokenRepositoryProvider(Provider):
    @provide(scope=Scope.APP)
    def get_identity_repository(self) -> IdentityRepository:
        return BrokenIdentityRepository()


@pytest.fixture
def client():
    """Create test client backed by a shared in-memory repository."""
    container = build_test_container(
        None, FastapiProvider(), SharedRepositoryProvider()
    )
    with TestClient(create_app(container)) as test_client:
        yield test_client


def link(client, user_uid, provider_user_id, **fields):
    return client.post(
        "/v1alpha/identities:link",
        json={
            "user_uid": user_uid,
            "provider": fields.pop("provider", WireIdentityProvider.GOOGLE),
            "provider_user_id": provider_user_id,
            **fields,
        },
    )


class TestLinkFlow:
    """End-to-end tests for linking, guarding and transferring identities."""

    def test_link_returns_wire_identity(self, client):
        """Should return the identity with wire-encoded fields."""
        # Arrange
        user_uid = str(uuid4())

        # Act
        response = link(
            client,
            user_uid,
            "google-a",
            provider_email="a@example.com",
            access_token="secret-token",
        )

        # Assert
        assert response.status_code == 200
        identities = response.json()["identities"]
        assert len(identities) == 1
        identity = identities[0]
        assert identity["user_uid"] == user_uid
        assert identity["provider"] == WireIdentityProvider.GOOGLE
        assert identity["provider_email"] == "a@example.com"
        assert identity["provider_username"] == ""
        assert identity["is_primary"] is True
        assert identity["last_used_at"] is None
        assert identity["create_time"]["seconds"] > 0
        assert "access_token" not in identity
        assert "secret-token" not in response.text

    def test_guard_then_transfer(self, client):
        """Should refuse the last unlink, then hand primary to the survivor."""
        user_uid = str(uuid4())
        a = link(client, user_uid, "google-a").json()["identities"][0]

        refused = client.post(
            "/v1alpha/identities:unlink",
            json={"identity_uid": a["uid"], "user_uid": user_uid},
        )
        assert refused.status_code == 412
        assert refused.json()["code"] == "FAILED_PRECONDITION"

        b = link(
            client, user_uid, "gh123", provider=WireIdentityProvider.GITHUB
        ).json()["identities"][0]
        assert b["is_primary"] is False

        unlinked = client.post(
            "/v1alpha/identities:unlink",
            json={"identity_uid": a["uid"], "user_uid": user_uid},
        )
        assert unlinked.status_code == 200
        assert unlinked.json()["identities"] == []

        listed = client.post("/v1alpha/identities:list", json={"user_uid": user_uid})
        remaining = listed.json()["identities"]
        assert [i["uid"] for i in remaining] == [b["uid"]]
        assert remaining[0]["is_primary"] is True

    def test_set_primary(self, client):
        user_uid = str(uuid4())
        link(client, user_uid, "google-a")
        b = link(
            client, user_uid, "gh-b", provider=WireIdentityProvider.GITHUB
        ).json()["identities"][0]

        response = client.post(
            "/v1alpha/identities:setPrimary",
            json={"identity_uid": b["uid"], "user_uid": user_uid},
        )

        assert response.status_code == 200
        assert response.json()["identities"][0]["is_primary"] is True
        by_user = client.post("/v1alpha/identities:get", json={"user_uid": user_uid})
        assert by_user.json()["identities"][0]["uid"] == b["uid"]

    def test_get_by_user_and_by_provider(self, client):
        user_uid = str(uuid4())
        created = link(client, user_uid, "google-a").json()["identities"][0]

        by_user = client.post("/v1alpha/identities:get", json={"user_uid": user_uid})
        by_provider = client.post(
            "/v1alpha/identities:get",
            json={
                "provider_user_id": "google-a",
                "provider": WireIdentityProvider.GOOGLE,
            },
        )
        missing = client.post(
            "/v1alpha/identities:get", json={"uid": str(uuid4())}
        )

        assert by_user.json()["identities"][0]["uid"] == created["uid"]
        assert by_provider.json()["identities"][0]["uid"] == created["uid"]
        assert missing.status_code == 200
        assert missing.json()["identities"] == []


class TestErrorMapping:
    """Domain errors should map to RPC-style statuses."""

    def test_invalid_uuid_is_bad_request(self, client):
        response = client.post("/v1alpha/identities:list", json={"user_uid": "nope"})

        assert response.status_code == 400
        assert response.json()["code"] == "INVALID_ARGUMENT"

    def test_ambiguous_selector_is_bad_request(self, client):
        response = client.post(
            "/v1alpha/identities:get",
            json={"uid": str(uuid4()), "user_uid": str(uuid4())},
        )

        assert response.status_code == 400

    def test_unspecified_provider_is_bad_request(self, client):
        response = link(
            client, str(uuid4()), "x", provider=WireIdentityProvider.UNSPECIFIED
        )

        assert response.status_code == 400

    def test_unknown_provider_is_bad_request(self, client):
        response = link(client, str(uuid4()), "x", provider=42)

        assert response.status_code == 400

    def test_link_without_user_is_unimplemented(self, client):
        response = link(client, "", "brand-new")

        assert response.status_code == 501
        assert response.json()["code"] == "UNIMPLEMENTED"

    def test_unlink_missing_identity_is_not_found(self, client):
        response = client.post(
            "/v1alpha/identities:unlink",
            json={"identity_uid": str(uuid4()), "user_uid": str(uuid4())},
        )

        assert response.status_code == 404

    def test_set_primary_for_other_user_is_forbidden(self, client):
        owner = str(uuid4())
        identity = link(client, owner, "google-a").json()["identities"][0]

        response = client.post(
            "/v1alpha/identities:setPrimary",
            json={"identity_uid": identity["uid"], "user_uid": str(uuid4())},
        )

        assert response.status_code == 403
        assert response.json()["code"] == "PERMISSION_DENIED"

    def test_store_failure_is_opaque(self):
        """Should hide store details from the client."""
        container = build_test_container(
            None, FastapiProvider(), BrokenRepositoryProvider()
        )
        with TestClient(create_app(container)) as client:
            response = client.post(
                "/v1alpha/identities:list", json={"user_uid": str(uuid4())}
            )

        assert response.status_code == 500
        assert response.json() == {"code": "INTERNAL", "detail": "Internal error"}
        assert "db.internal" not in response.text


class TestHealth:
    def test_health(self, client):
        response = client.get("/health")

        assert response.status_code == 200
        assert response.json()["status"] == "healthy"
