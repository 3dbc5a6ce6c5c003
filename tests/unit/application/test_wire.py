"""Unit tests for the identity wire mapping."""

from datetime import datetime, timedelta, timezone
from uuid import uuid4

import pytest

from geist.application.wire import (
    EPOCH,
    Timestamp,
    WireIdentityProvider,
    identity_to_wire,
    optional_text,
    provider_from_wire,
    provider_to_wire,
    timestamp_from_wire,
    timestamp_to_wire,
)
from geist.domain.error import CorruptRecordError, ValidationError
from geist.domain.model import Identity
from geist.domain.value import IdentityId, IdentityProvider, UserId


def make_identity(**fields) -> Identity:
    now = datetime(2024, 5, 1, 12, 30, 15, 250_000, tzinfo=timezone.utc)
    values = {
        "id": IdentityId(uuid4()),
        "user_id": UserId(uuid4()),
        "provider": IdentityProvider.GITHUB,
        "provider_user_id": "gh123",
        "create_time": now,
        "update_time": now,
    }
    values.update(fields)
    return Identity(**values)


class TestProviderMapping:
    """Tests for provider encoding and decoding."""

    def test_every_provider_has_a_wire_value(self):
        for provider in IdentityProvider:
            assert provider_to_wire(provider) == WireIdentityProvider[provider.name]

    def test_wire_values_are_fixed(self):
        assert provider_to_wire(IdentityProvider.GOOGLE) == 1
        assert provider_to_wire(IdentityProvider.EMAIL) == 7

    def test_decode_known_provider(self):
        assert provider_from_wire(4) is IdentityProvider.DISCORD

    def test_unspecified_provider_is_rejected(self):
        with pytest.raises(ValidationError, match="must be specified"):
            provider_from_wire(WireIdentityProvider.UNSPECIFIED)

    @pytest.mark.parametrize("value", [8, -1, 999])
    def test_unknown_provider_is_rejected(self, value):
        with pytest.raises(ValidationError, match="Invalid identity provider"):
            provider_from_wire(value)

    def test_unmapped_stored_provider_is_corrupt(self):
        with pytest.raises(CorruptRecordError):
            provider_to_wire("myspace")


class TestTimestampMapping:
    """Tests for timestamp encoding."""

    def test_epoch_is_zero(self):
        assert timestamp_to_wire(EPOCH) == Timestamp(seconds=0, nanos=0)

    def test_microseconds_become_nanos(self):
        value = EPOCH + timedelta(days=2, seconds=5, microseconds=123_456)

        encoded = timestamp_to_wire(value)

        assert encoded.seconds == 2 * 86_400 + 5
        assert encoded.nanos == 123_456_000

    def test_before_epoch_keeps_nanos_positive(self):
        encoded = timestamp_to_wire(EPOCH - timedelta(microseconds=1))

        assert encoded.seconds == -1
        assert encoded.nanos == 999_999_000

    def test_naive_datetime_is_utc(self):
        naive = datetime(2024, 1, 1, 0, 0, 0)
        aware = naive.replace(tzinfo=timezone.utc)

        assert timestamp_to_wire(naive) == timestamp_to_wire(aware)

    def test_other_timezones_are_normalized(self):
        plus_two = timezone(timedelta(hours=2))
        value = datetime(2024, 1, 1, 2, 0, 0, tzinfo=plus_two)

        assert timestamp_to_wire(value) == timestamp_to_wire(
            datetime(2024, 1, 1, tzinfo=timezone.utc)
        )

    def test_decode(self):
        decoded = timestamp_from_wire(Timestamp(seconds=86_400, nanos=5_000))

        assert decoded == EPOCH + timedelta(days=1, microseconds=5)
        assert decoded.tzinfo is not None

    @pytest.mark.parametrize(
        "seconds", [10**11, -(10**11), 10**15], ids=["past-max", "before-min", "huge"]
    )
    def test_decode_out_of_range_is_rejected(self, seconds):
        with pytest.raises(ValidationError, match="Invalid timestamp"):
            timestamp_from_wire(Timestamp(seconds=seconds))


class TestIdentityToWire:
    """Tests for identity_to_wire."""

    def test_absent_text_becomes_empty_string(self):
        message = identity_to_wire(make_identity())

        assert message.provider_email == ""
        assert message.provider_username == ""
        assert message.provider_avatar_url == ""
        assert message.last_used_at is None

    def test_fields_are_carried(self):
        identity = make_identity(
            provider_email="a@example.com",
            is_primary=True,
            verified=True,
            last_used_at=EPOCH + timedelta(seconds=10),
        )

        message = identity_to_wire(identity)

        assert message.uid == str(identity.id)
        assert message.user_uid == str(identity.user_id)
        assert message.provider == WireIdentityProvider.GITHUB
        assert message.provider_email == "a@example.com"
        assert message.is_primary is True
        assert message.verified is True
        assert message.create_time.nanos == 250_000_000
        assert message.last_used_at == Timestamp(seconds=10, nanos=0)

    def test_tokens_are_never_sent(self):
        identity = make_identity(
            access_token_encrypted="enc-access",
            refresh_token_encrypted="enc-refresh",
        )

        dumped = identity_to_wire(identity).model_dump_json()

        assert "enc-access" not in dumped
        assert "enc-refresh" not in dumped


def test_optional_text_reads_empty_as_absent():
    assert optional_text("") is None
    assert optional_text(None) is None
    assert optional_text("x") == "x"
