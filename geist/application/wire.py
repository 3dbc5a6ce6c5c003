"""Wire representation of identities.

Converts between the domain Identity and the message shapes exchanged
with RPC clients: providers travel as a closed integer enumeration and
instants as seconds plus nanoseconds since the Unix epoch.

Optional text fields that are absent in the domain are sent as empty
strings, and empty strings received from clients are read as absent, so
the two cannot be told apart on the wire.
"""

from datetime import datetime, timedelta, timezone
from enum import IntEnum

from pydantic import BaseModel, Field

from geist.domain.error import CorruptRecordError, ValidationError
from geist.domain.model import Identity
from geist.domain.value import IdentityProvider

EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)


class WireIdentityProvider(IntEnum):
    """Provider enumeration as numbered on the wire."""

    UNSPECIFIED = 0
    GOOGLE = 1
    GITHUB = 2
    TWITTER = 3
    DISCORD = 4
    APPLE = 5
    MICROSOFT = 6
    EMAIL = 7


_PROVIDER_TO_WIRE: dict[IdentityProvider, WireIdentityProvider] = {
    IdentityProvider.GOOGLE: WireIdentityProvider.GOOGLE,
    IdentityProvider.GITHUB: WireIdentityProvider.GITHUB,
    IdentityProvider.TWITTER: WireIdentityProvider.TWITTER,
    IdentityProvider.DISCORD: WireIdentityProvider.DISCORD,
    IdentityProvider.APPLE: WireIdentityProvider.APPLE,
    IdentityProvider.MICROSOFT: WireIdentityProvider.MICROSOFT,
    IdentityProvider.EMAIL: WireIdentityProvider.EMAIL,
}

_PROVIDER_FROM_WIRE: dict[WireIdentityProvider, IdentityProvider] = {
    wire: provider for provider, wire in _PROVIDER_TO_WIRE.items()
}


class Timestamp(BaseModel):
    """Point in time as seconds and nanoseconds since the Unix epoch."""

    seconds: int
    nanos: int = Field(default=0, ge=0, le=999_999_999)


class IdentityMessage(BaseModel):
    """Identity as returned to clients. Tokens and metadata never leave."""

    uid: str
    user_uid: str
    provider: int
    provider_user_id: str
    provider_email: str = ""
    provider_username: str = ""
    provider_avatar_url: str = ""
    is_primary: bool
    verified: bool
    create_time: Timestamp
    update_time: Timestamp
    last_used_at: Timestamp | None = None


class PageInfo(BaseModel):
    """Pagination cursor. Identity listings are never paginated."""

    next_page_token: str = ""


class IdentityResponse(BaseModel):
    """Response shape shared by every identity RPC."""

    identities: list[IdentityMessage] = []
    page: PageInfo | None = None


def provider_to_wire(provider: IdentityProvider) -> int:
    """Encode a stored provider.

    Raises:
        CorruptRecordError: If the provider has no wire value
    """
    try:
        return int(_PROVIDER_TO_WIRE[provider])
    except KeyError:
        raise CorruptRecordError(f"Invalid provider type: {provider!r}") from None


def provider_from_wire(value: int) -> IdentityProvider:
    """Decode a provider sent by a client.

    Raises:
        ValidationError: If the value is unspecified or unknown
    """
    try:
        wire = WireIdentityProvider(value)
    except ValueError:
        raise ValidationError(f"Invalid identity provider: {value}") from None
    if wire is WireIdentityProvider.UNSPECIFIED:
        raise ValidationError("Identity provider must be specified")
    return _PROVIDER_FROM_WIRE[wire]


def timestamp_to_wire(value: datetime) -> Timestamp:
    """Encode an instant. Naive datetimes are taken to be UTC."""
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    delta = value - EPOCH
    return Timestamp(
        seconds=delta.days * 86_400 + delta.seconds,
        nanos=delta.microseconds * 1_000,
    )


def timestamp_from_wire(value: Timestamp) -> datetime:
    """Decode an instant to an aware UTC datetime (microsecond precision).

    Raises:
        ValidationError: If the instant is outside the representable range
    """
    try:
        return EPOCH + timedelta(
            seconds=value.seconds, microseconds=value.nanos // 1_000
        )
    except (OverflowError, ValueError):
        raise ValidationError(f"Invalid timestamp: {value.seconds}s") from None


def optional_text(value: str | None) -> str | None:
    """Read an optional wire string, treating empty as absent."""
    return value or None


def identity_to_wire(identity: Identity) -> IdentityMessage:
    """Convert a domain identity to its wire message."""
    return IdentityMessage(
        uid=str(identity.id),
        user_uid=str(identity.user_id),
        provider=provider_to_wire(identity.provider),
        provider_user_id=identity.provider_user_id,
        provider_email=identity.provider_email or "",
        provider_username=identity.provider_username or "",
        provider_avatar_url=identity.provider_avatar_url or "",
        is_primary=identity.is_primary,
        verified=identity.verified,
        create_time=timestamp_to_wire(identity.create_time),
        update_time=timestamp_to_wire(identity.update_time),
        last_used_at=(
            timestamp_to_wire(identity.last_used_at) if identity.last_used_at else None
        ),
    )


def identities_response(identities: list[Identity]) -> IdentityResponse:
    """Wrap identities in the shared response shape."""
    return IdentityResponse(identities=[identity_to_wire(i) for i in identities])
