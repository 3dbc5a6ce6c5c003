"""Domain value objects for Geist meta."""

from datetime import datetime
from enum import Enum

from geist.domain.value.common import ValueObject
from geist.domain.value.identifiers import IdentityId, UserId


class IdentityProvider(str, Enum):
    """External authentication providers an identity can come from.

    The set is closed. Values are what gets stored in the
    ``user_identities.provider`` column.
    """

    GOOGLE = "google"
    GITHUB = "github"
    TWITTER = "twitter"
    DISCORD = "discord"
    APPLE = "apple"
    MICROSOFT = "microsoft"
    EMAIL = "email"


class IdentitySelector(ValueObject):
    """Ways of looking up a single identity.

    Exactly one of ``identity_id``, ``user_id`` or ``provider_user_id``
    must be set. ``provider`` qualifies ``provider_user_id`` and is
    ignored otherwise.
    """

    identity_id: IdentityId | None = None
    user_id: UserId | None = None
    provider_user_id: str | None = None
    provider: IdentityProvider | None = None


class ProviderAccount(ValueObject):
    """Account details reported by a provider when linking.

    Tokens are plaintext here; they are enciphered before persistence.
    """

    provider: IdentityProvider
    provider_user_id: str
    email: str | None = None
    username: str | None = None
    avatar_url: str | None = None
    access_token: str | None = None
    refresh_token: str | None = None
    token_expires_at: datetime | None = None
    verified: bool = False
