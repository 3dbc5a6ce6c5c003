"""Identity entity.

Links an external authentication provider account to a user.
"""

from datetime import datetime
from typing import Any, Optional

from geist.domain.model.common import DomainModel
from geist.domain.value import IdentityId, IdentityProvider, UserId


class NewIdentity(DomainModel):
    """Identity draft, before the store assigns an ID and timestamps."""

    user_id: UserId
    provider: IdentityProvider
    provider_user_id: str  # Permanent ID from provider (sub claim, numeric ID, ...)
    provider_email: Optional[str] = None
    provider_username: Optional[str] = None
    provider_avatar_url: Optional[str] = None
    access_token_encrypted: Optional[str] = None
    refresh_token_encrypted: Optional[str] = None
    token_expires_at: Optional[datetime] = None
    metadata: Optional[dict[str, Any]] = None
    is_primary: bool = False
    verified: bool = False


class Identity(NewIdentity):
    """External authentication identity linked to a user.

    A user can own several identities (Google, GitHub, ...). Exactly one
    of them is primary whenever the user owns any, and the user's
    ``primary_identity_id`` pointer always names that one.
    """

    id: IdentityId
    create_time: datetime
    update_time: datetime
    last_used_at: Optional[datetime] = None
