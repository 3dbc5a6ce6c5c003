"""Mappers for converting between database rows and domain models.

Domain models are frozen pydantic models, so rows are mapped by hand
instead of through the ORM.
"""

from typing import Any, Dict
from uuid import UUID

from geist.domain.error import CorruptRecordError
from geist.domain.model import Identity
from geist.domain.value import IdentityId, IdentityProvider, UserId


def _uuid(value: Any) -> UUID:
    return UUID(value) if isinstance(value, str) else value


def row_to_identity(row: Dict[str, Any]) -> Identity:
    """Convert database row to Identity domain model.

    Args:
        row: Database row as dict

    Returns:
        Identity domain model

    Raises:
        CorruptRecordError: If the stored provider is not a known provider
    """
    try:
        provider = IdentityProvider(row["provider"])
    except ValueError as e:
        raise CorruptRecordError(
            f"Identity {row['id']} has unknown provider {row['provider']!r}"
        ) from e

    return Identity(
        id=IdentityId(_uuid(row["id"])),
        user_id=UserId(_uuid(row["user_id"])),
        provider=provider,
        provider_user_id=row["provider_user_id"],
        provider_email=row.get("provider_email"),
        provider_username=row.get("provider_username"),
        provider_avatar_url=row.get("provider_avatar_url"),
        access_token_encrypted=row.get("access_token_encrypted"),
        refresh_token_encrypted=row.get("refresh_token_encrypted"),
        token_expires_at=row.get("token_expires_at"),
        metadata=row.get("metadata"),
        is_primary=row["is_primary"],
        verified=row["verified"],
        create_time=row["create_time"],
        update_time=row["update_time"],
        last_used_at=row.get("last_used_at"),
    )


def identity_to_dict(identity: Identity) -> Dict[str, Any]:
    """Convert Identity domain model to database dict.

    Args:
        identity: Identity domain model

    Returns:
        Dict suitable for database insertion
    """
    data = identity.model_dump()
    data["provider"] = identity.provider.value
    return data
