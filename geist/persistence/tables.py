"""SQLAlchemy table definitions for Geist meta.

They match the schema defined in Alembic migrations.
"""

from sqlalchemy import (
    Boolean,
    Column,
    ForeignKey,
    Index,
    MetaData,
    String,
    Table,
    Text,
    UniqueConstraint,
)
from sqlalchemy.dialects.postgresql import JSONB, TIMESTAMP, UUID

# Metadata object for all tables
metadata = MetaData()

# ============================================================================
# USERS TABLE
# ============================================================================
users_table = Table(
    "users",
    metadata,
    Column("id", UUID, primary_key=True, server_default="uuid_generate_v4()"),
    Column(
        "primary_identity_id",
        UUID,
        ForeignKey(
            "user_identities.id",
            name="fk_users_primary_identity_id",
            ondelete="SET NULL",
            use_alter=True,  # user_identities references users too
        ),
        nullable=True,
    ),
    Column(
        "create_time", TIMESTAMP(timezone=True), nullable=False, server_default="NOW()"
    ),
    Column(
        "update_time", TIMESTAMP(timezone=True), nullable=False, server_default="NOW()"
    ),
)

# ============================================================================
# USER IDENTITIES TABLE (Multi-provider authentication)
# ============================================================================
user_identities_table = Table(
    "user_identities",
    metadata,
    Column("id", UUID, primary_key=True),
    Column(
        "user_id",
        UUID,
        ForeignKey("users.id", name="fk_user_identities_user_id", ondelete="CASCADE"),
        nullable=False,
    ),
    Column("provider", String(50), nullable=False),  # 'google', 'github', ...
    Column("provider_user_id", String(255), nullable=False),
    Column("provider_email", String(255), nullable=True),
    Column("provider_username", String(255), nullable=True),
    Column("provider_avatar_url", Text, nullable=True),
    Column("access_token_encrypted", Text, nullable=True),
    Column("refresh_token_encrypted", Text, nullable=True),
    Column("token_expires_at", TIMESTAMP(timezone=True), nullable=True),
    Column("metadata", JSONB(none_as_null=True), nullable=True),
    Column("is_primary", Boolean, nullable=False, server_default="false"),
    Column("verified", Boolean, nullable=False, server_default="false"),
    Column(
        "create_time", TIMESTAMP(timezone=True), nullable=False, server_default="NOW()"
    ),
    Column(
        "update_time", TIMESTAMP(timezone=True), nullable=False, server_default="NOW()"
    ),
    Column("last_used_at", TIMESTAMP(timezone=True), nullable=True),
    UniqueConstraint(
        "provider", "provider_user_id", name="uq_user_identities_provider_user_id"
    ),
)

Index("idx_user_identities_user_id", user_identities_table.c.user_id)

# At most one primary identity per user
Index(
    "uq_user_identities_primary",
    user_identities_table.c.user_id,
    unique=True,
    postgresql_where=user_identities_table.c.is_primary,
)
