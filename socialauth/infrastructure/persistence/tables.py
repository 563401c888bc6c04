"""SQLAlchemy table definitions - dialect-agnostic (works with SQLite and PostgreSQL)."""

from sqlalchemy import (
    Column,
    DateTime,
    Index,
    Integer,
    MetaData,
    String,
    Table,
    Text,
    UniqueConstraint,
)

# Metadata object for all tables
metadata = MetaData()

# ============================================================================
# USER CONNECTIONS TABLE
# ============================================================================
user_connections_table = Table(
    "user_connections",
    metadata,
    Column("user_id", String(255), primary_key=True),
    Column("provider_id", String(255), primary_key=True),
    Column("provider_user_id", String(255), primary_key=True),
    Column("rank", Integer, nullable=False),  # Order among the user's connections to a provider
    Column("display_name", String(255), nullable=True),
    Column("profile_url", String(512), nullable=True),
    Column("image_url", String(512), nullable=True),
    Column("access_token", Text, nullable=True),
    Column("secret", Text, nullable=True),
    Column("refresh_token", Text, nullable=True),
    Column("expire_time", DateTime(timezone=True), nullable=True),
    Column("created_at", DateTime(timezone=True), nullable=False),
    UniqueConstraint("user_id", "provider_id", "rank", name="uq_user_connections_rank"),
)

Index(
    "idx_user_connections_provider_user",
    user_connections_table.c.provider_id,
    user_connections_table.c.provider_user_id,
)
