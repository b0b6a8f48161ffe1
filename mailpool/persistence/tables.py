"""SQLAlchemy table definitions for mailpool.

They match the schema defined in Alembic migrations.
"""

from sqlalchemy import (
    Boolean,
    CheckConstraint,
    Column,
    ForeignKey,
    Index,
    Integer,
    MetaData,
    String,
    Table,
    Text,
)
from sqlalchemy.dialects.postgresql import TIMESTAMP

# Metadata object for all tables
metadata = MetaData()

# ============================================================================
# INVITE REDEMPTIONS TABLE (one row per redeemed invite)
# ============================================================================
invite_redemptions_table = Table(
    "invite_redemptions",
    metadata,
    Column("invite_id", String(64), primary_key=True),
    Column("used_count", Integer, nullable=False, server_default="0"),
    Column(
        "created_at", TIMESTAMP(timezone=True), nullable=False, server_default="NOW()"
    ),
    Column(
        "updated_at", TIMESTAMP(timezone=True), nullable=False, server_default="NOW()"
    ),
    CheckConstraint("used_count >= 0", name="check_used_count_non_negative"),
)

# ============================================================================
# INVITE REDEMPTION USES TABLE (ordered uses of an invite)
# ============================================================================
invite_redemption_uses_table = Table(
    "invite_redemption_uses",
    metadata,
    Column(
        "invite_id",
        String(64),
        ForeignKey("invite_redemptions.invite_id", ondelete="CASCADE"),
        primary_key=True,
    ),
    # 1-based position; (invite_id, seq) makes a lost compare-and-set fail loudly
    Column("seq", Integer, primary_key=True),
    Column("user_id", String(255), nullable=False),
    Column("method", String(50), nullable=False),  # 'linuxdo', 'google', ...
    Column("used_at", TIMESTAMP(timezone=True), nullable=False),
)

# ============================================================================
# CARD KEY CONSUMPTIONS TABLE (existence == consumed)
# ============================================================================
card_key_consumptions_table = Table(
    "card_key_consumptions",
    metadata,
    Column("key", String(64), primary_key=True),
    Column("user_id", String(255), nullable=False),
    Column("consumed_at", TIMESTAMP(timezone=True), nullable=False),
)

# ============================================================================
# POOLED IDENTITIES TABLE
# ============================================================================
pooled_identities_table = Table(
    "pooled_identities",
    metadata,
    Column("email", String(320), primary_key=True),
    Column("tier", String(20), nullable=False),  # 'short_term', 'long_term'
    Column("protocol", String(20), nullable=False),  # 'imap', 'graph'
    Column("banned", Boolean, nullable=False, server_default="false"),
    Column("assigned_to", String(255), nullable=True),
    Column("assigned_at", TIMESTAMP(timezone=True), nullable=True),
    Column(
        "created_at", TIMESTAMP(timezone=True), nullable=False, server_default="NOW()"
    ),
    CheckConstraint(
        "tier IN ('short_term', 'long_term')", name="check_identity_tier"
    ),
    CheckConstraint("protocol IN ('imap', 'graph')", name="check_identity_protocol"),
)

Index(
    "idx_pooled_identities_available_tier",
    pooled_identities_table.c.tier,
    postgresql_where=(
        pooled_identities_table.c.assigned_to.is_(None)
        & pooled_identities_table.c.banned.is_(False)
    ),
)
Index(
    "idx_pooled_identities_available_protocol",
    pooled_identities_table.c.protocol,
    postgresql_where=(
        pooled_identities_table.c.assigned_to.is_(None)
        & pooled_identities_table.c.banned.is_(False)
    ),
)

# ============================================================================
# CARD VERIFICATION LOGS TABLE (append-only audit)
# ============================================================================
card_verification_logs_table = Table(
    "card_verification_logs",
    metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column("subject_key", String(64), nullable=False),
    Column("user_id", String(255), nullable=False),
    Column("verified_at", TIMESTAMP(timezone=True), nullable=False),
    Column("email_count", Integer, nullable=False),
    Column("duration", String(20), nullable=False),  # 'short', 'long'
    Column("source", String(20), nullable=False),
    Column("custom_source", Text, nullable=True),
)

Index("idx_card_verification_logs_user_id", card_verification_logs_table.c.user_id)
Index(
    "idx_card_verification_logs_verified_at",
    card_verification_logs_table.c.verified_at,
)
