"""initial_schema

Create the mailpool schema:
- Invite redemptions (compare-and-set used_count) and their ordered uses
- Card key consumptions (row existence == consumed)
- Pooled identities (tier, protocol, ban and assignment state)
- Card verification logs (append-only audit)

Revision ID: 3f1c2a9d7b64
Revises:
Create Date: 2026-10-19 10:12:41.538201

"""

from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql


# revision identifiers, used by Alembic.
revision: str = "3f1c2a9d7b64"
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    """Upgrade schema."""
    op.create_table(
        "invite_redemptions",
        sa.Column("invite_id", sa.String(64), primary_key=True),
        sa.Column("used_count", sa.Integer, nullable=False, server_default="0"),
        sa.Column(
            "created_at",
            postgresql.TIMESTAMP(timezone=True),
            nullable=False,
            server_default=sa.text("NOW()"),
        ),
        sa.Column(
            "updated_at",
            postgresql.TIMESTAMP(timezone=True),
            nullable=False,
            server_default=sa.text("NOW()"),
        ),
        sa.CheckConstraint("used_count >= 0", name="check_used_count_non_negative"),
    )

    op.create_table(
        "invite_redemption_uses",
        sa.Column(
            "invite_id",
            sa.String(64),
            sa.ForeignKey("invite_redemptions.invite_id", ondelete="CASCADE"),
            primary_key=True,
        ),
        sa.Column("seq", sa.Integer, primary_key=True),
        sa.Column("user_id", sa.String(255), nullable=False),
        sa.Column("method", sa.String(50), nullable=False),
        sa.Column("used_at", postgresql.TIMESTAMP(timezone=True), nullable=False),
    )

    op.create_table(
        "card_key_consumptions",
        sa.Column("key", sa.String(64), primary_key=True),
        sa.Column("user_id", sa.String(255), nullable=False),
        sa.Column("consumed_at", postgresql.TIMESTAMP(timezone=True), nullable=False),
    )

    op.create_table(
        "pooled_identities",
        sa.Column("email", sa.String(320), primary_key=True),
        sa.Column("tier", sa.String(20), nullable=False),
        sa.Column("protocol", sa.String(20), nullable=False),
        sa.Column("banned", sa.Boolean, nullable=False, server_default="false"),
        sa.Column("assigned_to", sa.String(255), nullable=True),
        sa.Column("assigned_at", postgresql.TIMESTAMP(timezone=True), nullable=True),
        sa.Column(
            "created_at",
            postgresql.TIMESTAMP(timezone=True),
            nullable=False,
            server_default=sa.text("NOW()"),
        ),
        sa.CheckConstraint(
            "tier IN ('short_term', 'long_term')", name="check_identity_tier"
        ),
        sa.CheckConstraint(
            "protocol IN ('imap', 'graph')", name="check_identity_protocol"
        ),
    )
    # Partial indexes over the allocatable rows only
    op.create_index(
        "idx_pooled_identities_available_tier",
        "pooled_identities",
        ["tier"],
        postgresql_where=sa.text("assigned_to IS NULL AND banned = false"),
    )
    op.create_index(
        "idx_pooled_identities_available_protocol",
        "pooled_identities",
        ["protocol"],
        postgresql_where=sa.text("assigned_to IS NULL AND banned = false"),
    )

    op.create_table(
        "card_verification_logs",
        sa.Column("id", sa.Integer, primary_key=True, autoincrement=True),
        sa.Column("subject_key", sa.String(64), nullable=False),
        sa.Column("user_id", sa.String(255), nullable=False),
        sa.Column("verified_at", postgresql.TIMESTAMP(timezone=True), nullable=False),
        sa.Column("email_count", sa.Integer, nullable=False),
        sa.Column("duration", sa.String(20), nullable=False),
        sa.Column("source", sa.String(20), nullable=False),
        sa.Column("custom_source", sa.Text, nullable=True),
    )
    op.create_index(
        "idx_card_verification_logs_user_id", "card_verification_logs", ["user_id"]
    )
    op.create_index(
        "idx_card_verification_logs_verified_at",
        "card_verification_logs",
        ["verified_at"],
    )


def downgrade() -> None:
    """Downgrade schema."""
    op.drop_index(
        "idx_card_verification_logs_verified_at", table_name="card_verification_logs"
    )
    op.drop_index(
        "idx_card_verification_logs_user_id", table_name="card_verification_logs"
    )
    op.drop_table("card_verification_logs")
    op.drop_index(
        "idx_pooled_identities_available_protocol", table_name="pooled_identities"
    )
    op.drop_index(
        "idx_pooled_identities_available_tier", table_name="pooled_identities"
    )
    op.drop_table("pooled_identities")
    op.drop_table("card_key_consumptions")
    op.drop_table("invite_redemption_uses")
    op.drop_table("invite_redemptions")
