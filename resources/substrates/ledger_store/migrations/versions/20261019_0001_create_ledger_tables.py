"""create ledger tables"""

from __future__ import annotations

from alembic import op
import sqlalchemy as sa

from packages.decibel_shared.config import load_settings
from resources.substrates.postgres.config import resolve_postgres_settings

# revision identifiers, used by Alembic.
revision = "20261019_0001"
down_revision = None
branch_labels = None
depends_on = None


def _schema() -> str:
    """Resolve the configured ledger schema name."""
    return resolve_postgres_settings(load_settings()).schema_name


def upgrade() -> None:
    """Create ledger tables."""
    schema = _schema()

    op.create_table(
        "zones",
        sa.Column("zone_id", sa.BigInteger(), primary_key=True, autoincrement=False),
        sa.Column("name", sa.String(length=256), nullable=False),
        sa.Column("max_decibel", sa.Integer(), nullable=False),
        sa.Column("current_usage", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("is_quiet_zone", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("premium_multiplier", sa.Integer(), nullable=False, server_default="100"),
        sa.CheckConstraint("max_decibel BETWEEN 30 AND 120", name="ck_zones_max_decibel_range"),
        sa.CheckConstraint("NOT is_quiet_zone OR max_decibel <= 50", name="ck_zones_quiet_ceiling"),
        schema=schema,
    )
    op.create_table(
        "zone_owners",
        sa.Column("zone_id", sa.BigInteger(), primary_key=True, autoincrement=False),
        sa.Column("owner", sa.String(length=128), nullable=False),
        schema=schema,
    )
    op.create_table(
        "zone_premiums",
        sa.Column("zone_id", sa.BigInteger(), primary_key=True, autoincrement=False),
        sa.Column("premium_multiplier", sa.Integer(), nullable=False),
        schema=schema,
    )
    op.create_table(
        "allowances",
        sa.Column("zone_id", sa.BigInteger(), nullable=False),
        sa.Column("holder", sa.String(length=128), nullable=False),
        sa.Column("total_allowance", sa.BigInteger(), nullable=False),
        sa.Column("used_allowance", sa.BigInteger(), nullable=False),
        sa.Column("expiry_block", sa.BigInteger(), nullable=False),
        sa.PrimaryKeyConstraint("zone_id", "holder", name="pk_allowances"),
        sa.CheckConstraint("used_allowance <= total_allowance", name="ck_allowances_used_le_total"),
        schema=schema,
    )
    op.create_table(
        "noise_readings",
        sa.Column("zone_id", sa.BigInteger(), nullable=False),
        sa.Column("block", sa.BigInteger(), nullable=False),
        sa.Column("decibel_level", sa.Integer(), nullable=False),
        sa.Column("reporter", sa.String(length=128), nullable=False),
        sa.Column("verified", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.PrimaryKeyConstraint("zone_id", "block", name="pk_noise_readings"),
        schema=schema,
    )
    op.create_table(
        "permits",
        sa.Column("permit_id", sa.BigInteger(), primary_key=True, autoincrement=False),
        sa.Column("zone_id", sa.BigInteger(), nullable=False),
        sa.Column("applicant", sa.String(length=128), nullable=False),
        sa.Column("requested_decibels", sa.Integer(), nullable=False),
        sa.Column("duration_blocks", sa.BigInteger(), nullable=False),
        sa.Column("approved", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("start_block", sa.BigInteger(), nullable=False, server_default="0"),
        sa.Column("end_block", sa.BigInteger(), nullable=False, server_default="0"),
        sa.Column("fee_paid", sa.BigInteger(), nullable=False),
        schema=schema,
    )
    op.create_table(
        "trade_offers",
        sa.Column("token_id", sa.BigInteger(), primary_key=True, autoincrement=False),
        sa.Column("seller", sa.String(length=128), nullable=False),
        sa.Column("price", sa.BigInteger(), nullable=False),
        sa.Column("zone_id", sa.BigInteger(), nullable=False),
        sa.Column("decibel_amount", sa.BigInteger(), nullable=False),
        sa.Column("active", sa.Boolean(), nullable=False, server_default=sa.true()),
        schema=schema,
    )
    op.create_table(
        "proposals",
        sa.Column("proposal_id", sa.BigInteger(), primary_key=True, autoincrement=False),
        sa.Column("title", sa.String(length=256), nullable=False),
        sa.Column("description", sa.Text(), nullable=False),
        sa.Column("zone_id", sa.BigInteger(), nullable=False),
        sa.Column("proposed_max_decibel", sa.Integer(), nullable=False),
        sa.Column("proposer", sa.String(length=128), nullable=False),
        sa.Column("start_block", sa.BigInteger(), nullable=False),
        sa.Column("end_block", sa.BigInteger(), nullable=False),
        sa.Column("yes_votes", sa.BigInteger(), nullable=False, server_default="0"),
        sa.Column("no_votes", sa.BigInteger(), nullable=False, server_default="0"),
        sa.Column("executed", sa.Boolean(), nullable=False, server_default=sa.false()),
        schema=schema,
    )
    op.create_table(
        "votes",
        sa.Column("proposal_id", sa.BigInteger(), nullable=False),
        sa.Column("voter", sa.String(length=128), nullable=False),
        sa.Column("support", sa.Boolean(), nullable=False),
        sa.Column("block", sa.BigInteger(), nullable=False),
        sa.PrimaryKeyConstraint("proposal_id", "voter", name="pk_votes"),
        schema=schema,
    )
    op.create_table(
        "tokens",
        sa.Column("token_id", sa.BigInteger(), primary_key=True, autoincrement=False),
        sa.Column("owner", sa.String(length=128), nullable=False),
        schema=schema,
    )
    op.create_table(
        "counters",
        sa.Column("name", sa.String(length=32), primary_key=True),
        sa.Column("value", sa.BigInteger(), nullable=False),
        schema=schema,
    )


def downgrade() -> None:
    """Drop ledger tables."""
    schema = _schema()
    for table in (
        "counters",
        "tokens",
        "votes",
        "proposals",
        "trade_offers",
        "permits",
        "noise_readings",
        "allowances",
        "zone_premiums",
        "zone_owners",
        "zones",
    ):
        op.drop_table(table, schema=schema)
