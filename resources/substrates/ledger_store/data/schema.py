"""SQLAlchemy table definitions owned by the ledger store.

Tables are declared without a schema; sessions pin ``search_path`` to the
configured ledger schema.
"""

from __future__ import annotations

from sqlalchemy import (
    BigInteger,
    Boolean,
    CheckConstraint,
    Column,
    Integer,
    MetaData,
    PrimaryKeyConstraint,
    String,
    Text,
)
from sqlalchemy import Table

from packages.decibel_shared.envelope import PRINCIPAL_MAX_LENGTH

metadata = MetaData()

zones = Table(
    "zones",
    metadata,
    Column("zone_id", BigInteger, primary_key=True, autoincrement=False),
    Column("name", String(256), nullable=False),
    Column("max_decibel", Integer, nullable=False),
    Column("current_usage", Integer, nullable=False, server_default="0"),
    Column("is_quiet_zone", Boolean, nullable=False, server_default="false"),
    Column("premium_multiplier", Integer, nullable=False, server_default="100"),
    CheckConstraint(
        "max_decibel BETWEEN 30 AND 120", name="ck_zones_max_decibel_range"
    ),
    CheckConstraint(
        "NOT is_quiet_zone OR max_decibel <= 50", name="ck_zones_quiet_ceiling"
    ),
)

zone_owners = Table(
    "zone_owners",
    metadata,
    Column("zone_id", BigInteger, primary_key=True, autoincrement=False),
    Column("owner", String(PRINCIPAL_MAX_LENGTH), nullable=False),
)

zone_premiums = Table(
    "zone_premiums",
    metadata,
    Column("zone_id", BigInteger, primary_key=True, autoincrement=False),
    Column("premium_multiplier", Integer, nullable=False),
)

allowances = Table(
    "allowances",
    metadata,
    Column("zone_id", BigInteger, nullable=False),
    Column("holder", String(PRINCIPAL_MAX_LENGTH), nullable=False),
    Column("total_allowance", BigInteger, nullable=False),
    Column("used_allowance", BigInteger, nullable=False),
    Column("expiry_block", BigInteger, nullable=False),
    PrimaryKeyConstraint("zone_id", "holder", name="pk_allowances"),
    CheckConstraint(
        "used_allowance <= total_allowance", name="ck_allowances_used_le_total"
    ),
)

noise_readings = Table(
    "noise_readings",
    metadata,
    Column("zone_id", BigInteger, nullable=False),
    Column("block", BigInteger, nullable=False),
    Column("decibel_level", Integer, nullable=False),
    Column("reporter", String(PRINCIPAL_MAX_LENGTH), nullable=False),
    Column("verified", Boolean, nullable=False, server_default="false"),
    PrimaryKeyConstraint("zone_id", "block", name="pk_noise_readings"),
)

permits = Table(
    "permits",
    metadata,
    Column("permit_id", BigInteger, primary_key=True, autoincrement=False),
    Column("zone_id", BigInteger, nullable=False),
    Column("applicant", String(PRINCIPAL_MAX_LENGTH), nullable=False),
    Column("requested_decibels", Integer, nullable=False),
    Column("duration_blocks", BigInteger, nullable=False),
    Column("approved", Boolean, nullable=False, server_default="false"),
    Column("start_block", BigInteger, nullable=False, server_default="0"),
    Column("end_block", BigInteger, nullable=False, server_default="0"),
    Column("fee_paid", BigInteger, nullable=False),
)

trade_offers = Table(
    "trade_offers",
    metadata,
    Column("token_id", BigInteger, primary_key=True, autoincrement=False),
    Column("seller", String(PRINCIPAL_MAX_LENGTH), nullable=False),
    Column("price", BigInteger, nullable=False),
    Column("zone_id", BigInteger, nullable=False),
    Column("decibel_amount", BigInteger, nullable=False),
    Column("active", Boolean, nullable=False, server_default="true"),
)

proposals = Table(
    "proposals",
    metadata,
    Column("proposal_id", BigInteger, primary_key=True, autoincrement=False),
    Column("title", String(256), nullable=False),
    Column("description", Text, nullable=False),
    Column("zone_id", BigInteger, nullable=False),
    Column("proposed_max_decibel", Integer, nullable=False),
    Column("proposer", String(PRINCIPAL_MAX_LENGTH), nullable=False),
    Column("start_block", BigInteger, nullable=False),
    Column("end_block", BigInteger, nullable=False),
    Column("yes_votes", BigInteger, nullable=False, server_default="0"),
    Column("no_votes", BigInteger, nullable=False, server_default="0"),
    Column("executed", Boolean, nullable=False, server_default="false"),
)

votes = Table(
    "votes",
    metadata,
    Column("proposal_id", BigInteger, nullable=False),
    Column("voter", String(PRINCIPAL_MAX_LENGTH), nullable=False),
    Column("support", Boolean, nullable=False),
    Column("block", BigInteger, nullable=False),
    PrimaryKeyConstraint("proposal_id", "voter", name="pk_votes"),
)

tokens = Table(
    "tokens",
    metadata,
    Column("token_id", BigInteger, primary_key=True, autoincrement=False),
    Column("owner", String(PRINCIPAL_MAX_LENGTH), nullable=False),
)

counters = Table(
    "counters",
    metadata,
    Column("name", String(32), primary_key=True),
    Column("value", BigInteger, nullable=False),
)
