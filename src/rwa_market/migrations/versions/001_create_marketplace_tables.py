"""Create the marketplace tables served by the store API.

Revision ID: 001
Revises:
Create Date: 2026-10-19
"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision: str = "001"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None

UUID_TEXT = sa.text("gen_random_uuid()::text")
NOW = sa.text("now()")

# PostgREST runs as these roles; the app only ever holds the anon key.
API_ROLES = ("anon", "authenticated")

TABLES = (
    "users",
    "assets",
    "bids",
    "activities",
    "price_history",
    "platform_stats",
    "notifications",
    "transactions",
    "profiles",
)


def _id() -> sa.Column:
    return sa.Column("id", sa.Text, primary_key=True, server_default=UUID_TEXT)


def _created_at(name: str = "created_at") -> sa.Column:
    return sa.Column(name, sa.DateTime(timezone=True), nullable=False, server_default=NOW)


def upgrade() -> None:
    op.create_table(
        "users",
        _id(),
        sa.Column("name", sa.Text, nullable=False),
        sa.Column("avatar", sa.Text, nullable=False, server_default=""),
        sa.Column("wallet", sa.Text, nullable=False),
        sa.Column("bio", sa.Text, nullable=True),
        sa.Column("is_verified", sa.Boolean, nullable=False, server_default="false"),
        sa.Column("followers_count", sa.Integer, nullable=False, server_default="0"),
        sa.Column("following_count", sa.Integer, nullable=False, server_default="0"),
        _created_at(),
        sa.UniqueConstraint("wallet"),
    )

    op.create_table(
        "assets",
        _id(),
        sa.Column("name", sa.Text, nullable=False),
        sa.Column("description", sa.Text, nullable=False, server_default=""),
        sa.Column("image", sa.Text, nullable=False, server_default=""),
        sa.Column("category", sa.Text, nullable=False),
        sa.Column("price", sa.Numeric, nullable=False),
        sa.Column("price_usd", sa.Numeric, nullable=False, server_default="0"),
        sa.Column("owner_id", sa.Text, nullable=False),
        sa.Column("creator_id", sa.Text, nullable=False),
        sa.Column("token_id", sa.Text, nullable=False, server_default=""),
        sa.Column("contract_address", sa.Text, nullable=False, server_default=""),
        sa.Column("blockchain", sa.Text, nullable=False, server_default="Ethereum"),
        sa.Column("token_standard", sa.Text, nullable=False, server_default="ERC-721"),
        sa.Column("status", sa.Text, nullable=False, server_default="Buy Now"),
        sa.Column("sale_type", sa.Text, nullable=False, server_default="fixed"),
        sa.Column("royalty", sa.Numeric, nullable=False, server_default="0"),
        sa.Column("supply", sa.Integer, nullable=False, server_default="1"),
        sa.Column("views", sa.Integer, nullable=False, server_default="0"),
        sa.Column("favorites", sa.Integer, nullable=False, server_default="0"),
        sa.Column("ipfs_hash", sa.Text, nullable=True),
        sa.Column("listed_at", sa.DateTime(timezone=True), nullable=True),
        _created_at(),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=True),
    )
    op.create_index("ix_assets_created_at", "assets", ["created_at"])

    for table, extra in (
        ("bids", [
            sa.Column("bidder_id", sa.Text, nullable=False),
            sa.Column("amount", sa.Numeric, nullable=False),
            sa.Column("amount_usd", sa.Numeric, nullable=False, server_default="0"),
            _created_at(),
        ]),
        ("activities", [
            sa.Column("type", sa.Text, nullable=False),
            sa.Column("from_address", sa.Text, nullable=True),
            sa.Column("to_address", sa.Text, nullable=True),
            sa.Column("price", sa.Numeric, nullable=True),
            _created_at(),
        ]),
        ("price_history", [
            sa.Column("month", sa.Text, nullable=False),
            sa.Column("price", sa.Numeric, nullable=False),
            _created_at("recorded_at"),
        ]),
    ):
        op.create_table(
            table,
            _id(),
            sa.Column("asset_id", sa.Text, sa.ForeignKey("assets.id", ondelete="CASCADE"), nullable=False),
            *extra,
        )
        op.create_index(f"ix_{table}_asset_id", table, ["asset_id"])

    op.create_table(
        "platform_stats",
        _id(),
        sa.Column("total_volume", sa.Numeric, nullable=True),
        sa.Column("assets_listed", sa.Integer, nullable=True),
        sa.Column("active_users", sa.Integer, nullable=True),
        _created_at("updated_at"),
    )

    op.create_table(
        "notifications",
        _id(),
        sa.Column("user_id", sa.Text, nullable=False),
        sa.Column("type", sa.Text, nullable=False),
        sa.Column("title", sa.Text, nullable=False),
        sa.Column("message", sa.Text, nullable=False, server_default=""),
        sa.Column("read", sa.Boolean, nullable=False, server_default="false"),
        sa.Column("asset_id", sa.Text, nullable=True),
        _created_at(),
    )
    op.create_index("ix_notifications_user_id", "notifications", ["user_id"])

    op.create_table(
        "transactions",
        _id(),
        sa.Column("type", sa.Text, nullable=False),
        sa.Column("asset_id", sa.Text, nullable=False),
        sa.Column("from_address", sa.Text, nullable=False),
        sa.Column("to_address", sa.Text, nullable=False),
        sa.Column("price", sa.Numeric, nullable=False),
        sa.Column("status", sa.Text, nullable=False, server_default="completed"),
        sa.Column("tx_hash", sa.Text, nullable=True),
        _created_at(),
    )
    op.create_index("ix_transactions_from_address", "transactions", ["from_address"])
    op.create_index("ix_transactions_to_address", "transactions", ["to_address"])

    op.create_table(
        "profiles",
        _id(),
        sa.Column("wallet", sa.Text, nullable=False),
        sa.Column("is_pro", sa.Boolean, nullable=False, server_default="false"),
        sa.Column("pro_plan", sa.Text, nullable=True),
        sa.Column("pro_since", sa.DateTime(timezone=True), nullable=True),
        sa.Column("pro_renews_at", sa.DateTime(timezone=True), nullable=True),
        _created_at(),
        sa.UniqueConstraint("wallet"),
    )

    # Open read/write policies for the API roles, when they exist.
    for table in TABLES:
        op.execute(f"ALTER TABLE {table} ENABLE ROW LEVEL SECURITY")
        op.execute(
            f"""
            DO $$
            BEGIN
                IF (SELECT count(*) FROM pg_roles WHERE rolname IN ('anon', 'authenticated')) = 2 THEN
                    GRANT SELECT, INSERT, UPDATE ON {table} TO {", ".join(API_ROLES)};
                    CREATE POLICY {table}_api_access ON {table}
                        FOR ALL TO {", ".join(API_ROLES)} USING (true) WITH CHECK (true);
                END IF;
            END $$;
            """
        )


def downgrade() -> None:
    for table in reversed(TABLES):
        op.drop_table(table)
