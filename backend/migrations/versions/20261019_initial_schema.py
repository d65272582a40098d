"""Initial schema: inventory units, accessories, sale records, users, sessions

Revision ID: 20261019_initial
Revises:
Create Date: 2026-10-19
"""

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision = "20261019_initial"
down_revision = None
branch_labels = None
depends_on = None


def _timestamps():
    return [
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
    ]


def upgrade():
    op.create_table(
        "inventory_units",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("product_name", sa.String(length=255), nullable=False),
        sa.Column("serial_number", sa.String(length=64), nullable=True),
        sa.Column("imei", sa.String(length=32), nullable=True),
        sa.Column("storage", sa.String(length=64), nullable=True),
        sa.Column("color", sa.String(length=64), nullable=True),
        sa.Column("warranty", sa.String(length=128), nullable=True),
        sa.Column("origin", sa.String(length=128), nullable=True),
        sa.Column("cost", sa.Integer(), nullable=False),
        sa.Column("intake_date", sa.Date(), nullable=True),
        sa.Column("status", sa.String(length=16), nullable=False),
        *_timestamps(),
        sqlite_autoincrement=True,
    )
    op.create_index("ix_inventory_units_serial_number", "inventory_units", ["serial_number"], unique=True)
    op.create_index("ix_inventory_units_imei", "inventory_units", ["imei"], unique=True)
    op.create_index("ix_inventory_units_intake_date", "inventory_units", ["intake_date"], unique=False)
    op.create_index("ix_inventory_units_status", "inventory_units", ["status"], unique=False)
    op.create_index("ix_inventory_units_status_intake", "inventory_units", ["status", "intake_date"], unique=False)

    op.create_table(
        "inventory_accessories",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("sku", sa.String(length=64), nullable=False),
        sa.Column("product_name", sa.String(length=255), nullable=False),
        sa.Column("storage", sa.String(length=64), nullable=True),
        sa.Column("color", sa.String(length=64), nullable=True),
        sa.Column("warranty", sa.String(length=128), nullable=True),
        sa.Column("origin", sa.String(length=128), nullable=True),
        sa.Column("cost", sa.Integer(), nullable=False),
        sa.Column("quantity", sa.Integer(), nullable=False),
        sa.Column("intake_date", sa.Date(), nullable=False),
        *_timestamps(),
        sqlite_autoincrement=True,
    )
    op.create_index("ix_inventory_accessories_sku", "inventory_accessories", ["sku"], unique=True)
    op.create_index("ix_inventory_accessories_intake_date", "inventory_accessories", ["intake_date"], unique=False)
    op.create_index("ix_inventory_accessories_intake", "inventory_accessories", ["intake_date", "created_at"], unique=False)

    op.create_table(
        "sale_records",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("invoice_id", sa.String(length=64), nullable=False),
        sa.Column("sale_date", sa.Date(), nullable=False),
        sa.Column("kind", sa.String(length=16), nullable=False),
        sa.Column("reference_key", sa.String(length=64), nullable=False),
        sa.Column("product_name", sa.String(length=255), nullable=False),
        sa.Column("color", sa.String(length=64), nullable=True),
        sa.Column("storage", sa.String(length=64), nullable=True),
        sa.Column("warranty", sa.String(length=128), nullable=True),
        sa.Column("cost_snapshot", sa.Integer(), nullable=False),
        sa.Column("sell_price", sa.Integer(), nullable=False),
        sa.Column("profit", sa.Integer(), nullable=False),
        sa.Column("buyer_name", sa.String(length=255), nullable=True),
        sa.Column("buyer_address", sa.Text(), nullable=True),
        sa.Column("buyer_phone", sa.String(length=32), nullable=True),
        sa.Column("salesperson", sa.String(length=255), nullable=False),
        sa.Column("referral", sa.String(length=255), nullable=True),
        sa.Column("inventory_synced", sa.Boolean(), nullable=False, server_default=sa.true()),
        *_timestamps(),
        sqlite_autoincrement=True,
    )
    op.create_index("ix_sale_records_invoice_id", "sale_records", ["invoice_id"], unique=False)
    op.create_index("ix_sale_records_date_created", "sale_records", ["sale_date", "created_at"], unique=False)
    op.create_index("ix_sale_records_kind_key", "sale_records", ["kind", "reference_key"], unique=False)

    op.create_table(
        "users",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("username", sa.String(length=64), nullable=False),
        sa.Column("email", sa.String(length=255), nullable=False),
        sa.Column("full_name", sa.String(length=255), nullable=True),
        sa.Column("password_hash", sa.String(length=255), nullable=False),
        sa.Column("is_active", sa.Boolean(), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.Column("last_login_at", sa.DateTime(timezone=True), nullable=True),
        sa.UniqueConstraint("email"),
        sqlite_autoincrement=True,
    )
    op.create_index("ix_users_username", "users", ["username"], unique=True)

    op.create_table(
        "session_tokens",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("user_id", sa.Integer(), sa.ForeignKey("users.id"), nullable=False),
        sa.Column("token_hash", sa.String(length=255), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.Column("last_used_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.Column("expires_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("user_agent", sa.String(length=255), nullable=True),
        sa.Column("ip_address", sa.String(length=64), nullable=True),
        sa.Column("is_revoked", sa.Boolean(), nullable=False),
        sa.Column("revoked_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("revoked_reason", sa.String(length=255), nullable=True),
        sqlite_autoincrement=True,
    )
    op.create_index("ix_session_tokens_user_id", "session_tokens", ["user_id"], unique=False)
    op.create_index("ix_session_tokens_token_hash", "session_tokens", ["token_hash"], unique=True)
    op.create_index("ix_session_tokens_expires_at", "session_tokens", ["expires_at"], unique=False)
    op.create_index("ix_session_tokens_user_active", "session_tokens", ["user_id", "is_revoked"], unique=False)


def downgrade():
    op.drop_table("session_tokens")
    op.drop_table("users")
    op.drop_table("sale_records")
    op.drop_table("inventory_accessories")
    op.drop_table("inventory_units")
