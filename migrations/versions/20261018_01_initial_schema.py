"""create networks, accounts and reconciliation ledger tables

Revision ID: 5c1e8a7d2b90
Revises: 
Create Date: 2026-10-18 09:30:00.000000
"""

from __future__ import annotations

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision = "5c1e8a7d2b90"
down_revision = None
branch_labels = None
depends_on = None


def upgrade() -> None:
    op.create_table(
        "networks",
        sa.Column("id", sa.String(length=36), primary_key=True),
        sa.Column("name", sa.String(length=100), nullable=False),
        sa.Column("prefix", sa.String(length=50), nullable=False),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column("realtime_enabled", sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column("check_interval_ms", sa.Integer()),
        sa.Column("webhook_enabled", sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column("telegram_enabled", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("telegram_bot_token", sa.String(length=255)),
        sa.Column("telegram_chat_id", sa.String(length=100)),
        sa.Column("notify_money_in", sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column("notify_money_out", sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column("notify_min_amount", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(timezone=True)),
    )
    op.create_index("ix_networks_prefix", "networks", ["prefix"], unique=True)

    op.create_table(
        "accounts",
        sa.Column("id", sa.String(length=36), primary_key=True),
        sa.Column("network_id", sa.String(length=36), sa.ForeignKey("networks.id"), nullable=False),
        sa.Column("name", sa.String(length=100), nullable=False),
        sa.Column("wallet_endpoint_url", sa.String(length=500), nullable=False),
        sa.Column("wallet_bearer_token", sa.Text(), nullable=False),
        sa.Column("phone_number", sa.String(length=20)),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column("created_at", sa.DateTime(timezone=True)),
        sa.Column("updated_at", sa.DateTime(timezone=True)),
    )
    op.create_index("ix_accounts_network_id", "accounts", ["network_id"])
    op.create_index("ix_accounts_phone_number", "accounts", ["phone_number"])

    op.create_table(
        "balance_snapshots",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column(
            "account_id",
            sa.String(length=36),
            sa.ForeignKey("accounts.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("balance_minor_units", sa.Integer(), nullable=False),
        sa.Column("mobile_no", sa.String(length=20)),
        sa.Column("source", sa.String(length=20), nullable=False),
        sa.Column("wallet_updated_at", sa.DateTime(timezone=True)),
        sa.Column("checked_at", sa.DateTime(timezone=True), nullable=False),
    )
    op.create_index(
        "ix_balance_snapshots_account_checked",
        "balance_snapshots",
        ["account_id", "checked_at"],
    )

    op.create_table(
        "financial_transactions",
        sa.Column("id", sa.String(length=36), primary_key=True),
        sa.Column("transaction_id", sa.String(length=191), nullable=False),
        sa.Column(
            "account_id",
            sa.String(length=36),
            sa.ForeignKey("accounts.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("amount_minor_units", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("fee_minor_units", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("direction", sa.String(length=10), nullable=False),
        sa.Column("status", sa.String(length=30), nullable=False, server_default="SUCCESS"),
        sa.Column("sender_mobile", sa.String(length=20)),
        sa.Column("sender_name", sa.String(length=150)),
        sa.Column("recipient_mobile", sa.String(length=20)),
        sa.Column("recipient_name", sa.String(length=150)),
        sa.Column("raw_payload", sa.Text()),
        sa.Column("timestamp", sa.DateTime(timezone=True), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True)),
    )
    op.create_index(
        "ix_financial_transactions_transaction_id",
        "financial_transactions",
        ["transaction_id"],
        unique=True,
    )
    op.create_index("ix_financial_transactions_account_id", "financial_transactions", ["account_id"])
    op.create_index("ix_financial_transactions_timestamp", "financial_transactions", ["timestamp"])

    op.create_table(
        "notification_logs",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("type", sa.String(length=30), nullable=False),
        sa.Column("message", sa.Text()),
        sa.Column("payload", sa.Text()),
        sa.Column("account_id", sa.String(length=36)),
        sa.Column("created_at", sa.DateTime(timezone=True)),
    )
    op.create_index("ix_notification_logs_account_id", "notification_logs", ["account_id"])


def downgrade() -> None:
    op.drop_index("ix_notification_logs_account_id", table_name="notification_logs")
    op.drop_table("notification_logs")

    op.drop_index("ix_financial_transactions_timestamp", table_name="financial_transactions")
    op.drop_index("ix_financial_transactions_account_id", table_name="financial_transactions")
    op.drop_index("ix_financial_transactions_transaction_id", table_name="financial_transactions")
    op.drop_table("financial_transactions")

    op.drop_index("ix_balance_snapshots_account_checked", table_name="balance_snapshots")
    op.drop_table("balance_snapshots")

    op.drop_index("ix_accounts_phone_number", table_name="accounts")
    op.drop_index("ix_accounts_network_id", table_name="accounts")
    op.drop_table("accounts")

    op.drop_index("ix_networks_prefix", table_name="networks")
    op.drop_table("networks")
