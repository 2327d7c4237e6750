"""create ledger tables

Revision ID: 20261019_000001
Revises:
Create Date: 2026-10-19 00:00:01.000000

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision: str = "20261019_000001"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None

MONEY = sa.DECIMAL(18, 8)
PERCENT = sa.DECIMAL(10, 4)


def _timestamps() -> list[sa.Column]:
    return [
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.Column("updated_at", sa.DateTime(), nullable=False),
    ]


def upgrade() -> None:
    # Users
    op.create_table(
        "users",
        sa.Column("id", sa.Integer(), nullable=False, autoincrement=True),
        sa.Column("email", sa.String(length=255), nullable=False),
        sa.Column("username", sa.String(length=255), nullable=True),
        sa.Column("balance", MONEY, nullable=False),
        sa.Column("referrer_id", sa.Integer(), nullable=True),
        sa.Column("pin_hash", sa.String(length=255), nullable=True),
        sa.Column("pin_enabled", sa.Boolean(), nullable=False),
        sa.Column("is_active", sa.Boolean(), nullable=False),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id"),
        sa.ForeignKeyConstraint(
            ["referrer_id"], ["users.id"], ondelete="SET NULL"
        ),
        sa.CheckConstraint(
            "balance >= 0", name="check_user_balance_non_negative"
        ),
    )
    op.create_index("ix_users_email", "users", ["email"], unique=True)
    op.create_index("ix_users_username", "users", ["username"])
    op.create_index("ix_users_referrer_id", "users", ["referrer_id"])

    # Staking plans
    op.create_table(
        "staking_plans",
        sa.Column("id", sa.Integer(), nullable=False, autoincrement=True),
        sa.Column("name", sa.String(length=100), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("daily_roi", PERCENT, nullable=False),
        sa.Column("duration_days", sa.Integer(), nullable=False),
        sa.Column("total_roi", PERCENT, nullable=False),
        sa.Column("min_amount", MONEY, nullable=False),
        sa.Column("max_amount", MONEY, nullable=True),
        sa.Column("is_active", sa.Boolean(), nullable=False),
        sa.Column("is_featured", sa.Boolean(), nullable=False),
        sa.Column("sort_order", sa.Integer(), nullable=False),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id"),
        sa.CheckConstraint(
            "daily_roi > 0", name="check_staking_plan_daily_roi_positive"
        ),
        sa.CheckConstraint(
            "duration_days > 0", name="check_staking_plan_duration_positive"
        ),
        sa.CheckConstraint(
            "min_amount > 0", name="check_staking_plan_min_amount_positive"
        ),
        sa.CheckConstraint(
            "max_amount IS NULL OR max_amount >= min_amount",
            name="check_staking_plan_max_gte_min",
        ),
    )
    op.create_index(
        "ix_staking_plans_is_active", "staking_plans", ["is_active"]
    )

    # Stakes
    op.create_table(
        "stakes",
        sa.Column("id", sa.Integer(), nullable=False, autoincrement=True),
        sa.Column("user_id", sa.Integer(), nullable=False),
        sa.Column("plan_id", sa.Integer(), nullable=False),
        sa.Column("amount", MONEY, nullable=False),
        sa.Column("daily_roi", PERCENT, nullable=False),
        sa.Column("total_roi", PERCENT, nullable=False),
        sa.Column("expected_return", MONEY, nullable=False),
        sa.Column("total_earned", MONEY, nullable=False),
        sa.Column("status", sa.String(length=20), nullable=False),
        sa.Column("start_date", sa.DateTime(), nullable=False),
        sa.Column("end_date", sa.DateTime(), nullable=False),
        sa.Column("next_process_at", sa.DateTime(), nullable=True),
        sa.Column("last_processed", sa.DateTime(), nullable=True),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id"),
        sa.ForeignKeyConstraint(["user_id"], ["users.id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["plan_id"], ["staking_plans.id"]),
        sa.CheckConstraint("amount > 0", name="check_stake_amount_positive"),
        sa.CheckConstraint(
            "total_earned >= 0", name="check_stake_total_earned_non_negative"
        ),
    )
    op.create_index("ix_stakes_user_id", "stakes", ["user_id"])
    op.create_index("ix_stakes_plan_id", "stakes", ["plan_id"])
    op.create_index("ix_stakes_status", "stakes", ["status"])
    op.create_index(
        "idx_stakes_status_next_process_at",
        "stakes",
        ["status", "next_process_at"],
    )

    # Stake payments
    op.create_table(
        "stake_payments",
        sa.Column("id", sa.Integer(), nullable=False, autoincrement=True),
        sa.Column("stake_id", sa.Integer(), nullable=False),
        sa.Column("amount", MONEY, nullable=False),
        sa.Column("date", sa.DateTime(), nullable=False),
        sa.PrimaryKeyConstraint("id"),
        sa.ForeignKeyConstraint(
            ["stake_id"], ["stakes.id"], ondelete="CASCADE"
        ),
        sa.CheckConstraint(
            "amount >= 0", name="check_stake_payment_amount_non_negative"
        ),
    )
    op.create_index(
        "ix_stake_payments_stake_id", "stake_payments", ["stake_id"]
    )

    # Transactions (ledger)
    op.create_table(
        "transactions",
        sa.Column("id", sa.Integer(), nullable=False, autoincrement=True),
        sa.Column("user_id", sa.Integer(), nullable=False),
        sa.Column("type", sa.String(length=50), nullable=False),
        sa.Column("amount", MONEY, nullable=False),
        sa.Column("balance_before", MONEY, nullable=False),
        sa.Column("balance_after", MONEY, nullable=False),
        sa.Column("status", sa.String(length=50), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("reference_id", sa.Integer(), nullable=True),
        sa.Column("reference_type", sa.String(length=50), nullable=True),
        sa.Column("tx_hash", sa.String(length=255), nullable=True),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id"),
        sa.ForeignKeyConstraint(["user_id"], ["users.id"], ondelete="CASCADE"),
        sa.CheckConstraint(
            "amount > 0", name="check_transaction_amount_positive"
        ),
        sa.CheckConstraint(
            "balance_before >= 0",
            name="check_transaction_balance_before_non_negative",
        ),
        sa.CheckConstraint(
            "balance_after >= 0",
            name="check_transaction_balance_after_non_negative",
        ),
    )
    op.create_index("ix_transactions_user_id", "transactions", ["user_id"])
    op.create_index("ix_transactions_type", "transactions", ["type"])
    op.create_index("ix_transactions_status", "transactions", ["status"])
    op.create_index(
        "ix_transactions_created_at", "transactions", ["created_at"]
    )
    op.create_index(
        "idx_transactions_reference",
        "transactions",
        ["reference_type", "reference_id"],
    )

    # Deposits
    op.create_table(
        "deposits",
        sa.Column("id", sa.Integer(), nullable=False, autoincrement=True),
        sa.Column("user_id", sa.Integer(), nullable=False),
        sa.Column("amount", MONEY, nullable=False),
        sa.Column("amount_usd", MONEY, nullable=True),
        sa.Column("pay_currency", sa.String(length=20), nullable=False),
        sa.Column("pay_amount", sa.DECIMAL(28, 12), nullable=True),
        sa.Column("pay_address", sa.String(length=255), nullable=True),
        sa.Column("payment_id", sa.String(length=100), nullable=True),
        sa.Column("tx_hash", sa.String(length=255), nullable=True),
        sa.Column("confirmations", sa.Integer(), nullable=False),
        sa.Column("required_confirmations", sa.Integer(), nullable=False),
        sa.Column("status", sa.String(length=20), nullable=False),
        sa.Column("confirmed_at", sa.DateTime(), nullable=True),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id"),
        sa.ForeignKeyConstraint(["user_id"], ["users.id"], ondelete="CASCADE"),
        sa.CheckConstraint("amount > 0", name="check_deposit_amount_positive"),
    )
    op.create_index("ix_deposits_user_id", "deposits", ["user_id"])
    op.create_index(
        "ix_deposits_payment_id", "deposits", ["payment_id"], unique=True
    )
    op.create_index("ix_deposits_status", "deposits", ["status"])

    # Withdrawal currencies
    op.create_table(
        "withdrawal_currencies",
        sa.Column("id", sa.Integer(), nullable=False, autoincrement=True),
        sa.Column("symbol", sa.String(length=20), nullable=False),
        sa.Column("network", sa.String(length=50), nullable=False),
        sa.Column("min_withdrawal", MONEY, nullable=False),
        sa.Column("max_withdrawal", MONEY, nullable=True),
        sa.Column("fee", MONEY, nullable=False),
        sa.Column("is_active", sa.Boolean(), nullable=False),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id"),
    )

    # Withdrawals
    op.create_table(
        "withdrawals",
        sa.Column("id", sa.Integer(), nullable=False, autoincrement=True),
        sa.Column("user_id", sa.Integer(), nullable=False),
        sa.Column("currency", sa.String(length=20), nullable=False),
        sa.Column("amount", MONEY, nullable=False),
        sa.Column("fee", MONEY, nullable=False),
        sa.Column("net_amount", MONEY, nullable=False),
        sa.Column("wallet_address", sa.String(length=255), nullable=False),
        sa.Column("status", sa.String(length=20), nullable=False),
        sa.Column("tx_hash", sa.String(length=255), nullable=True),
        sa.Column("pin_verified", sa.Boolean(), nullable=False),
        sa.Column("reason", sa.Text(), nullable=True),
        sa.Column("processed_at", sa.DateTime(), nullable=True),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id"),
        sa.ForeignKeyConstraint(["user_id"], ["users.id"], ondelete="CASCADE"),
        sa.CheckConstraint(
            "amount > 0", name="check_withdrawal_amount_positive"
        ),
        sa.CheckConstraint("fee >= 0", name="check_withdrawal_fee_non_negative"),
        sa.CheckConstraint(
            "net_amount >= 0", name="check_withdrawal_net_non_negative"
        ),
    )
    op.create_index("ix_withdrawals_user_id", "withdrawals", ["user_id"])
    op.create_index("ix_withdrawals_status", "withdrawals", ["status"])

    # Referral earnings
    op.create_table(
        "referral_earnings",
        sa.Column("id", sa.Integer(), nullable=False, autoincrement=True),
        sa.Column("user_id", sa.Integer(), nullable=False),
        sa.Column("from_user_id", sa.Integer(), nullable=False),
        sa.Column("stake_id", sa.Integer(), nullable=True),
        sa.Column("amount", MONEY, nullable=False),
        sa.Column("percentage", PERCENT, nullable=False),
        sa.Column("type", sa.String(length=20), nullable=False),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.PrimaryKeyConstraint("id"),
        sa.ForeignKeyConstraint(["user_id"], ["users.id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(
            ["from_user_id"], ["users.id"], ondelete="CASCADE"
        ),
        sa.ForeignKeyConstraint(
            ["stake_id"], ["stakes.id"], ondelete="SET NULL"
        ),
    )
    op.create_index(
        "ix_referral_earnings_user_id", "referral_earnings", ["user_id"]
    )
    op.create_index(
        "ix_referral_earnings_from_user_id",
        "referral_earnings",
        ["from_user_id"],
    )
    op.create_index(
        "idx_referral_earning_user_created",
        "referral_earnings",
        ["user_id", "created_at"],
    )

    # Notifications
    op.create_table(
        "notifications",
        sa.Column("id", sa.Integer(), nullable=False, autoincrement=True),
        sa.Column("user_id", sa.Integer(), nullable=False),
        sa.Column("type", sa.String(length=50), nullable=False),
        sa.Column("title", sa.String(length=255), nullable=False),
        sa.Column("message", sa.Text(), nullable=False),
        sa.Column("is_read", sa.Boolean(), nullable=False),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.PrimaryKeyConstraint("id"),
        sa.ForeignKeyConstraint(["user_id"], ["users.id"], ondelete="CASCADE"),
    )
    op.create_index(
        "ix_notifications_user_id", "notifications", ["user_id"]
    )

    # System settings
    op.create_table(
        "system_settings",
        sa.Column("id", sa.Integer(), nullable=False, autoincrement=True),
        sa.Column("key", sa.String(length=100), nullable=False),
        sa.Column("value", sa.Text(), nullable=False),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(
        "ix_system_settings_key", "system_settings", ["key"], unique=True
    )


def downgrade() -> None:
    op.drop_table("system_settings")
    op.drop_table("notifications")
    op.drop_table("referral_earnings")
    op.drop_table("withdrawals")
    op.drop_table("withdrawal_currencies")
    op.drop_table("deposits")
    op.drop_table("transactions")
    op.drop_table("stake_payments")
    op.drop_table("stakes")
    op.drop_table("staking_plans")
    op.drop_table("users")
