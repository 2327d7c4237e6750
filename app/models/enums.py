"""
Database enums.

Centralized enums used across database models.
"""

from enum import StrEnum


class TransactionStatus(StrEnum):
    """Transaction status values."""

    PENDING = "pending"
    COMPLETED = "completed"
    REJECTED = "rejected"
    FAILED = "failed"


class TransactionType(StrEnum):
    """Transaction type values."""

    DEPOSIT = "deposit"
    WITHDRAWAL = "withdrawal"
    STAKING = "staking"
    STAKING_RETURN = "staking_return"
    REFERRAL_BONUS = "referral_bonus"
    ADMIN_CREDIT = "admin_credit"
    ADMIN_DEBIT = "admin_debit"

    @property
    def is_debit(self) -> bool:
        """True if this transaction type takes funds out of the balance."""
        return self in DEBIT_TRANSACTION_TYPES


# Types that decrease User.balance; every other type is a credit
DEBIT_TRANSACTION_TYPES = frozenset(
    {
        TransactionType.WITHDRAWAL,
        TransactionType.STAKING,
        TransactionType.ADMIN_DEBIT,
    }
)

# Statuses whose amounts are reflected in User.balance
LEDGER_TRANSACTION_STATUSES = frozenset(
    {
        TransactionStatus.PENDING,
        TransactionStatus.COMPLETED,
    }
)


class StakeStatus(StrEnum):
    """Stake status values."""

    ACTIVE = "active"
    COMPLETED = "completed"
    CANCELLED = "cancelled"


class DepositStatus(StrEnum):
    """Deposit status values."""

    PENDING = "pending"
    CONFIRMED = "confirmed"
    FAILED = "failed"


class WithdrawalStatus(StrEnum):
    """Withdrawal status values."""

    PENDING = "pending"
    PROCESSING = "processing"
    COMPLETED = "completed"
    REJECTED = "rejected"
    FAILED = "failed"


class ReferralEarningType(StrEnum):
    """Referral earning source values."""

    STAKE = "stake"


class NotificationType(StrEnum):
    """In-app notification type values."""

    STAKE_CREATED = "stake_created"
    STAKE_COMPLETED = "stake_completed"
    REFERRAL_BONUS = "referral_bonus"
    DEPOSIT_CONFIRMED = "deposit_confirmed"
    WITHDRAWAL_REQUESTED = "withdrawal_requested"
    WITHDRAWAL_APPROVED = "withdrawal_approved"
    WITHDRAWAL_REJECTED = "withdrawal_rejected"
