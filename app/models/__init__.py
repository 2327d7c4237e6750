"""
Database models.

Exports all SQLAlchemy models for easy imports.
"""

from app.models.base import Base
from app.models.deposit import Deposit
from app.models.enums import (
    DEBIT_TRANSACTION_TYPES,
    LEDGER_TRANSACTION_STATUSES,
    DepositStatus,
    NotificationType,
    ReferralEarningType,
    StakeStatus,
    TransactionStatus,
    TransactionType,
    WithdrawalStatus,
)
from app.models.notification import Notification
from app.models.referral_earning import ReferralEarning

# Staking Models
from app.models.stake import Stake
from app.models.stake_payment import StakePayment
from app.models.staking_plan import StakingPlan

# System Models
from app.models.system_setting import SystemSetting
from app.models.transaction import Transaction

# Core Models
from app.models.user import User
from app.models.withdrawal import Withdrawal
from app.models.withdrawal_currency import WithdrawalCurrency

__all__ = [
    "Base",
    "DEBIT_TRANSACTION_TYPES",
    "Deposit",
    "DepositStatus",
    "LEDGER_TRANSACTION_STATUSES",
    "Notification",
    "NotificationType",
    "ReferralEarning",
    "ReferralEarningType",
    "Stake",
    "StakePayment",
    "StakeStatus",
    "StakingPlan",
    "SystemSetting",
    "Transaction",
    "TransactionStatus",
    "TransactionType",
    "User",
    "Withdrawal",
    "WithdrawalCurrency",
    "WithdrawalStatus",
]
