"""
Repositories.

Data access layer for all models.
"""

from app.repositories.base import BaseRepository
from app.repositories.deposit_repository import DepositRepository
from app.repositories.notification_repository import NotificationRepository
from app.repositories.referral_earning_repository import (
    ReferralEarningRepository,
)
from app.repositories.stake_repository import StakeRepository
from app.repositories.staking_plan_repository import StakingPlanRepository
from app.repositories.system_setting_repository import (
    SystemSettingRepository,
)
from app.repositories.transaction_repository import TransactionRepository
from app.repositories.user_repository import UserRepository
from app.repositories.withdrawal_repository import (
    WithdrawalCurrencyRepository,
    WithdrawalRepository,
)

__all__ = [
    "BaseRepository",
    "DepositRepository",
    "NotificationRepository",
    "ReferralEarningRepository",
    "StakeRepository",
    "StakingPlanRepository",
    "SystemSettingRepository",
    "TransactionRepository",
    "UserRepository",
    "WithdrawalCurrencyRepository",
    "WithdrawalRepository",
]
