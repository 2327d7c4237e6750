"""
Services.

Business logic layer.
"""

# Core Services
from app.services.deposit_service import DepositService
from app.services.notification_service import NotificationService
from app.services.payout_service import PayoutReport, PayoutService
from app.services.referral_service import ReferralService
from app.services.staking_plan_service import StakingPlanService
from app.services.staking_service import StakingService
from app.services.withdrawal_service import WithdrawalService

# Support Services
from app.services.email_service import EmailService
from app.services.reconciliation_service import ReconciliationService

__all__ = [
    # Core
    "DepositService",
    "NotificationService",
    "PayoutReport",
    "PayoutService",
    "ReferralService",
    "StakingPlanService",
    "StakingService",
    "WithdrawalService",
    # Support
    "EmailService",
    "ReconciliationService",
]
