"""
ReferralEarning model.

Tracks referral bonuses paid to a referrer when a referred user stakes.
"""

from datetime import datetime
from decimal import Decimal

from sqlalchemy import (
    DECIMAL,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    String,
)
from sqlalchemy.orm import Mapped, mapped_column

from app.models.base import Base
from app.models.enums import ReferralEarningType
from app.utils.datetime_utils import utcnow


class ReferralEarning(Base):
    """
    ReferralEarning entity.

    Attributes:
        id: Primary key
        user_id: Referrer who receives the bonus
        from_user_id: Referred user whose stake triggered the bonus
        stake_id: Source stake
        amount: Bonus amount
        percentage: Bonus percent applied
        type: Earning source
        created_at: Earning creation timestamp
    """

    __tablename__ = "referral_earnings"

    # Primary key
    id: Mapped[int] = mapped_column(
        Integer, primary_key=True, autoincrement=True
    )

    user_id: Mapped[int] = mapped_column(
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        index=True
    )
    from_user_id: Mapped[int] = mapped_column(
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        index=True
    )
    stake_id: Mapped[int | None] = mapped_column(
        ForeignKey("stakes.id", ondelete="SET NULL"),
        nullable=True
    )

    # Amount
    amount: Mapped[Decimal] = mapped_column(
        DECIMAL(18, 8), nullable=False
    )
    percentage: Mapped[Decimal] = mapped_column(
        DECIMAL(10, 4), nullable=False
    )
    type: Mapped[str] = mapped_column(
        String(20), nullable=False, default=ReferralEarningType.STAKE.value
    )

    # Timestamps
    created_at: Mapped[datetime] = mapped_column(
        DateTime, default=utcnow, nullable=False
    )

    def __repr__(self) -> str:
        """String representation."""
        return (
            f"ReferralEarning(id={self.id}, "
            f"user_id={self.user_id}, "
            f"from_user_id={self.from_user_id}, "
            f"amount={self.amount})"
        )


# Composite indexes
Index(
    "idx_referral_earning_user_created",
    ReferralEarning.user_id,
    ReferralEarning.created_at,
)
