"""
StakePayment model.

Append-only record of one applied daily payout.
"""

from datetime import datetime
from decimal import Decimal
from typing import TYPE_CHECKING

from sqlalchemy import DECIMAL, CheckConstraint, DateTime, ForeignKey
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.models.base import Base
from app.utils.datetime_utils import utcnow

if TYPE_CHECKING:
    from app.models.stake import Stake


class StakePayment(Base):
    """StakePayment model - one row per processed payout cycle."""

    __tablename__ = "stake_payments"
    __table_args__ = (
        CheckConstraint(
            'amount >= 0', name='check_stake_payment_amount_non_negative'
        ),
    )

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)

    stake_id: Mapped[int] = mapped_column(
        ForeignKey("stakes.id", ondelete="CASCADE"),
        nullable=False,
        index=True
    )
    amount: Mapped[Decimal] = mapped_column(
        DECIMAL(18, 8), nullable=False
    )
    date: Mapped[datetime] = mapped_column(
        DateTime, default=utcnow, nullable=False
    )

    stake: Mapped["Stake"] = relationship("Stake", back_populates="payments")

    def __repr__(self) -> str:
        """String representation."""
        return (
            f"<StakePayment(id={self.id}, stake_id={self.stake_id}, "
            f"amount={self.amount}, date={self.date})>"
        )
