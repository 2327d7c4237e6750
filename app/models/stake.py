"""
Stake model.

A user's position in a staking plan. Created by the staking service,
advanced only by the payout processor.
"""

from datetime import datetime
from decimal import Decimal
from typing import TYPE_CHECKING

from sqlalchemy import (
    DECIMAL,
    CheckConstraint,
    DateTime,
    ForeignKey,
    Index,
    String,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.models.base import Base
from app.models.enums import StakeStatus
from app.utils.datetime_utils import utcnow

if TYPE_CHECKING:
    from app.models.stake_payment import StakePayment
    from app.models.staking_plan import StakingPlan
    from app.models.user import User


class Stake(Base):
    """Stake model - staked principal earning daily ROI."""

    __tablename__ = "stakes"
    __table_args__ = (
        CheckConstraint(
            'amount > 0', name='check_stake_amount_positive'
        ),
        CheckConstraint(
            'total_earned >= 0',
            name='check_stake_total_earned_non_negative'
        ),
    )

    # Primary key
    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)

    # References
    user_id: Mapped[int] = mapped_column(
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        index=True
    )
    plan_id: Mapped[int] = mapped_column(
        ForeignKey("staking_plans.id"),
        nullable=False,
        index=True
    )

    # Principal (immutable after creation)
    amount: Mapped[Decimal] = mapped_column(
        DECIMAL(18, 8), nullable=False
    )

    # Plan terms copied at creation time
    daily_roi: Mapped[Decimal] = mapped_column(
        DECIMAL(10, 4), nullable=False
    )
    total_roi: Mapped[Decimal] = mapped_column(
        DECIMAL(10, 4), nullable=False
    )
    expected_return: Mapped[Decimal] = mapped_column(
        DECIMAL(18, 8), nullable=False
    )

    # Accrual
    total_earned: Mapped[Decimal] = mapped_column(
        DECIMAL(18, 8), default=Decimal("0"), nullable=False
    )

    # Status
    status: Mapped[str] = mapped_column(
        String(20),
        nullable=False,
        default=StakeStatus.ACTIVE.value,
        index=True
    )

    # Schedule (next_process_at NULL = no further payouts due)
    start_date: Mapped[datetime] = mapped_column(
        DateTime, default=utcnow, nullable=False
    )
    end_date: Mapped[datetime] = mapped_column(DateTime, nullable=False)
    next_process_at: Mapped[datetime | None] = mapped_column(
        DateTime, nullable=True
    )
    last_processed: Mapped[datetime | None] = mapped_column(
        DateTime, nullable=True
    )

    # Timestamps
    created_at: Mapped[datetime] = mapped_column(
        DateTime, default=utcnow, nullable=False
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime, default=utcnow, onupdate=utcnow, nullable=False
    )

    # Relationships
    user: Mapped["User"] = relationship("User", back_populates="stakes")
    plan: Mapped["StakingPlan"] = relationship("StakingPlan", lazy="joined")
    payments: Mapped[list["StakePayment"]] = relationship(
        "StakePayment", back_populates="stake"
    )

    @property
    def is_active(self) -> bool:
        """Check if stake still accrues payouts."""
        return self.status == StakeStatus.ACTIVE.value

    def __repr__(self) -> str:
        """String representation."""
        return (
            f"<Stake(id={self.id}, user_id={self.user_id}, "
            f"amount={self.amount}, status={self.status}, "
            f"next_process_at={self.next_process_at})>"
        )


# Due-stake scan (payout processor)
Index(
    "idx_stakes_status_next_process_at",
    Stake.status,
    Stake.next_process_at,
)
