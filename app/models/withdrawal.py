"""
Withdrawal model.

Represents a payout request. The gross amount is debited from the
balance at request time; rejection refunds it.
"""

from datetime import datetime
from decimal import Decimal

from sqlalchemy import (
    DECIMAL,
    Boolean,
    CheckConstraint,
    DateTime,
    ForeignKey,
    String,
    Text,
)
from sqlalchemy.orm import Mapped, mapped_column

from app.models.base import Base
from app.models.enums import WithdrawalStatus
from app.utils.datetime_utils import utcnow


class Withdrawal(Base):
    """Withdrawal model - user payout requests."""

    __tablename__ = "withdrawals"
    __table_args__ = (
        CheckConstraint(
            'amount > 0', name='check_withdrawal_amount_positive'
        ),
        CheckConstraint(
            'fee >= 0', name='check_withdrawal_fee_non_negative'
        ),
        CheckConstraint(
            'net_amount >= 0', name='check_withdrawal_net_non_negative'
        ),
    )

    # Primary key
    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)

    # User reference
    user_id: Mapped[int] = mapped_column(
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        index=True
    )

    # Payout details
    currency: Mapped[str] = mapped_column(String(20), nullable=False)
    amount: Mapped[Decimal] = mapped_column(
        DECIMAL(18, 8), nullable=False
    )  # gross, debited from balance
    fee: Mapped[Decimal] = mapped_column(
        DECIMAL(18, 8), default=Decimal("0"), nullable=False
    )
    net_amount: Mapped[Decimal] = mapped_column(
        DECIMAL(18, 8), nullable=False
    )  # sent to wallet
    wallet_address: Mapped[str] = mapped_column(
        String(255), nullable=False
    )

    # Status
    status: Mapped[str] = mapped_column(
        String(20),
        nullable=False,
        default=WithdrawalStatus.PENDING.value,
        index=True
    )  # pending, processing, completed, rejected, failed
    tx_hash: Mapped[str | None] = mapped_column(
        String(255), nullable=True
    )
    pin_verified: Mapped[bool] = mapped_column(
        Boolean, default=False, nullable=False
    )
    reason: Mapped[str | None] = mapped_column(Text, nullable=True)
    processed_at: Mapped[datetime | None] = mapped_column(
        DateTime, nullable=True
    )

    # Timestamps
    created_at: Mapped[datetime] = mapped_column(
        DateTime, default=utcnow, nullable=False
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime, default=utcnow, onupdate=utcnow, nullable=False
    )

    def __repr__(self) -> str:
        """String representation."""
        return (
            f"<Withdrawal(id={self.id}, user_id={self.user_id}, "
            f"amount={self.amount}, currency={self.currency}, "
            f"status={self.status})>"
        )
