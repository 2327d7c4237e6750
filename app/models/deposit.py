"""
Deposit model.

Represents an external crypto payment that credits the balance once
confirmed.
"""

from datetime import datetime
from decimal import Decimal

from sqlalchemy import (
    DECIMAL,
    CheckConstraint,
    DateTime,
    ForeignKey,
    Integer,
    String,
)
from sqlalchemy.orm import Mapped, mapped_column

from app.models.base import Base
from app.models.enums import DepositStatus
from app.utils.datetime_utils import utcnow


class Deposit(Base):
    """Deposit model - user deposits."""

    __tablename__ = "deposits"
    __table_args__ = (
        CheckConstraint(
            'amount > 0', name='check_deposit_amount_positive'
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

    # Amounts (USD)
    amount: Mapped[Decimal] = mapped_column(
        DECIMAL(18, 8), nullable=False
    )
    amount_usd: Mapped[Decimal | None] = mapped_column(
        DECIMAL(18, 8), nullable=True
    )  # quoted price_amount, preferred for crediting

    # Payment data
    pay_currency: Mapped[str] = mapped_column(String(20), nullable=False)
    pay_amount: Mapped[Decimal | None] = mapped_column(
        DECIMAL(28, 12), nullable=True
    )
    pay_address: Mapped[str | None] = mapped_column(
        String(255), nullable=True
    )
    payment_id: Mapped[str | None] = mapped_column(
        String(100), nullable=True, unique=True, index=True
    )  # gateway payment id

    # Blockchain data
    tx_hash: Mapped[str | None] = mapped_column(
        String(255), nullable=True
    )
    confirmations: Mapped[int] = mapped_column(
        Integer, default=0, nullable=False
    )
    required_confirmations: Mapped[int] = mapped_column(
        Integer, default=1, nullable=False
    )

    # Status
    status: Mapped[str] = mapped_column(
        String(20),
        nullable=False,
        default=DepositStatus.PENDING.value,
        index=True
    )  # pending, confirmed, failed
    confirmed_at: Mapped[datetime | None] = mapped_column(
        DateTime, nullable=True
    )

    # Timestamps
    created_at: Mapped[datetime] = mapped_column(
        DateTime, default=utcnow, nullable=False
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime, default=utcnow, onupdate=utcnow, nullable=False
    )

    @property
    def credit_amount(self) -> Decimal:
        """USD amount credited on confirmation."""
        return self.amount_usd if self.amount_usd is not None else self.amount

    @property
    def is_pending(self) -> bool:
        """Check if deposit awaits confirmation."""
        return self.status == DepositStatus.PENDING.value

    def __repr__(self) -> str:
        """String representation."""
        return (
            f"<Deposit(id={self.id}, user_id={self.user_id}, "
            f"amount={self.amount}, status={self.status})>"
        )
