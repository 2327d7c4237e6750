"""
Transaction model.

Append-only ledger of every balance movement in the system.
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
    Text,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.models.base import Base
from app.models.enums import TransactionStatus, TransactionType
from app.utils.datetime_utils import utcnow

if TYPE_CHECKING:
    from app.models.user import User


class Transaction(Base):
    """Transaction model - all financial operations."""

    __tablename__ = "transactions"
    __table_args__ = (
        CheckConstraint(
            'amount > 0', name='check_transaction_amount_positive'
        ),
        CheckConstraint(
            'balance_before >= 0',
            name='check_transaction_balance_before_non_negative'
        ),
        CheckConstraint(
            'balance_after >= 0',
            name='check_transaction_balance_after_non_negative'
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

    # Transaction type (sign is derived from type, amount is always > 0)
    type: Mapped[str] = mapped_column(
        String(50), nullable=False, index=True
    )  # deposit, withdrawal, staking, staking_return, referral_bonus, ...

    # Amount
    amount: Mapped[Decimal] = mapped_column(
        DECIMAL(18, 8), nullable=False
    )

    # Balance tracking
    balance_before: Mapped[Decimal] = mapped_column(
        DECIMAL(18, 8), nullable=False
    )
    balance_after: Mapped[Decimal] = mapped_column(
        DECIMAL(18, 8), nullable=False
    )

    # Status
    status: Mapped[str] = mapped_column(
        String(50),
        nullable=False,
        default=TransactionStatus.COMPLETED.value,
        index=True
    )  # pending, completed, rejected, failed

    # Description
    description: Mapped[str | None] = mapped_column(
        Text, nullable=True
    )

    # Reference IDs (links to stakes/deposits/withdrawals)
    reference_id: Mapped[int | None] = mapped_column(
        nullable=True
    )
    reference_type: Mapped[str | None] = mapped_column(
        String(50), nullable=True
    )  # stake, deposit, withdrawal, referral_earning

    # Blockchain data (withdrawals)
    tx_hash: Mapped[str | None] = mapped_column(
        String(255), nullable=True
    )

    # Timestamps (stored as naive UTC in DB: TIMESTAMP WITHOUT TIME ZONE)
    created_at: Mapped[datetime] = mapped_column(
        DateTime,
        default=utcnow,
        nullable=False,
        index=True,
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime,
        default=utcnow,
        onupdate=utcnow,
        nullable=False,
    )

    # Relationships
    user: Mapped["User"] = relationship(
        "User",
        back_populates="transactions",
    )

    @property
    def signed_amount(self) -> Decimal:
        """Amount with sign applied (debits negative)."""
        if TransactionType(self.type).is_debit:
            return -self.amount
        return self.amount

    def __repr__(self) -> str:
        """String representation."""
        return (
            f"<Transaction(id={self.id}, user_id={self.user_id}, "
            f"type={self.type}, amount={self.amount}, status={self.status})>"
        )


Index(
    "idx_transactions_reference",
    Transaction.reference_type,
    Transaction.reference_id,
)
