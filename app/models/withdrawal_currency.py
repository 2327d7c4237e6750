"""
WithdrawalCurrency model.

Payout currency/network with its limits and flat fee.
"""

from decimal import Decimal

from sqlalchemy import DECIMAL, Boolean, String
from sqlalchemy.orm import Mapped, mapped_column

from app.models.base import Base, TimestampMixin


class WithdrawalCurrency(TimestampMixin, Base):
    """WithdrawalCurrency model - supported payout currencies."""

    __tablename__ = "withdrawal_currencies"

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)

    symbol: Mapped[str] = mapped_column(String(20), nullable=False)
    network: Mapped[str] = mapped_column(String(50), nullable=False)

    min_withdrawal: Mapped[Decimal] = mapped_column(
        DECIMAL(18, 8), default=Decimal("10"), nullable=False
    )
    max_withdrawal: Mapped[Decimal | None] = mapped_column(
        DECIMAL(18, 8), nullable=True
    )
    fee: Mapped[Decimal] = mapped_column(
        DECIMAL(18, 8), default=Decimal("0"), nullable=False
    )  # flat fee in USD

    is_active: Mapped[bool] = mapped_column(
        Boolean, default=True, nullable=False
    )

    def __repr__(self) -> str:
        """String representation."""
        return (
            f"<WithdrawalCurrency(id={self.id}, symbol={self.symbol}, "
            f"network={self.network})>"
        )
