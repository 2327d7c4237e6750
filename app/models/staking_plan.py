"""
StakingPlan model.

Investment product: daily ROI percent over a fixed number of days.
"""

from datetime import datetime
from decimal import Decimal

from sqlalchemy import (
    DECIMAL,
    Boolean,
    CheckConstraint,
    DateTime,
    Integer,
    String,
    Text,
)
from sqlalchemy.orm import Mapped, mapped_column

from app.models.base import Base
from app.utils.datetime_utils import utcnow


class StakingPlan(Base):
    """StakingPlan model - staking products offered to users."""

    __tablename__ = "staking_plans"
    __table_args__ = (
        CheckConstraint(
            'daily_roi > 0', name='check_staking_plan_daily_roi_positive'
        ),
        CheckConstraint(
            'duration_days > 0',
            name='check_staking_plan_duration_positive'
        ),
        CheckConstraint(
            'min_amount > 0', name='check_staking_plan_min_amount_positive'
        ),
        CheckConstraint(
            'max_amount IS NULL OR max_amount >= min_amount',
            name='check_staking_plan_max_gte_min'
        ),
    )

    # Primary key
    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)

    name: Mapped[str] = mapped_column(String(100), nullable=False)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)

    # Returns
    daily_roi: Mapped[Decimal] = mapped_column(
        DECIMAL(10, 4), nullable=False
    )  # percent per day
    duration_days: Mapped[int] = mapped_column(Integer, nullable=False)
    total_roi: Mapped[Decimal] = mapped_column(
        DECIMAL(10, 4), nullable=False
    )  # daily_roi * duration_days

    # Bounds (max_amount NULL = unbounded)
    min_amount: Mapped[Decimal] = mapped_column(
        DECIMAL(18, 8), nullable=False
    )
    max_amount: Mapped[Decimal | None] = mapped_column(
        DECIMAL(18, 8), nullable=True
    )

    # Display
    is_active: Mapped[bool] = mapped_column(
        Boolean, default=True, nullable=False, index=True
    )
    is_featured: Mapped[bool] = mapped_column(
        Boolean, default=False, nullable=False
    )
    sort_order: Mapped[int] = mapped_column(
        Integer, default=0, nullable=False
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
            f"<StakingPlan(id={self.id}, name={self.name!r}, "
            f"daily_roi={self.daily_roi}, duration_days={self.duration_days})>"
        )
