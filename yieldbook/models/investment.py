"""
Investment domain model.

One capital placement by a user into a plan. ``created_at`` is the
authoritative start of accrual.
"""

import uuid
from datetime import datetime, timezone
from decimal import Decimal
from enum import Enum
from typing import Optional

from sqlalchemy import CheckConstraint, DateTime, Index
from sqlmodel import Field, SQLModel


class InvestmentStatus(str, Enum):
    """Lifecycle states. Pending → Approved | Rejected; both terminal."""

    PENDING = "Pending"
    APPROVED = "Approved"
    REJECTED = "Rejected"


class Investment(SQLModel, table=True):
    """
    Table definition for investments.

    Design notes:
    - ``status`` is nullable: rows written before approvals existed have no
      status and count as approved. Read it through :attr:`effective_status`;
      ``InvestmentRepository.backfill_legacy_statuses`` rewrites such rows.
    - ``plan_id`` is NULL on legacy rows, whose rate lives only in the
      ``investment_type`` label.
    - ``(user_id, created_at)`` is indexed for the per-user history query.
    """

    __tablename__ = "investments"  # type: ignore[assignment]

    __table_args__ = (
        Index("ix_investments_user_created", "user_id", "created_at"),
        CheckConstraint("amount > 0", name="ck_investments_amount_positive"),
    )

    id: uuid.UUID = Field(default_factory=uuid.uuid4, primary_key=True)
    # Display id: the payment reference issued at checkout.
    investment_id: str = Field(index=True, max_length=64)
    user_id: uuid.UUID = Field(foreign_key="users.id", index=True, ondelete="RESTRICT")
    investment_type: str = Field(max_length=255)
    plan_id: Optional[str] = Field(default=None, max_length=64)
    amount: Decimal = Field(max_digits=20, decimal_places=2)
    status: Optional[InvestmentStatus] = Field(default=InvestmentStatus.PENDING, index=True)
    created_at: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc),
        nullable=False,
        sa_type=DateTime(timezone=True),  # type: ignore[arg-type]
    )

    @property
    def effective_status(self) -> InvestmentStatus:
        return self.status or InvestmentStatus.APPROVED

    def __repr__(self) -> str:
        return (
            f"<Investment id={self.id} #{self.investment_id} user={self.user_id} "
            f"amount={self.amount} status={self.effective_status.value}>"
        )
