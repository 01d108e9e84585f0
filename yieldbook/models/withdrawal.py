"""
Withdrawal domain model.

A request to be paid part of the month's payout. The 2% management fee and
the resulting payout are fixed when the request is created.
"""

import uuid
from datetime import datetime, timezone
from decimal import Decimal
from enum import Enum

from sqlalchemy import CheckConstraint, DateTime, Index, UniqueConstraint
from sqlmodel import Field, SQLModel


class WithdrawalStatus(str, Enum):
    """Lifecycle states. Pending → Completed | Rejected; both terminal."""

    PENDING = "Pending"
    COMPLETED = "Completed"
    REJECTED = "Rejected"


class Withdrawal(SQLModel, table=True):
    __tablename__ = "withdrawals"  # type: ignore[assignment]

    __table_args__ = (
        Index("ix_withdrawals_user_created", "user_id", "created_at"),
        UniqueConstraint("user_id", "withdrawal_id", name="uq_withdrawals_user_sequence"),
        CheckConstraint("amount > 0", name="ck_withdrawals_amount_positive"),
        CheckConstraint("management_fee >= 0", name="ck_withdrawals_fee_non_negative"),
        CheckConstraint(
            "payout_amount = amount - management_fee", name="ck_withdrawals_payout_consistent"
        ),
    )

    id: uuid.UUID = Field(default_factory=uuid.uuid4, primary_key=True)
    # Sequential per user: "1", "2", ...; unique per user.
    withdrawal_id: str = Field(max_length=32)
    user_id: uuid.UUID = Field(foreign_key="users.id", index=True, ondelete="RESTRICT")
    amount: Decimal = Field(max_digits=20, decimal_places=2)
    management_fee: Decimal = Field(max_digits=20, decimal_places=2)
    payout_amount: Decimal = Field(max_digits=20, decimal_places=2)
    status: WithdrawalStatus = Field(default=WithdrawalStatus.PENDING, index=True)
    created_at: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc),
        nullable=False,
        sa_type=DateTime(timezone=True),  # type: ignore[arg-type]
    )

    def __repr__(self) -> str:
        return (
            f"<Withdrawal id={self.id} #{self.withdrawal_id} user={self.user_id} "
            f"amount={self.amount} status={self.status.value}>"
        )
