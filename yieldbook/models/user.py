"""
User profile model.

Holds identity, contact and payout bank details. ``is_active`` mirrors the
authentication provider's enabled flag; the withdrawal PIN is stored only as a
bcrypt hash.
"""

import uuid
from datetime import datetime, timezone
from typing import Optional

from sqlalchemy import CheckConstraint, DateTime
from sqlmodel import Field, SQLModel


class User(SQLModel, table=True):
    __tablename__ = "users"  # type: ignore[assignment]

    __table_args__ = (
        CheckConstraint("length(full_name) > 0", name="ck_users_full_name_not_empty"),
        CheckConstraint("length(email) > 0", name="ck_users_email_not_empty"),
    )

    id: uuid.UUID = Field(default_factory=uuid.uuid4, primary_key=True)
    full_name: str = Field(index=True, max_length=255)
    email: str = Field(unique=True, index=True, max_length=320)
    whatsapp_number: str = Field(default="", max_length=32)
    bank_name: str = Field(default="", max_length=255)
    account_name: str = Field(default="", max_length=255)
    account_number: str = Field(default="", max_length=32)

    is_active: bool = Field(default=True)
    is_admin: bool = Field(default=False)
    # Lets the account submit outside the monthly window.
    privileged_withdrawal_access: bool = Field(default=False)
    withdrawal_pin_hash: Optional[str] = Field(default=None, max_length=128)

    created_at: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc),
        nullable=False,
        sa_type=DateTime(timezone=True),  # type: ignore[arg-type]
    )

    @property
    def has_pin(self) -> bool:
        return bool(self.withdrawal_pin_hash)

    def __repr__(self) -> str:
        return f"<User id={self.id} email='{self.email}' active={self.is_active}>"
