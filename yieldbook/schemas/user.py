"""
Pydantic schemas for User API request / response serialisation.
"""

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, ConfigDict, EmailStr, Field, field_validator


class UserBase(BaseModel):
    """Profile fields supplied at registration."""

    full_name: str = Field(..., min_length=1, max_length=255, examples=["Ada Okafor"])
    whatsapp_number: str = Field(..., min_length=7, max_length=32, examples=["+2348012345678"])
    bank_name: str = Field(..., min_length=1, max_length=255, examples=["Access Bank"])
    account_name: str = Field(..., min_length=1, max_length=255, examples=["Ada Okafor"])
    account_number: str = Field(
        ...,
        pattern=r"^[0-9]{10}$",
        description="10-digit NUBAN account number",
        examples=["0123456789"],
    )

    @field_validator("full_name", "bank_name", "account_name")
    @classmethod
    def validate_not_blank(cls, v: str) -> str:
        """Reject whitespace-only values."""
        if not v.strip():
            raise ValueError("must not be blank")
        return v.strip()


class UserCreate(UserBase):
    """Schema for ``POST /users``."""

    email: EmailStr = Field(..., examples=["ada@example.com"])


class UserResponse(UserBase):
    """Schema returned by user endpoints.  The PIN hash is never exposed."""

    id: UUID
    email: str
    is_active: bool
    is_admin: bool
    privileged_withdrawal_access: bool
    has_pin: bool
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)


class PinRequest(BaseModel):
    """Body for setting or verifying the withdrawal PIN."""

    pin: str = Field(..., pattern=r"^[0-9]{4}$", description="Exactly four digits", examples=["4821"])


class PinVerificationResponse(BaseModel):
    valid: bool


class UserStatusUpdate(BaseModel):
    is_active: bool = Field(..., description="False disables sign-in and submissions")
