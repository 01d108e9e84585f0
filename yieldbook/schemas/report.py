"""
Pydantic schemas for report requests.
"""

from datetime import date
from typing import Optional

from pydantic import BaseModel, EmailStr, Field, model_validator


class ReportRequest(BaseModel):
    """Inclusive date range; either bound may be omitted."""

    email: EmailStr
    start_date: Optional[date] = None
    end_date: Optional[date] = None

    @model_validator(mode="after")
    def validate_range(self) -> "ReportRequest":
        if self.start_date and self.end_date and self.start_date > self.end_date:
            raise ValueError("start_date must be on or before end_date")
        return self


class ReportEmailRequest(BaseModel):
    email: EmailStr


class ReportEmailResponse(BaseModel):
    filename: str
    sent_to: str = Field(..., description="Administrator mailbox the report went to")
