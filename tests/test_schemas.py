"""
Unit tests for Pydantic schemas — validation rules and serializers.

Tests cover:
- UserCreate field rules (blank names, NUBAN account number, email)
- PIN, investment and withdrawal payloads
- ReportRequest date-range validation
- Decimal → number serialization and legacy status mapping
"""

from datetime import date
from decimal import Decimal

import pytest
from pydantic import ValidationError

from yieldbook.domain.plans import PLANS
from yieldbook.models.investment import InvestmentStatus
from yieldbook.schemas.investment import (
    InvestmentResponse,
    InvestmentStatusUpdate,
    InvestmentSubmit,
    PlanResponse,
)
from yieldbook.schemas.report import ReportRequest
from yieldbook.schemas.user import PinRequest, UserCreate, UserResponse
from yieldbook.schemas.withdrawal import BalanceResponse, WithdrawalResponse, WithdrawalSubmit

from .conftest import make_investment, make_user, make_withdrawal

_USER = dict(
    full_name="Ada Okafor",
    email="ada@example.com",
    whatsapp_number="+2348012345678",
    bank_name="Access Bank",
    account_name="Ada Okafor",
    account_number="0123456789",
)


class TestUserCreate:
    def test_valid(self):
        assert UserCreate(**_USER).account_number == "0123456789"

    def test_names_are_stripped(self):
        assert UserCreate(**{**_USER, "full_name": "  Ada Okafor "}).full_name == "Ada Okafor"

    @pytest.mark.parametrize("field", ["full_name", "bank_name", "account_name"])
    def test_blank_rejected(self, field):
        with pytest.raises(ValidationError, match="must not be blank"):
            UserCreate(**{**_USER, field: "   "})

    @pytest.mark.parametrize("number", ["012345678", "01234567890", "01234abcde"])
    def test_account_number_must_be_ten_digits(self, number):
        with pytest.raises(ValidationError):
            UserCreate(**{**_USER, "account_number": number})

    def test_invalid_email(self):
        with pytest.raises(ValidationError):
            UserCreate(**{**_USER, "email": "not-an-email"})


class TestUserResponse:
    def test_pin_hash_never_exposed(self):
        body = UserResponse.model_validate(make_user(pin_hash="$2b$10$abc")).model_dump()
        assert body["has_pin"] is True
        assert "withdrawal_pin_hash" not in body


class TestPinAndAmounts:
    @pytest.mark.parametrize("pin", ["123", "12345", "12a4", "", "1234\n", "\u0661\u0662\u0663\u0664"])
    def test_pin_rejected(self, pin):
        with pytest.raises(ValidationError):
            PinRequest(pin=pin)

    def test_withdrawal_needs_positive_amount(self):
        with pytest.raises(ValidationError):
            WithdrawalSubmit(amount=Decimal("0"), pin="1234")

    def test_investment_defaults_to_moderate(self):
        assert InvestmentSubmit(amount=Decimal("100000")).plan_id == "moderate"

    def test_investment_rejects_sub_kobo(self):
        with pytest.raises(ValidationError):
            InvestmentSubmit(amount=Decimal("100000.001"))

    def test_status_update_accepts_display_value(self):
        assert InvestmentStatusUpdate(status="Approved").status == InvestmentStatus.APPROVED


class TestReportRequest:
    def test_neither_date(self):
        req = ReportRequest(email="ada@example.com")
        assert req.start_date is None and req.end_date is None

    def test_both_dates(self):
        req = ReportRequest(email="ada@example.com", start_date="2024-01-01", end_date="2024-01-31")
        assert req.end_date == date(2024, 1, 31)

    def test_single_date_accepted(self):
        req = ReportRequest(email="ada@example.com", start_date="2024-01-01")
        assert req.start_date == date(2024, 1, 1)
        assert req.end_date is None

    def test_inverted_range_rejected(self):
        with pytest.raises(ValidationError, match="on or before"):
            ReportRequest(email="ada@example.com", start_date="2024-02-01", end_date="2024-01-01")


class TestResponses:
    def test_investment_money_serialized_as_numbers(self):
        body = InvestmentResponse.from_model(make_investment(), Decimal("10000")).model_dump(
            mode="json"
        )
        assert body["amount"] == 100000.0
        assert body["monthly_payout"] == 20000.0
        assert body["accrued_profit"] == 10000.0

    def test_legacy_investment_reports_approved(self):
        body = InvestmentResponse.from_model(make_investment(status=None)).model_dump(mode="json")
        assert body["status"] == "Approved"
        assert body["accrued_profit"] is None

    def test_withdrawal_response(self):
        body = WithdrawalResponse.model_validate(make_withdrawal()).model_dump(mode="json")
        assert body["management_fee"] == 300.0
        assert body["payout_amount"] == 14700.0
        assert body["status"] == "Pending"

    def test_balance_response(self):
        body = BalanceResponse(
            total_monthly_payout=Decimal("20000"),
            total_withdrawn_this_month=Decimal("15000"),
            available_balance=Decimal("5000"),
            eligible_investment_count=1,
        ).model_dump(mode="json")
        assert body["available_balance"] == 5000.0

    def test_plan_response(self):
        body = PlanResponse.from_plan(PLANS["moderate"]).model_dump(mode="json")
        assert body["label"] == "Moderate - 20% Monthly"
        assert body["min_amount"] == 50000.0
