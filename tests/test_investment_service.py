"""
Unit tests for InvestmentService — submission and read models.

The April 2024 window is the 2nd to the 3rd (the 1st is Easter Monday).
"""

from datetime import timedelta
from decimal import Decimal
from io import BytesIO
from unittest.mock import AsyncMock

import pytest
from openpyxl import load_workbook
from sqlalchemy.exc import IntegrityError

from yieldbook.clients.paystack import PaymentInitialization
from yieldbook.core.exceptions import (
    AuthenticationFailure,
    BusinessRuleViolation,
    ExternalServiceError,
    NotFoundException,
    ValidationFailure,
)
from yieldbook.models.investment import InvestmentStatus
from yieldbook.schemas.investment import InvestmentSubmit
from yieldbook.services.investment_service import InvestmentService

from .conftest import USER_ID, make_investment, make_user, utc

IN_WINDOW = utc(2024, 4, 2, 10, 0)
EASTER_MONDAY = utc(2024, 4, 1, 10, 0)


@pytest.fixture()
def user_repo():
    repo = AsyncMock()
    repo.get.return_value = make_user()
    return repo


@pytest.fixture()
def invest_repo(mock_db):
    repo = AsyncMock()
    repo.db = mock_db
    repo.create.side_effect = lambda inv: inv
    repo.list_for_user.return_value = [make_investment()]
    return repo


@pytest.fixture()
def payments():
    client = AsyncMock()
    client.initialize_transaction.return_value = PaymentInitialization(
        authorization_url="https://checkout.paystack.com/abc",
        access_code="abc",
        reference="T685312322670591",
    )
    return client


@pytest.fixture()
def service(invest_repo, user_repo, payments, notifier):
    return InvestmentService(invest_repo, user_repo, payments, notifier)


class TestSubmitInvestment:
    @pytest.mark.asyncio
    async def test_success(self, service, payments, invest_repo, notifier):
        checkout = await service.submit_investment(
            USER_ID, InvestmentSubmit(amount=Decimal("100000")), now=IN_WINDOW
        )

        inv = checkout.investment
        assert inv.investment_id == "T685312322670591"
        assert inv.status == InvestmentStatus.PENDING
        assert inv.plan_id == "moderate"
        assert inv.investment_type == "Moderate - 20% Monthly"
        assert inv.created_at == IN_WINDOW
        assert checkout.authorization_url == "https://checkout.paystack.com/abc"
        payments.initialize_transaction.assert_awaited_once_with(
            "ada@example.com", Decimal("100000")
        )
        notifier.notify_new_investment.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_admin_email_carries_workbook(self, service, notifier):
        await service.submit_investment(
            USER_ID, InvestmentSubmit(amount=Decimal("100000")), now=IN_WINDOW
        )

        attachment = notifier.notify_new_investment.await_args.args[3]
        assert attachment.filename == "Investment_Report_Ada_Okafor.xlsx"
        workbook = load_workbook(BytesIO(attachment.content))
        assert workbook.sheetnames == ["User Details", "Investments", "Withdrawals"]

    @pytest.mark.asyncio
    async def test_outside_window(self, service, payments):
        with pytest.raises(BusinessRuleViolation, match="from 02/04/2024 to 03/04/2024"):
            await service.submit_investment(
                USER_ID, InvestmentSubmit(amount=Decimal("100000")), now=EASTER_MONDAY
            )
        payments.initialize_transaction.assert_not_awaited()

    @pytest.mark.asyncio
    @pytest.mark.parametrize("amount", ["49999.99", "5000000.01"])
    async def test_amount_out_of_bounds(self, service, payments, amount):
        with pytest.raises(ValidationFailure) as exc_info:
            await service.submit_investment(
                USER_ID, InvestmentSubmit(amount=Decimal(amount)), now=IN_WINDOW
            )
        assert exc_info.value.details == {"min_amount": "50000", "max_amount": "5000000"}
        payments.initialize_transaction.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_unknown_plan(self, service):
        with pytest.raises(ValidationFailure, match="Unknown investment plan"):
            await service.submit_investment(
                USER_ID, InvestmentSubmit(plan_id="aggressive", amount=Decimal("100000")),
                now=IN_WINDOW,
            )

    @pytest.mark.asyncio
    async def test_gateway_failure_persists_nothing(self, service, payments, invest_repo, notifier):
        payments.initialize_transaction.side_effect = ExternalServiceError("Payment gateway")

        with pytest.raises(ExternalServiceError):
            await service.submit_investment(
                USER_ID, InvestmentSubmit(amount=Decimal("100000")), now=IN_WINDOW
            )
        invest_repo.create.assert_not_awaited()
        notifier.notify_new_investment.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_duplicate_reference(self, service, invest_repo, mock_db):
        invest_repo.create.side_effect = IntegrityError("INSERT", {}, Exception("unique"))

        with pytest.raises(BusinessRuleViolation, match="T685312322670591"):
            await service.submit_investment(
                USER_ID, InvestmentSubmit(amount=Decimal("100000")), now=IN_WINDOW
            )
        mock_db.rollback.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_deactivated_account(self, service, user_repo):
        user_repo.get.return_value = make_user(is_active=False)
        with pytest.raises(AuthenticationFailure):
            await service.submit_investment(
                USER_ID, InvestmentSubmit(amount=Decimal("100000")), now=IN_WINDOW
            )

    @pytest.mark.asyncio
    async def test_unknown_user(self, service, user_repo):
        user_repo.get.return_value = None
        with pytest.raises(NotFoundException):
            await service.submit_investment(
                USER_ID, InvestmentSubmit(amount=Decimal("100000")), now=IN_WINDOW
            )


class TestQueries:
    @pytest.mark.asyncio
    async def test_list_investments_with_accrual(self, service, invest_repo):
        created = utc(2024, 1, 5, 10, 0)
        invest_repo.list_for_user.return_value = [
            make_investment(created_at=created),
            make_investment(status=InvestmentStatus.PENDING, created_at=created),
        ]

        rows = await service.list_investments(USER_ID, as_of=created + timedelta(days=15))

        assert [r.accrued_profit for r in rows] == [Decimal("10000"), Decimal(0)]
        assert all(r.monthly_payout == Decimal("20000") for r in rows)

    @pytest.mark.asyncio
    async def test_list_investments_unknown_user(self, service, user_repo):
        user_repo.get.return_value = None
        with pytest.raises(NotFoundException):
            await service.list_investments(USER_ID)

    @pytest.mark.asyncio
    async def test_backfill(self, service, invest_repo):
        invest_repo.backfill_legacy_statuses.return_value = 3
        assert await service.backfill_legacy_statuses() == 3
