"""
Unit tests for WithdrawalService — submission rules and balance queries.

The March 2024 window runs from Friday the 1st to Monday the 4th (the 2nd
is a Saturday); submissions below use a time inside it unless stated.
"""

from decimal import Decimal
from unittest.mock import AsyncMock, patch

import pytest
from sqlalchemy import UniqueConstraint
from sqlalchemy.exc import IntegrityError

from yieldbook.core.exceptions import (
    AuthenticationFailure,
    BusinessRuleViolation,
    ConflictException,
    NotFoundException,
    ValidationFailure,
)
from yieldbook.core.security import hash_pin
from yieldbook.models.investment import InvestmentStatus
from yieldbook.models.withdrawal import Withdrawal, WithdrawalStatus
from yieldbook.services.withdrawal_service import WithdrawalService

from .conftest import USER_ID, make_investment, make_user, make_withdrawal, utc

IN_WINDOW = utc(2024, 3, 1, 9, 0)
OUTSIDE_WINDOW = utc(2024, 3, 12, 9, 0)


@pytest.fixture(scope="module")
def pin_hash():
    return hash_pin("1234")


@pytest.fixture()
def user_repo(pin_hash):
    repo = AsyncMock()
    repo.get.return_value = make_user(pin_hash=pin_hash)
    return repo


@pytest.fixture()
def invest_repo():
    repo = AsyncMock()
    repo.list_for_user.return_value = [make_investment()]
    return repo


@pytest.fixture()
def withdraw_repo():
    repo = AsyncMock()
    repo.list_for_user.return_value = []
    repo.count_for_user.return_value = 0
    repo.create.side_effect = lambda withdrawal: withdrawal
    return repo


@pytest.fixture()
def service(withdraw_repo, invest_repo, user_repo, notifier):
    return WithdrawalService(withdraw_repo, invest_repo, user_repo, notifier)


class TestSubmitWithdrawal:
    @pytest.mark.asyncio
    async def test_success(self, service, withdraw_repo, notifier):
        withdraw_repo.count_for_user.return_value = 2

        created = await service.submit_withdrawal(USER_ID, Decimal("15000"), "1234", now=IN_WINDOW)

        assert created.withdrawal_id == "3"
        assert created.status == WithdrawalStatus.PENDING
        assert created.management_fee == Decimal("300.00")
        assert created.payout_amount == Decimal("14700.00")
        assert created.created_at == IN_WINDOW
        withdraw_repo.create.assert_awaited_once()
        notifier.notify_withdrawal_request.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_balance_window_is_the_current_month(self, service, withdraw_repo):
        await service.submit_withdrawal(USER_ID, Decimal("2000"), "1234", now=IN_WINDOW)

        _, start, end = withdraw_repo.list_for_user.await_args.args
        # Lagos is UTC+1: local midnight on the 1st is 23:00 UTC the day before
        assert start == utc(2024, 2, 29, 23, 0)
        assert end == utc(2024, 3, 31, 23, 0)

    @pytest.mark.asyncio
    async def test_exceeding_balance_rejected(self, service, withdraw_repo):
        withdraw_repo.list_for_user.return_value = [make_withdrawal(amount=Decimal("15000"))]

        with pytest.raises(BusinessRuleViolation, match="₦5,000.00"):
            await service.submit_withdrawal(USER_ID, Decimal("6000"), "1234", now=IN_WINDOW)
        withdraw_repo.create.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_exact_balance_allowed(self, service, withdraw_repo):
        withdraw_repo.list_for_user.return_value = [make_withdrawal(amount=Decimal("15000"))]
        created = await service.submit_withdrawal(USER_ID, Decimal("5000"), "1234", now=IN_WINDOW)
        assert created.amount == Decimal("5000")

    @pytest.mark.asyncio
    async def test_concurrent_duplicate_sequence_conflicts(self, service, withdraw_repo, notifier):
        withdraw_repo.count_for_user.return_value = 1
        withdraw_repo.create.side_effect = IntegrityError("INSERT", {}, Exception("unique"))

        with pytest.raises(ConflictException, match="same time"):
            await service.submit_withdrawal(USER_ID, Decimal("2000"), "1234", now=IN_WINDOW)
        withdraw_repo.db.rollback.assert_awaited_once()
        notifier.notify_withdrawal_request.assert_not_awaited()

    def test_sequence_number_unique_per_user(self):
        unique_columns = [
            [column.name for column in constraint.columns]
            for constraint in Withdrawal.__table__.constraints
            if isinstance(constraint, UniqueConstraint)
        ]
        assert ["user_id", "withdrawal_id"] in unique_columns

    @pytest.mark.asyncio
    async def test_investments_from_this_month_do_not_count(self, service, invest_repo):
        invest_repo.list_for_user.return_value = [make_investment(created_at=utc(2024, 3, 1, 8, 0))]
        with pytest.raises(BusinessRuleViolation, match="₦0.00"):
            await service.submit_withdrawal(USER_ID, Decimal("2000"), "1234", now=IN_WINDOW)

    @pytest.mark.asyncio
    async def test_pending_investments_do_not_count(self, service, invest_repo):
        invest_repo.list_for_user.return_value = [make_investment(status=InvestmentStatus.PENDING)]
        with pytest.raises(BusinessRuleViolation):
            await service.submit_withdrawal(USER_ID, Decimal("2000"), "1234", now=IN_WINDOW)

    @pytest.mark.asyncio
    async def test_below_minimum_rejected(self, service, withdraw_repo):
        with pytest.raises(ValidationFailure, match="Minimum withdrawal amount is ₦2,000.00"):
            await service.submit_withdrawal(USER_ID, Decimal("1999.99"), "1234", now=IN_WINDOW)
        withdraw_repo.create.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_outside_window_rejected(self, service):
        with pytest.raises(BusinessRuleViolation, match="from 01/03/2024 to 04/03/2024"):
            await service.submit_withdrawal(USER_ID, Decimal("2000"), "1234", now=OUTSIDE_WINDOW)

    @pytest.mark.asyncio
    async def test_privileged_user_skips_window(self, service, user_repo, pin_hash):
        user_repo.get.return_value = make_user(pin_hash=pin_hash, privileged=True)
        created = await service.submit_withdrawal(
            USER_ID, Decimal("2000"), "1234", now=utc(2024, 3, 12, 9, 0)
        )
        assert created.amount == Decimal("2000")

    @pytest.mark.asyncio
    async def test_allow_listed_email_skips_window(self, service):
        with patch(
            "yieldbook.services.guards.settings.PRIVILEGED_EMAILS", "ada@example.com"
        ):
            created = await service.submit_withdrawal(
                USER_ID, Decimal("2000"), "1234", now=OUTSIDE_WINDOW
            )
        assert created.amount == Decimal("2000")

    @pytest.mark.asyncio
    async def test_wrong_pin(self, service, withdraw_repo):
        with pytest.raises(AuthenticationFailure):
            await service.submit_withdrawal(USER_ID, Decimal("2000"), "9999", now=IN_WINDOW)
        withdraw_repo.create.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_pin_not_set(self, service, user_repo):
        user_repo.get.return_value = make_user(pin_hash=None)
        with pytest.raises(BusinessRuleViolation, match="Set a withdrawal PIN"):
            await service.submit_withdrawal(USER_ID, Decimal("2000"), "1234", now=IN_WINDOW)

    @pytest.mark.asyncio
    async def test_deactivated_account(self, service, user_repo, pin_hash):
        user_repo.get.return_value = make_user(pin_hash=pin_hash, is_active=False)
        with pytest.raises(AuthenticationFailure, match="deactivated"):
            await service.submit_withdrawal(USER_ID, Decimal("2000"), "1234", now=IN_WINDOW)

    @pytest.mark.asyncio
    async def test_unknown_user(self, service, user_repo):
        user_repo.get.return_value = None
        with pytest.raises(NotFoundException):
            await service.submit_withdrawal(USER_ID, Decimal("2000"), "1234", now=IN_WINDOW)

    @pytest.mark.asyncio
    async def test_notification_failure_keeps_withdrawal(self, service, notifier):
        notifier.notify_withdrawal_request.return_value = False
        created = await service.submit_withdrawal(USER_ID, Decimal("2000"), "1234", now=IN_WINDOW)
        assert created.status == WithdrawalStatus.PENDING


class TestQueries:
    @pytest.mark.asyncio
    async def test_available_balance(self, service, withdraw_repo):
        withdraw_repo.list_for_user.return_value = [make_withdrawal(amount=Decimal("15000"))]

        balance = await service.get_available_balance(USER_ID, now=IN_WINDOW)

        assert balance.total_monthly_payout == Decimal("20000")
        assert balance.display_available == Decimal("5000")
        assert balance.eligible_investment_count == 1

    @pytest.mark.asyncio
    async def test_list_withdrawals(self, service, withdraw_repo):
        withdraw_repo.list_for_user.return_value = [make_withdrawal()]
        result = await service.list_withdrawals(USER_ID)
        assert len(result) == 1
        withdraw_repo.list_for_user.assert_awaited_once_with(USER_ID)

    @pytest.mark.asyncio
    async def test_list_pending(self, service, withdraw_repo):
        withdraw_repo.list_by_status.return_value = []
        await service.list_pending(skip=5, limit=10)
        withdraw_repo.list_by_status.assert_awaited_once_with(WithdrawalStatus.PENDING, 5, 10)
