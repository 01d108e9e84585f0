"""
Withdrawal API endpoints.

- GET   /users/{user_id}/withdrawals            — A user's withdrawal requests
- GET   /users/{user_id}/withdrawals/balance    — This month's withdrawable balance
- POST  /users/{user_id}/withdrawals            — Request a withdrawal
"""

from typing import List
from uuid import UUID

from fastapi import APIRouter, Depends

from yieldbook.api.dependencies import (
    get_investment_repo,
    get_notification_service,
    get_user_repo,
    get_withdrawal_repo,
)
from yieldbook.repositories.investment_repo import InvestmentRepository
from yieldbook.repositories.user_repo import UserRepository
from yieldbook.repositories.withdrawal_repo import WithdrawalRepository
from yieldbook.schemas.common import ERROR_RESPONSES
from yieldbook.schemas.withdrawal import BalanceResponse, WithdrawalResponse, WithdrawalSubmit
from yieldbook.services.notification_service import NotificationService
from yieldbook.services.withdrawal_service import WithdrawalService

router = APIRouter()


# ── Dependency injection ──


def _get_withdrawal_service(
    withdraw_repo: WithdrawalRepository = Depends(get_withdrawal_repo),
    invest_repo: InvestmentRepository = Depends(get_investment_repo),
    user_repo: UserRepository = Depends(get_user_repo),
    notifier: NotificationService = Depends(get_notification_service),
) -> WithdrawalService:
    return WithdrawalService(withdraw_repo, invest_repo, user_repo, notifier)


# ── Endpoints ──


@router.get(
    "/{user_id}/withdrawals",
    response_model=List[WithdrawalResponse],
    summary="List a user's withdrawals",
    responses={404: ERROR_RESPONSES[404]},
)
async def list_withdrawals(
    user_id: UUID,
    service: WithdrawalService = Depends(_get_withdrawal_service),
) -> List[WithdrawalResponse]:
    return await service.list_withdrawals(user_id)


@router.get(
    "/{user_id}/withdrawals/balance",
    response_model=BalanceResponse,
    summary="Available balance",
    description=(
        "Whole-month payout of approved investments made before this month, "
        "less everything already requested this month."
    ),
    responses={404: ERROR_RESPONSES[404]},
)
async def get_balance(
    user_id: UUID,
    service: WithdrawalService = Depends(_get_withdrawal_service),
) -> BalanceResponse:
    balance = await service.get_available_balance(user_id)
    return BalanceResponse(
        total_monthly_payout=balance.total_monthly_payout,
        total_withdrawn_this_month=balance.total_withdrawn_this_month,
        available_balance=balance.display_available,
        eligible_investment_count=balance.eligible_investment_count,
    )


@router.post(
    "/{user_id}/withdrawals",
    response_model=WithdrawalResponse,
    status_code=201,
    summary="Request a withdrawal",
    description=(
        "Requires an active account, an open submission window, the correct "
        "PIN and an amount between the minimum and the available balance.  "
        "A 2% management fee is deducted from the payout."
    ),
    responses={
        401: ERROR_RESPONSES[401],
        404: ERROR_RESPONSES[404],
        409: ERROR_RESPONSES[409],
        422: ERROR_RESPONSES[422],
    },
)
async def submit_withdrawal(
    user_id: UUID,
    body: WithdrawalSubmit,
    service: WithdrawalService = Depends(_get_withdrawal_service),
) -> WithdrawalResponse:
    return await service.submit_withdrawal(user_id, body.amount, body.pin)
