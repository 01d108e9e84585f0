"""
Administrator API endpoints.

- GET    /admin/investments/pending                                   — Investments awaiting a decision
- PATCH  /admin/users/{user_id}/investments/{investment_id}/status    — Approve / reject an investment
- GET    /admin/withdrawals/pending                                   — Withdrawals awaiting payment
- PATCH  /admin/users/{user_id}/withdrawals/{withdrawal_id}/status    — Complete / reject a withdrawal
- PATCH  /admin/users/{user_id}/status                                — Activate / deactivate an account
- POST   /admin/investments/backfill-legacy-status                    — Make legacy statuses explicit

Administrator identity is enforced by the upstream gateway.
"""

from typing import List
from uuid import UUID

from fastapi import APIRouter, Depends, Query

from yieldbook.api.dependencies import (
    get_investment_repo,
    get_notification_service,
    get_paystack_client,
    get_user_repo,
    get_withdrawal_repo,
)
from yieldbook.clients.paystack import PaystackClient
from yieldbook.repositories.investment_repo import InvestmentRepository
from yieldbook.repositories.user_repo import UserRepository
from yieldbook.repositories.withdrawal_repo import WithdrawalRepository
from yieldbook.schemas.common import ERROR_RESPONSES
from yieldbook.schemas.investment import (
    BackfillResponse,
    InvestmentResponse,
    InvestmentStatusUpdate,
    InvestmentTransitionResponse,
)
from yieldbook.schemas.user import UserResponse, UserStatusUpdate
from yieldbook.schemas.withdrawal import (
    WithdrawalResponse,
    WithdrawalStatusUpdate,
    WithdrawalTransitionResponse,
)
from yieldbook.services.investment_service import InvestmentService
from yieldbook.services.notification_service import NotificationService
from yieldbook.services.status_service import StatusService
from yieldbook.services.user_service import UserService
from yieldbook.services.withdrawal_service import WithdrawalService

router = APIRouter()

_TRANSITION_RESPONSES = {
    404: ERROR_RESPONSES[404],
    409: ERROR_RESPONSES[409],
    422: ERROR_RESPONSES[422],
}


# ── Dependency injection ──


def _get_status_service(
    user_repo: UserRepository = Depends(get_user_repo),
    invest_repo: InvestmentRepository = Depends(get_investment_repo),
    withdraw_repo: WithdrawalRepository = Depends(get_withdrawal_repo),
    notifier: NotificationService = Depends(get_notification_service),
) -> StatusService:
    return StatusService(user_repo, invest_repo, withdraw_repo, notifier)


def _get_admin_investment_service(
    invest_repo: InvestmentRepository = Depends(get_investment_repo),
    user_repo: UserRepository = Depends(get_user_repo),
    payments: PaystackClient = Depends(get_paystack_client),
    notifier: NotificationService = Depends(get_notification_service),
) -> InvestmentService:
    return InvestmentService(invest_repo, user_repo, payments, notifier)


def _get_admin_withdrawal_service(
    withdraw_repo: WithdrawalRepository = Depends(get_withdrawal_repo),
    invest_repo: InvestmentRepository = Depends(get_investment_repo),
    user_repo: UserRepository = Depends(get_user_repo),
    notifier: NotificationService = Depends(get_notification_service),
) -> WithdrawalService:
    return WithdrawalService(withdraw_repo, invest_repo, user_repo, notifier)


def _get_admin_user_service(
    user_repo: UserRepository = Depends(get_user_repo),
    notifier: NotificationService = Depends(get_notification_service),
) -> UserService:
    return UserService(user_repo, notifier)


# ── Investments ──


@router.get(
    "/investments/pending",
    response_model=List[InvestmentResponse],
    summary="List pending investments",
)
async def list_pending_investments(
    skip: int = Query(0, ge=0, description="Number of records to skip"),
    limit: int = Query(100, ge=1, le=1000, description="Max records to return"),
    service: InvestmentService = Depends(_get_admin_investment_service),
) -> List[InvestmentResponse]:
    pending = await service.list_pending(skip=skip, limit=limit)
    return [InvestmentResponse.from_model(inv) for inv in pending]


@router.patch(
    "/users/{user_id}/investments/{investment_id}/status",
    response_model=InvestmentTransitionResponse,
    summary="Approve or reject an investment",
    description=(
        "Only **Pending** investments can change.  Repeating a decision that "
        "already took effect returns ``changed: false`` and sends no email; a "
        "different decision on a decided investment returns 409."
    ),
    responses=_TRANSITION_RESPONSES,
)
async def update_investment_status(
    user_id: UUID,
    investment_id: UUID,
    body: InvestmentStatusUpdate,
    service: StatusService = Depends(_get_status_service),
) -> InvestmentTransitionResponse:
    result = await service.transition_investment(user_id, investment_id, body.status)
    return InvestmentTransitionResponse(
        investment=InvestmentResponse.from_model(result.entity),
        changed=result.changed,
        notified=result.notified,
    )


@router.post(
    "/investments/backfill-legacy-status",
    response_model=BackfillResponse,
    summary="Backfill legacy investment statuses",
    description="Writes ``Approved`` into every investment recorded without a status.",
)
async def backfill_legacy_statuses(
    service: InvestmentService = Depends(_get_admin_investment_service),
) -> BackfillResponse:
    return BackfillResponse(updated=await service.backfill_legacy_statuses())


# ── Withdrawals ──


@router.get(
    "/withdrawals/pending",
    response_model=List[WithdrawalResponse],
    summary="List pending withdrawals",
)
async def list_pending_withdrawals(
    skip: int = Query(0, ge=0, description="Number of records to skip"),
    limit: int = Query(100, ge=1, le=1000, description="Max records to return"),
    service: WithdrawalService = Depends(_get_admin_withdrawal_service),
) -> List[WithdrawalResponse]:
    return await service.list_pending(skip=skip, limit=limit)


@router.patch(
    "/users/{user_id}/withdrawals/{withdrawal_id}/status",
    response_model=WithdrawalTransitionResponse,
    summary="Complete or reject a withdrawal",
    responses=_TRANSITION_RESPONSES,
)
async def update_withdrawal_status(
    user_id: UUID,
    withdrawal_id: UUID,
    body: WithdrawalStatusUpdate,
    service: StatusService = Depends(_get_status_service),
) -> WithdrawalTransitionResponse:
    result = await service.transition_withdrawal(user_id, withdrawal_id, body.status)
    return WithdrawalTransitionResponse(
        withdrawal=WithdrawalResponse.model_validate(result.entity),
        changed=result.changed,
        notified=result.notified,
    )


# ── Accounts ──


@router.patch(
    "/users/{user_id}/status",
    response_model=UserResponse,
    summary="Activate or deactivate a user",
    responses={404: ERROR_RESPONSES[404]},
)
async def update_user_status(
    user_id: UUID,
    body: UserStatusUpdate,
    service: UserService = Depends(_get_admin_user_service),
) -> UserResponse:
    return await service.set_active(user_id, body.is_active)
