"""
Investment API endpoints.

- GET   /plans                              — Available plans
- GET   /users/{user_id}/investments        — A user's investments with accrued profit
- POST  /users/{user_id}/investments        — Submit an investment and start checkout
"""

from typing import List
from uuid import UUID

from fastapi import APIRouter, Depends

from yieldbook.api.dependencies import (
    get_investment_repo,
    get_notification_service,
    get_paystack_client,
    get_user_repo,
)
from yieldbook.clients.paystack import PaystackClient
from yieldbook.domain.plans import PLANS
from yieldbook.repositories.investment_repo import InvestmentRepository
from yieldbook.repositories.user_repo import UserRepository
from yieldbook.schemas.common import ERROR_RESPONSES
from yieldbook.schemas.investment import (
    InvestmentCheckoutResponse,
    InvestmentResponse,
    InvestmentSubmit,
    PlanResponse,
)
from yieldbook.services.investment_service import InvestmentService
from yieldbook.services.notification_service import NotificationService

router = APIRouter()


# ── Dependency injection ──


def _get_investment_service(
    invest_repo: InvestmentRepository = Depends(get_investment_repo),
    user_repo: UserRepository = Depends(get_user_repo),
    payments: PaystackClient = Depends(get_paystack_client),
    notifier: NotificationService = Depends(get_notification_service),
) -> InvestmentService:
    return InvestmentService(invest_repo, user_repo, payments, notifier)


# ── Endpoints ──


@router.get("/plans", response_model=List[PlanResponse], summary="List investment plans")
async def list_plans() -> List[PlanResponse]:
    return [PlanResponse.from_plan(plan) for plan in PLANS.values()]


@router.get(
    "/users/{user_id}/investments",
    response_model=List[InvestmentResponse],
    summary="List a user's investments",
    description="Newest first.  ``accrued_profit`` is computed at request time.",
    responses={404: ERROR_RESPONSES[404]},
)
async def list_investments(
    user_id: UUID,
    service: InvestmentService = Depends(_get_investment_service),
) -> List[InvestmentResponse]:
    rows = await service.list_investments(user_id)
    return [InvestmentResponse.from_model(row.investment, row.accrued_profit) for row in rows]


@router.post(
    "/users/{user_id}/investments",
    response_model=InvestmentCheckoutResponse,
    status_code=201,
    summary="Submit an investment",
    description=(
        "Validates the plan bounds and submission window, initialises a "
        "payment checkout and records a **Pending** investment whose display "
        "id is the payment reference."
    ),
    responses={
        401: ERROR_RESPONSES[401],
        404: ERROR_RESPONSES[404],
        422: ERROR_RESPONSES[422],
        502: ERROR_RESPONSES[502],
    },
)
async def submit_investment(
    user_id: UUID,
    body: InvestmentSubmit,
    service: InvestmentService = Depends(_get_investment_service),
) -> InvestmentCheckoutResponse:
    checkout = await service.submit_investment(user_id, body)
    return InvestmentCheckoutResponse(
        investment=InvestmentResponse.from_model(checkout.investment),
        authorization_url=checkout.authorization_url,
        access_code=checkout.access_code,
    )
