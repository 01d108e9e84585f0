"""
User API endpoints.

- POST  /users                          — Register a user
- GET   /users/{user_id}                — Fetch a profile
- PUT   /users/{user_id}/pin            — Set or replace the withdrawal PIN
- POST  /users/{user_id}/pin/verify     — Check a withdrawal PIN
- GET   /users/{user_id}/portfolio      — Dashboard summary

Authentication happens upstream; the caller's user id arrives in the path.
"""

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
from yieldbook.schemas.common import ERROR_RESPONSES, ValidationErrorResponse
from yieldbook.schemas.portfolio import PortfolioSummaryResponse
from yieldbook.schemas.user import PinRequest, PinVerificationResponse, UserCreate, UserResponse
from yieldbook.services.notification_service import NotificationService
from yieldbook.services.portfolio_service import PortfolioService
from yieldbook.services.user_service import UserService

router = APIRouter()


# ── Dependency injection ──


def _get_user_service(
    user_repo: UserRepository = Depends(get_user_repo),
    notifier: NotificationService = Depends(get_notification_service),
) -> UserService:
    return UserService(user_repo, notifier)


def _get_portfolio_service(
    user_repo: UserRepository = Depends(get_user_repo),
    invest_repo: InvestmentRepository = Depends(get_investment_repo),
    withdraw_repo: WithdrawalRepository = Depends(get_withdrawal_repo),
) -> PortfolioService:
    return PortfolioService(user_repo, invest_repo, withdraw_repo)


# ── Endpoints ──


@router.post(
    "/",
    response_model=UserResponse,
    status_code=201,
    summary="Register a user",
    description=(
        "Creates a profile and emails the administrator and the new user.  "
        "Email addresses are unique (case-insensitive); duplicates return 409."
    ),
    responses={
        409: ERROR_RESPONSES[409],
        422: {"model": ValidationErrorResponse, "description": "Validation error"},
    },
)
async def register_user(
    user: UserCreate,
    service: UserService = Depends(_get_user_service),
) -> UserResponse:
    return await service.register_user(user)


@router.get(
    "/{user_id}",
    response_model=UserResponse,
    summary="Get a user profile",
    responses={404: ERROR_RESPONSES[404]},
)
async def get_user(
    user_id: UUID,
    service: UserService = Depends(_get_user_service),
) -> UserResponse:
    return await service.get_user(user_id)


@router.put(
    "/{user_id}/pin",
    response_model=UserResponse,
    summary="Set the withdrawal PIN",
    description="Stores a bcrypt hash of the 4-digit PIN, replacing any previous PIN.",
    responses={404: ERROR_RESPONSES[404], 422: ERROR_RESPONSES[422]},
)
async def set_pin(
    user_id: UUID,
    body: PinRequest,
    service: UserService = Depends(_get_user_service),
) -> UserResponse:
    return await service.set_withdrawal_pin(user_id, body.pin)


@router.post(
    "/{user_id}/pin/verify",
    response_model=PinVerificationResponse,
    summary="Verify the withdrawal PIN",
    responses={401: ERROR_RESPONSES[401], 404: ERROR_RESPONSES[404], 422: ERROR_RESPONSES[422]},
)
async def verify_pin(
    user_id: UUID,
    body: PinRequest,
    service: UserService = Depends(_get_user_service),
) -> PinVerificationResponse:
    return PinVerificationResponse(valid=await service.verify_withdrawal_pin(user_id, body.pin))


@router.get(
    "/{user_id}/portfolio",
    response_model=PortfolioSummaryResponse,
    summary="Portfolio summary",
    description=(
        "Total invested, live accrued profit, monthly payout, this month's "
        "withdrawable balance and the submission window."
    ),
    responses={404: ERROR_RESPONSES[404]},
)
async def get_portfolio(
    user_id: UUID,
    service: PortfolioService = Depends(_get_portfolio_service),
) -> PortfolioSummaryResponse:
    return PortfolioSummaryResponse.model_validate(await service.get_summary(user_id))
