"""
Report API endpoints.

- POST  /reports/export  — Download a user's history as ``.xlsx``
- POST  /reports/email   — Email a user's full history to the administrator
"""

from fastapi import APIRouter, Depends
from fastapi.responses import Response

from yieldbook.api.dependencies import (
    get_investment_repo,
    get_notification_service,
    get_user_repo,
    get_withdrawal_repo,
)
from yieldbook.core.config import settings
from yieldbook.repositories.investment_repo import InvestmentRepository
from yieldbook.repositories.user_repo import UserRepository
from yieldbook.repositories.withdrawal_repo import WithdrawalRepository
from yieldbook.schemas.common import ERROR_RESPONSES
from yieldbook.schemas.report import ReportEmailRequest, ReportEmailResponse, ReportRequest
from yieldbook.services.notification_service import NotificationService
from yieldbook.services.report_service import XLSX_MEDIA_TYPE, ReportService

router = APIRouter()


def _get_report_service(
    user_repo: UserRepository = Depends(get_user_repo),
    invest_repo: InvestmentRepository = Depends(get_investment_repo),
    withdraw_repo: WithdrawalRepository = Depends(get_withdrawal_repo),
    notifier: NotificationService = Depends(get_notification_service),
) -> ReportService:
    return ReportService(user_repo, invest_repo, withdraw_repo, notifier)


@router.post(
    "/export",
    response_class=Response,
    summary="Export a user report",
    description="Dates are inclusive; omit either to leave that side open, or both for the full history.",
    responses={
        200: {"content": {XLSX_MEDIA_TYPE: {}}, "description": "Spreadsheet attachment"},
        404: ERROR_RESPONSES[404],
        422: ERROR_RESPONSES[422],
    },
)
async def export_report(
    body: ReportRequest,
    service: ReportService = Depends(_get_report_service),
) -> Response:
    report = await service.export_user_report(str(body.email), body.start_date, body.end_date)
    return Response(
        content=report.content,
        media_type=report.media_type,
        headers={"Content-Disposition": f'attachment; filename="{report.filename}"'},
    )


@router.post(
    "/email",
    response_model=ReportEmailResponse,
    summary="Email a full user report",
    responses={404: ERROR_RESPONSES[404], 502: ERROR_RESPONSES[502]},
)
async def email_report(
    body: ReportEmailRequest,
    service: ReportService = Depends(_get_report_service),
) -> ReportEmailResponse:
    report = await service.send_full_report(str(body.email))
    return ReportEmailResponse(filename=report.filename, sent_to=settings.ADMIN_EMAIL)
