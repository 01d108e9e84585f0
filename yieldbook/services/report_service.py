"""
Report service — spreadsheet export of a user's full history.

The workbook has three sheets:

- **User Details** — contact, bank and report-range details.
- **Investments** — one row per investment, a blank spacer and a TOTAL row.
- **Withdrawals** — one row per withdrawal request.

Row dates are rendered ``dd/mm/yyyy`` in the business timezone and the
requested range is echoed as ISO dates. Amounts stay numeric so the sheet
can be summed by whoever opens it.
"""

import io
import logging
import re
from dataclasses import dataclass
from datetime import date
from decimal import Decimal
from typing import Optional, Sequence

from openpyxl import Workbook
from openpyxl.styles import Font, PatternFill
from openpyxl.utils import get_column_letter

from yieldbook.clients.resend import EmailAttachment
from yieldbook.core.exceptions import NotFoundException, ValidationFailure
from yieldbook.domain.accrual import compute_monthly_payout
from yieldbook.domain.plans import plan_name_from_label
from yieldbook.models.investment import Investment
from yieldbook.models.user import User
from yieldbook.models.withdrawal import Withdrawal
from yieldbook.repositories.investment_repo import InvestmentRepository
from yieldbook.repositories.user_repo import UserRepository
from yieldbook.repositories.withdrawal_repo import WithdrawalRepository
from yieldbook.services.notification_service import NotificationService
from yieldbook.utils.dates import BUSINESS_TZ, day_bounds_utc, format_display_date, utcnow

logger = logging.getLogger(__name__)

XLSX_MEDIA_TYPE = "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"

INVESTMENT_HEADERS = ["Inv. ID", "Type", "Plan Details", "Date", "Status", "Amount", "Monthly Payout"]
WITHDRAWAL_HEADERS = ["Date", "ID", "Amount", "Fee", "Payout", "Status"]

_USER_WIDTHS = (20, 40)
_INVESTMENT_WIDTHS = (30, 15, 30, 12, 12, 15, 15)
_WITHDRAWAL_WIDTHS = (12, 10, 15, 15, 15, 12)

_HEADER_FILL = PatternFill(start_color="0A192F", end_color="0A192F", fill_type="solid")
_HEADER_FONT = Font(bold=True, color="FFFFFF")
_SECTION_FONT = Font(bold=True, size=12)


@dataclass(frozen=True)
class ReportFile:
    filename: str
    content: bytes
    media_type: str = XLSX_MEDIA_TYPE

    def as_attachment(self) -> EmailAttachment:
        return EmailAttachment(filename=self.filename, content=self.content)


def _set_widths(ws, widths: Sequence[int]) -> None:
    for index, width in enumerate(widths, start=1):
        ws.column_dimensions[get_column_letter(index)].width = width


def _style_header(row) -> None:
    for cell in row:
        cell.fill = _HEADER_FILL
        cell.font = _HEADER_FONT


def date_range_text(start: Optional[date], end: Optional[date]) -> str:
    """``YYYY-MM-DD to YYYY-MM-DD`` when both bounds are set, else ``All Time``."""
    if start and end:
        return f"{start.isoformat()} to {end.isoformat()}"
    return "All Time"


def report_filename(
    user: User, start: Optional[date], end: Optional[date], today: Optional[date] = None
) -> str:
    """``Full_Report_<Name>_<start>_to_<end>.xlsx`` or ``..._<today>.xlsx``."""
    name = re.sub(r"\s+", "_", user.full_name.strip())
    if start and end:
        suffix = f"{start.isoformat()}_to_{end.isoformat()}"
    else:
        suffix = (today or utcnow().astimezone(BUSINESS_TZ).date()).isoformat()
    return f"Full_Report_{name}_{suffix}.xlsx"


def build_report_workbook(
    user: User,
    investments: Sequence[Investment],
    withdrawals: Sequence[Withdrawal],
    start: Optional[date] = None,
    end: Optional[date] = None,
) -> bytes:
    """Render the three-sheet workbook and return the ``.xlsx`` bytes."""
    wb = Workbook()

    # User Details
    ws = wb.active
    ws.title = "User Details"
    for row in (
        ["User Details"],
        ["Full Name", user.full_name],
        ["Email Address", user.email],
        ["WhatsApp Number", user.whatsapp_number],
        [],
        ["User Bank Details"],
        ["Bank Name", user.bank_name],
        ["Account Name", user.account_name],
        ["Account Number", user.account_number],
        [],
        ["Report Details"],
        ["Date Range", date_range_text(start, end)],
    ):
        ws.append(row)
    for row_number in (1, 6, 11):
        ws.cell(row=row_number, column=1).font = _SECTION_FONT
    _set_widths(ws, _USER_WIDTHS)

    # Investments
    ws = wb.create_sheet("Investments")
    ws.append(INVESTMENT_HEADERS)
    _style_header(ws[1])
    total_amount = Decimal(0)
    total_payout = Decimal(0)
    for inv in investments:
        payout = compute_monthly_payout(inv)
        total_amount += Decimal(inv.amount)
        total_payout += payout
        ws.append(
            [
                inv.investment_id,
                plan_name_from_label(inv.investment_type),
                inv.investment_type,
                format_display_date(inv.created_at),
                inv.effective_status.value,
                Decimal(inv.amount),
                payout,
            ]
        )
    ws.append([])
    ws.append(["TOTAL", "", "", "", "", total_amount, total_payout])
    for cell in ws[ws.max_row]:
        cell.font = Font(bold=True)
    _set_widths(ws, _INVESTMENT_WIDTHS)

    # Withdrawals
    ws = wb.create_sheet("Withdrawals")
    ws.append(WITHDRAWAL_HEADERS)
    _style_header(ws[1])
    for w in withdrawals:
        ws.append(
            [
                format_display_date(w.created_at),
                w.withdrawal_id,
                Decimal(w.amount),
                Decimal(w.management_fee),
                Decimal(w.payout_amount),
                w.status.value,
            ]
        )
    _set_widths(ws, _WITHDRAWAL_WIDTHS)

    buffer = io.BytesIO()
    wb.save(buffer)
    return buffer.getvalue()


class ReportService:
    """Builds per-user reports and emails the full history on request."""

    def __init__(
        self,
        user_repo: UserRepository,
        invest_repo: InvestmentRepository,
        withdraw_repo: WithdrawalRepository,
        notifier: NotificationService,
    ):
        self._user_repo = user_repo
        self._invest_repo = invest_repo
        self._withdraw_repo = withdraw_repo
        self._notifier = notifier

    async def _load(self, email: str, start: Optional[date], end: Optional[date]):
        if start and end and start > end:
            raise ValidationFailure("start_date must be on or before end_date.")

        user = await self._user_repo.get_by_email(email)
        if not user:
            raise NotFoundException("User", email)

        lower, upper = day_bounds_utc(start, end)
        investments = await self._invest_repo.list_for_user(user.id, lower, upper)
        withdrawals = await self._withdraw_repo.list_for_user(user.id, lower, upper)
        return user, investments, withdrawals

    async def export_user_report(
        self, email: str, start: Optional[date] = None, end: Optional[date] = None
    ) -> ReportFile:
        """
        Workbook for the user registered under ``email``.

        ``start``/``end`` are inclusive business-timezone dates; either may be
        omitted to leave that side of the range open.

        Raises:
            ValidationFailure: ``start`` after ``end``.
            NotFoundException: No user with that email.
        """
        user, investments, withdrawals = await self._load(email, start, end)
        content = build_report_workbook(user, investments, withdrawals, start, end)
        filename = report_filename(user, start, end)
        logger.info(
            "Built report %s (%d investments, %d withdrawals)",
            filename,
            len(investments),
            len(withdrawals),
            extra={"operation": "export_report", "user_id": str(user.id)},
        )
        return ReportFile(filename=filename, content=content)

    async def send_full_report(self, email: str) -> ReportFile:
        """Email the all-time report to the administrator and return it."""
        user, investments, withdrawals = await self._load(email, None, None)
        report = ReportFile(
            filename=report_filename(user, None, None),
            content=build_report_workbook(user, investments, withdrawals),
        )
        await self._notifier.send_full_report(
            user, investments, withdrawals, report.as_attachment()
        )
        return report
