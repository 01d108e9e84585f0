"""
Notification service — renders and sends every transactional email.

Delivery is best-effort for all event notifications: a failed send is logged
with the entity id and operation and then dropped, so an email outage never
rolls back or fails a committed business operation.  The one exception is
:meth:`NotificationService.send_full_report`, which an administrator triggers
explicitly and therefore propagates :class:`ExternalServiceError`.
"""

import logging
from decimal import Decimal
from html import escape
from typing import Optional, Sequence

from yieldbook.clients.resend import EmailAttachment, ResendEmailClient
from yieldbook.core.config import settings
from yieldbook.core.exceptions import ExternalServiceError
from yieldbook.domain.accrual import compute_monthly_payout
from yieldbook.domain.plans import plan_name_from_label
from yieldbook.models.investment import Investment, InvestmentStatus
from yieldbook.models.user import User
from yieldbook.models.withdrawal import Withdrawal, WithdrawalStatus
from yieldbook.utils.dates import format_display_date

logger = logging.getLogger(__name__)

_POSITIVE_COLOUR = "#2ECC71"
_NEGATIVE_COLOUR = "#E74C3C"


def format_naira(amount: Decimal) -> str:
    return f"₦{Decimal(amount):,.2f}"


# ── HTML fragments ──


def _layout(title: str, body: str) -> str:
    return (
        '<div style="font-family: sans-serif; line-height: 1.6; color: #333;">'
        '<div style="max-width: 600px; margin: auto; padding: 20px; '
        'border: 1px solid #ddd; border-radius: 8px;">'
        f'<h2 style="color: #0A192F;">{escape(title)}</h2>'
        f"{body}"
        '<hr style="border: 0; border-top: 1px solid #eee; margin: 20px 0;">'
        f'<p style="font-size: 12px; color: #999;">This is an automated notification '
        f"from {escape(settings.PROJECT_NAME)}.</p>"
        "</div></div>"
    )


def _details(heading: str, items: Sequence[tuple]) -> str:
    rows = "".join(
        f"<li><strong>{escape(label)}:</strong> {escape(str(value))}</li>" for label, value in items
    )
    return f"<h3>{escape(heading)}</h3><ul>{rows}</ul>"


def _user_details(user: User) -> str:
    return _details(
        "User Details",
        [
            ("Full Name", user.full_name),
            ("Email Address", user.email),
            ("WhatsApp Number", user.whatsapp_number),
        ],
    ) + _details(
        "User Bank Details",
        [
            ("Bank Name", user.bank_name),
            ("Account Name", user.account_name),
            ("Account Number", user.account_number),
        ],
    )


def portfolio_table(investments: Sequence[Investment]) -> str:
    if not investments:
        return "<p>No investment data available.</p>"

    rows = []
    for inv in investments:
        rows.append(
            "<tr>"
            f"<td>{escape(plan_name_from_label(inv.investment_type))}<br>"
            f"<small>{escape(inv.investment_type)} · {format_display_date(inv.created_at)}</small></td>"
            f"<td>{inv.effective_status.value}</td>"
            f'<td style="text-align: right;">{format_naira(inv.amount)}</td>'
            f'<td style="text-align: right;">{format_naira(compute_monthly_payout(inv))}</td>'
            "</tr>"
        )
    total = sum((Decimal(inv.amount) for inv in investments), Decimal(0))
    total_payout = sum((compute_monthly_payout(inv) for inv in investments), Decimal(0))
    return (
        '<h3 style="color: #0A192F;">Portfolio Summary</h3>'
        '<table style="width: 100%; border-collapse: collapse; font-size: 14px;">'
        "<thead><tr><th>Investment</th><th>Status</th><th>Value</th><th>Monthly Payout</th></tr></thead>"
        f"<tbody>{''.join(rows)}</tbody>"
        f'<tfoot><tr><td colspan="2">Total</td>'
        f'<td style="text-align: right;">{format_naira(total)}</td>'
        f'<td style="text-align: right;">{format_naira(total_payout)}</td></tr></tfoot>'
        "</table>"
    )


def withdrawals_table(withdrawals: Sequence[Withdrawal]) -> str:
    if not withdrawals:
        return "<p>No withdrawal data available.</p>"

    rows = "".join(
        "<tr>"
        f"<td>{format_display_date(w.created_at)}</td>"
        f"<td>{escape(w.withdrawal_id)}</td>"
        f'<td style="text-align: right;">{format_naira(w.amount)}</td>'
        f'<td style="text-align: right;">{format_naira(w.management_fee)}</td>'
        f'<td style="text-align: right;">{format_naira(w.payout_amount)}</td>'
        f"<td>{w.status.value}</td>"
        "</tr>"
        for w in withdrawals
    )
    return (
        '<h3 style="color: #0A192F;">Withdrawal History</h3>'
        '<table style="width: 100%; border-collapse: collapse; font-size: 14px;">'
        "<thead><tr><th>Date</th><th>ID</th><th>Amount</th><th>Fee</th>"
        "<th>Payout</th><th>Status</th></tr></thead>"
        f"<tbody>{rows}</tbody></table>"
    )


def _status_banner(subject: str, status: str, positive: bool) -> str:
    colour = _POSITIVE_COLOUR if positive else _NEGATIVE_COLOUR
    return (
        f'<div style="background-color: #f9f9f9; padding: 15px; border-left: 5px solid {colour};">'
        f"<p>{subject} was marked as "
        f'<strong style="color: {colour};">{escape(status)}</strong>.</p></div>'
    )


class NotificationService:
    """Composes emails for each business event and hands them to Resend."""

    def __init__(self, email_client: ResendEmailClient, admin_email: Optional[str] = None):
        self._client = email_client
        self._admin_email = admin_email or settings.ADMIN_EMAIL

    # ── Delivery ──

    async def _dispatch(
        self,
        operation: str,
        entity_id: str,
        to: str,
        subject: str,
        html: str,
        attachments: Sequence[EmailAttachment] = (),
    ) -> bool:
        try:
            await self._client.send(to, subject, html, attachments)
        except ExternalServiceError as exc:
            logger.error(
                "Email delivery failed: %s",
                exc.message,
                extra={"operation": operation, "entity_id": entity_id},
            )
            return False
        logger.info(
            "Email sent: %s", subject, extra={"operation": operation, "entity_id": entity_id}
        )
        return True

    async def _admin_and_user(
        self,
        operation: str,
        entity_id: str,
        user: User,
        admin_subject: str,
        admin_html: str,
        user_subject: str,
        user_html: str,
    ) -> bool:
        admin_sent = await self._dispatch(
            operation, entity_id, self._admin_email, admin_subject, admin_html
        )
        user_sent = await self._dispatch(operation, entity_id, user.email, user_subject, user_html)
        return admin_sent and user_sent

    # ── Status changes ──

    async def notify_investment_status(
        self, user: User, investment: Investment, status: InvestmentStatus
    ) -> bool:
        """Admin record plus user email for an approved / rejected investment."""
        positive = status == InvestmentStatus.APPROVED
        admin_html = _layout(
            "Admin Action: Investment Status Updated",
            _status_banner(
                f"The investment for <strong>{escape(user.full_name)}</strong>",
                status.value,
                positive,
            )
            + _details(
                "Investment Details",
                [
                    ("Inv. ID", f"#{investment.investment_id}"),
                    ("Amount", format_naira(investment.amount)),
                    ("Type", investment.investment_type),
                    ("Investment Date", format_display_date(investment.created_at)),
                ],
            )
            + _details("User Details", [("Full Name", user.full_name), ("Email Address", user.email)]),
        )
        user_html = _layout(
            "Investment Status Updated",
            f"<p>Hello {escape(user.full_name)},</p>"
            + _status_banner(f"Your investment (#{escape(investment.investment_id)})", status.value, positive)
            + "<p>You can view the details by logging into your dashboard.</p>",
        )
        return await self._admin_and_user(
            "investment_status",
            str(investment.id),
            user,
            f"ACTION: Investment #{investment.investment_id} for {user.full_name} was {status.value}",
            admin_html,
            "Investment Status Update",
            user_html,
        )

    async def notify_withdrawal_status(
        self, user: User, withdrawal: Withdrawal, status: WithdrawalStatus
    ) -> bool:
        """Admin record plus user email for a completed / rejected withdrawal."""
        positive = status == WithdrawalStatus.COMPLETED
        items = [
            ("Withdrawal ID", f"#{withdrawal.withdrawal_id}"),
            ("Requested Amount", format_naira(withdrawal.amount)),
            ("Management Fee", format_naira(withdrawal.management_fee)),
            ("Payout Amount", format_naira(withdrawal.payout_amount)),
            ("Request Date", format_display_date(withdrawal.created_at)),
        ]
        admin_html = _layout(
            "Admin Action: Withdrawal Status Updated",
            _status_banner(
                f"The withdrawal for <strong>{escape(user.full_name)}</strong>",
                status.value,
                positive,
            )
            + _details("Withdrawal Details", items)
            + _user_details(user),
        )
        user_html = _layout(
            "Withdrawal Status Updated",
            f"<p>Hello {escape(user.full_name)},</p>"
            + _status_banner(f"Your withdrawal request (#{escape(withdrawal.withdrawal_id)})", status.value, positive)
            + _details("Withdrawal Details", items),
        )
        return await self._admin_and_user(
            "withdrawal_status",
            str(withdrawal.id),
            user,
            f"ACTION: Withdrawal #{withdrawal.withdrawal_id} for {user.full_name} was {status.value}",
            admin_html,
            "Withdrawal Status Update",
            user_html,
        )

    # ── New requests ──

    async def notify_new_investment(
        self,
        user: User,
        investment: Investment,
        portfolio: Sequence[Investment],
        attachment: Optional[EmailAttachment] = None,
    ) -> bool:
        html = _layout(
            "New Investment Notification",
            "<p>A new investment has been made. The user's report is attached.</p>"
            + _details(
                "New Investment Details",
                [
                    ("Inv. ID", investment.investment_id),
                    ("Investment Type", investment.investment_type),
                    ("Amount", format_naira(investment.amount)),
                    ("Investment Date", format_display_date(investment.created_at)),
                    ("Status", investment.effective_status.value),
                ],
            )
            + _user_details(user)
            + portfolio_table(portfolio),
        )
        return await self._dispatch(
            "new_investment",
            str(investment.id),
            self._admin_email,
            f"New Investment from {user.full_name}",
            html,
            [attachment] if attachment else (),
        )

    async def notify_withdrawal_request(
        self, user: User, withdrawal: Withdrawal, portfolio: Sequence[Investment]
    ) -> bool:
        html = _layout(
            "New Withdrawal Request",
            "<p>A user has requested a withdrawal. Please process it from the admin dashboard.</p>"
            + _details(
                "Withdrawal Details",
                [
                    ("Withdrawal ID", f"#{withdrawal.withdrawal_id}"),
                    ("Requested Amount", format_naira(withdrawal.amount)),
                    ("Management Fee (2%)", format_naira(withdrawal.management_fee)),
                    ("Amount to Pay", format_naira(withdrawal.payout_amount)),
                    ("Request Date", format_display_date(withdrawal.created_at)),
                ],
            )
            + _user_details(user)
            + portfolio_table(portfolio),
        )
        return await self._dispatch(
            "withdrawal_request",
            str(withdrawal.id),
            self._admin_email,
            f"Withdrawal Request (#{withdrawal.withdrawal_id}) from {user.full_name}",
            html,
        )

    # ── Accounts ──

    async def notify_new_user(self, user: User) -> bool:
        """Admin registration notice plus the welcome email."""
        first_name = user.full_name.split(" ")[0] or user.full_name
        admin_html = _layout(
            "New User Registration",
            "<p>A new user has created an account on the platform.</p>" + _user_details(user),
        )
        welcome_html = _layout(
            f"Welcome to {settings.PROJECT_NAME}!",
            f"<p>Hi {escape(first_name)},</p>"
            "<p>We are thrilled to have you on board. Your investment dashboard is now ready.</p>"
            "<p>Happy investing!</p>",
        )
        return await self._admin_and_user(
            "new_user",
            str(user.id),
            user,
            f"New User Registration: {user.full_name}",
            admin_html,
            f"Welcome to {settings.PROJECT_NAME}!",
            welcome_html,
        )

    async def notify_account_status(self, user: User, active: bool) -> bool:
        word = "Activated" if active else "Deactivated"
        admin_html = _layout(
            f"Admin Action: User Account {word}",
            _status_banner(f"The account of <strong>{escape(user.full_name)}</strong>", word, active)
            + _details("User Details", [("Full Name", user.full_name), ("Email Address", user.email)]),
        )
        user_html = _layout(
            f"Account {word}",
            f"<p>Hello {escape(user.full_name)},</p>"
            + _status_banner("Your account", word, active)
            + (
                "<p>You can now log in to your dashboard.</p>"
                if active
                else "<p>Please contact support if you believe this is a mistake.</p>"
            ),
        )
        return await self._admin_and_user(
            "account_status",
            str(user.id),
            user,
            f"ACTION: User Account {word}: {user.full_name}",
            admin_html,
            f"Your Account has been {word}",
            user_html,
        )

    # ── Reports ──

    async def send_full_report(
        self,
        user: User,
        investments: Sequence[Investment],
        withdrawals: Sequence[Withdrawal],
        attachment: EmailAttachment,
    ) -> None:
        """
        Email the full history of ``user`` to the administrator.

        Raises:
            ExternalServiceError: Delivery failed.
        """
        html = _layout(
            "Full Historical Report",
            "<p>The complete investment and withdrawal history is below and attached.</p>"
            + _user_details(user)
            + portfolio_table(investments)
            + withdrawals_table(withdrawals),
        )
        await self._client.send(
            self._admin_email,
            f"Full Historical Report for {user.full_name}",
            html,
            [attachment],
        )
        logger.info(
            "Full report emailed for %s",
            user.email,
            extra={"operation": "full_report", "user_id": str(user.id)},
        )
