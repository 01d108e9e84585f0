"""Preconditions shared by investment and withdrawal submission."""

import logging
from datetime import date
from typing import Optional

from yieldbook.core.config import settings
from yieldbook.core.exceptions import AuthenticationFailure, BusinessRuleViolation
from yieldbook.domain.holidays import HolidayCalendar
from yieldbook.domain.window import is_window_exempt, resolve_window
from yieldbook.models.user import User

logger = logging.getLogger(__name__)


def ensure_account_active(user: User) -> None:
    if not user.is_active:
        raise AuthenticationFailure("Your account has been deactivated. Please contact support.")


def can_submit_today(user: User, today: date, calendar: Optional[HolidayCalendar] = None) -> bool:
    if is_window_exempt(user.email, user.privileged_withdrawal_access, settings.privileged_emails):
        return True
    return resolve_window(today.year, today.month, calendar).contains(today)


def ensure_window_open(
    user: User, today: date, action: str, calendar: Optional[HolidayCalendar] = None
) -> None:
    """Raise :class:`BusinessRuleViolation` outside the monthly window unless exempt."""
    if can_submit_today(user, today, calendar):
        return
    window = resolve_window(today.year, today.month, calendar)
    logger.info(
        "%s rejected outside window %s..%s",
        action,
        window.start,
        window.end,
        extra={"user_id": str(user.id), "operation": action},
    )
    raise BusinessRuleViolation(
        f"{action.capitalize()}s can only be submitted from "
        f"{window.start.strftime('%d/%m/%Y')} to {window.end.strftime('%d/%m/%Y')} this month."
    )
