"""
Status transition orchestrator — administrator decisions on pending requests.

Investment: ``Pending → Approved | Rejected``.
Withdrawal: ``Pending → Completed | Rejected``.
Every target state is terminal.

Idempotency:
    Repeating a decision that already took effect is a no-op and sends
    nothing.  A different decision on a terminal record is a 409.  The write
    itself is a conditional ``UPDATE ... WHERE status = 'Pending'``, so when
    two administrators act on the same record at once exactly one update
    matches and exactly one set of emails goes out.

Notifications are best-effort: the status change is committed before any
email is attempted and a failed send never undoes it.
"""

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Any, Awaitable, Callable, Dict, FrozenSet
from uuid import UUID

from yieldbook.core.exceptions import ConflictException, NotFoundException, ValidationFailure
from yieldbook.models.investment import InvestmentStatus
from yieldbook.models.withdrawal import WithdrawalStatus
from yieldbook.repositories.base import BaseRepository
from yieldbook.repositories.investment_repo import InvestmentRepository
from yieldbook.repositories.user_repo import UserRepository
from yieldbook.repositories.withdrawal_repo import WithdrawalRepository
from yieldbook.services.notification_service import NotificationService

logger = logging.getLogger(__name__)

_INVESTMENT_TRANSITIONS: Dict[Enum, FrozenSet[Enum]] = {
    InvestmentStatus.PENDING: frozenset({InvestmentStatus.APPROVED, InvestmentStatus.REJECTED}),
}
_WITHDRAWAL_TRANSITIONS: Dict[Enum, FrozenSet[Enum]] = {
    WithdrawalStatus.PENDING: frozenset({WithdrawalStatus.COMPLETED, WithdrawalStatus.REJECTED}),
}


@dataclass(frozen=True)
class TransitionResult:
    entity: Any
    changed: bool
    notified: bool


def _investment_status(investment) -> InvestmentStatus:
    return investment.effective_status


def _withdrawal_status(withdrawal) -> WithdrawalStatus:
    return withdrawal.status


class StatusService:
    """Applies administrator decisions and dispatches the matching notifications."""

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

    async def transition_investment(
        self, user_id: UUID, investment_id: UUID, new_status: InvestmentStatus
    ) -> TransitionResult:
        return await self._transition(
            kind="Investment",
            repo=self._invest_repo,
            transitions=_INVESTMENT_TRANSITIONS,
            pending=InvestmentStatus.PENDING,
            current_status=_investment_status,
            notify=self._notifier.notify_investment_status,
            user_id=user_id,
            entity_id=investment_id,
            new_status=new_status,
        )

    async def transition_withdrawal(
        self, user_id: UUID, withdrawal_id: UUID, new_status: WithdrawalStatus
    ) -> TransitionResult:
        return await self._transition(
            kind="Withdrawal",
            repo=self._withdraw_repo,
            transitions=_WITHDRAWAL_TRANSITIONS,
            pending=WithdrawalStatus.PENDING,
            current_status=_withdrawal_status,
            notify=self._notifier.notify_withdrawal_status,
            user_id=user_id,
            entity_id=withdrawal_id,
            new_status=new_status,
        )

    async def _transition(
        self,
        kind: str,
        repo: BaseRepository,
        transitions: Dict[Enum, FrozenSet[Enum]],
        pending: Enum,
        current_status: Callable[[Any], Enum],
        notify: Callable[[Any, Any, Any], Awaitable[bool]],
        user_id: UUID,
        entity_id: UUID,
        new_status: Enum,
    ) -> TransitionResult:
        targets = transitions[pending]
        if new_status not in targets:
            allowed = ", ".join(sorted(s.value for s in targets))
            raise ValidationFailure(f"{kind} status can only be set to one of: {allowed}")

        # One session per request: the reads run one after the other, and
        # both finish before anything is written.
        user = await self._user_repo.get(user_id)
        if not user:
            raise NotFoundException("User", user_id)
        entity = await repo.get(entity_id)
        if not entity or entity.user_id != user_id:
            raise NotFoundException(kind, entity_id)

        log_extra = {
            "user_id": str(user_id),
            "entity_id": str(entity_id),
            "operation": f"{kind.lower()}_status",
        }

        current = current_status(entity)
        if current != pending:
            return self._terminal_outcome(kind, entity, current, new_status, log_extra)

        changed = await repo.update_status_if(entity.id, pending, new_status)
        entity = await repo.get(entity_id)
        if not changed:
            # Lost the race to another administrator.
            return self._terminal_outcome(kind, entity, current_status(entity), new_status, log_extra)

        logger.info("%s moved %s → %s", kind, pending.value, new_status.value, extra=log_extra)
        notified = await notify(user, entity, new_status)
        return TransitionResult(entity=entity, changed=True, notified=notified)

    @staticmethod
    def _terminal_outcome(
        kind: str, entity: Any, current: Enum, new_status: Enum, log_extra: dict
    ) -> TransitionResult:
        if current == new_status:
            logger.info("%s already %s; nothing to do", kind, current.value, extra=log_extra)
            return TransitionResult(entity=entity, changed=False, notified=False)
        logger.warning(
            "%s is %s; refusing change to %s", kind, current.value, new_status.value, extra=log_extra
        )
        raise ConflictException(
            f"{kind} is already {current.value} and cannot be changed to {new_status.value}"
        )
