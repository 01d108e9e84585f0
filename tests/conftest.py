"""
Shared pytest fixtures for unit tests.

All tests run with ``USE_SQLITE=true`` and mocked repositories and clients,
so no real database, payment gateway or mailbox is touched.
"""

import os

os.environ.setdefault("USE_SQLITE", "true")

import uuid  # noqa: E402
from datetime import datetime, timezone  # noqa: E402
from decimal import Decimal  # noqa: E402
from typing import Optional  # noqa: E402
from unittest.mock import AsyncMock, MagicMock  # noqa: E402

import pytest  # noqa: E402

from yieldbook.core.cache import TTLCache  # noqa: E402
from yieldbook.domain.plans import PLANS  # noqa: E402
from yieldbook.models.investment import Investment, InvestmentStatus  # noqa: E402
from yieldbook.models.user import User  # noqa: E402
from yieldbook.models.withdrawal import Withdrawal, WithdrawalStatus  # noqa: E402

# ────────────────────────────────────────────────────────────────────────────
# Factory helpers: domain objects with sensible defaults
# ────────────────────────────────────────────────────────────────────────────

USER_ID = uuid.UUID("11111111-1111-1111-1111-111111111111")
INVESTMENT_ID = uuid.UUID("33333333-3333-3333-3333-333333333333")
WITHDRAWAL_ID = uuid.UUID("44444444-4444-4444-4444-444444444444")
USER_ID_2 = uuid.UUID("55555555-5555-5555-5555-555555555555")

MODERATE = PLANS["moderate"]

_UNSET = object()


def utc(*args) -> datetime:
    return datetime(*args, tzinfo=timezone.utc)


def make_user(
    *,
    id: uuid.UUID = USER_ID,
    full_name: str = "Ada Okafor",
    email: str = "ada@example.com",
    is_active: bool = True,
    privileged: bool = False,
    pin_hash: Optional[str] = None,
    created_at: Optional[datetime] = None,
) -> User:
    """Create a User domain object with sensible test defaults."""
    return User(
        id=id,
        full_name=full_name,
        email=email,
        whatsapp_number="+2348012345678",
        bank_name="Access Bank",
        account_name=full_name,
        account_number="0123456789",
        is_active=is_active,
        privileged_withdrawal_access=privileged,
        withdrawal_pin_hash=pin_hash,
        created_at=created_at or utc(2024, 1, 1),
    )


def make_investment(
    *,
    id: uuid.UUID = INVESTMENT_ID,
    user_id: uuid.UUID = USER_ID,
    investment_id: str = "T100000001",
    amount: Decimal = Decimal("100000.00"),
    status=InvestmentStatus.APPROVED,
    plan_id=_UNSET,
    investment_type: str = MODERATE.label,
    created_at: Optional[datetime] = None,
) -> Investment:
    """
    Create an Investment domain object with sensible test defaults.

    Pass ``status=None`` for a legacy record; ``plan_id`` defaults to the
    moderate plan, pass ``plan_id=None`` for a label-only record.
    """
    return Investment(
        id=id,
        investment_id=investment_id,
        user_id=user_id,
        investment_type=investment_type,
        plan_id=MODERATE.plan_id if plan_id is _UNSET else plan_id,
        amount=amount,
        status=status,
        created_at=created_at or utc(2024, 1, 5, 10, 0),
    )


def make_withdrawal(
    *,
    id: uuid.UUID = WITHDRAWAL_ID,
    user_id: uuid.UUID = USER_ID,
    withdrawal_id: str = "1",
    amount: Decimal = Decimal("15000.00"),
    status: WithdrawalStatus = WithdrawalStatus.PENDING,
    created_at: Optional[datetime] = None,
) -> Withdrawal:
    """Create a Withdrawal domain object; fee and payout follow the 2% rule."""
    fee = (amount * Decimal("0.02")).quantize(Decimal("0.01"))
    return Withdrawal(
        id=id,
        withdrawal_id=withdrawal_id,
        user_id=user_id,
        amount=amount,
        management_fee=fee,
        payout_amount=amount - fee,
        status=status,
        created_at=created_at or utc(2024, 3, 1, 9, 0),
    )


# ────────────────────────────────────────────────────────────────────────────
# Pytest fixtures
# ────────────────────────────────────────────────────────────────────────────


@pytest.fixture()
def mock_db():
    """A mocked AsyncSession that tracks add/commit/refresh/rollback calls."""
    session = AsyncMock()
    session.add = MagicMock()
    session.commit = AsyncMock()
    session.refresh = AsyncMock()
    session.rollback = AsyncMock()
    session.execute = AsyncMock()
    session.get = AsyncMock()
    session.merge = AsyncMock()
    return session


@pytest.fixture()
def notifier():
    """NotificationService double; every dispatch reports success."""
    mock = AsyncMock()
    mock.notify_investment_status.return_value = True
    mock.notify_withdrawal_status.return_value = True
    mock.notify_new_investment.return_value = True
    mock.notify_withdrawal_request.return_value = True
    mock.notify_new_user.return_value = True
    mock.notify_account_status.return_value = True
    return mock


@pytest.fixture()
def test_cache():
    """A fresh TTL cache instance for test isolation."""
    return TTLCache(ttl=30.0, max_size=100, enabled=True)


@pytest.fixture()
def disabled_cache():
    """A disabled TTL cache; every operation is a no-op."""
    return TTLCache(ttl=30.0, max_size=100, enabled=False)


@pytest.fixture(autouse=True)
def _clear_global_cache():
    """Clear the market-data cache around every test."""
    from yieldbook.core.cache import market_data_cache

    market_data_cache.clear()
    yield
    market_data_cache.clear()
