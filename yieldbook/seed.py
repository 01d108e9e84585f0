"""
Seed script — sample users, investments and withdrawals for development.

Usage:
    USE_SQLITE=false python -m yieldbook.seed

The script is idempotent: it does nothing when users already exist, except
run the legacy-status backfill, which is safe to repeat.
"""

import asyncio
import logging
import uuid
from datetime import datetime, timezone
from decimal import Decimal

from sqlalchemy import select
from sqlmodel import SQLModel

from yieldbook.core.security import hash_pin
from yieldbook.db.session import AsyncSessionLocal, engine
from yieldbook.domain.plans import PLANS
from yieldbook.domain.reconciliation import management_fee
from yieldbook.models.investment import Investment, InvestmentStatus
from yieldbook.models.user import User
from yieldbook.models.withdrawal import Withdrawal, WithdrawalStatus
from yieldbook.repositories.investment_repo import InvestmentRepository

logging.basicConfig(level=logging.INFO, format="%(asctime)s | %(levelname)s | %(message)s")
logger = logging.getLogger(__name__)

MODERATE = PLANS["moderate"]

ADA_ID = uuid.UUID("5a0e8400-e29b-41d4-a716-446655440001")
TUNDE_ID = uuid.UUID("5a0e8400-e29b-41d4-a716-446655440002")
ADMIN_ID = uuid.UUID("5a0e8400-e29b-41d4-a716-446655440003")


def _users() -> list:
    return [
        User(
            id=ADA_ID,
            full_name="Ada Okafor",
            email="ada@example.com",
            whatsapp_number="+2348012345678",
            bank_name="Access Bank",
            account_name="Ada Okafor",
            account_number="0123456789",
            withdrawal_pin_hash=hash_pin("1234"),
            created_at=datetime(2024, 1, 3, 9, 0, tzinfo=timezone.utc),
        ),
        User(
            id=TUNDE_ID,
            full_name="Tunde Bakare",
            email="tunde@example.com",
            whatsapp_number="+2348098765432",
            bank_name="GTBank",
            account_name="Tunde Bakare",
            account_number="9876543210",
            created_at=datetime(2024, 2, 1, 12, 0, tzinfo=timezone.utc),
        ),
        User(
            id=ADMIN_ID,
            full_name="Operations Desk",
            email="ops@example.com",
            is_admin=True,
            privileged_withdrawal_access=True,
            created_at=datetime(2023, 12, 1, 8, 0, tzinfo=timezone.utc),
        ),
    ]


def _investments() -> list:
    return [
        Investment(
            investment_id="T100000001",
            user_id=ADA_ID,
            investment_type=MODERATE.label,
            plan_id=MODERATE.plan_id,
            amount=Decimal("100000.00"),
            status=InvestmentStatus.APPROVED,
            created_at=datetime(2024, 1, 5, 10, 0, tzinfo=timezone.utc),
        ),
        # Recorded before statuses existed: no plan_id, no status.
        Investment(
            investment_id="1",
            user_id=ADA_ID,
            investment_type="Moderate - 20% Monthly",
            amount=Decimal("50000.00"),
            status=None,
            created_at=datetime(2023, 11, 2, 10, 0, tzinfo=timezone.utc),
        ),
        Investment(
            investment_id="T100000002",
            user_id=TUNDE_ID,
            investment_type=MODERATE.label,
            plan_id=MODERATE.plan_id,
            amount=Decimal("250000.00"),
            status=InvestmentStatus.PENDING,
            created_at=datetime(2024, 3, 1, 11, 30, tzinfo=timezone.utc),
        ),
    ]


def _withdrawals() -> list:
    amount = Decimal("15000.00")
    fee = management_fee(amount)
    return [
        Withdrawal(
            withdrawal_id="1",
            user_id=ADA_ID,
            amount=amount,
            management_fee=fee,
            payout_amount=amount - fee,
            status=WithdrawalStatus.COMPLETED,
            created_at=datetime(2024, 3, 1, 9, 15, tzinfo=timezone.utc),
        ),
    ]


async def seed() -> None:
    """Create tables, insert sample data if empty, then backfill legacy statuses."""
    import yieldbook.db.base  # noqa: F401

    async with engine.begin() as conn:
        await conn.run_sync(SQLModel.metadata.create_all)

    async with AsyncSessionLocal() as session:
        result = await session.execute(select(User).limit(1))
        if result.scalars().first() is not None:
            logger.info("Database already contains users — skipping sample data.")
        else:
            users, investments, withdrawals = _users(), _investments(), _withdrawals()
            session.add_all(users)
            await session.commit()

            # Both reference users, so insert after.
            session.add_all(investments)
            session.add_all(withdrawals)
            await session.commit()
            logger.info(
                "Seeded %d users, %d investments, %d withdrawals",
                len(users),
                len(investments),
                len(withdrawals),
            )

        updated = await InvestmentRepository(Investment, session).backfill_legacy_statuses()
        logger.info("Backfilled %d legacy investment statuses", updated)


if __name__ == "__main__":
    asyncio.run(seed())
