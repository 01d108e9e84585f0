"""Dependency providers shared by the v1 endpoint modules."""

from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession

from yieldbook.clients.paystack import PaystackClient
from yieldbook.clients.resend import ResendEmailClient
from yieldbook.clients.twelvedata import TwelveDataClient
from yieldbook.db.session import get_db
from yieldbook.models.investment import Investment
from yieldbook.models.user import User
from yieldbook.models.withdrawal import Withdrawal
from yieldbook.repositories.investment_repo import InvestmentRepository
from yieldbook.repositories.user_repo import UserRepository
from yieldbook.repositories.withdrawal_repo import WithdrawalRepository
from yieldbook.services.notification_service import NotificationService


def get_paystack_client() -> PaystackClient:
    return PaystackClient()


def get_email_client() -> ResendEmailClient:
    return ResendEmailClient()


def get_twelvedata_client() -> TwelveDataClient:
    return TwelveDataClient()


def get_notification_service(
    email_client: ResendEmailClient = Depends(get_email_client),
) -> NotificationService:
    return NotificationService(email_client)


def get_user_repo(db: AsyncSession = Depends(get_db)) -> UserRepository:
    return UserRepository(User, db)


def get_investment_repo(db: AsyncSession = Depends(get_db)) -> InvestmentRepository:
    return InvestmentRepository(Investment, db)


def get_withdrawal_repo(db: AsyncSession = Depends(get_db)) -> WithdrawalRepository:
    return WithdrawalRepository(Withdrawal, db)
