"""SQLModel table models — import here so metadata is populated."""

from yieldbook.models.user import User  # noqa: F401
from yieldbook.models.investment import Investment, InvestmentStatus  # noqa: F401
from yieldbook.models.withdrawal import Withdrawal, WithdrawalStatus  # noqa: F401
