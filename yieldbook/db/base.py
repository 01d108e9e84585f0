"""
Database model registry.

Importing this module registers every table with SQLModel's metadata, which
must happen before ``create_all()`` runs.
"""

from yieldbook.models.user import User  # noqa: F401
from yieldbook.models.investment import Investment  # noqa: F401
from yieldbook.models.withdrawal import Withdrawal  # noqa: F401
