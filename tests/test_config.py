"""
Unit tests for the application configuration (Settings).

Tests cover:
- Default values, including business-rule constants
- DATABASE_URL for SQLite and PostgreSQL
- Fail-fast validation of production secrets
- PRIVILEGED_EMAILS parsing
"""

import os
from decimal import Decimal

import pytest

from yieldbook.core.config import Settings, settings

_PRODUCTION_KEYS = (
    "USE_SQLITE",
    "POSTGRES_USER",
    "POSTGRES_PASSWORD",
    "POSTGRES_SERVER",
    "POSTGRES_DB",
    "PAYSTACK_SECRET_KEY",
    "RESEND_API_KEY",
)

_FULL_PRODUCTION = dict(
    USE_SQLITE=False,
    POSTGRES_USER="u",
    POSTGRES_PASSWORD="p",
    POSTGRES_SERVER="localhost",
    POSTGRES_DB="db",
    POSTGRES_PORT=5432,
    PAYSTACK_SECRET_KEY="sk_test_x",
    RESEND_API_KEY="re_x",
)


@pytest.fixture()
def clean_env():
    """Hide production variables from the environment for one test."""
    saved = {key: os.environ.pop(key, None) for key in _PRODUCTION_KEYS}
    yield
    for key, val in saved.items():
        if val is not None:
            os.environ[key] = val


class TestSettingsDefaults:
    def test_project_name(self):
        assert settings.PROJECT_NAME == "Yieldbook Investments API"

    def test_api_version_prefix(self):
        assert settings.API_V1_STR == "/api/v1"

    def test_tests_run_in_sqlite_mode(self):
        assert settings.USE_SQLITE is True

    def test_business_rule_defaults(self):
        assert settings.MIN_WITHDRAWAL_AMOUNT == Decimal("2000")
        assert settings.MANAGEMENT_FEE_RATE == Decimal("0.02")
        assert settings.BUSINESS_TIMEZONE == "Africa/Lagos"

    def test_cache_and_breaker_defaults(self):
        assert settings.CACHE_TTL == 300.0
        assert settings.CB_FAILURE_THRESHOLD > 0
        assert settings.CB_RECOVERY_TIMEOUT > 0


class TestDatabaseURL:
    def test_sqlite_url(self):
        assert settings.DATABASE_URL.startswith("sqlite+aiosqlite")

    def test_postgres_url(self):
        s = Settings(**_FULL_PRODUCTION, _env_file=None)  # type: ignore[call-arg]
        assert s.DATABASE_URL == "postgresql+asyncpg://u:p@localhost:5432/db"


class TestProductionValidation:
    def test_missing_credentials_are_listed(self, clean_env):
        with pytest.raises(Exception) as exc_info:
            Settings(USE_SQLITE=False, _env_file=None)  # type: ignore[call-arg]
        message = str(exc_info.value)
        for key in ("POSTGRES_USER", "PAYSTACK_SECRET_KEY", "RESEND_API_KEY"):
            assert key in message

    def test_missing_payment_key_alone_fails(self, clean_env):
        values = {**_FULL_PRODUCTION, "PAYSTACK_SECRET_KEY": ""}
        with pytest.raises(Exception, match="PAYSTACK_SECRET_KEY"):
            Settings(**values, _env_file=None)  # type: ignore[call-arg]

    def test_sqlite_mode_needs_no_secrets(self, clean_env):
        s = Settings(USE_SQLITE=True, _env_file=None)  # type: ignore[call-arg]
        assert s.PAYSTACK_SECRET_KEY == ""


class TestPrivilegedEmails:
    def test_parses_and_normalises(self):
        s = Settings(
            USE_SQLITE=True,
            PRIVILEGED_EMAILS=" Ops@Example.com, ,treasury@example.com ",
            _env_file=None,
        )  # type: ignore[call-arg]
        assert s.privileged_emails == ["ops@example.com", "treasury@example.com"]

    def test_empty_by_default(self):
        s = Settings(USE_SQLITE=True, _env_file=None)  # type: ignore[call-arg]
        assert s.privileged_emails == []
