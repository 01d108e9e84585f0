"""
Application configuration module.

Loads settings from environment variables (or .env file) using pydantic-settings.
All sensitive values (DB credentials, SaaS API keys) come from environment —
never hardcoded.
"""

from decimal import Decimal
from typing import List

from pydantic import model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """
    Central configuration for the Yieldbook Investments API.

    Environment variables are loaded automatically from .env if present.
    In production, these should be injected via the container orchestrator
    (e.g., Kubernetes Secrets, AWS Parameter Store).
    """

    PROJECT_NAME: str = "Yieldbook Investments API"
    API_V1_STR: str = "/api/v1"

    # ── SQLite mode (no external DB required) ──
    USE_SQLITE: bool = False

    # ── PostgreSQL connection parameters ──
    POSTGRES_USER: str = ""
    POSTGRES_PASSWORD: str = ""
    POSTGRES_SERVER: str = ""
    POSTGRES_DB: str = ""
    POSTGRES_PORT: int = 5432

    # ── Payment gateway (Paystack) ──
    PAYSTACK_SECRET_KEY: str = ""
    PAYSTACK_API_URL: str = "https://api.paystack.co/transaction/initialize"
    PAYSTACK_CALLBACK_URL: str = ""

    # ── Transactional email (Resend) ──
    RESEND_API_KEY: str = ""
    RESEND_API_URL: str = "https://api.resend.com/emails"
    EMAIL_FROM: str = "Yieldbook <onboarding@resend.dev>"
    ADMIN_EMAIL: str = "admin@example.com"

    # ── Market data (Twelve Data) ──
    TWELVE_DATA_API_KEY: str = ""
    TWELVE_DATA_API_URL: str = "https://api.twelvedata.com/time_series"

    HTTP_TIMEOUT_SECONDS: float = 10.0

    @model_validator(mode="after")
    def _require_secrets_unless_sqlite(self) -> "Settings":
        """Fail fast if production credentials are missing.

        SQLite mode is the local/test mode and runs without any secrets; every
        other deployment must provide the database, payment and email
        credentials before the process starts serving traffic.
        """
        if not self.USE_SQLITE:
            missing = [
                name
                for name in (
                    "POSTGRES_USER",
                    "POSTGRES_PASSWORD",
                    "POSTGRES_SERVER",
                    "POSTGRES_DB",
                    "PAYSTACK_SECRET_KEY",
                    "RESEND_API_KEY",
                )
                if not getattr(self, name)
            ]
            if missing:
                vars_list = ", ".join(missing)
                raise ValueError(
                    f"Production mode requires these environment variables: "
                    f"{vars_list}.\n\n"
                    f"Set them in a .env file in the project root or export them "
                    f"before starting the server, e.g.:\n"
                    f"       export POSTGRES_USER=yieldbook_user\n"
                    f"       export PAYSTACK_SECRET_KEY=sk_live_...\n"
                    f"       export RESEND_API_KEY=re_...\n\n"
                    f"To run locally without external services:\n"
                    f"       USE_SQLITE=true uvicorn yieldbook.main:app"
                )
        return self

    # ── Connection pool tuning ──
    DB_POOL_SIZE: int = 10
    DB_MAX_OVERFLOW: int = 20
    DB_POOL_TIMEOUT: int = 30  # seconds to wait for a connection from the pool
    DB_POOL_RECYCLE: int = 1800  # seconds before a connection is recycled

    # ── CORS ──
    # Comma-separated list of allowed origins. "*" in dev, restrict in prod.
    CORS_ORIGINS: str = "*"

    # ── Logging ──
    LOG_LEVEL: str = "INFO"
    LOG_FILE_MAX_BYTES: int = 10 * 1024 * 1024
    LOG_FILE_BACKUP_COUNT: int = 5

    # ── Cache (market-data series) ──
    CACHE_ENABLED: bool = True
    CACHE_TTL: float = 300.0
    CACHE_MAX_SIZE: int = 256

    # ── Circuit breaker (database) ──
    CB_FAILURE_THRESHOLD: int = 5
    CB_RECOVERY_TIMEOUT: float = 30.0

    # ── Business rules ──
    # Calendar months, submission windows and holidays are evaluated in
    # this zone; timestamps are stored in UTC.
    BUSINESS_TIMEZONE: str = "Africa/Lagos"
    MIN_WITHDRAWAL_AMOUNT: Decimal = Decimal("2000")
    MANAGEMENT_FEE_RATE: Decimal = Decimal("0.02")

    # Comma-separated emails allowed to submit outside the monthly window.
    # Complements the per-user ``privileged_withdrawal_access`` flag.
    PRIVILEGED_EMAILS: str = ""

    # Optional path to a JSON table overriding the bundled Islamic holiday
    # estimates (see ``yieldbook/data/islamic_holidays.json``).
    ISLAMIC_HOLIDAYS_FILE: str = ""

    # ── Misc ──
    DEBUG: bool = False

    @property
    def DATABASE_URL(self) -> str:
        """Construct the async database DSN.

        Returns an in-memory SQLite URL when ``USE_SQLITE`` is enabled,
        otherwise a PostgreSQL DSN for asyncpg.
        """
        if self.USE_SQLITE:
            return "sqlite+aiosqlite://"
        return (
            f"postgresql+asyncpg://{self.POSTGRES_USER}:{self.POSTGRES_PASSWORD}"
            f"@{self.POSTGRES_SERVER}:{self.POSTGRES_PORT}/{self.POSTGRES_DB}"
        )

    @property
    def privileged_emails(self) -> List[str]:
        """Normalised allow-list parsed from ``PRIVILEGED_EMAILS``."""
        return [
            email.strip().lower()
            for email in self.PRIVILEGED_EMAILS.split(",")
            if email.strip()
        ]

    model_config = SettingsConfigDict(env_file=".env", extra="ignore")


settings = Settings()
