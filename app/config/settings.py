"""
Application settings.

Loads configuration from environment variables using pydantic-settings.
"""

from loguru import logger
from pydantic import Field, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # Database
    database_url: str = "sqlite+aiosqlite:///./stakeledger.db"
    database_echo: bool = False

    # Redis (for Dramatiq)
    redis_host: str = "localhost"
    redis_port: int = 6379
    redis_password: str | None = None
    redis_db: int = 0

    # Application
    environment: str = "development"
    debug: bool = False
    log_level: str = "INFO"
    app_url: str = "http://localhost:3000"
    http_host: str = "0.0.0.0"
    http_port: int = Field(
        default=8080, ge=1, le=65535, description="HTTP API server port"
    )

    # Scheduler trigger
    cron_secret: str | None = None
    payout_interval_minutes: int = Field(
        default=5, ge=1, description="Stake payout job interval in minutes"
    )
    deposit_poll_interval_minutes: int = Field(
        default=2, ge=1, description="Pending deposit polling interval"
    )

    # Referral
    referral_bonus_percent_default: float = Field(
        default=5.0,
        ge=0,
        le=100,
        description="Referral bonus percent used when the site setting is missing",
    )

    # NOWPayments (deposits)
    nowpayments_api_key: str | None = None
    nowpayments_api_url: str = "https://api.nowpayments.io/v1"
    nowpayments_ipn_secret: str | None = None

    # WestWallet (withdrawals)
    westwallet_api_key: str | None = None
    westwallet_api_url: str = "https://api.westwallet.io"
    wallet_request_timeout: int = Field(
        default=15, gt=0, description="Wallet provider request timeout (seconds)"
    )

    # Email
    smtp_host: str | None = None
    smtp_port: int = 587
    smtp_user: str | None = None
    smtp_password: str | None = None
    smtp_from: str = "noreply@stakeledger.local"
    smtp_use_tls: bool = True

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    @model_validator(mode='after')
    def validate_production(self) -> 'Settings':
        """Validate production-specific requirements."""
        if self.environment == 'production':
            # DEBUG must be False in production
            if self.debug:
                raise ValueError(
                    'DEBUG must be False in production environment. '
                    'Set DEBUG=false in your .env file.'
                )

            if not self.database_url.startswith('postgresql'):
                raise ValueError(
                    'DATABASE_URL must point to PostgreSQL in production.'
                )

            if not self.cron_secret or len(self.cron_secret) < 32:
                raise ValueError(
                    'CRON_SECRET must be at least 32 characters in '
                    'production. Generate one with: openssl rand -hex 32'
                )

            if not self.nowpayments_ipn_secret:
                raise ValueError(
                    'NOWPAYMENTS_IPN_SECRET is required in production.'
                )

            if not self.smtp_host:
                logger.warning(
                    'SMTP_HOST is not set. Transactional emails are disabled.'
                )

        return self

    @field_validator('database_url')
    @classmethod
    def validate_database_url(cls, v: str) -> str:
        """Validate database URL."""
        if not v.startswith(
            ('postgresql://', 'postgresql+asyncpg://', 'sqlite+aiosqlite://')
        ):
            raise ValueError(
                'DATABASE_URL must start with postgresql://, '
                'postgresql+asyncpg:// or sqlite+aiosqlite://'
            )
        return v

    @field_validator('log_level')
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Normalize log level name."""
        level = v.upper()
        if level not in {
            'TRACE', 'DEBUG', 'INFO', 'SUCCESS', 'WARNING', 'ERROR', 'CRITICAL'
        }:
            raise ValueError(f'Invalid LOG_LEVEL: {v}')
        return level

    @property
    def is_sqlite(self) -> bool:
        """True when running on the aiosqlite driver (tests, local dev)."""
        return self.database_url.startswith('sqlite')

    @property
    def async_database_url(self) -> str:
        """Database URL with the async driver made explicit."""
        if self.database_url.startswith('postgresql://'):
            return self.database_url.replace(
                'postgresql://', 'postgresql+asyncpg://', 1
            )
        return self.database_url


# Global settings instance
settings = Settings()
