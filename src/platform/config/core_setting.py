from decimal import Decimal
from pathlib import Path
from typing import List, Optional

from pydantic import SecretStr, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


_PROJECT_ROOT = Path(__file__).resolve().parents[3]
_ENV_PATH = _PROJECT_ROOT / '.env'
_ENV_FILE = _ENV_PATH if _ENV_PATH.exists() else (_PROJECT_ROOT / '.env.example')


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=str(_ENV_FILE),
        env_ignore_empty=True,
        extra='ignore',
    )

    PROJECT_NAME: str = 'Checkout Service'
    VERSION: str = '0.1.0'
    DEBUG: bool = True  # Set to False in production

    # Database
    POSTGRES_SERVER: str = 'localhost'
    POSTGRES_USER: str = 'postgres'
    POSTGRES_PASSWORD: SecretStr = SecretStr('postgres')
    POSTGRES_DB: str = 'checkout'
    POSTGRES_PORT: int = 5432
    DATABASE_URL: Optional[str] = None  # Full async URL override (e.g. sqlite+aiosqlite://...)

    @property
    def DATABASE_URL_ASYNC(self) -> str:
        if self.DATABASE_URL:
            return self.DATABASE_URL
        password = self.POSTGRES_PASSWORD.get_secret_value()
        return f'postgresql+asyncpg://{self.POSTGRES_USER}:{password}@{self.POSTGRES_SERVER}:{self.POSTGRES_PORT}/{self.POSTGRES_DB}'

    # Connection pool (ignored for SQLite)
    DB_POOL_SIZE: int = 20
    DB_POOL_MAX_OVERFLOW: int = 10
    DB_POOL_TIMEOUT: int = 30
    DB_POOL_RECYCLE: int = 3600
    DB_POOL_PRE_PING: bool = True

    # Security
    SECRET_KEY: SecretStr = SecretStr('test_secret_key_change_in_production')
    ALGORITHM: str = 'HS256'
    CRON_SECRET: SecretStr = SecretStr('test_cron_secret')
    PAYMENT_CALLBACK_SECRET: SecretStr = SecretStr('test_payment_callback_secret')

    # CORS
    BACKEND_CORS_ORIGINS: List[str] = []  # add your frontend URL here

    @field_validator('BACKEND_CORS_ORIGINS', mode='before')
    @classmethod
    def assemble_cors_origins(cls, v: str | List[str]) -> List[str]:
        if isinstance(v, str) and not v.startswith('['):
            return [i.strip() for i in v.split(',')]
        elif isinstance(v, list):
            return v
        return []

    # Checkout
    HOLD_DURATION_MINUTES: int = 60
    TAX_RATE: Decimal = Decimal('0.11')
    POINT_DEFAULT_EXPIRY_DAYS: int = 365
    POINT_REFUND_EXPIRY_DAYS: int = 365

    @field_validator('TAX_RATE')
    @classmethod
    def validate_tax_rate(cls, v: Decimal) -> Decimal:
        if v < 0:
            raise ValueError('TAX_RATE must be >= 0')
        return v

    # Expiration sweeper
    EXPIRATION_SWEEP_ENABLED: bool = True
    EXPIRATION_SWEEP_INTERVAL_SECONDS: float = 60.0

    # Lock contention retry (exponential backoff)
    LOCK_RETRY_ATTEMPTS: int = 3
    LOCK_RETRY_BASE_DELAY_SECONDS: float = 0.05
    LOCK_RETRY_MAX_DELAY_SECONDS: float = 1.0


settings = Settings()  # type: ignore
