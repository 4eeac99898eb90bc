from functools import lru_cache
from typing import Optional

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    # ==============================
    # Application
    # ==============================
    APP_NAME: str = "Inventory Ledger"
    ENVIRONMENT: str = "local"

    # ==============================
    # Database
    # ==============================
    DATABASE_URL: str = "sqlite:///./inventory.db"

    # ==============================
    # Logging
    # ==============================
    LOG_LEVEL: str = "INFO"
    LOG_JSON: bool = False

    # ==============================
    # Security
    # ==============================
    ADMIN_API_KEY: Optional[str] = None
    API_KEYS: Optional[str] = None
    API_KEY_HEADER: str = "X-API-Key"
    JWT_SECRET: Optional[str] = None
    JWT_ALGORITHM: str = "HS256"
    JWT_AUDIENCE: Optional[str] = None
    JWT_ISSUER: Optional[str] = None
    JWT_REQUIRED: bool = False

    # ==============================
    # Stock rules
    # ==============================
    INVENTORY_CRITICAL_STOCK_THRESHOLD: int = 2
    INVENTORY_DEFAULT_MIN_STOCK: int = 5

    # ==============================
    # Alerts & stats
    # ==============================
    ALERT_STALE_DAYS: int = 7
    ALERT_VERY_STALE_DAYS: int = 30
    STATS_RECENT_HOURS: int = 24

    # ==============================
    # Ledger transactions
    # ==============================
    LEDGER_TRANSACTION_TIMEOUT_SECONDS: float = 10.0
    LEDGER_MAX_RETRIES: int = 3

    # ==============================
    # Stats snapshot scheduler
    # ==============================
    SNAPSHOT_SCHEDULER_ENABLED: bool = True
    SNAPSHOT_RUN_TIME: str = "23:55"
    SNAPSHOT_POLL_SECONDS: int = 30
    SNAPSHOT_TZ: str = "local"


@lru_cache
def get_settings() -> Settings:
    """Cached settings loader (once per process)."""
    return Settings()


__all__ = ["Settings", "get_settings"]
