from functools import lru_cache
from typing import Optional

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    # ==============================
    # Application
    # ==============================
    APP_NAME: str = "Verified Inventory Ledger API"
    ENVIRONMENT: str = "local"
    HOST: str = "0.0.0.0"
    PORT: int = 3000

    # ==============================
    # Ledger (immudb)
    # ==============================
    IMMUDB_HOST: str = "localhost"
    IMMUDB_PORT: int = 3322
    IMMUDB_USER: str = "immudb"
    IMMUDB_PASS: str = "immudb"
    IMMUDB_DB: str = "defaultdb"
    IMMUDB_TIMEOUT: Optional[float] = None

    # ==============================
    # Ledger bounds
    # ==============================
    # Keys with more versions than these ceilings aggregate incompletely.
    HISTORY_SCAN_LIMIT: int = 1000
    TIME_TRAVEL_SCAN_LIMIT: int = 2500
    KEYSPACE_SCAN_PAGE_SIZE: int = 1000

    # ==============================
    # Inventory
    # ==============================
    SYNC_PRODUCT_STOCK: bool = False

    # ==============================
    # Logging
    # ==============================
    LOG_LEVEL: str = "INFO"
    LOG_JSON: bool = False

    # ==============================
    # Security
    # ==============================
    API_KEY_SECRET: Optional[str] = None
    API_KEY_HEADER: str = "X-API-Key"
    USER_EMAIL_HEADER: str = "X-User-Email"

    @property
    def immudb_url(self) -> str:
        return "{}:{}".format(self.IMMUDB_HOST, self.IMMUDB_PORT)


@lru_cache
def get_settings() -> Settings:
    """Cached settings loader (once per process)."""
    return Settings()


__all__ = ["Settings", "get_settings"]
