from __future__ import annotations

from typing import List, Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class DatabaseSettings(BaseSettings):
    """
    Database configuration settings.

    Loaded from environment variables (DB_*) or .env file.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_prefix="DB_",
        extra="ignore",
    )

    database_url: str = "sqlite+aiosqlite:///./fulfillment.db"

    # Connection pool settings (ignored for sqlite)
    pool_size: int = 10
    max_overflow: int = 20
    pool_timeout: int = 30
    pool_recycle: int = 3600  # 1 hour

    echo_sql: bool = False


class FulfillmentSettings(BaseSettings):
    """
    Business knobs for order fulfillment.

    Every field maps to FULFILLMENT_<FIELD_NAME> in the environment.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_prefix="FULFILLMENT_",
        extra="ignore",
    )

    # === Stock forecast ===
    forecast_default_days: int = Field(default=30, ge=1)
    forecast_max_days: int = Field(default=90, ge=1)
    urgent_threshold_hours: int = Field(default=24, ge=0)

    # === Admin stats ===
    stats_horizon_days: int = Field(default=7, ge=1)

    # === Gift claims ===
    # None disables expiry entirely
    gift_claim_ttl_hours: Optional[int] = Field(default=None, ge=1)

    # === Delivery scheduling ===
    same_day_cutoff_hour: int = Field(default=16, ge=0, le=23)
    once_due_days: int = Field(default=3, ge=0)
    interval_due_days: int = Field(default=7, ge=0)
    default_interval_days: int = Field(default=30, ge=1)


class ApiSettings(BaseSettings):
    """HTTP server settings (API_*)."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_prefix="API_",
        extra="ignore",
    )

    host: str = "0.0.0.0"
    port: int = 8000
    # Admin dashboard origins; the mini-program does not need CORS
    cors_origins: List[str] = Field(
        default_factory=lambda: ["http://localhost:3000", "http://127.0.0.1:3000"]
    )
