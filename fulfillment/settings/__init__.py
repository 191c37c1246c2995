# Settings package
from functools import lru_cache

from .modules import ApiSettings, DatabaseSettings, FulfillmentSettings


@lru_cache()
def get_settings() -> FulfillmentSettings:
    """Return cached fulfillment settings."""
    return FulfillmentSettings()


@lru_cache()
def get_database_settings() -> DatabaseSettings:
    """Return cached database settings."""
    return DatabaseSettings()


@lru_cache()
def get_api_settings() -> ApiSettings:
    return ApiSettings()


__all__ = [
    "ApiSettings",
    "DatabaseSettings",
    "FulfillmentSettings",
    "get_api_settings",
    "get_database_settings",
    "get_settings",
]
