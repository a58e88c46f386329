"""Configuration package for the table sync engine."""

from .settings import (
    RemoteServiceSettings,
    DatabaseSettings,
    LoggingSettings,
    AppSettings,
    get_settings
)

from .table_ref import TableRef, parse_table_url

from .schema import SyncConfig, MASKED_SECRET

from .loader import ConfigLoader

__all__ = [
    # Settings
    "RemoteServiceSettings",
    "DatabaseSettings",
    "LoggingSettings",
    "AppSettings",
    "get_settings",

    # Table location
    "TableRef",
    "parse_table_url",

    # Stored connection config
    "SyncConfig",
    "MASKED_SECRET",
    "ConfigLoader"
]
