"""Bidirectional sync between local records and a remote data table."""

from .exceptions import (
    TableSyncError,
    ConfigurationError,
    TableUrlParseError,
    APIConnectionError,
    SerializationError,
    RemoteAPIError,
    AuthenticationError,
    FieldDecodeError,
    LocalStoreError,
    SyncEngineError
)
from .config import SyncConfig, TableRef, parse_table_url, get_settings
from .core import Record, SyncPlan, FieldCodec, plan, LocalRecordStore, InMemoryRecordStore
from .api_clients import RecordReader, RecordWriter, ListResult
from .auth import TokenProvider, RemoteToken
from .core.sync_engine import SyncEngine, SyncResult
from .core.connector import TableSyncConnector

__version__ = "0.1.0"

__all__ = [
    "TableSyncError",
    "ConfigurationError",
    "TableUrlParseError",
    "APIConnectionError",
    "SerializationError",
    "RemoteAPIError",
    "AuthenticationError",
    "FieldDecodeError",
    "LocalStoreError",
    "SyncConfig",
    "TableRef",
    "parse_table_url",
    "get_settings",
    "Record",
    "SyncPlan",
    "FieldCodec",
    "plan",
    "LocalRecordStore",
    "InMemoryRecordStore",
    "RecordReader",
    "RecordWriter",
    "ListResult",
    "TokenProvider",
    "RemoteToken",
    "SyncEngine",
    "SyncResult",
    "SyncEngineError",
    "TableSyncConnector"
]
