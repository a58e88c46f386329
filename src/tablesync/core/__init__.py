"""Core sync logic package.

SyncEngine and TableSyncConnector are exported from the top-level package.
"""

from .records import Record, SyncPlan, ensure_utc
from .field_codec import FieldCodec, datetime_to_millis, millis_to_datetime
from .planner import plan
from .local_store import LocalRecordStore, InMemoryRecordStore

__all__ = [
    "Record",
    "SyncPlan",
    "ensure_utc",
    "FieldCodec",
    "datetime_to_millis",
    "millis_to_datetime",
    "plan",
    "LocalRecordStore",
    "InMemoryRecordStore"
]
